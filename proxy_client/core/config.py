# proxy_client/core/config.py

import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, AliasChoices

from proxy_client.core.logger import get_null_logger

DEFAULT_ROOT_URL = "http://localhost"
DEFAULT_TIMEOUT_MS = 5000


class ClientConfig(BaseModel):
    """
    Configuration d'un ProxyClient, immuable après construction.
    Seul `authorization` change, via ProxyClient.derive_child().
    """
    root_url: str                   = Field(DEFAULT_ROOT_URL, description="URL de base (protocole + hôte), ex: 'https://api.example/v1'")
    timeout_ms: int                 = Field(DEFAULT_TIMEOUT_MS, validation_alias=AliasChoices("timeout_ms", "timeout"),
                                            description="Timeout total d'une requête, en millisecondes.")
    authorization: Optional[str]    = Field(None, description="Valeur opaque du header Authorization.")
    headers: Dict[str, str]         = Field(default_factory=dict, description="Headers par défaut du client httpx.")

    # Capacités injectées (non sérialisées)
    logger: Any                     = Field(default_factory=get_null_logger, exclude=True)
    transport: Any                  = Field(None, exclude=True, description="httpx.AsyncBaseTransport optionnel (équivalent d'un 'agent').")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000


def load_client_config(prefix: str = "PROXY_CLIENT_", defaults: Optional[Dict[str, Any]] = None, **overrides) -> ClientConfig:
    """
    Construit une ClientConfig depuis l'environnement (.env chargé via python-dotenv).
    Priorité : `overrides` > variables d'environnement > `defaults`.
    """
    load_dotenv()

    values = dict(defaults or {})
    root_url = os.getenv(f"{prefix}ROOT_URL")
    if root_url:
        values["root_url"] = root_url
    timeout_ms = os.getenv(f"{prefix}TIMEOUT_MS")
    if timeout_ms:
        values["timeout_ms"] = int(timeout_ms)
    authorization = os.getenv(f"{prefix}AUTHORIZATION")
    if authorization:
        values["authorization"] = authorization

    values.update(overrides)
    return ClientConfig(**values)
