# proxy_client/core/exceptions.py
import json
import re
from typing import Any, Dict, Optional

import httpx


class APIError(Exception):
    """Erreur lors de l'appel d'une API externe"""
    pass


class TransportError(APIError):
    """Erreur de connexion, DNS ou timeout pendant l'appel sortant."""
    pass


class ProtocolConfigError(APIError, ValueError):
    """Protocole de l'URL cible ni http ni https (root_url mal configurée)."""
    pass


class ClientError(APIError):
    """
    Erreur construite à partir d'une réponse HTTP déjà reçue (non 2xx).

    - message : champ "message" du JSON, sinon le texte de la réponse
    - code : champ "code" du JSON, sinon le status code
    - name : champ "name" du JSON, sinon le nom du status (ex: BadRequestError)
    - response : la réponse d'origine, pour le contexte
    """

    def __init__(self, message: str, code: Any, name: str, response: Optional[httpx.Response] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.name = name
        self.response = response

    def __repr__(self):
        return f"{self.name}(message={self.message!r}, code={self.code!r})"

    @classmethod
    def from_response(cls, response: httpx.Response) -> "ClientError":
        body = _parse_body(response)
        status = response.status_code

        message = body.get("message") or response.text
        code = body.get("code") or status
        name = body.get("name") or (re.sub(r"\s", "", httpx.codes.get_reason_phrase(status)) + "Error")

        return cls(message=message, code=code, name=name, response=response)


def _parse_body(response: httpx.Response) -> Dict[str, Any]:
    # Le corps peut être vide, du texte brut, ou un JSON qui n'est pas un objet
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return body if isinstance(body, dict) else {}
