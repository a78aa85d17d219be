# proxy_client/domainr/api_client.py

from typing import Any, Dict, Optional

from proxy_client.core.http_client import ProxyClient
from proxy_client.core.logger import get_logger

logger = get_logger(__name__)


class DomainrClient:
    """
    Client pour l'API JSON de Domainr.

    Encapsule un ProxyClient configuré (root_url, timeout, logger) et fournit :
     - search(query)   recherche de noms de domaine
     - info(domain)    détails d'un domaine
    """

    ROOT_URL = "https://domainr.com/api/json"

    def __init__(self, client_id: str, client: Optional[ProxyClient] = None):
        self.client_id = client_id
        # ProxyClient injectable (testable)
        self.client = client if client is not None else ProxyClient(root_url=self.ROOT_URL, logger=logger)

    async def _get_json(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        response = await self.client.get(path).query({"client_id": self.client_id, **params})

        if response.status_code != 200:
            await self.client.reject_response(response)

        return response.json()

    async def search(self, query: str) -> Dict[str, Any]:
        """Recherche les domaines correspondant à `query`."""
        if not query or not query.strip():
            raise ValueError("La recherche ne peut pas être vide.")

        logger.debug("Recherche Domainr : %s", query)
        return await self._get_json("/search", {"q": query.strip()})

    async def info(self, domain: str) -> Dict[str, Any]:
        """Détails (disponibilité, registrars) d'un domaine."""
        return await self._get_json("/info", {"q": domain})

    def with_auth(self, auth: str) -> "DomainrClient":
        """Même client, avec les identifiants de l'appelant."""
        return DomainrClient(client_id=self.client_id, client=self.client.derive_child(auth))

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.client.aclose()
