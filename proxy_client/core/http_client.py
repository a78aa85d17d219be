# proxy_client/core/http_client.py
import asyncio
import time
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Any, Awaitable, Callable, Dict, Optional, Union
from urllib.parse import urlsplit

import httpx

from proxy_client.core.config import ClientConfig
from proxy_client.core.exceptions import ClientError, ProtocolConfigError, TransportError

SUPPORTED_SCHEMES = ("http", "https")


class PendingRequest:
    """
    Requête en préparation, à finaliser explicitement :

    1. `send()` pour fournir un corps (optionnel)
    2. `end()` (ou `await` directement) pour l'envoyer et obtenir la Response

    NOTE: une requête aboutie peut avoir un status non 2xx. Seules les erreurs de
    transport (DNS, connexion, timeout) lèvent une exception ; le status doit être
    vérifié par l'appelant, qui utilise `reject_response` si besoin.
    """

    def __init__(self, client: "ProxyClient", method: str, url: str,
                 on_request: Optional[Callable[[httpx.Request], None]] = None,
                 on_error: Optional[Callable[[str, str, Exception], None]] = None,
                 on_response: Optional[Callable[[str, str, httpx.Response, float], None]] = None):
        self.client = client
        self.method = method.upper()
        self.url = url
        self.headers = httpx.Headers()
        self.params: Dict[str, Any] = {}
        self._content: Optional[Union[str, bytes]] = None
        self._json: Any = None

        # Points d'observation explicites (par défaut : les logs du client)
        self.on_request = on_request or client._log_request
        self.on_error = on_error or client._log_error
        self.on_response = on_response or client._log_response

        if client.config.authorization is not None:
            self.headers["Authorization"] = client.config.authorization

    # ---------------- Construction ----------------
    def set(self, name: str, value: str) -> "PendingRequest":
        # Remplace toute valeur existante, sans tenir compte de la casse
        self.headers[name] = value
        return self

    def query(self, params: Dict[str, Any]) -> "PendingRequest":
        self.params.update(params)
        return self

    def send(self, body: Any) -> "PendingRequest":
        """dict/list -> JSON ; str/bytes -> contenu brut."""
        if isinstance(body, (str, bytes)):
            self._content, self._json = body, None
        else:
            self._content, self._json = None, body
        return self

    # ---------------- Envoi ----------------
    def end(self) -> Awaitable[httpx.Response]:
        """
        Valide le protocole immédiatement (ProtocolConfigError, sans I/O),
        puis retourne la coroutine d'envoi.
        """
        request = self.client._create_transport_request(
            method=self.method,
            url=self.url,
            headers=self.headers,
            params=self.params or None,
            content=self._content,
            json=self._json,
        )
        return self._dispatch(request)

    def __await__(self):
        return self.end().__await__()

    async def _dispatch(self, request: httpx.Request) -> httpx.Response:
        self.on_request(request)
        start = time.perf_counter()

        try:
            response = await asyncio.wait_for(
                self.client.http.send(request, follow_redirects=True),
                timeout=self.client.config.timeout_s,
            )
        except asyncio.TimeoutError as e:
            err = TransportError(f"Timeout de {self.client.config.timeout_ms}ms dépassé")
            self.on_error(self.method, self.url, err)
            raise err from e
        except httpx.HTTPError as e:
            self.on_error(self.method, self.url, e)
            raise TransportError(f"Erreur HTTPX: {e}") from e

        ms = (time.perf_counter() - start) * 1000
        self.on_response(self.method, self.url, response, ms)
        return response


class ProxyClient:
    """
    Base des clients d'API : URL racine, logger, timeout et Authorization.

    Un client spécialisé encapsule un ProxyClient configuré et délègue à
    `request()` / `get()` / `post()`... (composition, pas d'héritage).
    """

    def __init__(self, config: Optional[ClientConfig] = None, http_client: Optional[httpx.AsyncClient] = None, **options):
        self.config = config if config is not None else ClientConfig(**options)
        self._owns_http = http_client is None
        # Client httpx partagé par les enfants (réutilisation des connexions)
        self.http = http_client if http_client is not None else httpx.AsyncClient(
            headers=self.config.headers,
            timeout=self.config.timeout_s,
            transport=self.config.transport,
            # Jamais de cookies mémorisés : le client est partagé entre appelants
            cookies=CookieJar(policy=DefaultCookiePolicy(allowed_domains=[])),
        )

    @property
    def root_url(self) -> str:
        return self.config.root_url

    @property
    def logger(self):
        return self.config.logger

    @property
    def authorization(self) -> Optional[str]:
        return self.config.authorization

    # ---------------- Helpers de configuration ----------------
    def derive_child(self, auth: Optional[str]) -> "ProxyClient":
        """Client enfant : même configuration, Authorization remplacée. Le parent n'est pas modifié."""
        return ProxyClient(
            config=self.config.model_copy(update={"authorization": auth}),
            http_client=self.http,
        )

    def get_url(self, path: str) -> str:
        """URL complète relative à root_url (une URL absolue est retournée telle quelle)."""
        parts = urlsplit(path)
        if parts.scheme and parts.hostname:
            return path

        return self.root_url + path

    # ---------------- Requêtes ----------------
    def request(self, method: str, path: str) -> PendingRequest:
        return PendingRequest(self, method, self.get_url(path))

    def get(self, path: str) -> PendingRequest:
        return self.request("GET", path)

    def post(self, path: str) -> PendingRequest:
        return self.request("POST", path)

    def put(self, path: str) -> PendingRequest:
        return self.request("PUT", path)

    def delete(self, path: str) -> PendingRequest:
        return self.request("DELETE", path)

    async def reject_response(self, response: httpx.Response):
        """
        Lève une ClientError construite depuis la mauvaise `response`.
        L'appel ne lève jamais directement : l'erreur sort à l'`await`.

        NOTE: la coroutine retournée doit être attendue (`await`), sinon Python
        émet un RuntimeWarning "coroutine ... was never awaited" et l'erreur est perdue.
        """
        raise ClientError.from_response(response)

    # ---------------- Proxy ----------------
    def subapp(self):
        """Sous-application FastAPI qui proxifie les requêtes des navigateurs vers root_url."""
        from proxy_client.core.proxy import build_subapp

        return build_subapp(self)

    # ---------------- Usage interne ----------------
    def _create_transport_request(self, method: str, url: Union[str, httpx.URL], **kwargs) -> httpx.Request:
        """
        Construit la requête httpx (http ou https).
        Tout autre protocole lève ProtocolConfigError, avant tout I/O.
        """
        url = httpx.URL(url)
        if url.scheme not in SUPPORTED_SCHEMES:
            raise ProtocolConfigError(f"Protocole invalide, {url.scheme}:. Vérifier root_url.")

        return self.http.build_request(method, url, timeout=self.config.timeout_s, **kwargs)

    def _format_request(self, request) -> Dict[str, Any]:
        return {
            "method": request.method,
            "url": str(request.url),
            "headers": dict(request.headers),
        }

    def _format_response(self, response) -> Dict[str, Any]:
        return {
            "status": response.status_code,
            "headers": dict(response.headers),
        }

    def _log_request(self, request) -> None:
        self.logger.info("< %s %s", request.method, request.url, extra={"http": self._format_request(request)})

    def _log_error(self, method: str, url: str, err: Exception) -> None:
        self.logger.error("Error in %s %s: %s", method, url, err)

    def _log_response(self, method: str, url: str, response, ms: float) -> None:
        self.logger.info("> %s %s %s %.3f ms", method, url, response.status_code, ms,
                         extra={"http": self._format_response(response)})

    # ---------------- Context manager ----------------
    async def aclose(self):
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self):
        """Ouverture du client pour le context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Fermeture propre de la connexion."""
        await self.aclose()
