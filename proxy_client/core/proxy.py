# proxy_client/core/proxy.py
import time

import httpx
from fastapi import FastAPI
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask
from starlette.requests import Request

from proxy_client.core.http_client import ProxyClient

# Le découpage du corps relayé est géré par le serveur ASGI
SKIPPED_RESPONSE_HEADERS = {b"transfer-encoding"}


def _has_body(request: Request) -> bool:
    return "content-length" in request.headers or "transfer-encoding" in request.headers


def _raw_target(request: Request) -> str:
    """
    Chemin + query string tels que reçus (encodage %XX conservé),
    relatifs au point de montage de la sous-application.
    """
    scope = request.scope
    raw_path = scope.get("raw_path") or scope["path"].encode("utf-8")
    raw_path = raw_path.split(b"?", 1)[0]

    root_path = scope.get("root_path", "").encode("utf-8")
    if root_path and raw_path.startswith(root_path):
        raw_path = raw_path[len(root_path):]

    target = raw_path.decode("latin-1") or "/"
    query_string = scope.get("query_string", b"")
    if query_string:
        target += "?" + query_string.decode("latin-1")
    return target


async def _relay_body(incoming: httpx.Response):
    # Un corps déjà lu (réponse non streamée) est relayé tel quel
    if incoming.is_stream_consumed:
        yield incoming.content
        return

    async for chunk in incoming.aiter_raw():
        yield chunk


def build_subapp(client: ProxyClient) -> FastAPI:
    """
    Génère une sous-application FastAPI qui relaie les requêtes des navigateurs
    vers le root_url du `client` : status, headers et corps (en streaming).
    Toutes les méthodes HTTP sont relayées, y compris les verbes non standard.

    À monter par l'application hôte : `app.mount("/api", client.subapp())`.
    """

    async def proxy(request: Request) -> StreamingResponse:
        start = time.perf_counter()

        href = client.get_url(_raw_target(request))
        parsed_url = httpx.URL(href)

        # Headers entrants, surchargés sans tenir compte de la casse
        headers = httpx.Headers(request.headers.raw)
        headers["Connection"] = "Keep-Alive"
        headers["Host"] = parsed_url.netloc.decode("ascii")
        headers["Origin"] = parsed_url.netloc.decode("ascii")

        outgoing = client._create_transport_request(
            method=request.method,
            url=parsed_url,
            headers=headers,
            content=request.stream() if _has_body(request) else None,
        )

        client.logger.info("< %s %s", request.method, href, extra={"http": client._format_request(outgoing)})

        incoming = await client.http.send(outgoing, stream=True)

        ms = (time.perf_counter() - start) * 1000
        client.logger.info("> %s %s %s %.3f ms", request.method, href, incoming.status_code, ms,
                           extra={"http": client._format_response(incoming)})

        response = StreamingResponse(
            _relay_body(incoming),
            status_code=incoming.status_code,
            background=BackgroundTask(incoming.aclose),
        )
        response.raw_headers = [
            (name.lower(), value) for name, value in incoming.headers.raw
            if name.lower() not in SKIPPED_RESPONSE_HEADERS
        ]
        return response

    async def proxy_app(scope, receive, send):
        # Application ASGI brute : aucun filtrage par méthode, comme un middleware
        response = await proxy(Request(scope, receive))
        await response(scope, receive, send)

    subapp = FastAPI(openapi_url=None, docs_url=None, redoc_url=None)
    subapp.mount("/", proxy_app)
    return subapp
