# Fichier: proxy_client/domainr/api_server.py

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Query

from proxy_client.core.config import load_client_config
from proxy_client.core.exceptions import ClientError, TransportError
from proxy_client.core.http_client import ProxyClient
from proxy_client.core.logger import get_logger
from proxy_client.domainr.api_client import DomainrClient

log = get_logger(__name__)

client = ProxyClient(load_client_config(defaults={"root_url": DomainrClient.ROOT_URL}, logger=log))
domainr = DomainrClient(client_id="example", client=client)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gère les événements de démarrage et d'arrêt de l'application.
    """
    log.info("Proxy Domainr monté sur /api -> %s", client.root_url)

    yield  # L'application démarre ici

    await client.aclose()
    log.info("L'application s'arrête.")


app = FastAPI(
    title="Proxy Client - Domainr",
    description="Relaie /api vers l'API Domainr et expose une recherche.",
    version="0.1.0",
    lifespan=lifespan
)

# Les navigateurs passent par /api/..., relayé tel quel
app.mount("/api", client.subapp())


@app.get("/search/", summary="Recherche de domaines via Domainr.")
async def search(q: str = Query(..., description="nom recherché, ex: 'domai.nr'")):
    try:
        return await domainr.search(q)

    except ClientError as e:
        log.warning(f"Domainr error {e.code}: {e.message}")
        status_code = e.response.status_code if e.response is not None else 502
        raise HTTPException(status_code=status_code, detail={"name": e.name, "message": e.message})

    except TransportError as e:
        log.warning(f"Connection error to Domainr API: {e}")
        raise HTTPException(status_code=503, detail="Service Domainr non disponible.")
