import inspect
import logging
from typing import AsyncGenerator, Callable, List

import httpx
import pytest
from pytest_asyncio import fixture as async_fixture

from proxy_client.core.http_client import ProxyClient

ROOT_URL = "https://api.example/v1"
TEST_LOGGER_NAME = "tests.proxy_client"


class RecordingUpstream:
    """
    Upstream simulé pour httpx.MockTransport :
    enregistre chaque requête reçue et délègue la réponse à `handler`.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.handler: Callable = lambda request: httpx.Response(200, json={"ok": True})

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.handler(request)
        if inspect.isawaitable(response):
            response = await response
        return response


@pytest.fixture
def upstream() -> RecordingUpstream:
    return RecordingUpstream()


@pytest.fixture
def logger(caplog) -> logging.Logger:
    """Logger de test, capturé par caplog au niveau INFO."""
    caplog.set_level(logging.INFO, logger=TEST_LOGGER_NAME)
    return logging.getLogger(TEST_LOGGER_NAME)


@pytest.fixture
def make_client(upstream, logger):
    """Factory de ProxyClient branchés sur l'upstream simulé."""
    def _make(**options) -> ProxyClient:
        options.setdefault("root_url", ROOT_URL)
        options.setdefault("logger", logger)
        client = ProxyClient(transport=httpx.MockTransport(upstream), **options)
        return client

    return _make


@async_fixture
async def client(make_client) -> AsyncGenerator[ProxyClient, None]:
    proxy_client = make_client()
    yield proxy_client
    await proxy_client.aclose()
