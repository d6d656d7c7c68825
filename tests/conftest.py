"""
Shared fixtures: an in-process fake backend, a controllable clock, a
recording sleep and a token store on a temporary SQLite file.
"""

import inspect
from datetime import datetime, timedelta
from typing import Any, Callable

import httpx
import pytest

from storefront.datastore.engine import close_db, init_db
from storefront.services.cache import ResponseCache
from storefront.services.client import RequestExecutor
from storefront.services.connectivity import StaticConnectivityProbe
from storefront.services.token_store import TokenStore

BASE_URL = "http://backend.test/api"

Handler = Callable[[httpx.Request], Any]


class FakeClock:
    """Manually advanced clock for freshness checks."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class RecordingSleep:
    """Backoff sleep that returns immediately and remembers the delays."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def sequence(*responses: httpx.Response | Exception) -> Handler:
    """Handler answering with each response in turn, repeating the last."""
    remaining = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        item = remaining.pop(0) if len(remaining) > 1 else remaining[0]
        if isinstance(item, Exception):
            raise item
        return item

    return handler


class FakeBackend:
    """
    Route table in front of httpx.MockTransport.

    Routes are keyed by (method, path) with the "/api" prefix stripped;
    handlers may be sync or async and may raise httpx exceptions.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], Handler] = {}
        self.calls: list[httpx.Request] = []

    def route(
        self,
        method: str,
        path: str,
        handler: Handler | httpx.Response,
    ) -> None:
        if isinstance(handler, httpx.Response):
            response = handler
            handler = lambda request: response  # noqa: E731
        self.routes[(method, path)] = handler

    def requests_to(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r
            for r in self.calls
            if r.method == method and self._path(r) == path
        ]

    def count(self, method: str, path: str) -> int:
        return len(self.requests_to(method, path))

    @staticmethod
    def _path(request: httpx.Request) -> str:
        return request.url.path.removeprefix("/api")

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        handler = self.routes.get((request.method, self._path(request)))
        if handler is None:
            return httpx.Response(404, json={"message": "Not found"})
        response = handler(request)
        if inspect.isawaitable(response):
            response = await response
        return response

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


def envelope(data: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json={"data": data})


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def probe():
    return StaticConnectivityProbe(online=True)


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'tokens.db'}"


@pytest.fixture
async def token_store(database_url):
    engine, session_factory = await init_db(database_url, echo=False)
    yield TokenStore(session_factory)
    await close_db(engine)


@pytest.fixture
def cache(clock):
    return ResponseCache(ttl=timedelta(minutes=5), clock=clock)


@pytest.fixture
async def executor(backend, token_store, cache, probe, sleep):
    client = RequestExecutor(
        base_url=BASE_URL,
        token_store=token_store,
        cache=cache,
        probe=probe,
        transport=backend.transport,
        sleep=sleep,
    )
    yield client
    await client.close()
