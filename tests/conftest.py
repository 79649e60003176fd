"""
Shared pytest fixtures available to every test file automatically.

Nothing here talks to a real backend or Redis:
  - HTTP goes through httpx.MockTransport backed by MockBackend
  - Redis is replaced by InMemoryRedis
"""

from __future__ import annotations

import httpx
import pytest
from redis.exceptions import WatchError

from tourbook.client import ApiClient, build_http_client
from tourbook.session import SessionStore

BASE_URL = "http://backend.test"

# ---------------------------------------------------------------------------
# Fake backend: canned responses keyed by (method, path)
# ---------------------------------------------------------------------------


class MockBackend:
    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], dict] = {}
        self.requests: list[httpx.Request] = []

    def on(
        self,
        method: str,
        path: str,
        json=None,
        status: int = 200,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
        exc: Exception | None = None,
    ) -> None:
        self.routes[(method, path)] = dict(
            json=json, status=status, content=content, headers=headers, exc=exc
        )

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "Not found"})
        if route["exc"] is not None:
            raise route["exc"]
        if route["content"] is not None:
            return httpx.Response(
                route["status"], content=route["content"], headers=route["headers"]
            )
        if route["json"] is None:
            return httpx.Response(route["status"])
        return httpx.Response(route["status"], json=route["json"])


# ---------------------------------------------------------------------------
# In-memory Redis double: only the commands SessionStore uses
# ---------------------------------------------------------------------------


class _Pipeline:
    """
    Queues commands until execute(). After watch() commands run immediately
    until multi(), as in redis-py; a write registered in
    ``InMemoryRedis.interleaved`` lands before EXEC and aborts it.
    """

    def __init__(self, redis: InMemoryRedis) -> None:
        self._redis = redis
        self._ops: list[tuple[str, tuple]] = []
        self._watching = False
        self._watched = False

    async def __aenter__(self) -> _Pipeline:
        return self

    async def __aexit__(self, *exc_info) -> None:
        self._reset()

    def _reset(self) -> None:
        self._ops.clear()
        self._watching = False
        self._watched = False

    async def watch(self, *keys) -> bool:
        self._watching = True
        self._watched = True
        return True

    def multi(self) -> None:
        self._watching = False

    def __getattr__(self, name: str):
        if self._watching:
            return getattr(self._redis, name)

        def _queue(*args):
            self._ops.append((name, args))
            return self

        return _queue

    async def execute(self) -> list:
        if self._watched and self._redis.interleaved:
            await self._redis.interleaved.pop(0)(self._redis)
            self._reset()
            raise WatchError("Watched variable changed.")
        results = [await getattr(self._redis, name)(*args) for name, args in self._ops]
        self._reset()
        return results


class InMemoryRedis:
    def __init__(self) -> None:
        self.data: dict[str, object] = {}
        # writes from "another client", applied between WATCH and EXEC
        self.interleaved: list = []

    def pipeline(self, transaction: bool = True) -> _Pipeline:
        return _Pipeline(self)

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value):
        self.data[key] = value
        return True

    async def delete(self, *keys):
        return sum(1 for k in keys if self.data.pop(k, None) is not None)

    async def sadd(self, key, *values):
        members = self.data.setdefault(key, set())
        before = len(members)
        members.update(values)
        return len(members) - before

    async def srem(self, key, *values):
        members = self.data.get(key, set())
        before = len(members)
        members.difference_update(values)
        return before - len(members)

    async def smembers(self, key):
        return set(self.data.get(key, set()))

    async def lrem(self, key, count, value):
        items = self.data.get(key, [])
        kept = [v for v in items if v != value]
        self.data[key] = kept
        return len(items) - len(kept)

    async def lpush(self, key, *values):
        items = self.data.setdefault(key, [])
        for v in values:
            items.insert(0, v)
        return len(items)

    async def ltrim(self, key, start, end):
        items = self.data.get(key, [])
        self.data[key] = items[start : end + 1]
        return True

    async def lrange(self, key, start, end):
        items = self.data.get(key, [])
        return list(items[start:] if end == -1 else items[start : end + 1])

    async def hget(self, key, field):
        return self.data.get(key, {}).get(field)

    async def hset(self, key, field, value):
        self.data.setdefault(key, {})[field] = value
        return 1


# ---------------------------------------------------------------------------
# Reusable fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def backend() -> MockBackend:
    return MockBackend()


@pytest.fixture()
def redis() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture()
def session(redis) -> SessionStore:
    return SessionStore(redis=redis, namespace="test")


@pytest.fixture()
def api_factory(backend, session):
    def _make(max_retries: int = 0, prefix: str = "") -> ApiClient:
        http_client = build_http_client(
            base_url=BASE_URL, transport=httpx.MockTransport(backend)
        )
        return ApiClient(
            session=session, http_client=http_client, prefix=prefix, max_retries=max_retries
        )

    return _make


@pytest.fixture()
def api(api_factory) -> ApiClient:
    return api_factory()
