from __future__ import annotations

from functools import lru_cache
from typing import Any

import httpx
from loguru import logger

from tourbook import settings
from tourbook.errors import ApiError
from tourbook.session import SessionStore, get_session_store

# ---------------------------------------------------------------------------
# ApiClient: thin async wrapper around the tourism backend REST API
# ---------------------------------------------------------------------------

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def build_http_client(
    base_url: str = settings.API_URL,
    timeout: float = settings.API_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=httpx.Timeout(timeout),
        headers=DEFAULT_HEADERS,
        follow_redirects=True,
        transport=transport,
    )


class ApiClient:
    """
    Sends requests to the backend and turns every failure into ApiError.

    The bearer token is read from the injected SessionStore on each request,
    so a login or logout takes effect immediately. Transport failures of GET
    requests are retried up to ``max_retries`` times; nothing else is retried.
    """

    def __init__(
        self,
        session: SessionStore,
        http_client: httpx.AsyncClient | None = None,
        prefix: str = settings.API_PREFIX,
        max_retries: int = settings.API_MAX_RETRIES,
    ) -> None:
        self.session = session
        self._http_client = http_client
        self.prefix = prefix
        self.max_retries = max(max_retries, 0)

    @property
    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = build_http_client()
        return self._http_client

    def url(self, path: str) -> str:
        return f"{self.prefix}{path}"

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.session.token:
            headers["Authorization"] = f"Bearer {self.session.token}"
        if extra:
            headers.update(extra)
        return headers

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        resp = await self._client.request(method, url, **kwargs)
        if resp.status_code >= 400:
            raise ApiError.from_status(resp.status_code, _json_or_none(resp))
        logger.debug("{} {} -> {}", method, url, resp.status_code)
        return resp

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send a request; raises ApiError for transport and HTTP failures."""
        retries = self.max_retries if method.upper() == "GET" else 0
        url = self.url(path)
        kwargs = dict(params=params, json=json, headers=self._headers(headers))
        for attempt in range(1, retries + 1):
            try:
                return await self._send(method, url, **kwargs)
            except httpx.RequestError as exc:
                logger.debug(
                    "{} {} transport error, retrying ({}/{}): {}",
                    method, url, attempt, retries, exc,
                )
        try:
            return await self._send(method, url, **kwargs)
        except httpx.RequestError as exc:
            logger.debug("{} {} transport error: {}", method, url, exc)
            raise ApiError.transport() from exc

    async def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return _json_or_none(await self.request("GET", path, params=params))

    async def post_json(self, path: str, body: Any = None) -> Any:
        return _json_or_none(await self.request("POST", path, json=body))

    async def put_json(self, path: str, body: Any = None) -> Any:
        return _json_or_none(await self.request("PUT", path, json=body))

    async def patch_json(self, path: str, body: Any = None) -> Any:
        return _json_or_none(await self.request("PATCH", path, json=body))

    async def delete(self, path: str) -> None:
        await self.request("DELETE", path)

    async def get_bytes(self, path: str, accept: str) -> bytes:
        resp = await self.request("GET", path, headers={"Accept": accept})
        return resp.content

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()


def _json_or_none(resp: httpx.Response) -> Any:
    """Body as JSON, or None for empty / non-JSON bodies."""
    if not resp.content:
        return None
    try:
        return resp.json()
    except ValueError:
        return None


@lru_cache(maxsize=1)
def get_api_client() -> ApiClient:
    return ApiClient(session=get_session_store())
