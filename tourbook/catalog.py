"""
Pass-through clients for catalog and content endpoints.

Reads degrade to [] / None, admin writes raise ApiError, deletes return bool.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import lru_cache
from typing import Any, TypeVar

from loguru import logger

from tourbook.client import ApiClient, get_api_client
from tourbook.envelope import unwrap_entity, unwrap_list
from tourbook.errors import ApiError
from tourbook.normalize import (
    normalize_article,
    normalize_community_post,
    normalize_destination,
    normalize_package,
    normalize_user,
)
from tourbook.schemas import AdminUser, Article, CommunityPost, Destination, Package

T = TypeVar("T")

DESTINATIONS_PATH = "/destinations"
PACKAGES_PATH = "/packages"
ARTICLES_PATH = "/articles"
USERS_PATH = "/users"
COMMUNITY_PATH = "/community"


def _writable(payload: dict[str, Any]) -> dict[str, Any]:
    """Drop the id and unset values before sending an entity back."""
    return {k: v for k, v in payload.items() if k != "id" and v is not None}


class CatalogClient:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    async def _list(self, path: str, normalize: Callable[[Any], T], what: str) -> list[T]:
        try:
            data = await self.api.get_json(path)
        except ApiError as exc:
            logger.warning("Failed to load {}: {}", what, exc.message)
            return []
        return [normalize(raw) for raw in unwrap_list(data)]

    async def _one(self, path: str, normalize: Callable[[Any], T], what: str) -> T | None:
        try:
            data = await self.api.get_json(path)
        except ApiError as exc:
            logger.warning("Failed to load {}: {}", what, exc.message)
            return None
        raw = unwrap_entity(data)
        return normalize(raw) if raw is not None else None

    async def _save(
        self,
        collection: str,
        payload: dict[str, Any],
        normalize: Callable[[Any], T],
        entity_id: str | int | None = None,
    ) -> T:
        body = _writable(payload)
        if entity_id:
            data = await self.api.put_json(f"{collection}/{entity_id}", body)
        else:
            data = await self.api.post_json(collection, body)
        # Some endpoints answer 204: fall back to what we sent.
        raw = unwrap_entity(data) or {**body, "id": entity_id}
        return normalize(raw)

    async def _delete(self, path: str, what: str) -> bool:
        try:
            await self.api.delete(path)
        except ApiError as exc:
            logger.warning("Failed to delete {}: {}", what, exc.message)
            return False
        return True

    # -- destinations -------------------------------------------------------

    async def fetch_destinations(self) -> list[Destination]:
        return await self._list(DESTINATIONS_PATH, normalize_destination, "destinations")

    async def fetch_destination(self, destination_id: str | int) -> Destination | None:
        return await self._one(
            f"{DESTINATIONS_PATH}/{destination_id}",
            normalize_destination,
            f"destination {destination_id}",
        )

    # -- packages -----------------------------------------------------------

    async def fetch_packages(self) -> list[Package]:
        return await self._list(PACKAGES_PATH, normalize_package, "packages")

    async def fetch_package(self, package_id: str | int) -> Package | None:
        return await self._one(
            f"{PACKAGES_PATH}/{package_id}", normalize_package, f"package {package_id}"
        )

    async def save_package(
        self, payload: dict[str, Any], package_id: str | int | None = None
    ) -> Package:
        return await self._save(PACKAGES_PATH, payload, normalize_package, package_id)

    # -- articles -----------------------------------------------------------

    async def fetch_articles(self) -> list[Article]:
        return await self._list(ARTICLES_PATH, normalize_article, "articles")

    async def fetch_article(self, article_id: str | int) -> Article | None:
        return await self._one(
            f"{ARTICLES_PATH}/{article_id}", normalize_article, f"article {article_id}"
        )

    async def create_article(self, payload: dict[str, Any]) -> Article:
        return await self._save(ARTICLES_PATH, payload, normalize_article)

    async def update_article(self, article_id: str | int, payload: dict[str, Any]) -> Article:
        return await self._save(ARTICLES_PATH, payload, normalize_article, article_id)

    async def delete_article(self, article_id: str | int) -> bool:
        return await self._delete(f"{ARTICLES_PATH}/{article_id}", f"article {article_id}")

    async def upsert_article(self, article: Article | dict[str, Any]) -> list[Article]:
        """Update when the article carries an id, else create; returns the refreshed list."""
        payload = article.model_dump() if isinstance(article, Article) else dict(article)
        article_id = payload.get("id")
        if article_id:
            await self.update_article(article_id, payload)
        else:
            await self.create_article(payload)
        return await self.fetch_articles()

    # -- users (admin) ------------------------------------------------------

    async def fetch_users(self) -> list[AdminUser]:
        return await self._list(USERS_PATH, normalize_user, "users")

    async def save_user(
        self, payload: dict[str, Any], user_id: str | int | None = None
    ) -> AdminUser:
        return await self._save(USERS_PATH, payload, normalize_user, user_id)

    async def delete_user(self, user_id: str | int) -> bool:
        return await self._delete(f"{USERS_PATH}/{user_id}", f"user {user_id}")

    # -- community ----------------------------------------------------------

    async def fetch_community_posts(self) -> list[CommunityPost]:
        return await self._list(COMMUNITY_PATH, normalize_community_post, "community posts")


@lru_cache(maxsize=1)
def get_catalog_client() -> CatalogClient:
    return CatalogClient(get_api_client())
