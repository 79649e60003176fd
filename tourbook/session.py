from __future__ import annotations

import json

from loguru import logger
from pydantic import ValidationError
from redis.asyncio import Redis
from redis.exceptions import WatchError

from tourbook import settings
from tourbook.schemas import ReviewDraft, UserProfile

_redis: Redis | None = None

TOKEN_KEY = "token"
USER_KEY = "user"
WISHLIST_KEY = "wishlist"
RECENT_KEY = "recent-destinations"
REVIEWS_KEY = "review-drafts"

ALL_KEYS = (TOKEN_KEY, USER_KEY, WISHLIST_KEY, RECENT_KEY, REVIEWS_KEY)

MAX_WATCH_ATTEMPTS = 5


def get_redis() -> Redis:
    global _redis
    if _redis is None:
        _redis = Redis.from_url(settings.REDIS_URL, decode_responses=True)
    return _redis


class SessionStore:
    """
    Process-wide client state persisted in Redis.

    The token and cached profile are mirrored in memory after hydrate()/login
    so the HTTP adapter can read them synchronously. Every persistence call
    degrades to a logged warning when Redis is unavailable.
    """

    def __init__(
        self,
        redis: Redis | None = None,
        namespace: str = settings.SESSION_NAMESPACE,
    ) -> None:
        self._redis_override = redis
        self.namespace = namespace
        self._token: str | None = None
        self._user: UserProfile | None = None

    @property
    def _redis(self) -> Redis:
        return self._redis_override if self._redis_override is not None else get_redis()

    def _key(self, name: str) -> str:
        return f"{self.namespace}:{name}"

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def user(self) -> UserProfile | None:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None and self._user is not None

    # -- auth ---------------------------------------------------------------

    async def hydrate(self) -> None:
        """Load token and cached profile from persisted storage."""
        try:
            token = await self._redis.get(self._key(TOKEN_KEY))
            raw_user = await self._redis.get(self._key(USER_KEY))
        except Exception:
            logger.warning("Redis read failed: session starts empty", exc_info=True)
            return

        self._token = token or None
        self._user = None
        if raw_user:
            try:
                self._user = UserProfile.model_validate_json(raw_user)
            except ValidationError:
                logger.warning("Discarding unreadable cached profile")

    async def set_auth(self, token: str, user: UserProfile) -> None:
        self._token = token
        self._user = user
        try:
            async with self._redis.pipeline(transaction=True) as pipe:
                pipe.set(self._key(TOKEN_KEY), token)
                pipe.set(self._key(USER_KEY), user.model_dump_json())
                await pipe.execute()
        except Exception:
            logger.warning("Redis write failed: session kept in memory only", exc_info=True)

    async def set_user(self, user: UserProfile) -> None:
        self._user = user
        try:
            await self._redis.set(self._key(USER_KEY), user.model_dump_json())
        except Exception:
            logger.warning("Redis write failed for cached profile", exc_info=True)

    async def logout(self) -> None:
        """Clear every session key in a single command."""
        self._token = None
        self._user = None
        try:
            await self._redis.delete(*(self._key(k) for k in ALL_KEYS))
        except Exception:
            logger.warning("Redis delete failed during logout", exc_info=True)

    # -- wishlist -----------------------------------------------------------

    async def wishlist_ids(self) -> set[str]:
        try:
            return set(await self._redis.smembers(self._key(WISHLIST_KEY)))
        except Exception:
            logger.warning("Redis read failed for wishlist", exc_info=True)
            return set()

    async def add_to_wishlist(self, destination_id: str | int) -> None:
        try:
            await self._redis.sadd(self._key(WISHLIST_KEY), str(destination_id))
        except Exception:
            logger.warning("Redis write failed for wishlist", exc_info=True)

    async def remove_from_wishlist(self, destination_id: str | int) -> None:
        try:
            await self._redis.srem(self._key(WISHLIST_KEY), str(destination_id))
        except Exception:
            logger.warning("Redis write failed for wishlist", exc_info=True)

    async def toggle_wishlist(self, destination_id: str | int) -> bool:
        """Flip membership; returns True when the id is now wishlisted."""
        if str(destination_id) in await self.wishlist_ids():
            await self.remove_from_wishlist(destination_id)
            return False
        await self.add_to_wishlist(destination_id)
        return True

    # -- recently viewed ----------------------------------------------------

    async def push_recent_destination(self, destination_id: str | int) -> None:
        key = self._key(RECENT_KEY)
        value = str(destination_id)
        try:
            async with self._redis.pipeline(transaction=True) as pipe:
                pipe.lrem(key, 0, value)
                pipe.lpush(key, value)
                pipe.ltrim(key, 0, settings.RECENT_DESTINATIONS_LIMIT - 1)
                await pipe.execute()
        except Exception:
            logger.warning("Redis write failed for recent destinations", exc_info=True)

    async def recent_destinations(self) -> list[str]:
        try:
            return list(await self._redis.lrange(self._key(RECENT_KEY), 0, -1))
        except Exception:
            logger.warning("Redis read failed for recent destinations", exc_info=True)
            return []

    # -- review drafts ------------------------------------------------------

    async def review_drafts(self, destination_id: str | int) -> list[ReviewDraft]:
        try:
            raw = await self._redis.hget(self._key(REVIEWS_KEY), str(destination_id))
        except Exception:
            logger.warning("Redis read failed for review drafts", exc_info=True)
            return []
        return _parse_drafts(raw)

    async def save_review_draft(self, draft: ReviewDraft) -> bool:
        """
        Prepend ``draft`` to its destination's bucket with WATCH/MULTI so a
        concurrent save is never overwritten. Returns False when not stored.
        """
        key = self._key(REVIEWS_KEY)
        field = str(draft.destination_id)
        try:
            async with self._redis.pipeline(transaction=True) as pipe:
                for _ in range(MAX_WATCH_ATTEMPTS):
                    try:
                        await pipe.watch(key)
                        bucket = [draft, *_parse_drafts(await pipe.hget(key, field))]
                        pipe.multi()
                        pipe.hset(key, field, _dump_drafts(bucket))
                        await pipe.execute()
                        return True
                    except WatchError:
                        continue
        except Exception:
            logger.warning("Redis write failed for review drafts", exc_info=True)
            return False
        logger.warning("Review draft for {} not saved: bucket kept changing", field)
        return False


def _dump_drafts(drafts: list[ReviewDraft]) -> str:
    return json.dumps([d.model_dump(mode="json") for d in drafts])


def _parse_drafts(raw: str | None) -> list[ReviewDraft]:
    if not raw:
        return []
    try:
        items = json.loads(raw)
    except ValueError:
        return []
    if not isinstance(items, list):
        return []
    drafts = []
    for item in items:
        try:
            drafts.append(ReviewDraft.model_validate(item))
        except ValidationError:
            continue
    return drafts


_session_store = SessionStore()


def get_session_store() -> SessionStore:
    return _session_store
