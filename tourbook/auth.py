from __future__ import annotations

from functools import lru_cache

from loguru import logger

from tourbook.client import ApiClient, get_api_client
from tourbook.envelope import unwrap_entity
from tourbook.errors import ApiError
from tourbook.normalize import normalize_profile
from tourbook.schemas import UserProfile
from tourbook.session import SessionStore

LOGIN_PATH = "/user/login"
REGISTER_PATH = "/user/register"
PROFILE_PATH = "/user/profile"


class AuthClient:
    """Login / logout against the backend, persisting the result in the session store."""

    def __init__(self, api: ApiClient) -> None:
        self.api = api

    @property
    def session(self) -> SessionStore:
        return self.api.session

    async def login(self, email: str, password: str) -> UserProfile:
        data = await self.api.post_json(LOGIN_PATH, {"email": email, "password": password})
        raw = unwrap_entity(data) or {}
        token = raw.get("token")
        if not isinstance(token, str) or not token:
            raise ApiError("Login response did not contain a token")
        profile = normalize_profile(raw)
        await self.session.set_auth(token, profile)
        logger.info("Logged in as {}", profile.email)
        return profile

    async def register(self, fullname: str, email: str, password: str) -> None:
        await self.api.post_json(
            REGISTER_PATH, {"fullname": fullname, "email": email, "password": password}
        )

    async def get_profile(self) -> UserProfile:
        data = await self.api.get_json(PROFILE_PATH)
        return normalize_profile(unwrap_entity(data))

    async def refresh_user(self) -> UserProfile | None:
        """Profile from the backend, falling back to the cached one when that fails."""
        if not self.session.token:
            return None
        try:
            profile = await self.get_profile()
        except ApiError as exc:
            logger.warning("Failed to load profile, using cached user: {}", exc.message)
            return self.session.user
        await self.session.set_user(profile)
        return profile

    async def logout(self) -> None:
        await self.session.logout()


@lru_cache(maxsize=1)
def get_auth_client() -> AuthClient:
    return AuthClient(get_api_client())
