"""
TokenStore - persisted credentials and cached user profile.

Backed by the key-value table in the local database so the session
survives process restarts. Every write runs in its own transaction and is
awaited before returning.
"""

import json
from typing import Any

from loguru import logger
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.datastore.repositories import KeyValueRepository

USER_KEY = "user"
ACCESS_TOKEN_KEY = "authToken"
REFRESH_TOKEN_KEY = "refreshToken"

SESSION_KEYS = [USER_KEY, ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY]


class Credentials(BaseModel):
    """Access/refresh token pair."""

    access_token: str
    refresh_token: str | None = None


class TokenStore:
    """
    Owner of the persisted session state.

    Usage:
        store = TokenStore(await init_db())

        await store.set_credentials("access", "refresh")
        token = await store.get_access_token()
        await store.clear()
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def _get(self, key: str) -> str | None:
        async with self._session_factory() as session:
            return await KeyValueRepository(session).get(key)

    async def _put_many(self, values: dict[str, str]) -> None:
        async with self._session_factory() as session:
            async with session.begin():
                repo = KeyValueRepository(session)
                for key, value in values.items():
                    await repo.put(key, value)

    async def get_access_token(self) -> str | None:
        return await self._get(ACCESS_TOKEN_KEY)

    async def get_refresh_token(self) -> str | None:
        return await self._get(REFRESH_TOKEN_KEY)

    async def get_credentials(self) -> Credentials | None:
        async with self._session_factory() as session:
            values = await KeyValueRepository(session).get_many(
                [ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY]
            )
        if ACCESS_TOKEN_KEY not in values:
            return None
        return Credentials(
            access_token=values[ACCESS_TOKEN_KEY],
            refresh_token=values.get(REFRESH_TOKEN_KEY),
        )

    async def set_credentials(self, access: str, refresh: str | None = None) -> None:
        """Persist a new access token, and the refresh token when one is given."""
        values = {ACCESS_TOKEN_KEY: access}
        if refresh:
            values[REFRESH_TOKEN_KEY] = refresh
        await self._put_many(values)

    async def get_user(self) -> dict[str, Any] | None:
        raw = await self._get(USER_KEY)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored user profile is not valid JSON, ignoring it")
            return None

    async def set_user(self, user: dict[str, Any]) -> None:
        await self._put_many({USER_KEY: json.dumps(user)})

    async def save_session(
        self,
        user: dict[str, Any] | None,
        access: str | None,
        refresh: str | None,
    ) -> None:
        """Persist whatever a login returned in a single transaction."""
        values = {}
        if user is not None:
            values[USER_KEY] = json.dumps(user)
        if access:
            values[ACCESS_TOKEN_KEY] = access
        if refresh:
            values[REFRESH_TOKEN_KEY] = refresh
        if values:
            await self._put_many(values)

    async def clear(self) -> None:
        """Remove user, access token and refresh token together."""
        async with self._session_factory() as session:
            async with session.begin():
                await KeyValueRepository(session).delete_many(SESSION_KEYS)
        logger.debug("Token store cleared")
