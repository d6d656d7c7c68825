"""
Authentication resource - login, logout, registration and token refresh.

Login and logout are the only calls that write credentials outside of the
refresh flow: a successful login persists the user profile and both tokens,
and logout always wipes local session state, even when the server call
fails.
"""

from typing import Any

from loguru import logger

from storefront.api.base import BaseResource
from storefront.services.errors import ResponseValidationError, ServiceError


class AuthAPI(BaseResource):
    @property
    def prefix(self) -> str:
        return "/auth"

    async def login(self, email: str, password: str) -> dict[str, Any]:
        """
        Sign in and persist the returned session.

        Returns:
            ``{"user": ..., "accessToken": ..., "refreshToken": ...}``
        """
        logger.info(f"Login attempt: {email}")
        data = await self.executor.execute(
            f"{self.prefix}/login",
            "POST",
            {"email": email, "password": password},
            requires_auth=False,
            use_cache=False,
        )
        if not isinstance(data, dict):
            raise ResponseValidationError(
                "Unexpected login response", endpoint=f"{self.prefix}/login"
            )

        await self.executor.token_store.save_session(
            data.get("user"), data.get("accessToken"), data.get("refreshToken")
        )
        logger.info(f"Logged in as {email}")
        return data

    async def logout(self) -> None:
        """Tell the server, then clear the cache and every stored credential."""
        try:
            await self.executor.execute(
                f"{self.prefix}/logout", "POST", requires_auth=True, use_cache=False
            )
        except ServiceError as e:
            logger.warning(f"Server logout failed, clearing local session anyway: {e}")
        finally:
            await self.executor.clear_cache()
            await self.executor.token_store.clear()
        logger.info("Logged out")

    async def register(self, name: str, email: str, password: str) -> dict[str, Any]:
        return await self.executor.execute(
            "/users/register",
            "POST",
            {"name": name, "email": email, "password": password},
            requires_auth=False,
            use_cache=False,
        )

    async def refresh(self) -> dict[str, Any]:
        """Force a token refresh, sharing any refresh already in flight."""
        access_token = await self.executor.coordinator.refresh()
        refresh_token = await self.executor.token_store.get_refresh_token()
        return {"accessToken": access_token, "refreshToken": refresh_token}

    async def current_user(self) -> dict[str, Any] | None:
        """Profile stored by the last login, if any."""
        return await self.executor.token_store.get_user()

    async def is_authenticated(self) -> bool:
        return await self.executor.token_store.get_credentials() is not None
