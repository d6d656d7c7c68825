"""
TokenRefreshCoordinator - single-flight access token refresh.

When several requests are rejected with 401 at the same time, only the
first one calls the refresh endpoint. The others park a future in the
waiter queue and are settled, in the order they joined, with the outcome
of that one refresh.
"""

import asyncio
from collections import deque
from typing import Any, Awaitable, Callable

from loguru import logger

from storefront.services.errors import AuthenticationError
from storefront.services.token_store import TokenStore

RefreshCall = Callable[[str], Awaitable[dict[str, Any]]]


class TokenRefreshCoordinator:
    """
    Ensures at most one refresh call is in flight.

    Usage:
        coordinator = TokenRefreshCoordinator(token_store, refresh_call)

        # after a 401 produced by `sent_token`
        new_token = await coordinator.refresh(stale_token=sent_token)

    ``refresh_call`` receives the stored refresh token and returns the
    unwrapped response payload, which must carry ``accessToken`` and may
    carry a rotated ``refreshToken``.
    """

    def __init__(
        self,
        token_store: TokenStore,
        refresh_call: RefreshCall,
        debug: bool = False,
    ):
        self._token_store = token_store
        self._refresh_call = refresh_call
        self._refreshing = False
        self._waiters: deque[asyncio.Future[str]] = deque()
        self._debug = debug
        self._stats = RefreshStats()

    @property
    def is_refreshing(self) -> bool:
        return self._refreshing

    @property
    def waiter_count(self) -> int:
        return len(self._waiters)

    async def refresh(self, stale_token: str | None = None) -> str:
        """
        Obtain a new access token, joining an in-flight refresh if any.

        Args:
            stale_token: The token the rejected request was sent with. If the
                store already holds a different token, a refresh finished in
                the meantime and that token is returned without a new call.

        Returns:
            The new access token

        Raises:
            AuthenticationError: If the refresh failed; credentials are cleared
        """
        # No await between the check and the set: the flag is the only guard.
        if self._refreshing:
            waiter: asyncio.Future[str] = asyncio.get_running_loop().create_future()
            self._waiters.append(waiter)
            self._stats.queued += 1
            self._log(f"QUEUED: {len(self._waiters)} waiter(s)")
            return await waiter

        self._refreshing = True
        try:
            token = await self._obtain_token(stale_token)
        except asyncio.CancelledError:
            self._finish(error=AuthenticationError("Token refresh was cancelled"))
            raise
        except AuthenticationError as e:
            self._stats.failures += 1
            self._finish(error=e)
            raise
        except Exception as e:
            self._stats.failures += 1
            error = AuthenticationError(f"Token refresh failed: {e}")
            self._finish(error=error)
            raise error from e

        self._finish(token=token)
        return token

    async def _obtain_token(self, stale_token: str | None) -> str:
        current = await self._token_store.get_access_token()
        if current and stale_token and current != stale_token:
            self._log("SKIP: token already rotated by an earlier refresh")
            return current

        try:
            refresh_token = await self._token_store.get_refresh_token()
            if not refresh_token:
                raise AuthenticationError("No refresh token available")

            self._stats.refreshes += 1
            payload = await self._refresh_call(refresh_token)

            if not isinstance(payload, dict) or not payload.get("accessToken"):
                raise AuthenticationError("No token received")
            access_token = payload["accessToken"]

            await self._token_store.set_credentials(
                access_token, payload.get("refreshToken")
            )
        except Exception as e:
            logger.error(f"Token refresh failed: {e}")
            await self._token_store.clear()
            raise

        logger.info("Access token refreshed")
        return access_token

    def _finish(
        self,
        token: str | None = None,
        error: BaseException | None = None,
    ) -> None:
        """Return to idle and settle every queued waiter in enqueue order."""
        self._refreshing = False
        waiters, self._waiters = self._waiters, deque()

        for waiter in waiters:
            if waiter.done():
                continue
            if error is not None:
                waiter.set_exception(error)
            else:
                waiter.set_result(token)

        if waiters:
            self._log(f"SETTLED: {len(waiters)} waiter(s)")

    def get_stats(self) -> "RefreshStats":
        return self._stats

    def _log(self, message: str) -> None:
        """Log debug message if debug mode is enabled."""
        if self._debug:
            logger.debug(f"[RefreshCoordinator] {message}")


class RefreshStats:
    """Statistics for token refresh coordination."""

    def __init__(self):
        self.refreshes: int = 0  # Refresh endpoint calls issued
        self.queued: int = 0  # Callers that waited on an in-flight refresh
        self.failures: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "refreshes": self.refreshes,
            "queued": self.queued,
            "failures": self.failures,
        }
