"""
Domain API facade consumed by the storefront UI.

    async with await StorefrontAPI.connect() as api:
        products = await api.products.get_all()
        await api.auth.login("admin@example.com", "secret")
        await api.products.create({"name": "Tea", "price": 3, "category_id": 1})
"""

from datetime import timedelta
from typing import Any

import httpx
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncEngine

from storefront.api.auth import AuthAPI
from storefront.api.categories import CategoriesAPI
from storefront.api.orders import OrdersAPI
from storefront.api.products import ProductsAPI
from storefront.api.users import UsersAPI
from storefront.datastore.engine import close_db, init_db
from storefront.services.cache import ResponseCache
from storefront.services.client import RequestExecutor, Sleep
from storefront.services.connectivity import ConnectivityProbe, SocketConnectivityProbe
from storefront.services.token_store import TokenStore
from storefront.settings import Settings, global_settings


class CacheAPI:
    """Explicit cache management for the UI (pull-to-refresh, admin screens)."""

    def __init__(self, executor: RequestExecutor):
        self.executor = executor

    async def clear(self) -> None:
        await self.executor.clear_cache()
        logger.info("API cache cleared")

    async def clear_by_pattern(self, pattern: str) -> int:
        removed = await self.executor.invalidate(pattern)
        logger.info(f"Cache cleared for pattern: {pattern}")
        return removed


class StorefrontAPI:
    """
    Facade grouping the backend operations by resource.

    Each instance owns its own executor, cache and refresh state, so two
    instances never share a session.
    """

    def __init__(self, executor: RequestExecutor):
        self.executor = executor
        self.auth = AuthAPI(executor)
        self.products = ProductsAPI(executor)
        self.categories = CategoriesAPI(executor)
        self.orders = OrdersAPI(executor)
        self.users = UsersAPI(executor)
        self.cache = CacheAPI(executor)
        self._engine: AsyncEngine | None = None

    @classmethod
    async def connect(
        cls,
        settings: Settings | None = None,
        probe: ConnectivityProbe | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep | None = None,
    ) -> "StorefrontAPI":
        """Open the token database and build a fully wired facade."""
        settings = settings or global_settings
        engine, session_factory = await init_db(
            settings.database_url, settings.database_echo
        )

        executor = RequestExecutor(
            base_url=settings.api_base_url,
            token_store=TokenStore(session_factory),
            cache=ResponseCache(
                ttl=timedelta(seconds=settings.cache_ttl_seconds),
                debug=settings.debug,
            ),
            probe=probe
            or SocketConnectivityProbe(
                settings.api_base_url,
                timeout=settings.connectivity_timeout,
                ttl=settings.connectivity_ttl,
            ),
            timeout=settings.api_timeout,
            max_retries=settings.max_retries,
            retry_base_delay=settings.retry_base_delay,
            client_type=settings.client_type,
            transport=transport,
            sleep=sleep,
            debug=settings.debug,
        )
        logger.debug(f"API URL: {settings.api_base_url}")

        api = cls(executor)
        api._engine = engine
        return api

    def get_health_status(self) -> dict[str, Any]:
        return self.executor.get_health_status()

    async def close(self) -> None:
        await self.executor.close()
        if self._engine is not None:
            await close_db(self._engine)
            self._engine = None

    async def __aenter__(self) -> "StorefrontAPI":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


__all__ = [
    "StorefrontAPI",
    "AuthAPI",
    "ProductsAPI",
    "CategoriesAPI",
    "OrdersAPI",
    "UsersAPI",
    "CacheAPI",
]
