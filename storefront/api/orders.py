"""
Orders resource.
"""

from typing import Any

from storefront.api.base import BaseResource


class OrdersAPI(BaseResource):
    """Orders: guest checkout, authenticated listing and status updates."""

    @property
    def prefix(self) -> str:
        return "/orders"

    async def get_all(self, force_refresh: bool = False) -> list[dict[str, Any]]:
        return await self.executor.execute(
            self.prefix, requires_auth=True, use_cache=not force_refresh
        )

    async def create(self, order_data: dict[str, Any]) -> dict[str, Any]:
        """
        Place an order.

        Args:
            order_data: ``{"phone": str, "orderItems": [{"product_id", "quantity"}]}``
        """
        # Checkout does not require an account
        return await self._write(self.prefix, "POST", order_data, requires_auth=False)

    async def update(self, order_id: str | int, status: str) -> dict[str, Any]:
        return await self._write(f"{self.prefix}/{order_id}", "PUT", {"status": status})
