"""
Products resource.
"""

from pathlib import Path
from typing import Any

from loguru import logger

from storefront.api.base import BaseResource


class ProductsAPI(BaseResource):
    """Product catalogue: public reads, authenticated admin writes."""

    @property
    def prefix(self) -> str:
        return "/products"

    async def get_all(self, force_refresh: bool = False) -> list[dict[str, Any]]:
        logger.debug("Fetching all products")
        return await self.executor.execute(
            self.prefix, requires_auth=False, use_cache=not force_refresh
        )

    async def get_by_category(
        self,
        category_id: str | int,
        force_refresh: bool = False,
    ) -> list[dict[str, Any]]:
        return await self.executor.execute(
            self.prefix,
            requires_auth=False,
            use_cache=not force_refresh,
            params={"category_id": category_id},
        )

    async def get_by_id(
        self,
        product_id: str | int,
        force_refresh: bool = False,
    ) -> dict[str, Any]:
        return await self.executor.execute(
            f"{self.prefix}/{product_id}",
            requires_auth=False,
            use_cache=not force_refresh,
        )

    async def create(
        self,
        product_data: dict[str, Any],
        image: str | Path | None = None,
    ) -> dict[str, Any]:
        """
        Create a product.

        Sent as JSON, or as a multipart form when an image path is given.
        """
        if image is None:
            return await self._write(self.prefix, "POST", product_data)
        return await self._upload(self.prefix, "POST", product_data, image)

    async def update(
        self,
        product_id: str | int,
        product_data: dict[str, Any],
        image: str | Path | None = None,
    ) -> dict[str, Any]:
        endpoint = f"{self.prefix}/{product_id}"
        if image is None:
            return await self._write(endpoint, "PUT", product_data)
        return await self._upload(endpoint, "PUT", product_data, image)

    async def delete(self, product_id: str | int) -> Any:
        return await self._write(f"{self.prefix}/{product_id}", "DELETE")
