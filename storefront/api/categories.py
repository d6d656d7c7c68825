"""
Categories resource.
"""

from typing import Any

from storefront.api.base import BaseResource


class CategoriesAPI(BaseResource):
    @property
    def prefix(self) -> str:
        return "/categories"

    async def get_all(self, force_refresh: bool = False) -> list[dict[str, Any]]:
        return await self.executor.execute(
            self.prefix, requires_auth=False, use_cache=not force_refresh
        )

    async def create(self, name: str) -> dict[str, Any]:
        return await self._write(self.prefix, "POST", {"name": name})

    async def update(self, category_id: str | int, name: str) -> dict[str, Any]:
        return await self._write(f"{self.prefix}/{category_id}", "PUT", {"name": name})

    async def delete(self, category_id: str | int) -> Any:
        return await self._write(f"{self.prefix}/{category_id}", "DELETE")
