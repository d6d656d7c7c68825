"""
Users resource.
"""

from typing import Any

from storefront.api.base import BaseResource


class UsersAPI(BaseResource):
    @property
    def prefix(self) -> str:
        return "/users"

    async def update(
        self,
        user_id: str | int,
        user_data: dict[str, Any],
    ) -> dict[str, Any]:
        """Update name, email or password of a user."""
        result = await self._write(f"{self.prefix}/{user_id}", "PUT", user_data)

        # Keep the cached profile in sync when the signed-in user edits themselves
        current = await self.executor.token_store.get_user()
        is_self = current is not None and str(current.get("id")) == str(user_id)
        if is_self and isinstance(result, dict):
            await self.executor.token_store.set_user({**current, **result})

        return result
