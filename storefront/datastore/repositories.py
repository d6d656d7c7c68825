"""
Repository layer - wraps data access for the key-value store.
"""

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.datastore.models import KeyValueDB


class KeyValueRepository:
    """Key-value store repository"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, key: str) -> str | None:
        result = await self.session.execute(
            select(KeyValueDB.value).where(KeyValueDB.key == key)
        )
        return result.scalar_one_or_none()

    async def get_many(self, keys: list[str]) -> dict[str, str]:
        result = await self.session.execute(
            select(KeyValueDB.key, KeyValueDB.value).where(KeyValueDB.key.in_(keys))
        )
        return {key: value for key, value in result.all()}

    async def put(self, key: str, value: str) -> None:
        """Insert or overwrite a single entry."""
        row = await self.session.get(KeyValueDB, key)
        if row is None:
            self.session.add(KeyValueDB(key=key, value=value))
        else:
            row.value = value
            row.updated_at = datetime.now()

    async def delete_many(self, keys: list[str]) -> None:
        await self.session.execute(delete(KeyValueDB).where(KeyValueDB.key.in_(keys)))
