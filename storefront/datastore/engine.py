"""
Database engine setup for the persisted token store.
Uses SQLAlchemy's async engine (SQLite through aiosqlite by default).
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from storefront.datastore.models import Base
from storefront.settings import global_settings


async def init_db(
    database_url: str | None = None,
    echo: bool | None = None,
) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """Create the engine and tables; return the engine and a session factory."""
    engine = create_async_engine(
        database_url or global_settings.database_url,
        echo=global_settings.database_echo if echo is None else echo,
        future=True,
    )

    session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    return engine, session_factory


async def close_db(engine: AsyncEngine) -> None:
    """Dispose of the engine and its connections."""
    await engine.dispose()
