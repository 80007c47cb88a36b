"""Database connection, session management and insert helpers."""

from collections.abc import AsyncGenerator, Mapping, Sequence
from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from techfeed.config import get_settings

settings = get_settings()

# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    future=True,
)

# Create async session factory
async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_db() -> None:
    """Initialize database tables."""
    # Register table models on the metadata before create_all
    import techfeed.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions."""
    async with async_session() as session:
        try:
            yield session
        finally:
            await session.close()


async def insert_ignore(
    session: AsyncSession,
    model: type[SQLModel],
    rows: Mapping[str, Any] | Sequence[Mapping[str, Any]],
    conflict_columns: Sequence[str],
) -> None:
    """
    Insert rows, silently skipping those that collide on `conflict_columns`.

    Used for the idempotent join-table writes (read state, favorites) and
    for seeding sources. Does not commit.
    """
    dialect = session.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = postgresql.insert(model)
    elif dialect == "sqlite":
        stmt = sqlite.insert(model)
    else:
        raise NotImplementedError(f"insert_ignore is not supported on {dialect}")

    values = [rows] if isinstance(rows, Mapping) else list(rows)
    if not values:
        return
    stmt = stmt.values(values).on_conflict_do_nothing(index_elements=list(conflict_columns))
    await session.execute(stmt)
