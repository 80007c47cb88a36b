"""Source service - listing sources and managing favorite sources."""

from datetime import datetime

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from techfeed.constants.default_sources import DEFAULT_SOURCES
from techfeed.db.postgres import insert_ignore
from techfeed.models import Article, FavoriteSource, Source


class SourceNotFoundError(Exception):
    """Raised when a source id does not exist."""


class SourceService:
    """Service for reading sources and per-user favorites."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_sources(self) -> list[tuple[Source, datetime | None]]:
        """Get active sources with the publish time of their newest article."""
        latest = (
            select(Article.source_id, func.max(Article.published_at).label("latest_published_at"))
            .group_by(Article.source_id)
            .subquery()
        )
        result = await self.session.execute(
            select(Source, latest.c.latest_published_at)
            .outerjoin(latest, latest.c.source_id == Source.id)
            .where(Source.is_active == True)
            .order_by(Source.category, Source.name)
        )
        return [(source, latest_published_at) for source, latest_published_at in result.all()]

    async def list_favorite_source_ids(self, user_id: int) -> list[str]:
        """Get the ids of the user's favorite sources."""
        result = await self.session.execute(
            select(FavoriteSource.source_id)
            .where(FavoriteSource.user_id == user_id)
            .order_by(FavoriteSource.added_at)
        )
        return list(result.scalars().all())

    async def add_favorite(self, user_id: int, source_id: str) -> None:
        """Bookmark a source. Adding it twice keeps a single row."""
        if await self.session.get(Source, source_id) is None:
            raise SourceNotFoundError(source_id)

        await insert_ignore(
            self.session,
            FavoriteSource,
            {"user_id": user_id, "source_id": source_id},
            conflict_columns=["user_id", "source_id"],
        )
        await self.session.commit()

    async def remove_favorite(self, user_id: int, source_id: str) -> None:
        """Remove a bookmark; missing bookmarks are ignored."""
        await self.session.execute(
            delete(FavoriteSource).where(
                FavoriteSource.user_id == user_id,
                FavoriteSource.source_id == source_id,
            )
        )
        await self.session.commit()

    async def seed_default_sources(self) -> int:
        """
        Insert the built-in sources that are not present yet.

        Existing rows are left untouched so out-of-band edits survive restarts.
        Returns the number of known default sources.
        """
        await insert_ignore(self.session, Source, DEFAULT_SOURCES, conflict_columns=["id"])
        await self.session.commit()
        return len(DEFAULT_SOURCES)
