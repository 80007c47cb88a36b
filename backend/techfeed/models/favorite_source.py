"""FavoriteSource link table for user-bookmarked sources."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, func
from sqlmodel import Field, SQLModel


class FavoriteSource(SQLModel, table=True):
    """Link table for User <-> Source bookmarks, unique per (user_id, source_id)."""

    __tablename__ = "favorite_source"

    user_id: int = Field(foreign_key="user.id", primary_key=True)
    source_id: str = Field(foreign_key="source.id", primary_key=True, max_length=64)

    added_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(DateTime(timezone=True), nullable=False, server_default=func.now()),
    )
