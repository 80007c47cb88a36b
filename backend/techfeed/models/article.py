"""Article model for ingested news items."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, Index, func
from sqlmodel import Field, SQLModel


class Article(SQLModel, table=True):
    """
    Normalized, deduplicated news item.

    `id` grows monotonically and doubles as the pagination cursor.
    `url` is the deduplication key and is unique across the table.
    """

    __tablename__ = "article"
    __table_args__ = (Index("ix_article_published_at_id", "published_at", "id"),)

    id: int | None = Field(default=None, primary_key=True)
    source_id: str = Field(foreign_key="source.id", index=True, max_length=64)

    # Content
    title: str = Field(max_length=500)
    url: str = Field(max_length=2048, unique=True, index=True)
    summary: str | None = Field(default=None)

    # Metadata
    image_url: str | None = Field(default=None, max_length=2048)
    author: str | None = Field(default=None, max_length=200)
    category: str | None = Field(default=None, max_length=100)
    published_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(DateTime(timezone=True), nullable=False, server_default=func.now()),
    )
