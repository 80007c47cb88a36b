"""Source model - configured content origins."""

from datetime import UTC, datetime
from enum import Enum

from sqlalchemy import Column, DateTime, func
from sqlmodel import Field, SQLModel


class SourceKind(str, Enum):
    """Provider kind, selects the adapter used to fetch a source."""

    FEED = "feed"
    LINK_AGGREGATOR = "link-aggregator"
    BLOG_API = "blog-api"


class Source(SQLModel, table=True):
    """
    A content origin (RSS/Atom feed, link aggregator or blog API).
    Seeded out-of-band; the ingestion pipeline only reads it.
    """

    __tablename__ = "source"

    id: str = Field(primary_key=True, max_length=64)  # Stable slug, e.g. "hn"
    name: str = Field(max_length=100)
    kind: str = Field(default=SourceKind.FEED.value, max_length=32)
    category: str = Field(default="", max_length=100)

    feed_url: str | None = Field(default=None, max_length=2048)  # kind=feed only
    icon_url: str | None = Field(default=None, max_length=2048)

    # Only active sources take part in fetch runs
    is_active: bool = Field(default=True, index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(DateTime(timezone=True), nullable=False, server_default=func.now()),
    )
