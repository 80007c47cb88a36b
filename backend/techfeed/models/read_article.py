"""ReadArticle link table - which user opened which article."""

from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, func
from sqlmodel import Field, SQLModel


class ReadArticle(SQLModel, table=True):
    """
    Link table for User <-> Article read state.
    The composite primary key makes (user_id, article_id) unique.
    """

    __tablename__ = "read_article"

    user_id: int = Field(foreign_key="user.id", primary_key=True)
    article_id: int = Field(foreign_key="article.id", primary_key=True)

    read_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=Column(DateTime(timezone=True), nullable=False, server_default=func.now()),
    )
