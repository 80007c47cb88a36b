"""Article schemas for API request/response validation."""

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from techfeed.services.article_service import ArticleItem, ArticlePage


class ArticleSource(BaseModel):
    """Source summary embedded in each article."""

    name: str
    kind: str
    icon_url: str | None = None


class ArticleResponse(BaseModel):
    """Schema for article responses."""

    id: int
    title: str
    url: str
    summary: str | None = None
    image_url: str | None = None
    author: str | None = None
    category: str | None = None
    published_at: datetime
    source_id: str
    source: ArticleSource | None = None
    is_read: bool = False

    @classmethod
    def from_item(cls, item: "ArticleItem") -> "ArticleResponse":
        a = item.article
        return cls(
            id=a.id,
            title=a.title,
            url=a.url,
            summary=a.summary,
            image_url=a.image_url,
            author=a.author,
            category=a.category,
            published_at=a.published_at,
            source_id=a.source_id,
            source=ArticleSource(**item.source) if item.source else None,
            is_read=item.is_read,
        )


class ArticleListResponse(BaseModel):
    """Schema for cursor-paginated article list response."""

    articles: list[ArticleResponse] = Field(default_factory=list)
    next_cursor: int | None = Field(
        default=None, description="Pass as `cursor` to get the next page"
    )
    has_more: bool = False

    @classmethod
    def from_page(cls, page: "ArticlePage") -> "ArticleListResponse":
        return cls(
            articles=[ArticleResponse.from_item(item) for item in page.articles],
            next_cursor=page.next_cursor,
            has_more=page.has_more,
        )
