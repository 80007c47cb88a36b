"""Article service - cursor-paginated listing and per-user read state."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from techfeed.db.postgres import insert_ignore
from techfeed.models import Article, ReadArticle, Source

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class ArticleNotFoundError(Exception):
    """Raised when an article id does not exist."""


class SortOrder(str, Enum):
    """Listing order over (published_at, id)."""

    LATEST = "latest"
    OLDEST = "oldest"

    @classmethod
    def parse(cls, value: str | None) -> "SortOrder":
        """Unrecognized or missing values fall back to LATEST."""
        try:
            return cls(value)
        except ValueError:
            return cls.LATEST


@dataclass
class ArticleQuery:
    """Filters for one page request."""

    source_ids: list[str] = field(default_factory=list)
    search: str | None = None
    cursor: int | None = None
    limit: int = DEFAULT_PAGE_SIZE
    sort: SortOrder = SortOrder.LATEST

    def __post_init__(self) -> None:
        self.limit = max(1, min(int(self.limit), MAX_PAGE_SIZE))
        if not isinstance(self.sort, SortOrder):
            self.sort = SortOrder.parse(self.sort)
        self.search = self.search.strip() if self.search else None


@dataclass
class ArticleItem:
    """Article row joined with its source summary and the caller's read state."""

    article: Article
    source: dict[str, Any] | None
    is_read: bool = False


@dataclass
class ArticlePage:
    articles: list[ArticleItem]
    next_cursor: int | None
    has_more: bool


class ArticleService:
    """Service for querying articles and recording reads."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_articles(self, query: ArticleQuery, user_id: int | None = None) -> ArticlePage:
        """
        Get one page of articles.

        Ordered by (published_at, id), both descending for LATEST and both
        ascending for OLDEST. The cursor is the id of the last article of the
        previous page; one extra row is fetched to tell whether more follow.
        """
        stmt = select(Article)

        if query.sort == SortOrder.OLDEST:
            stmt = stmt.order_by(Article.published_at.asc(), Article.id.asc())
        else:
            stmt = stmt.order_by(Article.published_at.desc(), Article.id.desc())

        if query.source_ids:
            stmt = stmt.where(Article.source_id.in_(query.source_ids))

        if query.search:
            stmt = stmt.where(
                or_(
                    Article.title.icontains(query.search, autoescape=True),
                    Article.summary.icontains(query.search, autoescape=True),
                )
            )

        if query.cursor is not None:
            if query.sort == SortOrder.OLDEST:
                stmt = stmt.where(Article.id > query.cursor)
            else:
                stmt = stmt.where(Article.id < query.cursor)

        result = await self.session.execute(stmt.limit(query.limit + 1))
        rows = list(result.scalars().all())

        has_more = len(rows) > query.limit
        articles = rows[: query.limit]
        next_cursor = articles[-1].id if has_more else None

        sources = await self._get_source_summaries({a.source_id for a in articles})
        read_ids = await self._get_read_ids(user_id, [a.id for a in articles])

        return ArticlePage(
            articles=[
                ArticleItem(
                    article=a,
                    source=sources.get(a.source_id),
                    is_read=a.id in read_ids,
                )
                for a in articles
            ],
            next_cursor=next_cursor,
            has_more=has_more,
        )

    async def mark_read(self, user_id: int, article_id: int) -> None:
        """Record that the user opened the article. Calling it again is a no-op."""
        article = await self.session.get(Article, article_id)
        if article is None:
            raise ArticleNotFoundError(article_id)

        await insert_ignore(
            self.session,
            ReadArticle,
            {"user_id": user_id, "article_id": article_id},
            conflict_columns=["user_id", "article_id"],
        )
        await self.session.commit()

    async def _get_source_summaries(self, source_ids: set[str]) -> dict[str, dict[str, Any]]:
        if not source_ids:
            return {}
        result = await self.session.execute(select(Source).where(Source.id.in_(source_ids)))
        return {
            s.id: {"name": s.name, "kind": s.kind, "icon_url": s.icon_url}
            for s in result.scalars().all()
        }

    async def _get_read_ids(self, user_id: int | None, article_ids: list[int | None]) -> set[int]:
        if user_id is None or not article_ids:
            return set()
        result = await self.session.execute(
            select(ReadArticle.article_id).where(
                ReadArticle.user_id == user_id,
                ReadArticle.article_id.in_(article_ids),
            )
        )
        return set(result.scalars().all())
