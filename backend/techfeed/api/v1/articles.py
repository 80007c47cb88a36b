"""Articles API endpoints."""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from techfeed.api.deps import get_current_user, get_current_user_optional, get_db
from techfeed.models import User
from techfeed.schemas.article import ArticleListResponse
from techfeed.services.article_service import (
    DEFAULT_PAGE_SIZE,
    ArticleNotFoundError,
    ArticleQuery,
    ArticleService,
    SortOrder,
)

router = APIRouter()


@router.get("", response_model=ArticleListResponse)
async def list_articles(
    source: str | None = Query(default=None, description="Comma-separated source ids"),
    search: str | None = None,
    cursor: int | None = None,
    limit: int = DEFAULT_PAGE_SIZE,
    sort: str = "latest",
    user: User | None = Depends(get_current_user_optional),
    db: AsyncSession = Depends(get_db),
) -> ArticleListResponse:
    """
    List articles, newest first by default.

    - source: restrict to these sources (all when empty)
    - search: case-insensitive match on title or summary
    - cursor: `next_cursor` from the previous page
    - limit: page size, clamped to 1..100
    - sort: `latest` or `oldest`
    """
    query = ArticleQuery(
        source_ids=[s.strip() for s in (source or "").split(",") if s.strip()],
        search=search,
        cursor=cursor,
        limit=limit,
        sort=SortOrder.parse(sort),
    )
    page = await ArticleService(db).list_articles(query, user_id=user.id if user else None)
    return ArticleListResponse.from_page(page)


@router.post("/{article_id}/read", status_code=status.HTTP_204_NO_CONTENT)
async def mark_article_read(
    article_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> None:
    """Mark an article as read by the current user."""
    try:
        await ArticleService(db).mark_read(user.id, article_id)
    except ArticleNotFoundError:
        raise HTTPException(status_code=404, detail="Article not found")
