"""dev.to adapter - single listing of the most popular recent posts."""

import logging
from typing import Any

import httpx

from techfeed.adapters.base import (
    DEFAULT_TITLE,
    FetchedArticle,
    clean_summary,
    clean_url,
    parse_datetime,
    text_or_none,
    utc_now,
)
from techfeed.config import get_settings
from techfeed.models import Source

logger = logging.getLogger(__name__)


async def fetch_blog_api(source: Source, client: httpx.AsyncClient) -> list[FetchedArticle]:
    """Fetch the top posts listing. Malformed posts are skipped. Never raises."""
    settings = get_settings()
    try:
        response = await client.get(
            settings.devto_api_url,
            params={"per_page": settings.feed_max_items, "top": 1},
        )
        response.raise_for_status()
        posts = response.json()
        if not isinstance(posts, list):
            raise ValueError(f"expected a JSON list, got {type(posts).__name__}")
    except Exception as e:
        logger.error("Failed to fetch blog listing for %s: %s", source.id, e)
        return []

    articles = []
    for post in posts[: settings.feed_max_items]:
        if not isinstance(post, dict):
            continue
        try:
            article = _to_article(post, source)
        except (TypeError, ValueError, AttributeError, KeyError) as e:
            logger.debug("Skipping malformed post %r: %s", post.get("url"), e)
            continue
        if article is not None:
            articles.append(article)
    return articles


def _to_article(post: dict[str, Any], source: Source) -> FetchedArticle | None:
    url = clean_url(post.get("url"))
    if url is None:
        return None

    tags = post.get("tag_list")
    tag = text_or_none(tags[0]) if isinstance(tags, list) and tags else None
    user = post.get("user")
    author = text_or_none(user.get("name")) if isinstance(user, dict) else None

    return FetchedArticle(
        title=text_or_none(post.get("title")) or DEFAULT_TITLE,
        url=url,
        source_id=source.id,
        published_at=parse_datetime(post.get("published_at")) or utc_now(),
        summary=clean_summary(post.get("description")),
        image_url=clean_url(post.get("cover_image")) or clean_url(post.get("social_image")),
        author=author,
        category=tag or source.category or None,
    )
