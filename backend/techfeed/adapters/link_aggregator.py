"""Hacker News adapter - two-phase fetch of top story ids, then item details."""

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any

import httpx

from techfeed.adapters.base import FetchedArticle, clean_url, text_or_none, utc_now
from techfeed.config import get_settings
from techfeed.models import Source

logger = logging.getLogger(__name__)


async def fetch_link_aggregator(
    source: Source, client: httpx.AsyncClient
) -> list[FetchedArticle]:
    """
    Fetch the current top stories.

    Item details are fetched concurrently; a failed or malformed item is
    simply left out. Never raises.
    """
    settings = get_settings()
    try:
        response = await client.get(f"{settings.hn_api_base}/topstories.json")
        response.raise_for_status()
        ids = response.json()
        if not isinstance(ids, list):
            raise ValueError(f"expected a JSON list, got {type(ids).__name__}")
        ids = ids[: settings.feed_max_items]

        items = await asyncio.gather(
            *(_fetch_item(client, settings.hn_api_base, item_id) for item_id in ids),
            return_exceptions=True,
        )
    except Exception as e:
        logger.error("Failed to fetch top stories for %s: %s", source.id, e)
        return []

    articles = []
    for item_id, item in zip(ids, items):
        if isinstance(item, BaseException):
            logger.debug("Item %s failed: %s", item_id, item)
            continue
        if not isinstance(item, dict):
            continue
        try:
            article = _to_article(item_id, item, source, settings.hn_item_url)
        except (TypeError, ValueError, AttributeError, KeyError) as e:
            logger.debug("Skipping malformed item %s: %s", item_id, e)
            continue
        if article is not None:
            articles.append(article)
    return articles


async def _fetch_item(client: httpx.AsyncClient, base: str, item_id: int) -> dict[str, Any] | None:
    response = await client.get(f"{base}/item/{item_id}.json")
    response.raise_for_status()
    return response.json()


def _to_article(
    item_id: int, item: dict[str, Any], source: Source, item_url: str
) -> FetchedArticle | None:
    title = text_or_none(item.get("title"))
    if title is None:
        return None
    url = clean_url(item.get("url")) or clean_url(item_url.format(id=item.get("id", item_id)))
    if url is None:
        return None

    return FetchedArticle(
        title=title,
        url=url,
        source_id=source.id,
        published_at=_unix_time(item.get("time")),
        # Synthesized from metadata, the API has no article text
        summary=f"Score: {item.get('score') or 0} | Comments: {item.get('descendants') or 0}",
        author=text_or_none(item.get("by")),
        category=source.category or None,
    )


def _unix_time(value: object) -> datetime:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return datetime.fromtimestamp(value, UTC)
        except (OverflowError, OSError, ValueError):
            pass
    return utc_now()
