"""RSS/Atom feed adapter."""

import logging
from typing import Any

import feedparser
import httpx

from techfeed.adapters.base import (
    DEFAULT_TITLE,
    FetchedArticle,
    clean_summary,
    clean_url,
    first_image_url,
    parse_datetime,
    text_or_none,
    utc_now,
)
from techfeed.config import get_settings
from techfeed.models import Source

logger = logging.getLogger(__name__)


async def fetch_feed(source: Source, client: httpx.AsyncClient) -> list[FetchedArticle]:
    """
    Fetch a syndication feed and normalize its most recent entries.

    Never raises: network errors, timeouts and unparsable payloads are logged
    and yield an empty list. Malformed entries are skipped one by one.
    """
    settings = get_settings()
    if not source.feed_url:
        logger.warning("Feed source %s has no feed_url, skipping", source.id)
        return []

    try:
        response = await client.get(source.feed_url, timeout=settings.feed_timeout_seconds)
        response.raise_for_status()
        parsed = feedparser.parse(response.content)
        entries = parsed.entries[: settings.feed_max_items]
    except Exception as e:
        logger.error("Failed to fetch feed %s (%s): %s", source.id, source.feed_url, e)
        return []

    articles = []
    for entry in entries:
        try:
            article = _parse_entry(entry, source)
        except (TypeError, ValueError, AttributeError, KeyError) as e:
            logger.debug("Skipping malformed entry in %s: %s", source.id, e)
            continue
        if article is not None:
            articles.append(article)
    return articles


def _parse_entry(entry: Any, source: Source) -> FetchedArticle | None:
    """Map one feedparser entry; entries without a link are unusable."""
    url = clean_url(entry.get("link"))
    if url is None:
        return None

    content_html = _content_html(entry)
    summary = clean_summary(entry.get("summary") or content_html)

    image_url = first_image_url(content_html or entry.get("summary"))
    if not image_url:
        image_url = _enclosure_url(entry)

    published_at = parse_datetime(entry.get("published") or entry.get("updated")) or utc_now()

    return FetchedArticle(
        title=text_or_none(entry.get("title")) or DEFAULT_TITLE,
        url=url,
        source_id=source.id,
        published_at=published_at,
        summary=summary,
        image_url=image_url,
        author=text_or_none(entry.get("author")),
        category=source.category or None,
    )


def _content_html(entry: Any) -> str:
    content = entry.get("content") or []
    for block in content:
        value = block.get("value")
        if value:
            return value
    return ""


def _enclosure_url(entry: Any) -> str | None:
    for enclosure in entry.get("enclosures") or []:
        href = clean_url(enclosure.get("href")) or clean_url(enclosure.get("url"))
        if href:
            return href
    return None
