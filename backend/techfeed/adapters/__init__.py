"""Adapters package - provider-specific fetchers producing normalized articles."""

import logging

import httpx

from techfeed.adapters.base import FetchedArticle
from techfeed.adapters.blog_api import fetch_blog_api
from techfeed.adapters.feed import fetch_feed
from techfeed.adapters.link_aggregator import fetch_link_aggregator
from techfeed.models import Source, SourceKind

logger = logging.getLogger(__name__)


async def fetch_source(source: Source, client: httpx.AsyncClient) -> list[FetchedArticle]:
    """Run the adapter matching `source.kind`."""
    if source.kind == SourceKind.FEED:
        return await fetch_feed(source, client)
    elif source.kind == SourceKind.LINK_AGGREGATOR:
        return await fetch_link_aggregator(source, client)
    elif source.kind == SourceKind.BLOG_API:
        return await fetch_blog_api(source, client)

    logger.warning("Unknown source kind %r for %s, skipping", source.kind, source.id)
    return []


__all__ = [
    "FetchedArticle",
    "fetch_source",
    # Adapters
    "fetch_feed",
    "fetch_link_aggregator",
    "fetch_blog_api",
]
