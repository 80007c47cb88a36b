"""Ingestion service - concurrent source fetch, URL deduplication, batched insert."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from techfeed.adapters import FetchedArticle, fetch_source
from techfeed.adapters.base import clean_url
from techfeed.config import get_settings
from techfeed.models import Article, Source

logger = logging.getLogger(__name__)


@dataclass
class IngestReport:
    """Outcome of one ingestion run."""

    total_fetched: int = 0
    inserted: int = 0
    duplicates_skipped: int = 0
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


async def fetch_all_sources(
    sources: Sequence[Source], client: httpx.AsyncClient
) -> list[FetchedArticle]:
    """
    Fetch every source concurrently and flatten the successful results.

    All fetches are awaited to completion; a source that fails contributes
    nothing and does not affect the others.
    """
    if not sources:
        return []

    results = await asyncio.gather(
        *(fetch_source(source, client) for source in sources),
        return_exceptions=True,
    )

    articles: list[FetchedArticle] = []
    for source, result in zip(sources, results):
        if isinstance(result, BaseException):
            logger.error("Source %s failed: %s", source.id, result)
            continue
        logger.info("Source %s: %d articles", source.id, len(result))
        articles.extend(result)
    return articles


class IngestService:
    """Service running the fetch-and-merge job."""

    def __init__(
        self,
        session: AsyncSession,
        http_client: httpx.AsyncClient,
        batch_size: int | None = None,
    ):
        self.session = session
        self.http_client = http_client
        self.batch_size = batch_size or get_settings().insert_batch_size

    async def get_active_sources(self) -> list[Source]:
        """Get all sources taking part in fetch runs."""
        result = await self.session.execute(select(Source).where(Source.is_active == True))
        return list(result.scalars().all())

    async def run(self) -> IngestReport:
        """Fetch all active sources and store the new articles."""
        sources = await self.get_active_sources()
        if not sources:
            logger.info("No active sources, nothing to fetch")
            return IngestReport()

        articles = await fetch_all_sources(sources, self.http_client)
        report = await self.store_articles(articles)
        logger.info(
            "Ingestion finished: fetched=%d inserted=%d duplicates=%d",
            report.total_fetched,
            report.inserted,
            report.duplicates_skipped,
        )
        return report

    async def store_articles(self, articles: Sequence[FetchedArticle]) -> IngestReport:
        """
        Drop articles whose URL is already stored, then insert the rest in batches.

        A failing batch is rolled back and logged. Its rows, like articles
        without a storable URL, count as fetched but neither as inserted nor
        as duplicates.
        """
        total_fetched = len(articles)
        if total_fetched == 0:
            return IngestReport()

        storable = [a for a in articles if clean_url(a.url) == a.url]
        if len(storable) < total_fetched:
            logger.warning("Dropping %d articles without a storable URL", total_fetched - len(storable))

        existing = await self._find_existing_urls({a.url for a in storable})

        new_articles: list[FetchedArticle] = []
        duplicates = 0
        seen: set[str] = set(existing)
        for article in storable:
            # Also drops repeats within this run, first occurrence wins
            if article.url in seen:
                duplicates += 1
                continue
            seen.add(article.url)
            new_articles.append(article)

        inserted = 0
        for start in range(0, len(new_articles), self.batch_size):
            batch = new_articles[start : start + self.batch_size]
            inserted += await self._insert_batch(batch)

        return IngestReport(
            total_fetched=total_fetched,
            inserted=inserted,
            duplicates_skipped=duplicates,
        )

    async def _find_existing_urls(self, urls: set[str]) -> set[str]:
        if not urls:
            return set()
        result = await self.session.execute(select(Article.url).where(Article.url.in_(urls)))
        return set(result.scalars().all())

    async def _insert_batch(self, batch: list[FetchedArticle]) -> int:
        rows = []
        for article in batch:
            try:
                rows.append(article.to_model())
            except (TypeError, ValueError, AttributeError) as e:
                logger.warning("Dropping unstorable article %r: %s", article.url, e)
        if not rows:
            return 0

        try:
            self.session.add_all(rows)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Failed to insert batch of %d articles: %s", len(rows), e)
            return 0
        return len(rows)
