"""CLI for running ingestion outside the web process (cron, CI, local use)."""

import argparse
import asyncio
import json
import logging

import httpx

from techfeed.config import configure_logging, get_settings

logger = logging.getLogger(__name__)


async def _fetch_feeds() -> dict:
    from techfeed.db.postgres import async_session, engine, init_db
    from techfeed.schemas.ingest import FetchFeedsResponse
    from techfeed.services.ingest_service import IngestService

    settings = get_settings()
    await init_db()
    async with (
        async_session() as session,
        httpx.AsyncClient(
            timeout=settings.feed_timeout_seconds,
            follow_redirects=True,
            headers={"User-Agent": settings.user_agent},
        ) as client,
    ):
        report = await IngestService(session, client).run()
    await engine.dispose()

    return FetchFeedsResponse.from_report(report).model_dump(mode="json")


async def _seed_sources() -> int:
    from techfeed.db.postgres import async_session, engine, init_db
    from techfeed.services.source_service import SourceService

    await init_db()
    async with async_session() as session:
        count = await SourceService(session).seed_default_sources()
    await engine.dispose()
    return count


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="techfeed")
    parser.add_argument("--log-level", default=None, help="Overrides LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("fetch-feeds", help="Run one ingestion pass over all active sources")
    subparsers.add_parser("seed-sources", help="Insert the built-in sources if missing")
    args = parser.parse_args(argv)

    configure_logging(args.log_level)

    if args.command == "fetch-feeds":
        summary = asyncio.run(_fetch_feeds())
        print(json.dumps(summary))
    elif args.command == "seed-sources":
        count = asyncio.run(_seed_sources())
        logger.info("Seeded default sources (%d known)", count)


if __name__ == "__main__":
    main()
