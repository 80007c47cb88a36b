"""Shared fixtures: per-test SQLite database, fake upstream providers, API client."""

import asyncio
import os

# Must be set before techfeed modules build the engine and settings
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CRON_SECRET"] = ""
os.environ["SEED_DEFAULT_SOURCES"] = "false"

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel, select

import techfeed.models  # noqa: F401
from techfeed.api.deps import get_http_client
from techfeed.config import get_settings
from techfeed.db.postgres import get_session
from techfeed.models import Article, Source, SourceKind

BASE_TIME = datetime(2024, 1, 1, tzinfo=UTC)


class Database:
    """Synchronous facade over an async session factory for test setup and checks."""

    def __init__(self, factory: async_sessionmaker[AsyncSession]):
        self.factory = factory

    def run(self, fn: Callable[[AsyncSession], Any]) -> Any:
        async def _run() -> Any:
            async with self.factory() as session:
                return await fn(session)

        return asyncio.run(_run())

    def add(self, *rows: SQLModel) -> tuple[SQLModel, ...]:
        async def _add(session: AsyncSession) -> None:
            session.add_all(rows)
            await session.commit()

        self.run(_add)
        return rows

    def add_source(self, source_id: str, kind: str = SourceKind.FEED.value, **kwargs: Any) -> Source:
        values = {
            "name": source_id.upper(),
            "category": "Tech",
            "feed_url": f"https://{source_id}.example.com/rss" if kind == SourceKind.FEED else None,
            "icon_url": f"https://{source_id}.example.com/icon.png",
        }
        values.update(kwargs)
        (source,) = self.add(Source(id=source_id, kind=kind, **values))
        return source

    def add_article(self, source_id: str, n: int, **kwargs: Any) -> Article:
        """Add article number `n`; publish time grows with `n` unless given."""
        values = {
            "title": f"Article {n}",
            "url": f"https://news.example.com/{source_id}/{n}",
            "summary": f"Summary {n}",
            "published_at": BASE_TIME + timedelta(hours=n),
        }
        values.update(kwargs)
        (article,) = self.add(Article(source_id=source_id, **values))
        return article

    def all(self, model: type[SQLModel]) -> list[Any]:
        async def _all(session: AsyncSession) -> list[Any]:
            result = await session.execute(select(model))
            return list(result.scalars().all())

        return self.run(_all)


class FakeUpstream:
    """URL-keyed responses for httpx.MockTransport, ignoring query strings."""

    def __init__(self) -> None:
        self.routes: dict[str, Any] = {}
        self.requests: list[httpx.Request] = []

    def add(self, url: str, response: Any) -> None:
        """`response` is JSON data, an httpx.Response, an exception, or a callable."""
        self.routes[url] = response

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = str(request.url).split("?")[0]
        if key not in self.routes:
            return httpx.Response(404, json={"error": "not found"})

        response = self.routes[key]
        if callable(response) and not isinstance(response, type):
            response = response(request)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, httpx.Response):
            return response
        return httpx.Response(200, json=response)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture()
def session_factory(tmp_path) -> async_sessionmaker[AsyncSession]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)

    async def create_all() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    asyncio.run(create_all())
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    asyncio.run(engine.dispose())


@pytest.fixture()
def db(session_factory) -> Database:
    return Database(session_factory)


@pytest.fixture()
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture()
def settings_env(monkeypatch):
    """Set environment overrides and rebuild the cached settings."""

    def _set(**values: str) -> None:
        for key, value in values.items():
            monkeypatch.setenv(key.upper(), value)
        get_settings.cache_clear()

    yield _set
    monkeypatch.undo()
    get_settings.cache_clear()


@pytest.fixture()
def app(session_factory, upstream):
    from techfeed.main import app

    async def override_session():
        async with session_factory() as session:
            yield session

    async def override_http_client():
        async with upstream.client() as client:
            yield client

    app.dependency_overrides[get_session] = override_session
    app.dependency_overrides[get_http_client] = override_http_client
    yield app
    app.dependency_overrides.clear()


@pytest.fixture()
def client(app) -> TestClient:
    # Not used as a context manager, so the lifespan (init_db, seeding) does not run
    return TestClient(app)
