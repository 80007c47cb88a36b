"""Async Python client for the TechFeed HTTP API."""

import logging
from collections.abc import Callable, Sequence
from typing import Any

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from techfeed.schemas.article import ArticleListResponse, ArticleResponse
from techfeed.schemas.auth import TokenResponse, UserResponse
from techfeed.schemas.ingest import FetchFeedsResponse
from techfeed.schemas.source import SourceResponse
from techfeed.utils.singleflight import SingleFlight

logger = logging.getLogger(__name__)

# 401s from these endpoints are real credential errors, not an expired access token
AUTH_PATHS = ("/auth/login", "/auth/register", "/auth/refresh")


class ApiError(Exception):
    """Error response from the API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class SessionExpiredError(ApiError):
    """The refresh token was missing or rejected; the stored tokens were cleared."""


def _error_message(response: httpx.Response) -> str:
    try:
        detail = response.json().get("detail")
    except (ValueError, AttributeError):
        detail = None
    if isinstance(detail, str):
        return detail
    return response.reason_phrase or "Request failed"


class TechFeedClient:
    """
    Client for the TechFeed API with transparent access-token refresh.

    When a request fails with 401 the token pair is refreshed once and the
    request retried. Concurrent 401s share a single refresh call.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        *,
        api_prefix: str = "/api/v1",
        access_token: str | None = None,
        refresh_token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        on_session_expired: Callable[[], None] | None = None,
    ):
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.on_session_expired = on_session_expired
        self.http = httpx.AsyncClient(
            base_url=base_url.rstrip("/") + api_prefix,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )
        self._refresh_flight: SingleFlight[str] = SingleFlight()

    async def __aenter__(self) -> "TechFeedClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.http.aclose()

    # Auth

    async def register(self, email: str, password: str, nickname: str) -> UserResponse:
        response = await self._request(
            "POST",
            "/auth/register",
            json={"email": email, "password": password, "nickname": nickname},
        )
        return self._store_tokens(response).user

    async def login(self, email: str, password: str) -> UserResponse:
        response = await self._request(
            "POST", "/auth/login", json={"email": email, "password": password}
        )
        return self._store_tokens(response).user

    async def me(self) -> UserResponse:
        response = await self._request("GET", "/auth/me")
        return UserResponse.model_validate(response.json())

    def clear_tokens(self) -> None:
        self.access_token = None
        self.refresh_token = None

    # Articles

    async def list_articles(
        self,
        *,
        source: Sequence[str] | str | None = None,
        search: str | None = None,
        cursor: int | None = None,
        limit: int = 20,
        sort: str = "latest",
    ) -> ArticleListResponse:
        params: dict[str, Any] = {"limit": limit, "sort": sort}
        if source:
            params["source"] = source if isinstance(source, str) else ",".join(source)
        if search:
            params["search"] = search
        if cursor is not None:
            params["cursor"] = cursor
        response = await self._request("GET", "/articles", params=params)
        return ArticleListResponse.model_validate(response.json())

    async def mark_read(self, article_id: int) -> None:
        await self._request("POST", f"/articles/{article_id}/read")

    # Sources

    async def list_sources(self) -> list[SourceResponse]:
        response = await self._request("GET", "/sources")
        return [SourceResponse.model_validate(s) for s in response.json()]

    async def list_favorite_sources(self) -> list[str]:
        response = await self._request("GET", "/auth/favorites/sources")
        return list(response.json())

    async def add_favorite_source(self, source_id: str) -> None:
        await self._request("POST", f"/auth/favorites/sources/{source_id}")

    async def remove_favorite_source(self, source_id: str) -> None:
        await self._request("DELETE", f"/auth/favorites/sources/{source_id}")

    # Ingestion

    async def fetch_feeds(self, cron_secret: str | None = None) -> FetchFeedsResponse:
        headers = {"Authorization": f"Bearer {cron_secret}"} if cron_secret else None
        response = await self._request(
            "POST", "/cron/fetch-feeds", headers=headers, authenticated=False
        )
        return FetchFeedsResponse.model_validate(response.json())

    # Internals

    async def _request(
        self,
        method: str,
        path: str,
        *,
        authenticated: bool = True,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        token = self.access_token if authenticated else None
        response = await self._send(method, path, token, headers, **kwargs)

        if response.status_code == 401 and authenticated and not path.startswith(AUTH_PATHS):
            # Another request may already have refreshed the pair since this one was sent
            if self.access_token == token:
                await self._refresh_flight.run(self._refresh_tokens)
            response = await self._send(method, path, self.access_token, headers, **kwargs)

        if response.is_error:
            raise ApiError(response.status_code, _error_message(response))
        return response

    async def _send(
        self,
        method: str,
        path: str,
        token: str | None,
        headers: dict[str, str] | None,
        **kwargs: Any,
    ) -> httpx.Response:
        merged = dict(headers or {})
        if token:
            merged["Authorization"] = f"Bearer {token}"
        if method == "GET":
            return await self._get_with_retry(path, merged, **kwargs)
        return await self.http.request(method, path, headers=merged, **kwargs)

    @retry(
        retry=retry_if_exception_type(httpx.TransportError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        reraise=True,
    )
    async def _get_with_retry(
        self, path: str, headers: dict[str, str], **kwargs: Any
    ) -> httpx.Response:
        """GET with retry on connection-level failures."""
        return await self.http.get(path, headers=headers, **kwargs)

    async def _refresh_tokens(self) -> str:
        if not self.refresh_token:
            self._expire_session()
            raise SessionExpiredError(401, "No refresh token")

        try:
            response = await self.http.post(
                "/auth/refresh", json={"refresh_token": self.refresh_token}
            )
        except httpx.HTTPError as e:
            self._expire_session()
            raise SessionExpiredError(401, f"Token refresh failed: {e}") from e

        if response.is_error:
            self._expire_session()
            raise SessionExpiredError(response.status_code, _error_message(response))

        return self._store_tokens(response).access_token

    def _store_tokens(self, response: httpx.Response) -> TokenResponse:
        tokens = TokenResponse.model_validate(response.json())
        self.access_token = tokens.access_token
        self.refresh_token = tokens.refresh_token
        return tokens

    def _expire_session(self) -> None:
        logger.info("Session expired, clearing tokens")
        self.clear_tokens()
        if self.on_session_expired is not None:
            self.on_session_expired()


class ArticleFeed:
    """
    Paged article list that ignores responses to superseded requests.

    Every `load` starts a new generation. A response that arrives after a
    newer `load` was issued is dropped instead of overwriting newer state.
    """

    def __init__(self, client: TechFeedClient, page_size: int = 20):
        self.client = client
        self.page_size = page_size
        self.articles: list[ArticleResponse] = []
        self.next_cursor: int | None = None
        self.has_more = False
        self._filters: dict[str, Any] = {}
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    async def load(
        self,
        *,
        source: Sequence[str] | str | None = None,
        search: str | None = None,
        sort: str = "latest",
    ) -> bool:
        """Load the first page for new filters. Returns False if superseded."""
        self._generation += 1
        generation = self._generation
        self._filters = {"source": source, "search": search, "sort": sort}

        page = await self.client.list_articles(**self._filters, limit=self.page_size)
        if generation != self._generation:
            return False

        self.articles = list(page.articles)
        self.next_cursor = page.next_cursor
        self.has_more = page.has_more
        return True

    async def load_more(self) -> bool:
        """Append the next page. Returns False if there is none or it went stale."""
        if not self.has_more or self.next_cursor is None:
            return False
        generation = self._generation

        page = await self.client.list_articles(
            **self._filters, cursor=self.next_cursor, limit=self.page_size
        )
        if generation != self._generation:
            return False

        self.articles.extend(page.articles)
        self.next_cursor = page.next_cursor
        self.has_more = page.has_more
        return True
