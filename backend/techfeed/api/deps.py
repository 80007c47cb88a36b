"""Shared FastAPI dependencies."""

from collections.abc import AsyncGenerator

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from techfeed.config import get_settings
from techfeed.db.postgres import get_session as get_db
from techfeed.models import User
from techfeed.security import verify_token

bearer_scheme = HTTPBearer(auto_error=False)


async def get_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client for upstream providers, closed after the request."""
    settings = get_settings()
    async with httpx.AsyncClient(
        timeout=settings.feed_timeout_seconds,
        follow_redirects=True,
        headers={"User-Agent": settings.user_agent},
    ) as client:
        yield client


async def get_current_user_optional(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User | None:
    """The caller for a valid access token, or None."""
    if credentials is None:
        return None
    user_id = verify_token(credentials.credentials, "access")
    if user_id is None:
        return None
    return await db.get(User, user_id)


async def get_current_user(user: User | None = Depends(get_current_user_optional)) -> User:
    """The authenticated caller; 401 otherwise."""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
