"""Scheduled job endpoints."""

import secrets

import httpx
from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from techfeed.api.deps import get_db, get_http_client
from techfeed.config import get_settings
from techfeed.schemas.ingest import FetchFeedsResponse
from techfeed.services.ingest_service import IngestService

router = APIRouter()


def verify_cron_secret(authorization: str | None = Header(default=None)) -> None:
    """Require `Bearer <CRON_SECRET>` when a secret is configured."""
    secret = get_settings().cron_secret
    if not secret:
        return
    if not authorization or not secrets.compare_digest(authorization, f"Bearer {secret}"):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


@router.post(
    "/fetch-feeds",
    response_model=FetchFeedsResponse,
    dependencies=[Depends(verify_cron_secret)],
)
async def fetch_feeds(
    db: AsyncSession = Depends(get_db),
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> FetchFeedsResponse:
    """
    Fetch all active sources and store new articles.

    Failing sources or insert batches only lower the counts; the run itself
    always reports success.
    """
    report = await IngestService(db, http_client).run()
    return FetchFeedsResponse.from_report(report)
