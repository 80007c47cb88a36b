"""Sources API endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from techfeed.api.deps import get_db
from techfeed.schemas.source import SourceResponse
from techfeed.services.source_service import SourceService

router = APIRouter()


@router.get("", response_model=list[SourceResponse])
async def list_sources(db: AsyncSession = Depends(get_db)) -> list[SourceResponse]:
    """List active sources with the publish time of their latest article."""
    rows = await SourceService(db).list_sources()
    return [
        SourceResponse(
            id=source.id,
            name=source.name,
            kind=source.kind,
            category=source.category,
            icon_url=source.icon_url,
            latest_published_at=latest_published_at,
        )
        for source, latest_published_at in rows
    ]
