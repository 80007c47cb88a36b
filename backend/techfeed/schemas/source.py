"""Source schemas for API response validation."""

from datetime import datetime

from pydantic import BaseModel


class SourceResponse(BaseModel):
    """Schema for source responses."""

    id: str
    name: str
    kind: str
    category: str
    icon_url: str | None = None
    latest_published_at: datetime | None = None

    class Config:
        from_attributes = True
