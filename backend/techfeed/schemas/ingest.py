"""Schemas for the ingestion trigger."""

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel

if TYPE_CHECKING:
    from techfeed.services.ingest_service import IngestReport


class FetchFeedsResponse(BaseModel):
    """Summary of one ingestion run."""

    success: bool = True
    inserted: int
    total_fetched: int
    duplicates_skipped: int
    timestamp: datetime

    @classmethod
    def from_report(cls, report: "IngestReport") -> "FetchFeedsResponse":
        return cls(
            inserted=report.inserted,
            total_fetched=report.total_fetched,
            duplicates_skipped=report.duplicates_skipped,
            timestamp=report.timestamp,
        )
