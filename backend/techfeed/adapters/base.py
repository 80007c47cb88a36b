"""Normalized article record and shared payload-cleaning helpers."""

from dataclasses import dataclass
from datetime import UTC, datetime

from bs4 import BeautifulSoup
from dateutil.parser import parse as parse_date

from techfeed.models import Article

SUMMARY_MAX_CHARS = 300
TITLE_MAX_CHARS = 500
URL_MAX_CHARS = 2048
DEFAULT_TITLE = "Untitled"


@dataclass
class FetchedArticle:
    """Article produced by an adapter, before deduplication and persistence."""

    title: str
    url: str
    source_id: str
    published_at: datetime
    summary: str | None = None
    image_url: str | None = None
    author: str | None = None
    category: str | None = None

    def to_model(self) -> Article:
        """Build the table row for this article."""
        author = text_or_none(self.author)
        category = text_or_none(self.category)
        return Article(
            source_id=self.source_id,
            title=(text_or_none(self.title) or DEFAULT_TITLE)[:TITLE_MAX_CHARS],
            url=self.url,
            summary=text_or_none(self.summary),
            image_url=clean_url(self.image_url),
            author=author[:200] if author else None,
            category=category[:100] if category else None,
            published_at=self.published_at,
        )


def text_or_none(value: object) -> str | None:
    """Stripped string, or None for empty or non-string provider values."""
    if not isinstance(value, str):
        return None
    return value.strip() or None


def clean_url(value: object) -> str | None:
    """A storable link: a non-empty string that fits the column and is not a data: URI."""
    url = text_or_none(value)
    if url is None or len(url) > URL_MAX_CHARS or url.lower().startswith("data:"):
        return None
    return url


def strip_html(text: str) -> str:
    """Remove markup and collapse whitespace."""
    if "<" not in text:
        return " ".join(text.split())
    soup = BeautifulSoup(text, "lxml")
    return " ".join(soup.get_text(" ").split())


def clean_summary(raw: object, max_chars: int = SUMMARY_MAX_CHARS) -> str | None:
    """Plain-text summary truncated to `max_chars`; empty or non-string input gives None."""
    if not raw or not isinstance(raw, str):
        return None
    text = strip_html(raw)[:max_chars].strip()
    return text or None


def first_image_url(html: str | None) -> str | None:
    """Return the first storable <img> src in an HTML fragment."""
    if not html or "<img" not in html.lower():
        return None
    soup = BeautifulSoup(html, "lxml")
    for img in soup.find_all("img"):
        src = clean_url(img.get("src"))
        if src:
            return src
    return None


def parse_datetime(value: object) -> datetime | None:
    """Parse a provider timestamp; naive values are taken as UTC."""
    if not value or not isinstance(value, str):
        return None
    try:
        dt = parse_date(value)
    except (ValueError, OverflowError):
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def utc_now() -> datetime:
    return datetime.now(UTC)
