"""Pagination clamping, search patterns and date-range parsing shared by the recycle bin and history listings."""

from datetime import date, datetime, time, timezone
from typing import Optional

from app.core.config import settings
from app.core.exceptions import InvalidRequestError

LIKE_ESCAPE = "\\"


def parse_int(value: Optional[str]) -> Optional[int]:
    """Lenient query integer: anything unparsable is treated as missing."""
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def contains_pattern(term: str) -> str:
    """ILIKE pattern matching ``term`` literally anywhere; use with ``escape=LIKE_ESCAPE``."""
    escaped = (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def clamp_page(page: Optional[int]) -> int:
    """1-based page; anything below 1 becomes 1."""
    if page is None or page < 1:
        return 1
    return page


def clamp_limit(limit: Optional[int]) -> int:
    """Page size within 1..max; missing means the configured default."""
    if limit is None:
        return settings.recycle_bin_default_page_size
    return max(1, min(limit, settings.recycle_bin_max_page_size))


def total_pages(total: int, limit: int) -> int:
    return (total + limit - 1) // limit if limit else 0


def parse_date_bound(value: Optional[str], field: str, *, end: bool = False) -> Optional[datetime]:
    """
    Parse a fromDate / toDate query value into a naive UTC datetime.

    A bare date (YYYY-MM-DD) covers the whole day, so toDate=2024-05-01 includes
    everything deleted on May 1st.
    """
    if value is None or not str(value).strip():
        return None
    raw = str(value).strip()
    try:
        if len(raw) == 10:
            day = date.fromisoformat(raw)
            return datetime.combine(day, time.max if end else time.min)
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        raise InvalidRequestError(f"Invalid {field} (expected YYYY-MM-DD or ISO datetime)")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
