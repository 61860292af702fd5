"""Parsing of the human-readable dates shown on Steam Workshop detail pages.

Steam omits the year for dates in the current year ("25 Mar @ 3:04pm") and
switches between day-first and month-first ordering depending on locale.
"""

import re
from datetime import datetime, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from errors import UnparseableDate

_PATTERNS = [
    "%d %b, %Y %I:%M%p",
    "%d %b, %Y %H:%M",
    "%b %d, %Y %I:%M%p",
    "%b %d, %Y %H:%M",
    "%d %b %Y %I:%M%p",
    "%d %b %Y %H:%M",
    "%b %d %Y %I:%M%p",
    "%b %d %Y %H:%M",
    "%d %b %I:%M%p",
    "%d %b %H:%M",
    "%b %d %I:%M%p",
    "%b %d %H:%M",
    "%d %b, %Y",
    "%b %d, %Y",
    "%d %b %Y",
    "%b %d %Y",
    "%d %b",
    "%b %d",
]


def resolve_tz(name: str | None) -> tzinfo:
    if not name or name.strip().upper() == "UTC":
        return timezone.utc
    try:
        return ZoneInfo(name.strip())
    except (ZoneInfoNotFoundError, ValueError):
        return timezone.utc


def _normalize(value: str) -> str:
    cleaned = re.sub(r"\s+", " ", value.replace("\xa0", " ")).strip()
    cleaned = re.sub(r"^(posted|updated|created)\s*[:\-]\s*", "", cleaned, flags=re.I)
    cleaned = cleaned.replace("@", " ")
    # "3:04 pm" and "3:04pm" both occur
    cleaned = re.sub(r"(\d)\s*([ap])\.?m\.?(?![a-z])", r"\1\2m", cleaned, flags=re.I)
    cleaned = re.sub(r"\s*,\s*", ", ", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned).strip(" ,")
    return cleaned


def _strptime_no_year(cleaned: str, fmt: str, year: int) -> datetime:
    # strptime defaults to 1900, which rejects 29 Feb
    return datetime.strptime(f"{year} {cleaned}", f"%Y {fmt}")


def parse(date_text: str, *, now: datetime | None = None, tz: tzinfo | None = None) -> datetime:
    """Parse a Steam detail-page date into an aware datetime.

    A missing year is taken from ``now`` (default: the current time in ``tz``).
    Dates without a time of day resolve to midnight. Raises UnparseableDate.
    """
    zone = tz or timezone.utc
    if not date_text or not date_text.strip():
        raise UnparseableDate(date_text or "")
    cleaned = _normalize(date_text)
    if now is None:
        now = datetime.now(zone)

    for fmt in _PATTERNS:
        try:
            if "%Y" in fmt:
                dt = datetime.strptime(cleaned, fmt)
            else:
                dt = _strptime_no_year(cleaned, fmt, now.year)
        except ValueError:
            continue
        return dt.replace(tzinfo=zone)
    raise UnparseableDate(date_text)
