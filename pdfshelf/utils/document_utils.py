"""
Document utility functions for metadata normalization.
"""
import re
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, List, Optional, Union

_PDF_DATE = re.compile(
    r"^(?:D:)?(\d{4})(\d{2})?(\d{2})?(\d{2})?(\d{2})?(\d{2})?"
    r"(?:([Zz+\-])(\d{2})?'?(\d{2})?'?)?"
)


def format_file_size(size: int) -> str:
    """
    Format a byte count for display, using decimal units.

    Args:
        size: File size in bytes

    Returns:
        Human readable size such as "532 KB" or "1.4 MB"
    """
    if size <= 0:
        return "0 KB"
    if size < 1000:
        return f"{size} bytes"
    if size < 1000 ** 2:
        return f"{round(size / 1000)} KB"
    if size < 1000 ** 3:
        return f"{size / 1000 ** 2:.1f} MB"
    return f"{size / 1000 ** 3:.2f} GB"


def parse_pdf_date(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a PDF date string (D:YYYYMMDDHHmmSSOHH'mm').

    Missing components default to their lowest value. Returns None for
    empty or unparseable input.
    """
    if not value:
        return None
    match = _PDF_DATE.match(value.strip())
    if not match:
        return None

    year, month, day, hour, minute, second, sign, tz_hour, tz_minute = match.groups()
    try:
        tzinfo = None
        if sign in ("Z", "z"):
            tzinfo = timezone.utc
        elif sign in ("+", "-"):
            offset = timedelta(hours=int(tz_hour or 0), minutes=int(tz_minute or 0))
            tzinfo = timezone(offset if sign == "+" else -offset)
        return datetime(
            int(year), int(month or 1), int(day or 1),
            int(hour or 0), int(minute or 0), int(second or 0),
            tzinfo=tzinfo
        )
    except ValueError:
        return None


def parse_iso_day(value: Optional[str]) -> Optional[date]:
    """Parse YYYY-MM-DD; 'null' and empty strings mean no date."""
    if value is None:
        return None
    value = value.strip()
    if not value or value.lower() == "null":
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        return None


def normalize_keywords(raw: Union[str, Iterable[str], None]) -> List[str]:
    """
    Normalize a keyword attribute that may be a scalar string or a list.

    Scalar strings are split on commas and semicolons. Duplicates are
    dropped, first occurrence wins.
    """
    if not raw:
        return []
    if isinstance(raw, str):
        parts = re.split(r"[;,]", raw)
    else:
        parts = [str(item) for item in raw]

    keywords = []
    seen = set()
    for part in parts:
        keyword = part.strip()
        if keyword and keyword.lower() not in seen:
            seen.add(keyword.lower())
            keywords.append(keyword)
    return keywords


def clean_text(value: Optional[str]) -> Optional[str]:
    """Trim a metadata string; blank strings become None."""
    if value is None:
        return None
    value = value.strip()
    return value or None
