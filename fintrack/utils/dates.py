"""Date and timestamp helpers.

Record dates are stored as ``DD-MM-YYYY`` strings everywhere: in the
document, in filters and in exports. Ledger timestamps are RFC 3339 UTC.
"""

from datetime import date, datetime, timezone
from typing import Optional

from fintrack.errors import DATE_FORMAT_HINT, InvalidDateError


DATE_FORMAT = "%d-%m-%Y"
EXPORT_TIMESTAMP_FORMAT = "%Y-%m-%dT%H-%M-%SZ"


def today() -> date:
    return date.today()


def today_str() -> str:
    return date.today().strftime(DATE_FORMAT)


def format_date(d: date) -> str:
    return d.strftime(DATE_FORMAT)


def try_parse_date(date_str: Optional[str]) -> Optional[date]:
    """Parse a DD-MM-YYYY string, returning None on failure."""
    if not date_str:
        return None
    try:
        return datetime.strptime(date_str, DATE_FORMAT).date()
    except ValueError:
        return None


def parse_date(date_str: str) -> date:
    """Parse a DD-MM-YYYY string, raising InvalidDateError on failure."""
    parsed = try_parse_date(date_str.strip() if date_str else date_str)
    if parsed is None:
        raise InvalidDateError(provided=date_str or "", expected_format=DATE_FORMAT_HINT)
    return parsed


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_rfc3339() -> str:
    return utc_now().isoformat()
