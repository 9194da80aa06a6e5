import re
from datetime import datetime, timezone

# Extended format only: date, "T", hh:mm[:ss[.fff]] and an optional Z or +hh:mm offset
_ISO_EXTENDED_RE = re.compile(
    r"\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}(:\d{2}(\.\d+)?)?([Zz]|[+-]\d{2}:\d{2})?",
    re.ASCII,
)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO 8601 extended-format datetime string that includes a time part.

    Raises ValueError for anything else, including bare dates and the basic
    format (``20251215T000000Z``).
    """
    if not _ISO_EXTENDED_RE.fullmatch(value):
        raise ValueError(f"not an ISO 8601 datetime: {value!r}")
    if value[-1] in "Zz":
        value = value[:-1] + "+00:00"
    return ensure_aware(datetime.fromisoformat(value)).astimezone(timezone.utc)


def format_iso8601_utc(value: datetime) -> str:
    """Format as UTC with millisecond precision, e.g. 2025-12-15T00:00:00.000Z."""
    dt_utc = ensure_aware(value).astimezone(timezone.utc)
    return dt_utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")
