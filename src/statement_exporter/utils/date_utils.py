"""Timestamp parsing and display utilities."""

from datetime import date, datetime, timezone

# Locale-style date used for the Transactions sheet (month/day/year)
DEFAULT_DISPLAY_FORMAT = "%m/%d/%Y"


def parse_timestamp(raw: object) -> datetime:
    """Parse a data-layer timestamp into a datetime.

    Accepts datetime and date objects, and ISO 8601 strings including a
    trailing "Z" for UTC (as emitted by most REST backends).

    Args:
        raw: Timestamp value.

    Returns:
        Parsed datetime. Naive inputs are kept naive.

    Raises:
        ValueError: If the value cannot be parsed.
    """
    if isinstance(raw, datetime):
        return raw
    if isinstance(raw, date):
        return datetime(raw.year, raw.month, raw.day)
    if not isinstance(raw, str) or not raw.strip():
        raise ValueError(f"Invalid timestamp: {raw!r}")

    text = raw.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise ValueError(f"Cannot parse timestamp '{raw}': {e}") from e


def sort_key(moment: datetime) -> float:
    """Comparable key for mixing naive and aware datetimes.

    Naive values are treated as UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.timestamp()


def format_display_date(moment: datetime, fmt: str = DEFAULT_DISPLAY_FORMAT) -> str:
    """Render a timestamp as a display date string.

    Args:
        moment: Timestamp to render.
        fmt: strftime pattern.

    Returns:
        Formatted date string.
    """
    return moment.strftime(fmt)


def timestamp_millis(moment: datetime | None = None) -> int:
    """Milliseconds since the epoch, used to make export file names unique."""
    if moment is None:
        moment = datetime.now(timezone.utc)
    return int(sort_key(moment) * 1000)
