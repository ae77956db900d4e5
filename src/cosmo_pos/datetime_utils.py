"""
Datetime utilities for order timestamps.
"""

from datetime import datetime, timezone

ORDER_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Formats seen on rows written by older terminals.
_LEGACY_FORMATS = (
    "%Y-%m-%d %H:%M",
    "%m/%d/%Y, %I:%M:%S %p",
    "%d/%m/%Y, %H:%M:%S",
    "%Y/%m/%d %H:%M:%S",
)


def utcnow() -> datetime:
    """
    Get current UTC time (timezone-aware).
    """
    return datetime.now(timezone.utc)


def localnow() -> datetime:
    return datetime.now()


def format_order_date(value: datetime) -> str:
    return value.strftime(ORDER_DATE_FORMAT)


def parse_order_date(value: str | None) -> datetime:
    """
    Parse an order date string. Unparseable values sort as the oldest possible date.
    """
    if not value:
        return datetime.min
    text = value.strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        return parsed.replace(tzinfo=None) if parsed.tzinfo else parsed
    except ValueError:
        pass
    for fmt in _LEGACY_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return datetime.min


def epoch_millis(value: datetime | None = None) -> int:
    value = value or utcnow()
    return int(value.timestamp() * 1000)
