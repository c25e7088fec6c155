import logging
from datetime import datetime, timezone

logger = logging.getLogger("mongo-lifecycle")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so mixed sources sort consistently."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def filesystem_timestamp(value: datetime) -> str:
    """ISO-8601 UTC timestamp with ':' and '.' replaced so it is safe in file names.

    Example: 2026-10-18T09-30-00-123Z
    """
    value = ensure_utc(value).astimezone(timezone.utc)
    iso = value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"
    return iso.replace(":", "-").replace(".", "-")
