from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def resolve_timezone(name: str) -> ZoneInfo:
    normalized = name.strip()
    if not normalized:
        raise ValueError("timezone name is empty")
    try:
        return ZoneInfo(normalized)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"unknown timezone {normalized!r}") from exc


def local_today(tz: ZoneInfo, now: datetime | None = None) -> date:
    """Calendar date at the caller's local midnight boundary."""
    current = now if now is not None else utc_now()
    return current.astimezone(tz).date()
