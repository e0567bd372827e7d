from datetime import date, datetime, timezone
from typing import Optional


def get_current_datetime() -> datetime:
    """Return current UTC datetime with timezone info."""
    dt = datetime.now(timezone.utc)
    # Microseconds are stripped so stored timestamps compare cleanly
    dt = dt.replace(microsecond=0)
    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def get_current_timestamp() -> str:
    """Return the current UTC datetime as an ISO 8601 string."""
    return get_current_datetime().isoformat()


def get_today() -> date:
    return get_current_datetime().date()


def get_date(date_str: str | None) -> Optional[date]:
    return None if date_str is None else date.fromisoformat(date_str[:10])


def get_month_key(target: date) -> str:
    """Return the YYYY-MM key used to group records by month."""
    return target.strftime("%Y-%m")
