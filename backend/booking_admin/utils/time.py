import re
from datetime import date, datetime, timezone
from typing import Any
from zoneinfo import ZoneInfo

MYT = ZoneInfo("Asia/Kuala_Lumpur")

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_SLOT_TIME = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def to_civil_date(value: Any, tz: ZoneInfo = MYT) -> date | None:
    """Normalise a booking date to the calendar date it falls on in ``tz``.

    ``YYYY-MM-DD`` strings and ``date`` objects are already civil dates and are
    returned unchanged. Timestamps are converted into ``tz``; naive ones are
    taken to be UTC, which is how the backend stores them. Returns None when
    the value cannot be parsed.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return _aware(value).astimezone(tz).date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()
    if _DATE_ONLY.match(text):
        try:
            return date.fromisoformat(text)
        except ValueError:
            return None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        return None
    return _aware(parsed).astimezone(tz).date()


def is_slot_time(value: str) -> bool:
    return bool(_SLOT_TIME.match(value))


def _aware(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt
