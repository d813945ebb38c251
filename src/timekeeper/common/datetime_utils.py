from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from ..core.constants import CIVIL_DATE_PATTERN, DEFAULT_UTC_OFFSET
from ..core.exceptions import ValidationError

_DATE_RE = re.compile(CIVIL_DATE_PATTERN)
_OFFSET_RE = re.compile(r"^([+-])(\d{1,2}):(\d{2})$")


@dataclass(frozen=True)
class DayWindow:
    """Half-open instant range ``[start, end)`` of one civil day, in UTC."""

    civil_date: str
    start: datetime
    end: datetime

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end


def parse_utc_offset(value: str) -> timezone:
    """Parse a fixed offset such as ``+8:00`` or ``-05:30``."""
    m = _OFFSET_RE.match((value or "").strip())
    if not m:
        raise ValidationError(f"Invalid UTC offset: {value!r}")
    sign, hours, minutes = m.group(1), int(m.group(2)), int(m.group(3))
    if hours > 14 or minutes >= 60:
        raise ValidationError(f"Invalid UTC offset: {value!r}")
    delta = timedelta(hours=hours, minutes=minutes)
    return timezone(-delta if sign == "-" else delta)


def parse_iso_date(value: str) -> date:
    """Parse a strict YYYY-MM-DD string into date."""
    if not isinstance(value, str) or not _DATE_RE.match(value):
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")


def resolve_day_window(civil_date: str, utc_offset: str = DEFAULT_UTC_OFFSET) -> DayWindow:
    """Convert a civil date in a fixed offset into its UTC ``[start, end)`` window.

    Pure: the host's local offset is never consulted.
    """
    day = parse_iso_date(civil_date)
    tz = parse_utc_offset(utc_offset)
    start = datetime.combine(day, time.min, tzinfo=tz).astimezone(timezone.utc)
    return DayWindow(civil_date=day.isoformat(), start=start, end=start + timedelta(days=1))


def require_aware(instant: datetime, field_name: str = "timestamp") -> datetime:
    if not isinstance(instant, datetime):
        raise ValidationError(f"{field_name} is not a datetime")
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise ValidationError(f"{field_name} must carry a UTC offset")
    return instant.astimezone(timezone.utc)


def civil_date_of(instant: datetime, utc_offset: str = DEFAULT_UTC_OFFSET) -> str:
    instant = require_aware(instant)
    return instant.astimezone(parse_utc_offset(utc_offset)).date().isoformat()


def window_containing(instant: datetime, utc_offset: str = DEFAULT_UTC_OFFSET) -> DayWindow:
    return resolve_day_window(civil_date_of(instant, utc_offset), utc_offset)


def parse_instant(value: str, field_name: str = "timestamp") -> datetime:
    """Parse an ISO-8601 instant that carries an offset (``Z`` accepted)."""
    v = (value or "").strip()
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(v)
    except ValueError:
        raise ValidationError(f"Invalid {field_name}: {value!r}")
    return require_aware(parsed, field_name)


def now_utc() -> datetime:
    """Current instant in UTC.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now(timezone.utc)


def parse_hhmm(value: str, field_name: str = "time") -> time:
    v = (value or "").strip()
    try:
        return datetime.strptime(v, "%H:%M").time()
    except ValueError:
        raise ValidationError(f"Invalid {field_name} (HH:MM)")
