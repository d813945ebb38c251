from __future__ import annotations

from ..common.datetime_utils import parse_iso_date
from .model import DayKind
from .repository import HolidayRepository


class HolidayCalendar:
    """Classify civil dates. Only a stored row marks a holiday; weekends are
    reported through ``is_weekend`` and left to the caller."""

    def __init__(self, holidays: HolidayRepository):
        self._holidays = holidays

    def classify(self, civil_date: str) -> DayKind:
        day = parse_iso_date(civil_date)
        is_weekend = day.weekday() >= 5
        row = self._holidays.get(day)
        if row:
            return DayKind(
                civil_date=day.isoformat(),
                is_holiday=row.is_holiday,
                is_weekend=is_weekend,
                name=row.name,
                type=row.type,
            )
        return DayKind(civil_date=day.isoformat(), is_holiday=False, is_weekend=is_weekend)
