from __future__ import annotations

from datetime import date
from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Holiday
from .repository import HolidayRepository


def row_to_holiday(r: dict) -> Holiday:
    return Holiday(
        date=r["holiday_date"],
        is_holiday=bool(r["is_holiday"]),
        name=r["name"],
        type=r["holiday_type"],
    )


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, day: date) -> Optional[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT holiday_date, is_holiday, name, holiday_type FROM holidays WHERE holiday_date=%s",
                (day,),
            )
            r = fetchone(cur)
            return row_to_holiday(r) if r else None

