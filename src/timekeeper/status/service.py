from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..clock.model import ClockStatus
from ..clock.service import ClockLedger
from ..common.datetime_utils import civil_date_of, now_utc, require_aware
from ..core.constants import DEFAULT_UTC_OFFSET
from ..holidays.model import DayKind
from ..holidays.service import HolidayCalendar
from ..overtime.model import OvertimeSession
from ..overtime.service import OvertimeTracker


@dataclass(frozen=True)
class PunchStatus:
    day: DayKind
    clock: ClockStatus
    open_overtime: Optional[OvertimeSession]


class PunchStatusService:
    """Read model polled by clients: today's day kind, clock status and open overtime."""

    def __init__(
        self,
        ledger: ClockLedger,
        overtime: OvertimeTracker,
        calendar: HolidayCalendar,
        *,
        utc_offset: str = DEFAULT_UTC_OFFSET,
    ):
        self._ledger = ledger
        self._overtime = overtime
        self._calendar = calendar
        self._utc_offset = utc_offset

    def punch_status(self, worker_id, as_of: Optional[datetime] = None) -> PunchStatus:
        as_of = require_aware(as_of, "as_of") if as_of else now_utc()
        return PunchStatus(
            day=self._calendar.classify(civil_date_of(as_of, self._utc_offset)),
            clock=self._ledger.current_status(worker_id, as_of),
            open_overtime=self._overtime.find_open(worker_id),
        )
