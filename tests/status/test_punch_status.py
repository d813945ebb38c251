from datetime import date

from timekeeper.clock.service import ClockLedger
from timekeeper.core.enums import ClockKind
from timekeeper.holidays.model import Holiday
from timekeeper.holidays.service import HolidayCalendar
from timekeeper.overtime.model import OvertimeStart
from timekeeper.overtime.service import OvertimeTracker
from timekeeper.status.service import PunchStatusService

from fakes import InMemoryClock, InMemoryHolidays, InMemoryOvertime, utc, worker


def _service(*holidays):
    clock = InMemoryClock()
    overtime = OvertimeTracker(InMemoryOvertime(), utc_offset="+08:00")
    service = PunchStatusService(
        ClockLedger(clock, utc_offset="+08:00"),
        overtime,
        HolidayCalendar(InMemoryHolidays(*holidays)),
        utc_offset="+08:00",
    )
    return clock, overtime, service


def test_punch_status_combines_day_clock_and_overtime():
    clock, overtime, service = _service(
        Holiday(date=date(2024, 3, 10), is_holiday=True, name="Company day", type="COMPANY")
    )
    clock.add(1, ClockKind.IN, utc(2024, 3, 10, 1, 0))
    overtime.start_session(worker(1), 1, OvertimeStart(reason="deploy"), utc(2024, 3, 10, 2, 0))

    status = service.punch_status(1, utc(2024, 3, 10, 3, 0))

    assert status.day.civil_date == "2024-03-10"
    assert status.day.is_holiday and status.day.name == "Company day"
    assert status.clock.clocked_in
    assert status.open_overtime.reason == "deploy"


def test_punch_status_uses_the_configured_offset_for_the_day():
    _, _, service = _service()

    # 2024-03-08 17:00Z is Saturday 01:00 in +08:00
    status = service.punch_status(1, utc(2024, 3, 8, 17, 0))

    assert status.day.civil_date == "2024-03-09"
    assert status.day.is_weekend
    assert not status.clock.clocked_in
    assert status.open_overtime is None
