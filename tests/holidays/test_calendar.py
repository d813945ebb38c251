from datetime import date

from timekeeper.holidays.model import Holiday
from timekeeper.holidays.service import HolidayCalendar

from fakes import InMemoryHolidays


def test_weekend_without_row_is_not_a_holiday():
    day = HolidayCalendar(InMemoryHolidays()).classify("2024-03-09")

    assert day.is_weekend and not day.is_holiday
    assert day.name is None


def test_weekday_without_row_is_a_working_day():
    day = HolidayCalendar(InMemoryHolidays()).classify("2024-03-11")

    assert not day.is_weekend and not day.is_holiday


def test_stored_row_decides_the_holiday_flag():
    calendar = HolidayCalendar(
        InMemoryHolidays(
            Holiday(date=date(2024, 2, 17), is_holiday=False, name="Make-up workday", type="WORKDAY"),
            Holiday(date=date(2024, 4, 4), is_holiday=True, name="Children's Day", type="NATIONAL"),
        )
    )

    saturday = calendar.classify("2024-02-17")
    thursday = calendar.classify("2024-04-04")

    assert saturday.is_weekend and not saturday.is_holiday
    assert thursday.is_holiday and thursday.name == "Children's Day"
