import pytest

from timekeeper.clock.service import ClockLedger
from timekeeper.container import Container
from timekeeper.core.enums import Role
from timekeeper.holidays.service import HolidayCalendar
from timekeeper.leaves.service import LeaveService
from timekeeper.main import create_app
from timekeeper.overtime.service import OvertimeTracker
from timekeeper.status.service import PunchStatusService
from timekeeper.users.model import User
from timekeeper.users.service import IdentityService
from timekeeper.worklogs.service import WorkSessionTracker

from fakes import (
    InMemoryClock,
    InMemoryHolidays,
    InMemoryLeaves,
    InMemoryOvertime,
    InMemoryUsers,
    InMemoryWorkSessions,
    RecordingNotifier,
)


@pytest.fixture
def stores():
    clock = InMemoryClock()
    return {
        "users": InMemoryUsers(
            User(user_id=1, full_name="Ann", email="ann@example.com", role=Role.WORKER),
            User(user_id=2, full_name="Bo", email="bo@example.com", role=Role.WORKER),
            User(user_id=99, full_name="Admin", email="admin@example.com", role=Role.ADMIN),
        ),
        "clock": clock,
        "work": InMemoryWorkSessions(clock),
        "overtime": InMemoryOvertime(),
        "leaves": InMemoryLeaves(),
        "notifier": RecordingNotifier(),
    }


@pytest.fixture
def app(stores, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    identity = IdentityService(stores["users"])
    ledger = ClockLedger(stores["clock"], utc_offset="+08:00")
    overtime = OvertimeTracker(stores["overtime"], utc_offset="+08:00")
    calendar = HolidayCalendar(InMemoryHolidays())
    container = Container(
        conn=None,
        identity_service=identity,
        clock_ledger=ledger,
        work_tracker=WorkSessionTracker(stores["work"], stores["clock"], utc_offset="+08:00"),
        overtime_tracker=overtime,
        leave_service=LeaveService(stores["leaves"], identity, stores["notifier"]),
        holiday_calendar=calendar,
        punch_status_service=PunchStatusService(ledger, overtime, calendar, utc_offset="+08:00"),
    )
    return create_app(container)


@pytest.fixture
def login(app):
    def _login(client, user_id: int):
        with client.session_transaction() as sess:
            sess["user_id"] = user_id
        return client

    return _login
