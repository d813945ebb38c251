from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .clock.mysql_clock_repository import MySQLClockRepository
from .clock.service import ClockLedger
from .core.constants import DEFAULT_UTC_OFFSET
from .database.connection import DBConfig, DatabaseConnection
from .holidays.mysql_holiday_repository import MySQLHolidayRepository
from .holidays.service import HolidayCalendar
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.service import LeaveService
from .notifications.dispatcher import Notifier
from .overtime.mysql_overtime_repository import MySQLOvertimeRepository
from .overtime.service import OvertimeTracker
from .status.service import PunchStatusService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import IdentityService
from .worklogs.mysql_worklog_repository import MySQLWorkSessionRepository
from .worklogs.service import WorkSessionTracker


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    identity_service: IdentityService
    clock_ledger: ClockLedger
    work_tracker: WorkSessionTracker
    overtime_tracker: OvertimeTracker
    leave_service: LeaveService
    holiday_calendar: HolidayCalendar
    punch_status_service: PunchStatusService


def build_container(*, db_config: dict, notifier: Notifier, utc_offset: str = DEFAULT_UTC_OFFSET) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
        connection_timeout=int(db_config.get("connection_timeout", 10)),
        lock_wait_timeout=int(db_config.get("lock_wait_timeout", 10)),
    )
    conn = DatabaseConnection.get_instance(config)

    users_repo = MySQLUserRepository(conn)
    clock_repo = MySQLClockRepository(conn)
    work_repo = MySQLWorkSessionRepository(conn)
    overtime_repo = MySQLOvertimeRepository(conn)
    leaves_repo = MySQLLeaveRepository(conn)
    holidays_repo = MySQLHolidayRepository(conn)

    identity_service = IdentityService(users_repo)
    clock_ledger = ClockLedger(clock_repo, utc_offset=utc_offset)
    work_tracker = WorkSessionTracker(work_repo, clock_repo, utc_offset=utc_offset)
    overtime_tracker = OvertimeTracker(overtime_repo, utc_offset=utc_offset)
    leave_service = LeaveService(leaves_repo, identity_service, notifier)
    holiday_calendar = HolidayCalendar(holidays_repo)
    punch_status_service = PunchStatusService(
        clock_ledger, overtime_tracker, holiday_calendar, utc_offset=utc_offset
    )

    return Container(
        conn=conn,
        identity_service=identity_service,
        clock_ledger=clock_ledger,
        work_tracker=work_tracker,
        overtime_tracker=overtime_tracker,
        leave_service=leave_service,
        holiday_calendar=holiday_calendar,
        punch_status_service=punch_status_service,
    )
