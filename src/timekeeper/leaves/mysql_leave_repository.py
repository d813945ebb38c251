from __future__ import annotations

from datetime import date, time
from typing import Optional, Sequence

from ..core.enums import LeaveStatus, LeaveType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_instant, normalize_mysql_time
from .model import LeaveRequest
from .repository import LeaveRepository

_COLUMNS = """
    request_id, requester_id, agent_id, leave_type, status, reason,
    start_date, end_date, start_time, end_time, total_hours,
    decided_by, created_at, updated_at
"""


def row_to_leave(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        requester_id=int(r["requester_id"]),
        agent_id=int(r["agent_id"]),
        leave_type=LeaveType(r["leave_type"]),
        status=LeaveStatus(r["status"]),
        reason=r["reason"],
        start_date=r["start_date"],
        end_date=r["end_date"],
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        total_hours=int(r["total_hours"]),
        decided_by=r.get("decided_by"),
        created_at=from_db_instant(r["created_at"]),
        updated_at=from_db_instant(r["updated_at"]),
    )


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        requester_id: int,
        agent_id: int,
        leave_type: LeaveType,
        reason: str,
        start_date: date,
        end_date: date,
        start_time: time,
        end_time: time,
        total_hours: int,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO leave_requests(
                    requester_id, agent_id, leave_type, status, reason,
                    start_date, end_date, start_time, end_time, total_hours
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(requester_id),
                    int(agent_id),
                    leave_type.value,
                    LeaveStatus.PENDING_AGENT.value,
                    reason,
                    start_date,
                    end_date,
                    start_time,
                    end_time,
                    int(total_hours),
                ),
            )
            return int(cur.lastrowid)

    def get(self, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM leave_requests WHERE request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return row_to_leave(r) if r else None

    def transition(
        self,
        *,
        request_id: int,
        expected: LeaveStatus,
        new_status: LeaveStatus,
        decided_by: int,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT status FROM leave_requests WHERE request_id=%s FOR UPDATE",
                (int(request_id),),
            )
            r = fetchone(cur)
            if not r or r["status"] != expected.value:
                return False
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, decided_by=%s
                WHERE request_id=%s AND status=%s
                """,
                (new_status.value, int(decided_by), int(request_id), expected.value),
            )
            return cur.rowcount > 0

    def list_requests(
        self,
        *,
        requester_id: Optional[int] = None,
        agent_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        clauses = ["1=1"]
        params: list[object] = []

        if requester_id is not None:
            clauses.append("requester_id=%s")
            params.append(int(requester_id))
        if agent_id is not None:
            clauses.append("agent_id=%s")
            params.append(int(agent_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM leave_requests
                WHERE {where}
                ORDER BY created_at DESC
                LIMIT %s
                """,
                tuple(params + [int(limit)]),
            )
            return [row_to_leave(r) for r in fetchall(cur)]
