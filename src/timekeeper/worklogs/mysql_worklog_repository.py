from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Sequence

from ..database.mysql_base import fetchall, from_db_instant, to_db_instant
from ..sessions.mysql_session_repository import MySQLSessionRepository, MySQLSessionTransaction
from .model import WorkSession, WorkSessionDraft
from .repository import WorkSessionRepository


class MySQLWorkSessionTransaction(MySQLSessionTransaction):
    def closed_between(self, start: datetime, end: datetime) -> Sequence[WorkSession]:
        self._cur.execute(
            f"""
            SELECT {self._repo.columns}
            FROM work_sessions
            WHERE worker_id=%s AND end_time IS NOT NULL AND start_time >= %s AND start_time < %s
            ORDER BY start_time ASC, session_id ASC
            FOR UPDATE
            """,
            (self.worker_id, to_db_instant(start), to_db_instant(end)),
        )
        return [self._repo.row_to_session(r) for r in fetchall(self._cur)]

    def sessions_between(self, start: datetime, end: datetime) -> Sequence[WorkSession]:
        self._cur.execute(
            f"""
            SELECT {self._repo.columns}
            FROM work_sessions
            WHERE worker_id=%s AND start_time >= %s AND start_time < %s
            ORDER BY start_time ASC, session_id ASC
            FOR UPDATE
            """,
            (self.worker_id, to_db_instant(start), to_db_instant(end)),
        )
        return [self._repo.row_to_session(r) for r in fetchall(self._cur)]

    def set_interval(self, session_id: int, start_time: datetime, end_time: datetime) -> None:
        self._cur.execute(
            "UPDATE work_sessions SET start_time=%s, end_time=%s WHERE session_id=%s AND worker_id=%s",
            (to_db_instant(start_time), to_db_instant(end_time), int(session_id), self.worker_id),
        )

    def delete_clock_events_between(self, start: datetime, end: datetime) -> int:
        self._cur.execute(
            """
            DELETE FROM clock_events
            WHERE worker_id=%s AND ts >= %s AND ts < %s
            """,
            (self.worker_id, to_db_instant(start), to_db_instant(end)),
        )
        return int(self._cur.rowcount)


class MySQLWorkSessionRepository(MySQLSessionRepository, WorkSessionRepository):
    table = "work_sessions"
    columns = """
        session_id, worker_id, project_code, project_name, category, content,
        start_time, end_time, is_overtime
    """
    tracker = "WORK"
    transaction_class = MySQLWorkSessionTransaction

    def row_to_session(self, r: Dict[str, Any]) -> WorkSession:
        return WorkSession(
            session_id=int(r["session_id"]),
            worker_id=int(r["worker_id"]),
            project_code=r["project_code"],
            project_name=r["project_name"],
            category=r["category"],
            content=r["content"],
            start_time=from_db_instant(r["start_time"]),
            end_time=from_db_instant(r.get("end_time")),
            is_overtime=bool(r.get("is_overtime")),
        )

    def insert_draft(self, cur, draft: WorkSessionDraft) -> int:
        cur.execute(
            """
            INSERT INTO work_sessions(
                worker_id, project_code, project_name, category, content, start_time, end_time, is_overtime
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                int(draft.worker_id),
                draft.project_code,
                draft.project_name,
                draft.category,
                draft.content,
                to_db_instant(draft.start_time),
                to_db_instant(draft.end_time),
                1 if draft.is_overtime else 0,
            ),
        )
        return int(cur.lastrowid)
