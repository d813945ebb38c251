from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import ClockKind
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_instant, to_db_instant
from .model import ClockEvent, ClockMetadata
from .repository import ClockRepository

_COLUMNS = """
    event_id, worker_id, kind, ts, ip_address, device_fingerprint, user_agent,
    is_edited, original_ts, edit_reason, edited_by, edited_at
"""


def row_to_clock_event(r: dict) -> ClockEvent:
    return ClockEvent(
        event_id=int(r["event_id"]),
        worker_id=int(r["worker_id"]),
        kind=ClockKind(r["kind"]),
        timestamp=from_db_instant(r["ts"]),
        metadata=ClockMetadata(
            ip_address=r.get("ip_address"),
            device_fingerprint=r.get("device_fingerprint"),
            user_agent=r.get("user_agent"),
        ),
        is_edited=bool(r.get("is_edited")),
        original_timestamp=from_db_instant(r.get("original_ts")),
        edit_reason=r.get("edit_reason"),
        edited_by=r.get("edited_by"),
        edited_at=from_db_instant(r.get("edited_at")),
    )


class MySQLClockRepository(ClockRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(
        self,
        *,
        worker_id: int,
        kind: ClockKind,
        timestamp: datetime,
        metadata: ClockMetadata,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO clock_events(worker_id, kind, ts, ip_address, device_fingerprint, user_agent)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(worker_id),
                    kind.value,
                    to_db_instant(timestamp),
                    metadata.ip_address,
                    metadata.device_fingerprint,
                    metadata.user_agent,
                ),
            )
            return int(cur.lastrowid)

    def get(self, event_id: int) -> Optional[ClockEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM clock_events WHERE event_id=%s", (int(event_id),))
            r = fetchone(cur)
            return row_to_clock_event(r) if r else None

    def list_between(self, *, worker_id: int, start: datetime, end: datetime) -> Sequence[ClockEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM clock_events
                WHERE worker_id=%s AND ts >= %s AND ts < %s
                ORDER BY ts ASC, event_id ASC
                """,
                (int(worker_id), to_db_instant(start), to_db_instant(end)),
            )
            return [row_to_clock_event(r) for r in fetchall(cur)]

    def count_between(self, *, worker_id: int, start: datetime, end: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS n
                FROM clock_events
                WHERE worker_id=%s AND ts >= %s AND ts < %s
                """,
                (int(worker_id), to_db_instant(start), to_db_instant(end)),
            )
            r = fetchone(cur)
            return int(r["n"]) if r else 0

    def correct_timestamp(
        self,
        *,
        event_id: int,
        timestamp: datetime,
        reason: str,
        edited_by: int,
        edited_at: datetime,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE clock_events
                SET original_ts = IF(is_edited = 1, original_ts, ts),
                    ts=%s, is_edited=1, edit_reason=%s, edited_by=%s, edited_at=%s
                WHERE event_id=%s
                """,
                (to_db_instant(timestamp), reason, int(edited_by), to_db_instant(edited_at), int(event_id)),
            )
            return cur.rowcount > 0

    def delete(self, event_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM clock_events WHERE event_id=%s", (int(event_id),))
            return cur.rowcount > 0
