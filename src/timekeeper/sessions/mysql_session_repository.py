from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, Optional, Sequence, Tuple

from ..core.exceptions import StorageError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_db_instant
from .model import WorkerSessionState


class MySQLSessionTransaction:
    """Cursor-bound unit of work; the worker's state row is already locked."""

    def __init__(self, repo: "MySQLSessionRepository", cur, worker_id: int, state: WorkerSessionState):
        self._repo = repo
        self._cur = cur
        self.worker_id = worker_id
        self.state = state

    def open_sessions(self) -> Sequence[Any]:
        self._cur.execute(
            f"""
            SELECT {self._repo.columns}
            FROM {self._repo.table}
            WHERE worker_id=%s AND end_time IS NULL
            ORDER BY start_time ASC, session_id ASC
            FOR UPDATE
            """,
            (self.worker_id,),
        )
        return [self._repo.row_to_session(r) for r in fetchall(self._cur)]

    def get(self, session_id: int) -> Optional[Any]:
        self._cur.execute(
            f"""
            SELECT {self._repo.columns}
            FROM {self._repo.table}
            WHERE session_id=%s AND worker_id=%s
            FOR UPDATE
            """,
            (int(session_id), self.worker_id),
        )
        r = fetchone(self._cur)
        return self._repo.row_to_session(r) if r else None

    def close(self, session_id: int, end_time: datetime, metadata: Any = None) -> None:
        extra_sql, extra_params = self._repo.close_columns(metadata)
        self._cur.execute(
            f"""
            UPDATE {self._repo.table}
            SET end_time=%s{extra_sql}
            WHERE session_id=%s AND end_time IS NULL
            """,
            (to_db_instant(end_time), *extra_params, int(session_id)),
        )

    def insert(self, draft: Any) -> Any:
        session_id = self._repo.insert_draft(self._cur, draft)
        created = self.get(session_id)
        if created is None:
            raise StorageError(f"Inserted row {session_id} is not readable")
        return created

    def delete(self, session_id: int) -> None:
        self._cur.execute(
            f"DELETE FROM {self._repo.table} WHERE session_id=%s AND worker_id=%s",
            (int(session_id), self.worker_id),
        )

    def set_open_session(self, session_id: Optional[int]) -> None:
        self._cur.execute(
            """
            UPDATE worker_session_state
            SET open_session_id=%s
            WHERE worker_id=%s AND tracker=%s
            """,
            (session_id, self.worker_id, self._repo.tracker),
        )
        self.state = WorkerSessionState(worker_id=self.worker_id, tracker=self._repo.tracker, open_session_id=session_id)


class MySQLSessionRepository(ABC):
    """Shared MySQL plumbing for session trackers.

    Subclasses name their table, columns and tracker key and map rows.
    """

    table: str = ""
    columns: str = ""
    tracker: str = ""
    transaction_class = MySQLSessionTransaction

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @abstractmethod
    def row_to_session(self, r: Dict[str, Any]) -> Any:
        raise NotImplementedError

    @abstractmethod
    def insert_draft(self, cur, draft: Any) -> int:
        raise NotImplementedError

    def close_columns(self, metadata: Any) -> Tuple[str, Tuple[Any, ...]]:
        """Extra ``SET`` assignments written when a session is closed."""
        return "", ()

    @contextmanager
    def transaction(self, worker_id: int) -> Iterator[MySQLSessionTransaction]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO worker_session_state(worker_id, tracker, open_session_id)
                VALUES(%s,%s,NULL)
                ON DUPLICATE KEY UPDATE worker_id=worker_id
                """,
                (int(worker_id), self.tracker),
            )
            cur.execute(
                """
                SELECT worker_id, tracker, open_session_id
                FROM worker_session_state
                WHERE worker_id=%s AND tracker=%s
                FOR UPDATE
                """,
                (int(worker_id), self.tracker),
            )
            r = fetchone(cur) or {}
            open_id = r.get("open_session_id")
            state = WorkerSessionState(
                worker_id=int(worker_id),
                tracker=self.tracker,
                open_session_id=int(open_id) if open_id is not None else None,
            )
            yield self.transaction_class(self, cur, int(worker_id), state)

    def get(self, session_id: int) -> Optional[Any]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {self.columns} FROM {self.table} WHERE session_id=%s", (int(session_id),))
            r = fetchone(cur)
            return self.row_to_session(r) if r else None

    def find_open(self, worker_id: int) -> Optional[Any]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {self.columns}
                FROM {self.table}
                WHERE worker_id=%s AND end_time IS NULL
                ORDER BY start_time DESC
                LIMIT 1
                """,
                (int(worker_id),),
            )
            r = fetchone(cur)
            return self.row_to_session(r) if r else None

    def list_between(self, *, worker_id: int, start: datetime, end: datetime) -> Sequence[Any]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {self.columns}
                FROM {self.table}
                WHERE worker_id=%s AND start_time >= %s AND start_time < %s
                ORDER BY start_time ASC, session_id ASC
                """,
                (int(worker_id), to_db_instant(start), to_db_instant(end)),
            )
            return [self.row_to_session(r) for r in fetchall(cur)]
