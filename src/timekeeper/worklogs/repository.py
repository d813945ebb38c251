from __future__ import annotations

from datetime import datetime
from typing import ContextManager, Optional, Protocol, Sequence

from ..sessions.repository import SessionRepository, SessionTransaction
from .model import WorkSession, WorkSessionDraft


class WorkSessionTransaction(SessionTransaction, Protocol):
    def open_sessions(self) -> Sequence[WorkSession]:
        raise NotImplementedError

    def get(self, session_id: int) -> Optional[WorkSession]:
        raise NotImplementedError

    def insert(self, draft: WorkSessionDraft) -> WorkSession:
        raise NotImplementedError

    def closed_between(self, start: datetime, end: datetime) -> Sequence[WorkSession]:
        """Closed sessions of the locked worker starting in ``[start, end)``."""

        raise NotImplementedError

    def sessions_between(self, start: datetime, end: datetime) -> Sequence[WorkSession]:
        """Open and closed sessions of the locked worker starting in ``[start, end)``."""

        raise NotImplementedError

    def set_interval(self, session_id: int, start_time: datetime, end_time: datetime) -> None:
        raise NotImplementedError

    def delete_clock_events_between(self, start: datetime, end: datetime) -> int:
        """Delete the locked worker's clock events in ``[start, end)``; returns the count."""

        raise NotImplementedError


class WorkSessionRepository(SessionRepository, Protocol):
    def transaction(self, worker_id: int) -> ContextManager[WorkSessionTransaction]:
        raise NotImplementedError

    def get(self, session_id: int) -> Optional[WorkSession]:
        raise NotImplementedError

    def find_open(self, worker_id: int) -> Optional[WorkSession]:
        raise NotImplementedError

    def list_between(self, *, worker_id: int, start: datetime, end: datetime) -> Sequence[WorkSession]:
        raise NotImplementedError
