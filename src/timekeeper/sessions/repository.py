from __future__ import annotations

from datetime import datetime
from typing import Any, ContextManager, Optional, Protocol, Sequence

from .model import WorkerSessionState


class SessionTransaction(Protocol):
    """Unit of work holding the per-worker lock of one tracker."""

    state: WorkerSessionState

    def open_sessions(self) -> Sequence[Any]:
        raise NotImplementedError

    def get(self, session_id: int) -> Optional[Any]:
        raise NotImplementedError

    def close(self, session_id: int, end_time: datetime, metadata: Any = None) -> None:
        raise NotImplementedError

    def insert(self, draft: Any) -> Any:
        raise NotImplementedError

    def delete(self, session_id: int) -> None:
        raise NotImplementedError

    def set_open_session(self, session_id: Optional[int]) -> None:
        raise NotImplementedError


class SessionRepository(Protocol):
    def transaction(self, worker_id: int) -> ContextManager[SessionTransaction]:
        """Lock the worker's state record; commit on exit, roll back on error."""

        raise NotImplementedError

    def get(self, session_id: int) -> Optional[Any]:
        raise NotImplementedError

    def find_open(self, worker_id: int) -> Optional[Any]:
        raise NotImplementedError

    def list_between(self, *, worker_id: int, start: datetime, end: datetime) -> Sequence[Any]:
        """Sessions whose start_time lies in ``[start, end)``, ordered by start_time."""

        raise NotImplementedError
