from __future__ import annotations

from datetime import datetime
from typing import ContextManager, Optional, Protocol, Sequence

from ..clock.model import ClockMetadata
from ..sessions.repository import SessionRepository, SessionTransaction
from .model import OvertimeDraft, OvertimeSession


class OvertimeTransaction(SessionTransaction, Protocol):
    def open_sessions(self) -> Sequence[OvertimeSession]:
        raise NotImplementedError

    def get(self, session_id: int) -> Optional[OvertimeSession]:
        raise NotImplementedError

    def close(self, session_id: int, end_time: datetime, metadata: Optional[ClockMetadata] = None) -> None:
        raise NotImplementedError

    def insert(self, draft: OvertimeDraft) -> OvertimeSession:
        raise NotImplementedError


class OvertimeRepository(SessionRepository, Protocol):
    def transaction(self, worker_id: int) -> ContextManager[OvertimeTransaction]:
        raise NotImplementedError

    def get(self, session_id: int) -> Optional[OvertimeSession]:
        raise NotImplementedError

    def find_open(self, worker_id: int) -> Optional[OvertimeSession]:
        raise NotImplementedError

    def list_between(self, *, worker_id: int, start: datetime, end: datetime) -> Sequence[OvertimeSession]:
        raise NotImplementedError
