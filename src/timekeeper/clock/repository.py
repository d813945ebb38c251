from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import ClockKind
from .model import ClockEvent, ClockMetadata


class ClockRepository(Protocol):
    def create(
        self,
        *,
        worker_id: int,
        kind: ClockKind,
        timestamp: datetime,
        metadata: ClockMetadata,
    ) -> int:
        raise NotImplementedError

    def get(self, event_id: int) -> Optional[ClockEvent]:
        raise NotImplementedError

    def list_between(self, *, worker_id: int, start: datetime, end: datetime) -> Sequence[ClockEvent]:
        """Events with ``start <= timestamp < end``, ordered by timestamp then id."""

        raise NotImplementedError

    def count_between(self, *, worker_id: int, start: datetime, end: datetime) -> int:
        raise NotImplementedError

    def correct_timestamp(
        self,
        *,
        event_id: int,
        timestamp: datetime,
        reason: str,
        edited_by: int,
        edited_at: datetime,
    ) -> bool:
        """Set a corrected timestamp; the first original timestamp is kept."""

        raise NotImplementedError

    def delete(self, event_id: int) -> bool:
        raise NotImplementedError
