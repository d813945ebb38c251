from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..clock.model import ClockMetadata
from ..core.enums import OvertimeStatus


@dataclass(frozen=True)
class OvertimeSession:
    """Domain entity: an overtime interval, tracked apart from work sessions."""

    session_id: int
    worker_id: int
    start_time: datetime
    reason: str
    status: OvertimeStatus = OvertimeStatus.PENDING
    end_time: Optional[datetime] = None
    start_metadata: ClockMetadata = ClockMetadata()
    end_metadata: Optional[ClockMetadata] = None

    @property
    def is_open(self) -> bool:
        return self.end_time is None


@dataclass(frozen=True)
class OvertimeStart:
    reason: str
    metadata: ClockMetadata = ClockMetadata()


@dataclass(frozen=True)
class OvertimeDraft:
    worker_id: int
    start_time: datetime
    reason: str
    status: OvertimeStatus
    start_metadata: ClockMetadata
