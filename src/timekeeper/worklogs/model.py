from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import ConflictAction


@dataclass(frozen=True)
class WorkSession:
    """Domain entity: a labor interval; open while end_time is None."""

    session_id: int
    worker_id: int
    project_code: str
    project_name: str
    category: str
    content: str
    start_time: datetime
    end_time: Optional[datetime] = None
    is_overtime: bool = False

    @property
    def is_open(self) -> bool:
        return self.end_time is None


@dataclass(frozen=True)
class WorkDescriptor:
    """What the worker says they are working on."""

    project_code: str
    project_name: str
    category: str
    content: str
    is_overtime: bool = False


@dataclass(frozen=True)
class WorkSessionDraft:
    worker_id: int
    project_code: str
    project_name: str
    category: str
    content: str
    start_time: datetime
    end_time: Optional[datetime] = None
    is_overtime: bool = False


@dataclass(frozen=True)
class DeletePreview:
    session: WorkSession
    clock_event_count: int


@dataclass(frozen=True)
class MergeResult:
    merged: WorkSession
    original_count: int


@dataclass(frozen=True)
class ConflictResolution:
    session: WorkSession
    action: ConflictAction


@dataclass(frozen=True)
class CompletedEntry:
    created: WorkSession
    resolved: Sequence[ConflictResolution] = ()
