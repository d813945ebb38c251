from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ClockKind


@dataclass(frozen=True)
class ClockMetadata:
    """Source metadata captured at the request boundary; stored opaquely."""

    ip_address: Optional[str] = None
    device_fingerprint: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class ClockEvent:
    """Domain entity: one IN/OUT punch."""

    event_id: int
    worker_id: int
    kind: ClockKind
    timestamp: datetime
    metadata: ClockMetadata = ClockMetadata()
    is_edited: bool = False
    original_timestamp: Optional[datetime] = None
    edit_reason: Optional[str] = None
    edited_by: Optional[int] = None
    edited_at: Optional[datetime] = None


@dataclass(frozen=True)
class ClockStatus:
    clocked_in: bool
    last_in: Optional[ClockEvent]
    last_out: Optional[ClockEvent]
