from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

from ..clock.model import ClockMetadata
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_UTC_OFFSET
from ..core.enums import OvertimeStatus
from ..core.exceptions import ValidationError
from ..sessions.tracker import SessionTracker
from .model import OvertimeDraft, OvertimeSession, OvertimeStart
from .repository import OvertimeRepository


class OvertimeTracker(SessionTracker):
    """Overtime sessions.

    Same start/stop machine as work sessions but with its own state record: an
    open overtime session never closes or blocks an open work session. Start
    requires a reason; stopping stores the end device metadata and never touches
    clock events.
    """

    label = "overtime session"

    def __init__(self, sessions: OvertimeRepository, *, utc_offset: str = DEFAULT_UTC_OFFSET):
        super().__init__(sessions, utc_offset=utc_offset)

    def _build_draft(self, worker_id: int, descriptor: OvertimeStart, start_time: datetime) -> OvertimeDraft:
        if not isinstance(descriptor, OvertimeStart):
            raise ValidationError("Overtime reason is required")
        return OvertimeDraft(
            worker_id=worker_id,
            start_time=start_time,
            reason=require_non_empty(descriptor.reason, "reason"),
            status=OvertimeStatus.PENDING,
            start_metadata=descriptor.metadata or ClockMetadata(),
        )

    def _close(self, tx, session: OvertimeSession, end_time: datetime, metadata: Optional[ClockMetadata]):
        stopped = super()._close(tx, session, end_time, metadata)
        return replace(stopped, end_metadata=metadata)
