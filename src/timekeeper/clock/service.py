from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_utc, require_aware, resolve_day_window, window_containing
from ..common.validators import require_id, require_non_empty
from ..core.constants import DEFAULT_UTC_OFFSET
from ..core.enums import ClockKind
from ..core.exceptions import NotFound, ValidationError
from ..users.model import Principal
from ..users.permissions import Action, Resource, require
from .model import ClockEvent, ClockMetadata, ClockStatus
from .repository import ClockRepository

logger = logging.getLogger(__name__)


def _latest(events: Sequence[ClockEvent], kind: ClockKind) -> Optional[ClockEvent]:
    candidates = [e for e in events if e.kind == kind]
    if not candidates:
        return None
    return max(candidates, key=lambda e: (e.timestamp, e.event_id))


def derive_status(events: Sequence[ClockEvent]) -> ClockStatus:
    """Clock status from one day's events.

    An OUT at exactly the same instant as the latest IN does not override it.
    """
    last_in = _latest(events, ClockKind.IN)
    last_out = _latest(events, ClockKind.OUT)
    clocked_in = last_in is not None and (last_out is None or last_in.timestamp >= last_out.timestamp)
    return ClockStatus(clocked_in=clocked_in, last_in=last_in, last_out=last_out)


class ClockLedger:
    """Append-only IN/OUT record per worker; derives the live clock status."""

    def __init__(self, clock: ClockRepository, *, utc_offset: str = DEFAULT_UTC_OFFSET):
        self._clock = clock
        self._utc_offset = utc_offset

    def record_event(
        self,
        principal: Principal,
        worker_id,
        kind,
        metadata: Optional[ClockMetadata] = None,
        *,
        now: Optional[datetime] = None,
    ) -> ClockEvent:
        worker_id = require_id(worker_id, "worker_id")
        try:
            kind = ClockKind(kind)
        except ValueError:
            raise ValidationError("kind must be IN or OUT")
        require(principal, Action.RECORD_CLOCK, Resource(owner_id=worker_id))

        timestamp = require_aware(now) if now else now_utc()
        metadata = metadata or ClockMetadata()
        event_id = self._clock.create(worker_id=worker_id, kind=kind, timestamp=timestamp, metadata=metadata)
        logger.info("clock %s recorded for worker %s (event %s)", kind.value, worker_id, event_id)
        return ClockEvent(event_id=event_id, worker_id=worker_id, kind=kind, timestamp=timestamp, metadata=metadata)

    def current_status(self, worker_id, as_of: Optional[datetime] = None) -> ClockStatus:
        worker_id = require_id(worker_id, "worker_id")
        as_of = require_aware(as_of, "as_of") if as_of else now_utc()

        window = window_containing(as_of, self._utc_offset)
        events = self._clock.list_between(worker_id=worker_id, start=window.start, end=window.end)
        return derive_status([e for e in events if e.timestamp <= as_of])

    def list_day(self, worker_id, civil_date: str) -> Sequence[ClockEvent]:
        worker_id = require_id(worker_id, "worker_id")
        window = resolve_day_window(civil_date, self._utc_offset)
        return self._clock.list_between(worker_id=worker_id, start=window.start, end=window.end)

    def edit_event(
        self,
        principal: Principal,
        event_id,
        new_timestamp: datetime,
        reason: str,
        *,
        now: Optional[datetime] = None,
    ) -> ClockEvent:
        """Administrator correction; marks the event edited and keeps the first original time."""
        event_id = require_id(event_id, "event_id")
        reason = require_non_empty(reason, "Edit reason")
        new_timestamp = require_aware(new_timestamp, "timestamp")

        existing = self._clock.get(event_id)
        if not existing:
            raise NotFound("Clock event not found")
        require(principal, Action.EDIT_CLOCK, Resource(owner_id=existing.worker_id))

        self._clock.correct_timestamp(
            event_id=event_id,
            timestamp=new_timestamp,
            reason=reason,
            edited_by=principal.user_id,
            edited_at=require_aware(now) if now else now_utc(),
        )
        logger.warning(
            "clock event %s of worker %s corrected by %s: %s -> %s (%s)",
            event_id,
            existing.worker_id,
            principal.user_id,
            existing.timestamp.isoformat(),
            new_timestamp.isoformat(),
            reason,
        )
        updated = self._clock.get(event_id)
        if not updated:
            raise NotFound("Clock event not found")
        return updated

    def delete_event(self, principal: Principal, event_id, reason: str) -> None:
        event_id = require_id(event_id, "event_id")
        reason = require_non_empty(reason, "Delete reason")

        existing = self._clock.get(event_id)
        if not existing:
            raise NotFound("Clock event not found")
        require(principal, Action.EDIT_CLOCK, Resource(owner_id=existing.worker_id))

        if not self._clock.delete(event_id):
            raise NotFound("Clock event not found")
        logger.warning(
            "clock event %s of worker %s deleted by %s (%s)", event_id, existing.worker_id, principal.user_id, reason
        )
