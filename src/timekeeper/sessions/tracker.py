from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime
from typing import Any, Optional, Sequence

from ..common.datetime_utils import now_utc, require_aware, resolve_day_window
from ..common.validators import require_id
from ..core.constants import DEFAULT_UTC_OFFSET
from ..core.enums import SessionState
from ..core.exceptions import InvalidStateTransition, NotFound, ValidationError
from ..users.model import Principal
from ..users.permissions import Action, Resource, require
from .model import SessionStart
from .repository import SessionRepository

logger = logging.getLogger(__name__)


class SessionTracker(ABC):
    """Open/closed interval machine, one instance per tracker kind.

    Per worker the states are NoSession and OpenSession. ``start`` from either
    state closes whatever is open at the new start instant and opens a new
    session; ``stop`` is only valid from OpenSession.
    """

    label = "session"

    def __init__(self, sessions: SessionRepository, *, utc_offset: str = DEFAULT_UTC_OFFSET):
        self._sessions = sessions
        self._utc_offset = utc_offset

    @abstractmethod
    def _build_draft(self, worker_id: int, descriptor: Any, start_time: datetime) -> Any:
        """Validate the descriptor and return the draft the repository inserts."""

        raise NotImplementedError

    def start_session(
        self,
        principal: Principal,
        worker_id,
        descriptor: Any,
        start_time: Optional[datetime] = None,
    ) -> SessionStart:
        worker_id = require_id(worker_id, "worker_id")
        require(principal, Action.MANAGE_SESSION, Resource(owner_id=worker_id))
        start_time = require_aware(start_time, "start_time") if start_time else now_utc()
        draft = self._build_draft(worker_id, descriptor, start_time)

        with self._sessions.transaction(worker_id) as tx:
            open_sessions = list(tx.open_sessions())
            for s in open_sessions:
                if start_time < s.start_time:
                    raise ValidationError(f"start_time is earlier than the open {self.label} it would close")

            for s in open_sessions:
                tx.close(s.session_id, start_time)
            started = tx.insert(draft)
            tx.set_open_session(started.session_id)

        closed = [replace(s, end_time=start_time) for s in open_sessions]
        for s in closed:
            logger.info("%s %s of worker %s auto-closed at %s", self.label, s.session_id, worker_id, start_time.isoformat())
        logger.info("%s %s started for worker %s", self.label, started.session_id, worker_id)
        return SessionStart(started=started, auto_closed=tuple(closed))

    def stop_session(
        self,
        principal: Principal,
        session_id,
        end_time: Optional[datetime] = None,
        metadata: Any = None,
    ) -> Any:
        session_id = require_id(session_id, "session_id")
        end_time = require_aware(end_time, "end_time") if end_time else now_utc()

        session = self._sessions.get(session_id)
        if not session:
            raise NotFound(f"{self.label.capitalize()} not found")
        require(principal, Action.MANAGE_SESSION, Resource(owner_id=session.worker_id))

        with self._sessions.transaction(session.worker_id) as tx:
            current = tx.get(session_id)
            if not current:
                raise NotFound(f"{self.label.capitalize()} not found")
            stopped = self._close(tx, current, end_time, metadata)

        logger.info("%s %s of worker %s stopped", self.label, session_id, session.worker_id)
        return stopped

    def stop_open(
        self,
        principal: Principal,
        worker_id,
        end_time: Optional[datetime] = None,
        metadata: Any = None,
    ) -> Any:
        worker_id = require_id(worker_id, "worker_id")
        require(principal, Action.MANAGE_SESSION, Resource(owner_id=worker_id))
        end_time = require_aware(end_time, "end_time") if end_time else now_utc()

        with self._sessions.transaction(worker_id) as tx:
            open_sessions = list(tx.open_sessions())
            if not open_sessions:
                raise InvalidStateTransition(f"No open {self.label}")
            stopped = [self._close(tx, s, end_time, metadata) for s in open_sessions]

        logger.info("%s %s of worker %s stopped", self.label, stopped[-1].session_id, worker_id)
        return stopped[-1]

    def _close(self, tx, session: Any, end_time: datetime, metadata: Any) -> Any:
        if session.end_time is not None:
            raise InvalidStateTransition(f"{self.label.capitalize()} is already closed")
        if end_time < session.start_time:
            raise ValidationError("end_time must not be earlier than start_time")

        tx.close(session.session_id, end_time, metadata)
        if tx.state.open_session_id in (None, session.session_id):
            tx.set_open_session(None)
        return replace(session, end_time=end_time)

    def find_open(self, worker_id) -> Optional[Any]:
        return self._sessions.find_open(require_id(worker_id, "worker_id"))

    def state_of(self, worker_id) -> SessionState:
        return SessionState.OPEN_SESSION if self.find_open(worker_id) else SessionState.NO_SESSION

    def list_day(self, worker_id, civil_date: str) -> Sequence[Any]:
        worker_id = require_id(worker_id, "worker_id")
        window = resolve_day_window(civil_date, self._utc_offset)
        return self._sessions.list_between(worker_id=worker_id, start=window.start, end=window.end)
