from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Dict, List, Sequence, Tuple

from ..clock.repository import ClockRepository
from ..common.datetime_utils import require_aware, resolve_day_window, window_containing
from ..common.validators import require_id, require_non_empty
from ..core.constants import DEFAULT_UTC_OFFSET, MERGE_GAP_MINUTES
from ..core.enums import ConflictAction
from ..core.exceptions import NotFound, ValidationError
from ..sessions.tracker import SessionTracker
from ..users.model import Principal
from ..users.permissions import Action, Resource, require
from .model import (
    CompletedEntry,
    ConflictResolution,
    DeletePreview,
    MergeResult,
    WorkDescriptor,
    WorkSession,
    WorkSessionDraft,
)
from .repository import WorkSessionRepository

logger = logging.getLogger(__name__)


def _merge_key(s: WorkSession) -> Tuple[str, str, str]:
    return (s.project_code, s.category, s.content.strip())


def plan_merges(sessions: Sequence[WorkSession], *, gap_minutes: int = MERGE_GAP_MINUTES) -> List[List[WorkSession]]:
    """Group closed same-task sessions that overlap or touch within ``gap_minutes``.

    A candidate is not joined when another session lies strictly between the
    group's last session and the candidate.
    """
    max_gap = timedelta(minutes=gap_minutes)
    groups: Dict[Tuple[str, str, str], List[WorkSession]] = defaultdict(list)
    for s in sessions:
        if s.end_time is not None:
            groups[_merge_key(s)].append(s)

    plans: List[List[WorkSession]] = []
    for logs in groups.values():
        if len(logs) < 2:
            continue
        logs = sorted(logs, key=lambda s: (s.start_time, s.session_id))

        current = [logs[0]]
        for candidate in logs[1:]:
            last = current[-1]
            # overlapping sessions give a negative gap
            if candidate.start_time - last.end_time <= max_gap:
                member_ids = {s.session_id for s in current} | {candidate.session_id}
                in_between = [
                    s
                    for s in sessions
                    if s.session_id not in member_ids
                    and s.end_time is not None
                    and s.start_time > last.start_time
                    and s.end_time < candidate.end_time
                ]
                if not in_between:
                    current.append(candidate)
                    continue
            if len(current) > 1:
                plans.append(current)
            current = [candidate]

        if len(current) > 1:
            plans.append(current)

    return plans


def plan_conflicts(
    sessions: Sequence[WorkSession], *, start: datetime, end: datetime
) -> List[ConflictResolution]:
    """Decide how each session overlapping ``[start, end)`` makes room for a finished entry.

    Open sessions are closed at ``start``; a closed session covering the range is
    split around it, one sticking out on a single side is trimmed to ``start`` or
    ``end``, and one lying inside the range is deleted. Touching sessions are left alone.
    """
    plan: List[ConflictResolution] = []
    for s in sessions:
        if s.end_time is None:
            if s.start_time >= end:
                continue
            if s.start_time > start:
                raise ValidationError("An open work session starts inside the recorded range")
            plan.append(ConflictResolution(session=s, action=ConflictAction.CLOSE))
            continue

        overlaps = (
            start <= s.start_time < end
            or start < s.end_time <= end
            or (s.start_time <= start and s.end_time >= end)
        )
        if not overlaps:
            continue
        if s.start_time < start and s.end_time > end:
            action = ConflictAction.SPLIT
        elif s.start_time < start:
            action = ConflictAction.TRIM_END
        elif s.end_time > end:
            action = ConflictAction.TRIM_START
        else:
            action = ConflictAction.DELETE
        plan.append(ConflictResolution(session=s, action=action))
    return plan


class WorkSessionTracker(SessionTracker):
    """Work-log sessions: at most one open per worker, auto-closed on a new start."""

    label = "work session"

    def __init__(
        self,
        sessions: WorkSessionRepository,
        clock: ClockRepository,
        *,
        utc_offset: str = DEFAULT_UTC_OFFSET,
    ):
        super().__init__(sessions, utc_offset=utc_offset)
        self._work = sessions
        self._clock = clock

    def _build_draft(self, worker_id: int, descriptor: WorkDescriptor, start_time: datetime) -> WorkSessionDraft:
        if not isinstance(descriptor, WorkDescriptor):
            raise ValidationError("Work descriptor is required")
        return WorkSessionDraft(
            worker_id=worker_id,
            project_code=require_non_empty(descriptor.project_code, "projectCode"),
            project_name=require_non_empty(descriptor.project_name, "projectName"),
            category=require_non_empty(descriptor.category, "category"),
            content=require_non_empty(descriptor.content, "content"),
            start_time=start_time,
            is_overtime=bool(descriptor.is_overtime),
        )

    def _get_owned(self, principal: Principal, session_id) -> WorkSession:
        session = self._work.get(require_id(session_id, "session_id"))
        if not session:
            raise NotFound("Work session not found")
        require(principal, Action.MANAGE_SESSION, Resource(owner_id=session.worker_id))
        return session

    def preview_delete(self, principal: Principal, session_id) -> DeletePreview:
        """How many clock events a delete of this session would remove."""
        session = self._get_owned(principal, session_id)
        window = window_containing(session.start_time, self._utc_offset)
        count = self._clock.count_between(worker_id=session.worker_id, start=window.start, end=window.end)
        return DeletePreview(session=session, clock_event_count=count)

    def delete_session(self, principal: Principal, session_id) -> int:
        """Delete a work session and the worker's clock events of the same civil day.

        Returns the number of clock events removed.
        """
        session = self._get_owned(principal, session_id)
        window = window_containing(session.start_time, self._utc_offset)

        with self._work.transaction(session.worker_id) as tx:
            if not tx.get(session.session_id):
                raise NotFound("Work session not found")
            removed = tx.delete_clock_events_between(window.start, window.end)
            tx.delete(session.session_id)
            if tx.state.open_session_id == session.session_id:
                tx.set_open_session(None)

        logger.warning(
            "work session %s of worker %s deleted with %s clock events of %s",
            session.session_id,
            session.worker_id,
            removed,
            window.civil_date,
        )
        return removed

    def record_completed(
        self,
        principal: Principal,
        worker_id,
        descriptor: WorkDescriptor,
        start_time: datetime,
        end_time: datetime,
    ) -> CompletedEntry:
        """Record a finished session and make room for it among the same day's sessions."""
        worker_id = require_id(worker_id, "worker_id")
        require(principal, Action.MANAGE_SESSION, Resource(owner_id=worker_id))
        start_time = require_aware(start_time, "start_time")
        end_time = require_aware(end_time, "end_time")
        if end_time <= start_time:
            raise ValidationError("end_time must be later than start_time")
        draft = replace(self._build_draft(worker_id, descriptor, start_time), end_time=end_time)
        window = window_containing(start_time, self._utc_offset)

        with self._work.transaction(worker_id) as tx:
            plan = plan_conflicts(tx.sessions_between(window.start, window.end), start=start_time, end=end_time)
            for step in plan:
                s = step.session
                if step.action == ConflictAction.CLOSE:
                    tx.close(s.session_id, start_time)
                    if tx.state.open_session_id == s.session_id:
                        tx.set_open_session(None)
                elif step.action == ConflictAction.TRIM_END:
                    tx.set_interval(s.session_id, s.start_time, start_time)
                elif step.action == ConflictAction.TRIM_START:
                    tx.set_interval(s.session_id, end_time, s.end_time)
                elif step.action == ConflictAction.SPLIT:
                    tx.set_interval(s.session_id, s.start_time, start_time)
                    tx.insert(
                        WorkSessionDraft(
                            worker_id=worker_id,
                            project_code=s.project_code,
                            project_name=s.project_name,
                            category=s.category,
                            content=s.content,
                            start_time=end_time,
                            end_time=s.end_time,
                            is_overtime=s.is_overtime,
                        )
                    )
                else:
                    tx.delete(s.session_id)
            created = tx.insert(draft)

        for step in plan:
            logger.info(
                "work session %s of worker %s: %s to fit %s",
                step.session.session_id,
                worker_id,
                step.action.value.lower(),
                created.session_id,
            )
        logger.info("completed work session %s recorded for worker %s", created.session_id, worker_id)
        return CompletedEntry(created=created, resolved=tuple(plan))

    def preview_merges(self, principal: Principal, worker_id, civil_date: str) -> List[List[WorkSession]]:
        """Dry run of ``merge_adjacent``: the groups it would merge, nothing written."""
        worker_id = require_id(worker_id, "worker_id")
        require(principal, Action.MANAGE_SESSION, Resource(owner_id=worker_id))
        window = resolve_day_window(civil_date, self._utc_offset)
        day = self._work.list_between(worker_id=worker_id, start=window.start, end=window.end)
        return plan_merges([s for s in day if s.end_time is not None])

    def merge_adjacent(self, principal: Principal, worker_id, civil_date: str) -> List[MergeResult]:
        worker_id = require_id(worker_id, "worker_id")
        require(principal, Action.MANAGE_SESSION, Resource(owner_id=worker_id))
        window = resolve_day_window(civil_date, self._utc_offset)

        results: List[MergeResult] = []
        with self._work.transaction(worker_id) as tx:
            day = list(tx.closed_between(window.start, window.end))
            for group in plan_merges(day):
                first = group[0]
                merged = tx.insert(
                    WorkSessionDraft(
                        worker_id=worker_id,
                        project_code=first.project_code,
                        project_name=first.project_name,
                        category=first.category,
                        content=first.content,
                        start_time=first.start_time,
                        end_time=max(s.end_time for s in group),
                        is_overtime=first.is_overtime,
                    )
                )
                for s in group:
                    tx.delete(s.session_id)
                results.append(MergeResult(merged=merged, original_count=len(group)))

        if results:
            logger.info(
                "merged %s work session groups for worker %s on %s", len(results), worker_id, window.civil_date
            )
        return results
