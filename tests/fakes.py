from __future__ import annotations

import threading
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Optional

from timekeeper.clock.model import ClockEvent, ClockMetadata
from timekeeper.core.enums import ClockKind, LeaveStatus, Role
from timekeeper.holidays.model import Holiday
from timekeeper.leaves.model import LeaveRequest
from timekeeper.overtime.model import OvertimeDraft, OvertimeSession
from timekeeper.sessions.model import WorkerSessionState
from timekeeper.users.model import Principal, User
from timekeeper.worklogs.model import WorkSession, WorkSessionDraft


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def worker(user_id: int) -> Principal:
    return Principal(user_id=user_id, role=Role.WORKER)


def admin(user_id: int = 99) -> Principal:
    return Principal(user_id=user_id, role=Role.ADMIN)


class InMemoryUsers:
    def __init__(self, *users: User):
        self.users_by_id: dict[int, User] = {u.user_id: u for u in users}
        self.fail_role_lookup = False

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users_by_id.get(int(user_id))

    def list_ids_by_role(self, role: Role):
        if self.fail_role_lookup:
            raise RuntimeError("user directory unavailable")
        return [u.user_id for u in self.users_by_id.values() if u.role == role and u.is_active]


class InMemoryClock:
    def __init__(self):
        self.events: dict[int, ClockEvent] = {}
        self._id = 0
        self._lock = threading.Lock()

    def create(self, *, worker_id, kind, timestamp, metadata) -> int:
        with self._lock:
            self._id += 1
            self.events[self._id] = ClockEvent(
                event_id=self._id, worker_id=worker_id, kind=ClockKind(kind), timestamp=timestamp, metadata=metadata
            )
            return self._id

    def add(self, worker_id: int, kind: ClockKind, timestamp: datetime) -> ClockEvent:
        event_id = self.create(worker_id=worker_id, kind=kind, timestamp=timestamp, metadata=ClockMetadata())
        return self.events[event_id]

    def get(self, event_id: int) -> Optional[ClockEvent]:
        return self.events.get(int(event_id))

    def list_between(self, *, worker_id, start, end):
        items = [e for e in self.events.values() if e.worker_id == worker_id and start <= e.timestamp < end]
        return sorted(items, key=lambda e: (e.timestamp, e.event_id))

    def count_between(self, *, worker_id, start, end) -> int:
        return len(self.list_between(worker_id=worker_id, start=start, end=end))

    def correct_timestamp(self, *, event_id, timestamp, reason, edited_by, edited_at) -> bool:
        e = self.events.get(int(event_id))
        if not e:
            return False
        self.events[e.event_id] = replace(
            e,
            timestamp=timestamp,
            is_edited=True,
            original_timestamp=e.original_timestamp if e.is_edited else e.timestamp,
            edit_reason=reason,
            edited_by=edited_by,
            edited_at=edited_at,
        )
        return True

    def delete(self, event_id: int) -> bool:
        return self.events.pop(int(event_id), None) is not None


class InMemorySessionTransaction:
    def __init__(self, repo: "InMemorySessions", worker_id: int):
        self._repo = repo
        self.worker_id = worker_id
        self.state = WorkerSessionState(
            worker_id=worker_id, tracker=repo.tracker, open_session_id=repo.open_ids.get(worker_id)
        )

    def open_sessions(self):
        items = [s for s in self._repo.rows.values() if s.worker_id == self.worker_id and s.end_time is None]
        return sorted(items, key=lambda s: (s.start_time, s.session_id))

    def get(self, session_id: int):
        s = self._repo.rows.get(int(session_id))
        return s if s and s.worker_id == self.worker_id else None

    def close(self, session_id: int, end_time: datetime, metadata=None) -> None:
        s = self._repo.rows[int(session_id)]
        if s.end_time is None:
            self._repo.rows[s.session_id] = self._repo.closed(s, end_time, metadata)

    def insert(self, draft):
        self._repo.next_id += 1
        created = self._repo.from_draft(self._repo.next_id, draft)
        self._repo.rows[created.session_id] = created
        return created

    def delete(self, session_id: int) -> None:
        self._repo.rows.pop(int(session_id), None)

    def set_open_session(self, session_id: Optional[int]) -> None:
        self._repo.open_ids[self.worker_id] = session_id
        self.state = WorkerSessionState(worker_id=self.worker_id, tracker=self._repo.tracker, open_session_id=session_id)


class InMemorySessions:
    """Session store with a lock per worker; a failing transaction restores the snapshot."""

    tracker = ""
    transaction_class = InMemorySessionTransaction

    def __init__(self):
        self.rows: dict = {}
        self.open_ids: dict[int, Optional[int]] = {}
        self.next_id = 0
        self._locks: dict[int, threading.Lock] = defaultdict(threading.Lock)
        self._guard = threading.Lock()

    def _lock_for(self, worker_id: int) -> threading.Lock:
        with self._guard:
            return self._locks[worker_id]

    def from_draft(self, session_id: int, draft):
        raise NotImplementedError

    def closed(self, session, end_time, metadata):
        return replace(session, end_time=end_time)

    def snapshot(self):
        return dict(self.rows), dict(self.open_ids), self.next_id

    def restore(self, snap) -> None:
        self.rows, self.open_ids, self.next_id = dict(snap[0]), dict(snap[1]), snap[2]

    @contextmanager
    def transaction(self, worker_id: int):
        with self._lock_for(int(worker_id)):
            snap = self.snapshot()
            try:
                yield self.transaction_class(self, int(worker_id))
            except Exception:
                self.restore(snap)
                raise

    def get(self, session_id: int):
        return self.rows.get(int(session_id))

    def find_open(self, worker_id: int):
        items = [s for s in self.rows.values() if s.worker_id == worker_id and s.end_time is None]
        return max(items, key=lambda s: s.start_time) if items else None

    def list_between(self, *, worker_id, start, end):
        items = [s for s in self.rows.values() if s.worker_id == worker_id and start <= s.start_time < end]
        return sorted(items, key=lambda s: (s.start_time, s.session_id))

    def open_count(self, worker_id: int) -> int:
        return sum(1 for s in self.rows.values() if s.worker_id == worker_id and s.end_time is None)


class InMemoryWorkTransaction(InMemorySessionTransaction):
    def closed_between(self, start, end):
        return [s for s in self._repo.list_between(worker_id=self.worker_id, start=start, end=end) if s.end_time]

    def sessions_between(self, start, end):
        return self._repo.list_between(worker_id=self.worker_id, start=start, end=end)

    def set_interval(self, session_id, start_time, end_time) -> None:
        s = self._repo.rows[int(session_id)]
        self._repo.rows[s.session_id] = replace(s, start_time=start_time, end_time=end_time)

    def delete_clock_events_between(self, start, end) -> int:
        clock = self._repo.clock
        doomed = [e.event_id for e in clock.list_between(worker_id=self.worker_id, start=start, end=end)]
        for event_id in doomed:
            clock.delete(event_id)
        return len(doomed)


class InMemoryWorkSessions(InMemorySessions):
    tracker = "WORK"
    transaction_class = InMemoryWorkTransaction

    def __init__(self, clock: InMemoryClock):
        super().__init__()
        self.clock = clock

    def from_draft(self, session_id: int, draft: WorkSessionDraft) -> WorkSession:
        return WorkSession(
            session_id=session_id,
            worker_id=draft.worker_id,
            project_code=draft.project_code,
            project_name=draft.project_name,
            category=draft.category,
            content=draft.content,
            start_time=draft.start_time,
            end_time=draft.end_time,
            is_overtime=draft.is_overtime,
        )

    def snapshot(self):
        return super().snapshot() + (dict(self.clock.events),)

    def restore(self, snap) -> None:
        super().restore(snap)
        self.clock.events = dict(snap[3])

    def seed(self, worker_id: int, project_code: str, start: datetime, end: Optional[datetime], *,
             category: str = "DEV", content: str = "coding") -> WorkSession:
        self.next_id += 1
        s = WorkSession(
            session_id=self.next_id,
            worker_id=worker_id,
            project_code=project_code,
            project_name=project_code.title(),
            category=category,
            content=content,
            start_time=start,
            end_time=end,
        )
        self.rows[s.session_id] = s
        if end is None:
            self.open_ids[worker_id] = s.session_id
        return s


class InMemoryOvertime(InMemorySessions):
    tracker = "OVERTIME"

    def from_draft(self, session_id: int, draft: OvertimeDraft) -> OvertimeSession:
        return OvertimeSession(
            session_id=session_id,
            worker_id=draft.worker_id,
            start_time=draft.start_time,
            reason=draft.reason,
            status=draft.status,
            start_metadata=draft.start_metadata,
        )

    def closed(self, session, end_time, metadata):
        return replace(session, end_time=end_time, end_metadata=metadata)


class InMemoryLeaves:
    def __init__(self):
        self.rows: dict[int, LeaveRequest] = {}
        self._id = 0
        self._lock = threading.Lock()

    def create(self, *, requester_id, agent_id, leave_type, reason, start_date, end_date, start_time, end_time,
               total_hours) -> int:
        self._id += 1
        now = utc(2024, 3, 1, 9, 0)
        self.rows[self._id] = LeaveRequest(
            request_id=self._id,
            requester_id=requester_id,
            agent_id=agent_id,
            leave_type=leave_type,
            status=LeaveStatus.PENDING_AGENT,
            reason=reason,
            start_date=start_date,
            end_date=end_date,
            start_time=start_time,
            end_time=end_time,
            total_hours=total_hours,
            created_at=now,
            updated_at=now,
        )
        return self._id

    def get(self, request_id: int) -> Optional[LeaveRequest]:
        return self.rows.get(int(request_id))

    def transition(self, *, request_id, expected, new_status, decided_by) -> bool:
        with self._lock:
            row = self.rows.get(int(request_id))
            if not row or row.status != expected:
                return False
            self.rows[row.request_id] = replace(row, status=new_status, decided_by=decided_by)
            return True

    def list_requests(self, *, requester_id=None, agent_id=None, status=None, limit=200):
        items = [
            r
            for r in self.rows.values()
            if (requester_id is None or r.requester_id == requester_id)
            and (agent_id is None or r.agent_id == agent_id)
            and (status is None or r.status == status)
        ]
        items.sort(key=lambda r: r.request_id, reverse=True)
        return items[:limit]


class InMemoryHolidays:
    def __init__(self, *holidays: Holiday):
        self.by_date: dict[date, Holiday] = {h.date: h for h in holidays}

    def get(self, day: date) -> Optional[Holiday]:
        return self.by_date.get(day)


class RecordingNotifier:
    def __init__(self):
        self.sent: list[tuple[str, str, dict]] = []

    def notify(self, subscriber_id, template_id, payload) -> None:
        self.sent.append((subscriber_id, template_id, payload))


class FailingNotifier:
    def __init__(self):
        self.attempts = 0

    def notify(self, subscriber_id, template_id, payload) -> None:
        self.attempts += 1
        raise ConnectionError("notification service unreachable")
