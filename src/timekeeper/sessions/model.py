from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, Sequence, TypeVar

S = TypeVar("S")


@dataclass(frozen=True)
class WorkerSessionState:
    """Explicit per-worker record of the open session for one tracker.

    Locked and rewritten inside every start/stop transaction, so the
    at-most-one-open rule is enforced by the lock and not by re-scanning history.
    """

    worker_id: int
    tracker: str
    open_session_id: Optional[int] = None


@dataclass(frozen=True)
class SessionStart(Generic[S]):
    started: S
    auto_closed: Sequence[S] = ()
