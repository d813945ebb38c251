from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    WORKER = "WORKER"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"

    @property
    def is_admin(self) -> bool:
        return self in {Role.ADMIN, Role.SUPER_ADMIN}


class ClockKind(str, Enum):
    IN = "IN"
    OUT = "OUT"


class SessionState(str, Enum):
    """Per-worker state of one session tracker."""

    NO_SESSION = "NO_SESSION"
    OPEN_SESSION = "OPEN_SESSION"


class OvertimeStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class LeaveStatus(str, Enum):
    """Status of a leave request along the two-stage approval flow."""

    PENDING_AGENT = "PENDING_AGENT"
    AGENT_REJECTED = "AGENT_REJECTED"
    PENDING_ADMIN = "PENDING_ADMIN"
    ADMIN_REJECTED = "ADMIN_REJECTED"
    APPROVED = "APPROVED"

    @property
    def is_terminal(self) -> bool:
        return self in {LeaveStatus.AGENT_REJECTED, LeaveStatus.ADMIN_REJECTED, LeaveStatus.APPROVED}


class LeaveAction(str, Enum):
    AGENT_CONFIRM = "AGENT_CONFIRM"
    AGENT_REJECT = "AGENT_REJECT"
    ADMIN_APPROVE = "ADMIN_APPROVE"
    ADMIN_REJECT = "ADMIN_REJECT"


class LeaveType(str, Enum):
    PERSONAL = "PERSONAL"
    SICK = "SICK"
    ANNUAL = "ANNUAL"
    OFFICIAL = "OFFICIAL"
    FUNERAL = "FUNERAL"
    MARRIAGE = "MARRIAGE"
    MATERNITY = "MATERNITY"
    PATERNITY = "PATERNITY"
    OTHER = "OTHER"


class ConflictAction(str, Enum):
    """How an overlapping work session is adjusted when a finished one is recorded."""

    CLOSE = "CLOSE"
    SPLIT = "SPLIT"
    TRIM_END = "TRIM_END"
    TRIM_START = "TRIM_START"
    DELETE = "DELETE"
