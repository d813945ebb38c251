from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..core.enums import LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveRequest:
    """Domain entity: a leave request, mutated only through state-machine transitions."""

    request_id: int
    requester_id: int
    agent_id: int
    leave_type: LeaveType
    status: LeaveStatus
    reason: str
    start_date: date
    end_date: date
    start_time: time
    end_time: time
    total_hours: int
    created_at: datetime
    updated_at: datetime
    decided_by: Optional[int] = None

    @property
    def agent_approved(self) -> bool:
        return self.status in {LeaveStatus.PENDING_ADMIN, LeaveStatus.ADMIN_REJECTED, LeaveStatus.APPROVED}


@dataclass(frozen=True)
class NewLeave:
    agent_id: int
    leave_type: LeaveType
    reason: str
    start_date: date
    end_date: date
    start_time: time
    end_time: time
