from __future__ import annotations

from datetime import date, time
from typing import Optional, Protocol, Sequence

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveRequest


class LeaveRepository(Protocol):
    def create(
        self,
        *,
        requester_id: int,
        agent_id: int,
        leave_type: LeaveType,
        reason: str,
        start_date: date,
        end_date: date,
        start_time: time,
        end_time: time,
        total_hours: int,
    ) -> int:
        raise NotImplementedError

    def get(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def transition(
        self,
        *,
        request_id: int,
        expected: LeaveStatus,
        new_status: LeaveStatus,
        decided_by: int,
    ) -> bool:
        """Compare-and-set the status inside one transaction.

        Returns False (and writes nothing) when the stored status is no longer ``expected``.
        """

        raise NotImplementedError

    def list_requests(
        self,
        *,
        requester_id: Optional[int] = None,
        agent_id: Optional[int] = None,
        status: Optional[LeaveStatus] = None,
        limit: int = 200,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError
