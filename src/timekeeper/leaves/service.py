from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, Sequence

from ..common.validators import require_id, require_non_empty
from ..core.constants import (
    DEFAULT_LIST_LIMIT,
    NOTIFY_TEMPLATE_LEAVE_PENDING_ADMIN,
    NOTIFY_TEMPLATE_LEAVE_REQUEST,
    NOTIFY_TEMPLATE_LEAVE_RESULT,
)
from ..core.enums import LeaveAction, LeaveStatus, LeaveType
from ..core.exceptions import InvalidStateTransition, NotFound, Unauthorized, ValidationError
from ..notifications.dispatcher import Notifier, subscriber_id_for
from ..users.model import Principal
from ..users.permissions import Action, Resource, require
from ..users.service import IdentityService
from .model import LeaveRequest, NewLeave
from .repository import LeaveRepository
from .state_machine import plan_transition

logger = logging.getLogger(__name__)

_MESSAGES = {
    LeaveAction.AGENT_REJECT: "Your agent rejected the leave request.",
    LeaveAction.ADMIN_APPROVE: "Your leave request was approved.",
    LeaveAction.ADMIN_REJECT: "Your leave request was rejected by an administrator.",
}


def total_leave_hours(new: NewLeave) -> int:
    """Whole hours between the start and end datetimes of the request."""
    start = datetime.combine(new.start_date, new.start_time)
    end = datetime.combine(new.end_date, new.end_time)
    if end <= start:
        return 0
    return int((end - start).total_seconds() // 3600)


class LeaveService:
    """Leave requests: creation, visibility and the two-stage approval flow."""

    def __init__(self, leaves: LeaveRepository, identity: IdentityService, notifier: Notifier):
        self._leaves = leaves
        self._identity = identity
        self._notifier = notifier

    def create_leave(self, principal: Principal, new: NewLeave) -> LeaveRequest:
        if principal is None:
            raise Unauthorized("Login required")
        agent_id = require_id(new.agent_id, "agentId")
        reason = require_non_empty(new.reason, "reason")
        try:
            leave_type = LeaveType(new.leave_type)
        except ValueError:
            raise ValidationError("Unknown leave type")

        if agent_id == principal.user_id:
            raise ValidationError("The agent must be another worker")
        if not self._identity.exists(agent_id):
            raise ValidationError("Agent does not exist")
        if new.end_date < new.start_date:
            raise ValidationError("endDate must not be earlier than startDate")
        if new.start_date.weekday() >= 5 or new.end_date.weekday() >= 5:
            raise ValidationError("Leave dates cannot fall on a weekend")

        hours = total_leave_hours(new)
        if hours <= 0:
            raise ValidationError("Leave must last at least one hour")

        request_id = self._leaves.create(
            requester_id=principal.user_id,
            agent_id=agent_id,
            leave_type=leave_type,
            reason=reason,
            start_date=new.start_date,
            end_date=new.end_date,
            start_time=new.start_time,
            end_time=new.end_time,
            total_hours=hours,
        )
        leave = self._leaves.get(request_id)
        if not leave:
            raise NotFound("Leave request not found")
        logger.info("leave %s created by %s (agent %s, %sh)", request_id, principal.user_id, agent_id, hours)

        self._dispatch(
            [agent_id],
            NOTIFY_TEMPLATE_LEAVE_REQUEST,
            {"title": "Leave agent request", "body": "You were asked to cover a leave request.", "url": "/leave"},
        )
        return leave

    def get_leave(self, principal: Principal, request_id) -> LeaveRequest:
        leave = self._leaves.get(require_id(request_id, "request_id"))
        if not leave:
            raise NotFound("Leave request not found")
        require(principal, Action.VIEW_LEAVE, Resource(owner_id=leave.requester_id, agent_id=leave.agent_id))
        return leave

    def list_mine(self, principal: Principal) -> Sequence[LeaveRequest]:
        return self._leaves.list_requests(requester_id=principal.user_id, limit=DEFAULT_LIST_LIMIT)

    def list_agent_pending(self, principal: Principal) -> Sequence[LeaveRequest]:
        return self._leaves.list_requests(
            agent_id=principal.user_id, status=LeaveStatus.PENDING_AGENT, limit=DEFAULT_LIST_LIMIT
        )

    def list_admin_pending(self, principal: Principal) -> Sequence[LeaveRequest]:
        require(principal, Action.ADMIN_DECIDE, Resource())
        return self._leaves.list_requests(status=LeaveStatus.PENDING_ADMIN, limit=DEFAULT_LIST_LIMIT)

    def transition(self, principal: Principal, request_id, action: LeaveAction) -> LeaveRequest:
        request_id = require_id(request_id, "request_id")
        leave = self._leaves.get(request_id)
        if not leave:
            raise NotFound("Leave request not found")

        step = plan_transition(principal, leave, action)
        ok = self._leaves.transition(
            request_id=request_id,
            expected=step.source,
            new_status=step.target,
            decided_by=principal.user_id,
        )
        if not ok:
            raise InvalidStateTransition("Leave request was already processed")

        updated = self._leaves.get(request_id)
        if not updated:
            raise NotFound("Leave request not found")
        logger.info(
            "leave %s: %s -> %s by %s", request_id, step.source.value, step.target.value, principal.user_id
        )
        self._notify_transition(updated, action)
        return updated

    def agent_decide(self, principal: Principal, request_id, *, approve: bool) -> LeaveRequest:
        action = LeaveAction.AGENT_CONFIRM if approve else LeaveAction.AGENT_REJECT
        return self.transition(principal, request_id, action)

    def admin_decide(self, principal: Principal, request_id, *, approve: bool) -> LeaveRequest:
        action = LeaveAction.ADMIN_APPROVE if approve else LeaveAction.ADMIN_REJECT
        return self.transition(principal, request_id, action)

    def _notify_transition(self, leave: LeaveRequest, action: LeaveAction) -> None:
        if action == LeaveAction.AGENT_CONFIRM:
            try:
                admin_ids = list(self._identity.admin_ids())
            except Exception:
                logger.exception("could not load administrators to notify for leave %s", leave.request_id)
                return
            self._dispatch(
                admin_ids,
                NOTIFY_TEMPLATE_LEAVE_PENDING_ADMIN,
                {
                    "title": "Leave request awaiting approval",
                    "body": f"Leave request {leave.request_id} was confirmed by the agent and awaits your approval.",
                    "url": "/leave",
                },
            )
            return

        self._dispatch(
            [leave.requester_id],
            NOTIFY_TEMPLATE_LEAVE_RESULT,
            {"title": "Leave request update", "body": _MESSAGES[action], "url": "/leave"},
        )

    def _dispatch(self, user_ids: Iterable[int], template_id: str, payload: dict) -> None:
        """Best-effort delivery: failures are logged, never raised."""
        for uid in user_ids:
            try:
                self._notifier.notify(subscriber_id_for(uid), template_id, payload)
            except Exception:
                logger.exception("notification %s to user %s failed", template_id, uid)
