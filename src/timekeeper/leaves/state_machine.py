"""Two-stage leave approval as an explicit transition table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Tuple

from ..core.enums import LeaveAction, LeaveStatus
from ..core.exceptions import InvalidStateTransition
from ..users.model import Principal
from ..users.permissions import Action, Resource, require
from .model import LeaveRequest


@dataclass(frozen=True)
class Transition:
    source: LeaveStatus
    action: LeaveAction
    target: LeaveStatus
    capability: Action


TRANSITIONS: Dict[Tuple[LeaveStatus, LeaveAction], Transition] = {
    (t.source, t.action): t
    for t in (
        Transition(LeaveStatus.PENDING_AGENT, LeaveAction.AGENT_CONFIRM, LeaveStatus.PENDING_ADMIN, Action.AGENT_DECIDE),
        Transition(LeaveStatus.PENDING_AGENT, LeaveAction.AGENT_REJECT, LeaveStatus.AGENT_REJECTED, Action.AGENT_DECIDE),
        Transition(LeaveStatus.PENDING_ADMIN, LeaveAction.ADMIN_APPROVE, LeaveStatus.APPROVED, Action.ADMIN_DECIDE),
        Transition(LeaveStatus.PENDING_ADMIN, LeaveAction.ADMIN_REJECT, LeaveStatus.ADMIN_REJECTED, Action.ADMIN_DECIDE),
    )
}

# Capability per action, independent of the current state.
ACTION_CAPABILITY: Dict[LeaveAction, Action] = {t.action: t.capability for t in TRANSITIONS.values()}


def reachable_from(status: LeaveStatus) -> FrozenSet[LeaveStatus]:
    return frozenset(t.target for t in TRANSITIONS.values() if t.source == status)


def next_status(status: LeaveStatus, action: LeaveAction) -> LeaveStatus:
    t = TRANSITIONS.get((status, action))
    if t is None:
        raise InvalidStateTransition(f"Cannot {action.value.lower()} a request in {status.value}")
    return t.target


def plan_transition(principal: Principal, leave: LeaveRequest, action: LeaveAction) -> Transition:
    """Authorize the principal for ``action``, then look up the row for the current state.

    Raises Forbidden before InvalidStateTransition; neither mutates anything.
    """
    require(principal, ACTION_CAPABILITY[action], Resource(owner_id=leave.requester_id, agent_id=leave.agent_id))
    next_status(leave.status, action)
    return TRANSITIONS[(leave.status, action)]
