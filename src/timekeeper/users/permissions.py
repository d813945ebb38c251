"""Capability checks.

Every guarded operation asks ``authorize(principal, action, resource)``;
nothing else inspects roles directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..core.exceptions import Forbidden
from .model import Principal


class Action(str, Enum):
    RECORD_CLOCK = "RECORD_CLOCK"
    VIEW_ATTENDANCE = "VIEW_ATTENDANCE"
    EDIT_CLOCK = "EDIT_CLOCK"
    MANAGE_SESSION = "MANAGE_SESSION"
    VIEW_LEAVE = "VIEW_LEAVE"
    AGENT_DECIDE = "AGENT_DECIDE"
    ADMIN_DECIDE = "ADMIN_DECIDE"


@dataclass(frozen=True)
class Resource:
    owner_id: Optional[int] = None
    agent_id: Optional[int] = None


def authorize(principal: Optional[Principal], action: Action, resource: Resource) -> bool:
    if principal is None:
        return False

    if action in {Action.RECORD_CLOCK, Action.VIEW_ATTENDANCE, Action.MANAGE_SESSION}:
        return principal.is_admin or (resource.owner_id is not None and principal.is_user(resource.owner_id))

    if action == Action.EDIT_CLOCK:
        return principal.is_admin

    if action == Action.VIEW_LEAVE:
        if principal.is_admin:
            return True
        return any(
            uid is not None and principal.is_user(uid) for uid in (resource.owner_id, resource.agent_id)
        )

    if action == Action.AGENT_DECIDE:
        return resource.agent_id is not None and principal.is_user(resource.agent_id)

    if action == Action.ADMIN_DECIDE:
        return principal.is_admin

    return False


def require(principal: Optional[Principal], action: Action, resource: Resource) -> None:
    if not authorize(principal, action, resource):
        raise Forbidden(f"Not allowed: {action.value.lower()}")
