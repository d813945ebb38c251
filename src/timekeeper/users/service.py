from __future__ import annotations

from typing import Sequence

from ..common.validators import require_id
from ..core.enums import Role
from ..core.exceptions import Unauthorized
from .model import Principal
from .repository import UserRepository


class IdentityService:
    """Use case: turn a session user id into a verified Principal."""

    def __init__(self, users: UserRepository):
        self._users = users

    def resolve(self, user_id) -> Principal:
        if user_id is None:
            raise Unauthorized("Login required")
        user = self._users.get_by_id(require_id(user_id, "user_id"))
        if not user or not user.is_active:
            raise Unauthorized("Login required")
        return Principal(user_id=user.user_id, role=user.role)

    def exists(self, user_id: int) -> bool:
        user = self._users.get_by_id(int(user_id))
        return bool(user and user.is_active)

    def admin_ids(self) -> Sequence[int]:
        return self._users.list_ids_by_role(Role.ADMIN)
