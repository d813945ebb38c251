from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Plain data object; no DB access code here.
    """

    user_id: int
    full_name: str
    email: str
    role: Role
    is_active: bool = True


@dataclass(frozen=True)
class Principal:
    """The verified user acting on a request."""

    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role.is_admin

    def is_user(self, user_id: int) -> bool:
        return int(self.user_id) == int(user_id)
