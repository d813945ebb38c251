from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, full_name, email, role, is_active
                FROM users
                WHERE user_id=%s
                """,
                (int(user_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return User(
                user_id=int(r["user_id"]),
                full_name=r["full_name"],
                email=r["email"],
                role=Role(r["role"]),
                is_active=bool(r["is_active"]),
            )

    def list_ids_by_role(self, role: Role) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id FROM users WHERE role=%s AND is_active=1 ORDER BY user_id",
                (role.value,),
            )
            return [int(r["user_id"]) for r in fetchall(cur)]
