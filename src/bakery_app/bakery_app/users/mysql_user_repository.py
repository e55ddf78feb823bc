from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UserRepository

_COLUMNS = "id, email, first_name, last_name, password_hash, role, locked"

_MATCH_CLAUSE = """
    LOWER(email) LIKE LOWER(%s)
    OR LOWER(first_name) LIKE LOWER(%s)
    OR LOWER(last_name) LIKE LOWER(%s)
    OR LOWER(role) LIKE LOWER(%s)
"""


def _to_user(row: dict) -> User:
    return User(
        id=int(row["id"]),
        email=row["email"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        locked=bool(row.get("locked", False)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, entity_id: int) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE id=%s", (int(entity_id),))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users WHERE LOWER(email)=LOWER(%s)", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def save(self, entity: User) -> User:
        with db_cursor(self._conn_factory) as (_, cur):
            if entity.id is None:
                cur.execute(
                    """
                    INSERT INTO users(email, first_name, last_name, password_hash, role, locked)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        entity.email,
                        entity.first_name,
                        entity.last_name,
                        entity.password_hash,
                        entity.role.value,
                        int(entity.locked),
                    ),
                )
                return replace(entity, id=int(cur.lastrowid))

            cur.execute(
                """
                UPDATE users
                SET email=%s, first_name=%s, last_name=%s, password_hash=%s, role=%s, locked=%s
                WHERE id=%s
                """,
                (
                    entity.email,
                    entity.first_name,
                    entity.last_name,
                    entity.password_hash,
                    entity.role.value,
                    int(entity.locked),
                    int(entity.id),
                ),
            )
            return entity

    def delete_by_id(self, entity_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM users WHERE id=%s", (int(entity_id),))
            return cur.rowcount > 0

    def count(self) -> int:
        return self.count_matching(pattern=None)

    def find_page(self, *, pattern: Optional[str], offset: int, limit: int) -> Sequence[User]:
        where, params = self._where(pattern)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM users {where} ORDER BY id LIMIT %s OFFSET %s",
                (*params, int(limit), int(offset)),
            )
            return [_to_user(r) for r in fetchall(cur)]

    def count_matching(self, *, pattern: Optional[str]) -> int:
        where, params = self._where(pattern)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM users {where}", params)
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    @staticmethod
    def _where(pattern: Optional[str]) -> tuple[str, tuple]:
        if pattern is None:
            return "", ()
        return f"WHERE {_MATCH_CLAUSE}", (pattern, pattern, pattern, pattern)
