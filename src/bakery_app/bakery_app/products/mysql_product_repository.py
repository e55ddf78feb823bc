from __future__ import annotations

from dataclasses import replace
from typing import Optional, Sequence

from mysql.connector import errorcode
from mysql.connector.errors import IntegrityError

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Product
from .repository import DuplicateProductNameError, ProductRepository


def _to_product(row: dict) -> Product:
    return Product(id=int(row["id"]), name=row["name"], price=int(row["price"]))


class MySQLProductRepository(ProductRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, entity_id: int) -> Optional[Product]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, price FROM products WHERE id=%s", (int(entity_id),))
            row = fetchone(cur)
            return _to_product(row) if row else None

    def save(self, entity: Product) -> Product:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                if entity.id is None:
                    cur.execute("INSERT INTO products(name, price) VALUES(%s,%s)", (entity.name, int(entity.price)))
                    return replace(entity, id=int(cur.lastrowid))

                cur.execute(
                    "UPDATE products SET name=%s, price=%s WHERE id=%s",
                    (entity.name, int(entity.price), int(entity.id)),
                )
                return entity
        except IntegrityError as e:
            if e.errno == errorcode.ER_DUP_ENTRY:
                raise DuplicateProductNameError(entity.name) from e
            raise

    def delete_by_id(self, entity_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM products WHERE id=%s", (int(entity_id),))
            return cur.rowcount > 0

    def count(self) -> int:
        return self.count_matching(pattern=None)

    def find_page(self, *, pattern: Optional[str], offset: int, limit: int) -> Sequence[Product]:
        where, params = self._where(pattern)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT id, name, price FROM products {where} ORDER BY name, id LIMIT %s OFFSET %s",
                (*params, int(limit), int(offset)),
            )
            return [_to_product(r) for r in fetchall(cur)]

    def count_matching(self, *, pattern: Optional[str]) -> int:
        where, params = self._where(pattern)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM products {where}", params)
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    @staticmethod
    def _where(pattern: Optional[str]) -> tuple[str, tuple]:
        if pattern is None:
            return "", ()
        return "WHERE LOWER(name) LIKE LOWER(%s)", (pattern,)
