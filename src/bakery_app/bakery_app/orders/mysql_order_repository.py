from __future__ import annotations

from datetime import date
from typing import Collection, Optional, Sequence

from ..core.enums import OrderState
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time, placeholders
from ..products.model import Product
from .model import Customer, HistoryItem, Order, OrderItem, OrderSummary, PickupLocation
from .repository import OrderRepository, PickupLocationRepository

_BRIEF_SELECT = """
    SELECT o.id, o.due_date, o.due_time, o.state, o.customer_full_name,
           o.customer_phone, o.customer_details,
           pl.id AS pickup_location_id, pl.name AS pickup_location_name
    FROM orders o
    JOIN pickup_locations pl ON pl.id = o.pickup_location_id
"""

_ORDER_BY = "ORDER BY o.due_date ASC, o.due_time ASC, o.id ASC"


def _to_item(r: dict) -> OrderItem:
    return OrderItem(
        product=Product(id=int(r["product_id"]), name=r["product_name"], price=int(r["product_price"])),
        quantity=int(r["quantity"]),
        comment=r.get("comment"),
        price=int(r["price"]),
    )


class MySQLOrderRepository(OrderRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    # -- loading --------------------------------------------------------

    def _load_items(self, cur, order_ids: Sequence[int]) -> dict[int, list[OrderItem]]:
        out: dict[int, list[OrderItem]] = {int(i): [] for i in order_ids}
        if not order_ids:
            return out
        cur.execute(
            f"""
            SELECT oi.order_id, oi.quantity, oi.comment, oi.price,
                   p.id AS product_id, p.name AS product_name, p.price AS product_price
            FROM order_items oi
            JOIN products p ON p.id = oi.product_id
            WHERE oi.order_id IN ({placeholders(len(order_ids))})
            ORDER BY oi.order_id, oi.position
            """,
            tuple(int(i) for i in order_ids),
        )
        for r in fetchall(cur):
            out[int(r["order_id"])].append(_to_item(r))
        return out

    def _summaries(self, cur, rows: list[dict]) -> list[OrderSummary]:
        items = self._load_items(cur, [int(r["id"]) for r in rows])
        return [
            OrderSummary(
                id=int(r["id"]),
                due_date=r["due_date"],
                due_time=normalize_mysql_time(r["due_time"]),
                state=OrderState(r["state"]),
                customer_full_name=r["customer_full_name"],
                pickup_location_name=r["pickup_location_name"],
                items=tuple(items[int(r["id"])]),
            )
            for r in rows
        ]

    def get_by_id(self, entity_id: int) -> Optional[Order]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_BRIEF_SELECT} WHERE o.id=%s", (int(entity_id),))
            r = fetchone(cur)
            if not r:
                return None

            items = self._load_items(cur, [int(r["id"])])[int(r["id"])]
            cur.execute(
                """
                SELECT created_at, created_by, message, new_state
                FROM order_history
                WHERE order_id=%s
                ORDER BY position
                """,
                (int(r["id"]),),
            )
            history = [
                HistoryItem(
                    created_at=h["created_at"],
                    created_by=h["created_by"],
                    message=h["message"],
                    new_state=OrderState(h["new_state"]) if h.get("new_state") else None,
                )
                for h in fetchall(cur)
            ]

            return Order(
                id=int(r["id"]),
                due_date=r["due_date"],
                due_time=normalize_mysql_time(r["due_time"]),
                pickup_location=PickupLocation(id=int(r["pickup_location_id"]), name=r["pickup_location_name"]),
                customer=Customer(
                    full_name=r["customer_full_name"],
                    phone_number=r["customer_phone"],
                    details=r.get("customer_details"),
                ),
                items=items,
                state=OrderState(r["state"]),
                history=history,
            )

    def find_page(
        self,
        *,
        name_pattern: Optional[str],
        due_after: Optional[date],
        offset: int,
        limit: int,
    ) -> Sequence[OrderSummary]:
        where, params = self._where(name_pattern, due_after)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_BRIEF_SELECT} {where} {_ORDER_BY} LIMIT %s OFFSET %s",
                (*params, int(limit), int(offset)),
            )
            return self._summaries(cur, fetchall(cur))

    def count_matching(self, *, name_pattern: Optional[str], due_after: Optional[date]) -> int:
        where, params = self._where(name_pattern, due_after)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM orders o {where}", params)
            row = fetchone(cur)
            return int(row["n"]) if row else 0

    def count(self) -> int:
        return self.count_matching(name_pattern=None, due_after=None)

    def find_summaries_due_from(self, due_date: date) -> Sequence[OrderSummary]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_BRIEF_SELECT} WHERE o.due_date >= %s {_ORDER_BY}", (due_date,))
            return self._summaries(cur, fetchall(cur))

    @staticmethod
    def _where(name_pattern: Optional[str], due_after: Optional[date]) -> tuple[str, tuple]:
        clauses: list[str] = []
        params: list[object] = []
        if name_pattern is not None:
            clauses.append("LOWER(o.customer_full_name) LIKE LOWER(%s)")
            params.append(name_pattern)
        if due_after is not None:
            clauses.append("o.due_date > %s")
            params.append(due_after)
        if not clauses:
            return "", ()
        return "WHERE " + " AND ".join(clauses), tuple(params)

    # -- writing --------------------------------------------------------

    def save(self, entity: Order) -> Order:
        order_id = entity.id
        with db_cursor(self._conn_factory) as (_, cur):
            values = (
                entity.due_date,
                entity.due_time,
                int(entity.pickup_location.id),
                entity.customer.full_name,
                entity.customer.phone_number,
                entity.customer.details,
                entity.state.value,
            )
            if entity.id is None:
                cur.execute(
                    """
                    INSERT INTO orders(due_date, due_time, pickup_location_id, customer_full_name,
                                       customer_phone, customer_details, state)
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    values,
                )
                order_id = int(cur.lastrowid)
            else:
                cur.execute(
                    """
                    UPDATE orders
                    SET due_date=%s, due_time=%s, pickup_location_id=%s, customer_full_name=%s,
                        customer_phone=%s, customer_details=%s, state=%s
                    WHERE id=%s
                    """,
                    (*values, int(order_id)),
                )
                cur.execute("DELETE FROM order_items WHERE order_id=%s", (int(order_id),))
                cur.execute("DELETE FROM order_history WHERE order_id=%s", (int(order_id),))

            for position, item in enumerate(entity.items):
                cur.execute(
                    """
                    INSERT INTO order_items(order_id, position, product_id, quantity, comment, price)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (int(order_id), position, int(item.product.id), int(item.quantity), item.comment, int(item.price)),
                )
            for position, h in enumerate(entity.history):
                cur.execute(
                    """
                    INSERT INTO order_history(order_id, position, created_at, created_by, message, new_state)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        int(order_id),
                        position,
                        h.created_at,
                        h.created_by,
                        h.message,
                        h.new_state.value if h.new_state else None,
                    ),
                )
        # id is only set once the whole aggregate is committed
        entity.id = order_id
        return entity

    def delete_by_id(self, entity_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM orders WHERE id=%s", (int(entity_id),))
            return cur.rowcount > 0

    # -- dashboard queries ----------------------------------------------

    def count_by_due_date(self, due_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM orders WHERE due_date=%s", (due_date,))
            return int(fetchone(cur)["n"])

    def count_by_due_date_and_states(self, due_date: date, states: Collection[OrderState]) -> int:
        if not states:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT COUNT(*) AS n FROM orders WHERE due_date=%s AND state IN ({placeholders(len(states))})",
                (due_date, *[s.value for s in states]),
            )
            return int(fetchone(cur)["n"])

    def count_by_state(self, state: OrderState) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM orders WHERE state=%s", (state.value,))
            return int(fetchone(cur)["n"])

    def count_per_month(self, state: OrderState, year: int) -> Sequence[tuple[int, int]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT MONTH(due_date) AS m, COUNT(*) AS deliveries
                FROM orders
                WHERE state=%s AND YEAR(due_date)=%s
                GROUP BY MONTH(due_date)
                """,
                (state.value, int(year)),
            )
            return [(int(r["m"]), int(r["deliveries"])) for r in fetchall(cur)]

    def count_per_day(self, state: OrderState, year: int, month: int) -> Sequence[tuple[int, int]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT DAY(due_date) AS d, COUNT(*) AS deliveries
                FROM orders
                WHERE state=%s AND YEAR(due_date)=%s AND MONTH(due_date)=%s
                GROUP BY DAY(due_date)
                """,
                (state.value, int(year), int(month)),
            )
            return [(int(r["d"]), int(r["deliveries"])) for r in fetchall(cur)]

    def sum_per_month_last_three_years(self, state: OrderState, year: int) -> Sequence[tuple[int, int, int]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT YEAR(o.due_date) AS y, MONTH(o.due_date) AS m, SUM(oi.quantity * p.price) AS sales
                FROM orders o
                JOIN order_items oi ON oi.order_id = o.id
                JOIN products p ON p.id = oi.product_id
                WHERE o.state=%s AND YEAR(o.due_date) <= %s AND YEAR(o.due_date) >= %s
                GROUP BY YEAR(o.due_date), MONTH(o.due_date)
                ORDER BY y DESC, m
                """,
                (state.value, int(year), int(year) - 3),
            )
            return [(int(r["y"]), int(r["m"]), int(r["sales"] or 0)) for r in fetchall(cur)]

    def count_per_product(self, state: OrderState, year: int, month: int) -> Sequence[tuple[int, Product]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT SUM(oi.quantity) AS qty, p.id, p.name, p.price
                FROM orders o
                JOIN order_items oi ON oi.order_id = o.id
                JOIN products p ON p.id = oi.product_id
                WHERE o.state=%s AND YEAR(o.due_date)=%s AND MONTH(o.due_date)=%s
                GROUP BY p.id, p.name, p.price
                ORDER BY p.id
                """,
                (state.value, int(year), int(month)),
            )
            return [
                (int(r["qty"] or 0), Product(id=int(r["id"]), name=r["name"], price=int(r["price"])))
                for r in fetchall(cur)
            ]


class MySQLPickupLocationRepository(PickupLocationRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[PickupLocation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name FROM pickup_locations ORDER BY name")
            return [PickupLocation(id=int(r["id"]), name=r["name"]) for r in fetchall(cur)]

    def get_by_id(self, location_id: int) -> Optional[PickupLocation]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name FROM pickup_locations WHERE id=%s", (int(location_id),))
            r = fetchone(cur)
            return PickupLocation(id=int(r["id"]), name=r["name"]) if r else None
