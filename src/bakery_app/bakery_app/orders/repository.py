from __future__ import annotations

from datetime import date
from typing import Collection, Optional, Protocol, Sequence

from ..core.enums import OrderState
from ..products.model import Product
from .model import Order, OrderSummary, PickupLocation


class OrderRepository(Protocol):
    def get_by_id(self, entity_id: int) -> Optional[Order]:
        """Full order, items and history included."""

        raise NotImplementedError

    def save(self, entity: Order) -> Order:
        raise NotImplementedError

    def delete_by_id(self, entity_id: int) -> bool:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def find_page(
        self,
        *,
        name_pattern: Optional[str],
        due_after: Optional[date],
        offset: int,
        limit: int,
    ) -> Sequence[OrderSummary]:
        """Summaries sorted ascending by due date, due time, id.

        name_pattern is a LIKE pattern on the customer full name (case-insensitive);
        due_after keeps orders with due_date strictly after it.
        """

        raise NotImplementedError

    def count_matching(self, *, name_pattern: Optional[str], due_after: Optional[date]) -> int:
        raise NotImplementedError

    def find_summaries_due_from(self, due_date: date) -> Sequence[OrderSummary]:
        raise NotImplementedError

    def count_by_due_date(self, due_date: date) -> int:
        raise NotImplementedError

    def count_by_due_date_and_states(self, due_date: date, states: Collection[OrderState]) -> int:
        raise NotImplementedError

    def count_by_state(self, state: OrderState) -> int:
        raise NotImplementedError

    def count_per_month(self, state: OrderState, year: int) -> Sequence[tuple[int, int]]:
        """(month, count) rows for the year."""

        raise NotImplementedError

    def count_per_day(self, state: OrderState, year: int, month: int) -> Sequence[tuple[int, int]]:
        """(day, count) rows for the month."""

        raise NotImplementedError

    def sum_per_month_last_three_years(self, state: OrderState, year: int) -> Sequence[tuple[int, int, int]]:
        """(year, month, sales in cents) rows for year-3 .. year."""

        raise NotImplementedError

    def count_per_product(self, state: OrderState, year: int, month: int) -> Sequence[tuple[int, Product]]:
        """(quantity, product) rows ordered by product id."""

        raise NotImplementedError


class PickupLocationRepository(Protocol):
    def list_all(self) -> Sequence[PickupLocation]:
        raise NotImplementedError

    def get_by_id(self, location_id: int) -> Optional[PickupLocation]:
        raise NotImplementedError
