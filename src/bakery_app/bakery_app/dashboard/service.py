from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Callable, Iterable, List, Optional, Sequence

from ..common.datetime_utils import today_local
from ..core.constants import DASHBOARD_SALES_YEARS
from ..core.enums import OrderState
from ..core.exceptions import ValidationError
from ..orders.repository import OrderRepository
from .model import DashboardData, DeliveryStats

NOT_AVAILABLE_STATES = frozenset(set(OrderState) - {OrderState.DELIVERED, OrderState.READY, OrderState.CANCELLED})


def flatten_and_replace_missing_with_none(length: int, rows: Iterable[Sequence[int]]) -> List[Optional[int]]:
    """Spread sparse (position, value) rows, positions 1-based, over a fixed-length list."""

    counts: List[Optional[int]] = [None] * int(length)
    for position, value in rows:
        counts[int(position) - 1] = value
    return counts


class DashboardService:
    def __init__(self, orders: OrderRepository, *, clock: Callable[[], date] = today_local):
        self._orders = orders
        self._clock = clock

    def get_delivery_stats(self) -> DeliveryStats:
        today = self._clock()
        return DeliveryStats(
            due_today=self._orders.count_by_due_date(today),
            due_tomorrow=self._orders.count_by_due_date(today + timedelta(days=1)),
            delivered_today=self._orders.count_by_due_date_and_states(today, {OrderState.DELIVERED}),
            not_available_today=self._orders.count_by_due_date_and_states(today, NOT_AVAILABLE_STATES),
            new_orders=self._orders.count_by_state(OrderState.NEW),
        )

    def get_deliveries_per_day(self, month: int, year: int) -> List[Optional[int]]:
        days_in_month = calendar.monthrange(year, month)[1]
        return flatten_and_replace_missing_with_none(
            days_in_month, self._orders.count_per_day(OrderState.DELIVERED, year, month)
        )

    def get_deliveries_per_month(self, year: int) -> List[Optional[int]]:
        return flatten_and_replace_missing_with_none(12, self._orders.count_per_month(OrderState.DELIVERED, year))

    def get_sales_per_month(self, month: int, year: int) -> List[List[Optional[int]]]:
        sales: List[List[Optional[int]]] = [[None] * 12 for _ in range(DASHBOARD_SALES_YEARS)]
        for sales_year, sales_month, total in self._orders.sum_per_month_last_three_years(OrderState.DELIVERED, year):
            y = year - int(sales_year)
            m = int(sales_month) - 1
            if y < 0 or y >= DASHBOARD_SALES_YEARS:
                continue
            if y == 0 and m == month - 1:
                # current month is incomplete
                continue
            sales[y][m] = int(total)
        return sales

    def get_product_deliveries(self, month: int, year: int) -> dict[str, int]:
        out: dict[str, int] = {}
        for quantity, product in self._orders.count_per_product(OrderState.DELIVERED, year, month):
            out[product.name] = int(quantity)
        return out

    def get_dashboard_data(self, month: int, year: int) -> DashboardData:
        if month < 1 or month > 12:
            raise ValidationError("Month must be between 1 and 12")
        if year < 1:
            raise ValidationError("Year is not valid")

        return DashboardData(
            delivery_stats=self.get_delivery_stats(),
            deliveries_this_month=self.get_deliveries_per_day(month, year),
            deliveries_this_year=self.get_deliveries_per_month(year),
            sales_per_month=self.get_sales_per_month(month, year),
            product_deliveries=self.get_product_deliveries(month, year),
        )
