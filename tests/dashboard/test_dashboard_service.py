from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.bakery_app.bakery_app.core.enums import OrderState
from src.bakery_app.bakery_app.core.exceptions import ValidationError
from src.bakery_app.bakery_app.dashboard.service import DashboardService, flatten_and_replace_missing_with_none


class CannedSales:
    def __init__(self, rows):
        self.rows = rows

    def sum_per_month_last_three_years(self, state, year):
        return self.rows


def test_flatten_fills_gaps_with_none():
    assert flatten_and_replace_missing_with_none(4, [(1, 5), (3, 2)]) == [5, None, 2, None]
    assert flatten_and_replace_missing_with_none(2, []) == [None, None]


def test_sales_skip_current_month_and_rows_outside_window():
    service = DashboardService(
        CannedSales([(2024, 5, 100), (2024, 6, 999), (2023, 6, 300), (2021, 1, 7), (2022, 12, 40)])
    )

    sales = service.get_sales_per_month(6, 2024)

    assert len(sales) == 3
    assert sales[0][4] == 100
    assert sales[0][5] is None
    assert sales[1][5] == 300
    assert sales[2][11] == 40
    assert all(v is None for v in sales[2][:11])


def test_delivery_stats(orders, add_order, fixed_today):
    add_order(fixed_today, state=OrderState.NEW)
    add_order(fixed_today, state=OrderState.DELIVERED)
    add_order(fixed_today, state=OrderState.READY)
    add_order(fixed_today, state=OrderState.PROBLEM)
    add_order(fixed_today + timedelta(days=1), state=OrderState.NEW)

    stats = DashboardService(orders, clock=lambda: fixed_today).get_delivery_stats()

    assert stats.due_today == 4
    assert stats.due_tomorrow == 1
    assert stats.delivered_today == 1
    assert stats.not_available_today == 2
    assert stats.new_orders == 2


def test_dashboard_data(orders, add_order, fixed_today):
    add_order(date(2024, 6, 3), state=OrderState.DELIVERED, quantity=2)
    add_order(date(2024, 6, 3), state=OrderState.DELIVERED)
    add_order(date(2024, 2, 14), state=OrderState.DELIVERED)
    add_order(date(2024, 6, 4), state=OrderState.NEW)

    data = DashboardService(orders, clock=lambda: fixed_today).get_dashboard_data(6, 2024)

    assert len(data.deliveries_this_month) == 30
    assert data.deliveries_this_month[2] == 2
    assert data.deliveries_this_month[3] is None
    assert data.deliveries_this_year[1] == 1
    assert data.deliveries_this_year[5] == 2
    assert data.product_deliveries == {"Strawberry Bun": 3}
    assert data.sales_per_month[0][1] == 150
    assert data.sales_per_month[0][5] is None


def test_dashboard_rejects_bad_month(orders):
    with pytest.raises(ValidationError):
        DashboardService(orders).get_dashboard_data(13, 2024)
