from __future__ import annotations

from datetime import date, datetime, time

from src.bakery_app.bakery_app.core.enums import OrderState, Role
from src.bakery_app.bakery_app.orders.model import Order, OrderItem, PickupLocation
from src.bakery_app.bakery_app.products.model import Product
from src.bakery_app.bakery_app.users.service import SessionUser

NOW = datetime(2024, 6, 10, 9, 30)
BARISTA = SessionUser(id=2, email="barista@vaadin.com", full_name="Malin Castro", role=Role.BARISTA)


def test_placed_order_starts_with_history():
    order = Order.placed_by(BARISTA, now=NOW)

    assert order.state is OrderState.NEW
    assert [(h.message, h.created_by, h.new_state) for h in order.history] == [
        ("Order placed", "Malin Castro", OrderState.NEW)
    ]


def test_change_state_adds_history_only_on_change():
    order = Order.placed_by(BARISTA, now=NOW)

    order.change_state(BARISTA, OrderState.NEW, now=NOW)
    order.change_state(BARISTA, OrderState.READY, now=NOW)

    assert len(order.history) == 2
    assert order.history[-1].message == "Order Ready"
    assert order.history[-1].new_state is OrderState.READY


def test_totals_and_summary():
    bun = Product(id=1, name="Strawberry Bun", price=150)
    cake = Product(id=3, name="Blueberry Cheese Cake", price=1200)
    order = Order(
        id=5,
        due_date=date(2024, 6, 11),
        due_time=time(16, 0),
        pickup_location=PickupLocation(2, "Bakery"),
        items=[OrderItem(product=bun, quantity=4, price=150), OrderItem(product=cake, price=1200)],
    )

    summary = order.to_summary()

    assert order.total_price == 1800
    assert summary.total_price == 1800
    assert summary.pickup_location_name == "Bakery"
    assert order.to_dict()["due_time"] == "16:00"
