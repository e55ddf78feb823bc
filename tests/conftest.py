from __future__ import annotations

import copy
from collections import Counter
from datetime import date, datetime, time
from typing import Collection, Optional

import pytest
from werkzeug.security import generate_password_hash

from src.bakery_app.bakery_app.container import wire
from src.bakery_app.bakery_app.core.enums import OrderState, Role
from src.bakery_app.bakery_app.main import create_app
from src.bakery_app.bakery_app.orders.model import Customer, Order, OrderItem, OrderSummary, PickupLocation
from src.bakery_app.bakery_app.products.model import Product
from src.bakery_app.bakery_app.products.repository import DuplicateProductNameError
from src.bakery_app.bakery_app.users.model import User


def _matches(pattern: Optional[str], *values: str) -> bool:
    if pattern is None:
        return True
    needle = pattern.strip("%").lower()
    return any(needle in (v or "").lower() for v in values)


class InMemoryProducts:
    def __init__(self):
        self._items: dict[int, Product] = {}
        self._id = 0

    def get_by_id(self, entity_id: int) -> Optional[Product]:
        return self._items.get(entity_id)

    def get_by_name(self, name: str) -> Optional[Product]:
        return next((p for p in self._items.values() if p.name == name), None)

    def save(self, entity: Product) -> Product:
        same = self.get_by_name(entity.name)
        if same and same.id != entity.id:
            raise DuplicateProductNameError(entity.name)
        if entity.id is None:
            self._id += 1
            entity = Product(id=self._id, name=entity.name, price=entity.price)
        self._items[entity.id] = entity
        return entity

    def delete_by_id(self, entity_id: int) -> bool:
        return self._items.pop(entity_id, None) is not None

    def count(self) -> int:
        return len(self._items)

    def _matching(self, pattern):
        items = [p for p in self._items.values() if _matches(pattern, p.name)]
        return sorted(items, key=lambda p: (p.name, p.id))

    def find_page(self, *, pattern, offset: int, limit: int):
        return self._matching(pattern)[offset:offset + limit]

    def count_matching(self, *, pattern) -> int:
        return len(self._matching(pattern))


class InMemoryUsers:
    def __init__(self):
        self._items: dict[int, User] = {}
        self._id = 0

    def get_by_id(self, entity_id: int) -> Optional[User]:
        return self._items.get(entity_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self._items.values() if u.email.lower() == (email or "").lower()), None)

    def save(self, entity: User) -> User:
        if entity.id is None:
            self._id += 1
            entity = User(
                id=self._id,
                email=entity.email,
                first_name=entity.first_name,
                last_name=entity.last_name,
                password_hash=entity.password_hash,
                role=entity.role,
                locked=entity.locked,
            )
        self._items[entity.id] = entity
        return entity

    def delete_by_id(self, entity_id: int) -> bool:
        return self._items.pop(entity_id, None) is not None

    def count(self) -> int:
        return len(self._items)

    def _matching(self, pattern):
        return [
            u
            for u in sorted(self._items.values(), key=lambda u: u.id)
            if _matches(pattern, u.email, u.first_name, u.last_name, u.role.value)
        ]

    def find_page(self, *, pattern, offset: int, limit: int):
        return self._matching(pattern)[offset:offset + limit]

    def count_matching(self, *, pattern) -> int:
        return len(self._matching(pattern))


class InMemoryPickupLocations:
    def __init__(self, locations):
        self._items = {loc.id: loc for loc in locations}

    def list_all(self):
        return sorted(self._items.values(), key=lambda loc: loc.id)

    def get_by_id(self, location_id: int) -> Optional[PickupLocation]:
        return self._items.get(location_id)


class InMemoryOrders:
    def __init__(self):
        self._items: dict[int, Order] = {}
        self._id = 0
        self.page_calls: list[dict] = []

    def get_by_id(self, entity_id: int) -> Optional[Order]:
        order = self._items.get(entity_id)
        return copy.deepcopy(order) if order else None

    def save(self, entity: Order) -> Order:
        if entity.id is None:
            self._id += 1
            entity.id = self._id
        self._items[entity.id] = copy.deepcopy(entity)
        return entity

    def delete_by_id(self, entity_id: int) -> bool:
        return self._items.pop(entity_id, None) is not None

    def count(self) -> int:
        return len(self._items)

    def _matching(self, name_pattern, due_after):
        items = [
            o
            for o in self._items.values()
            if _matches(name_pattern, o.customer.full_name) and (due_after is None or o.due_date > due_after)
        ]
        items.sort(key=lambda o: (o.due_date, o.due_time, o.id))
        return items

    def find_page(self, *, name_pattern, due_after, offset: int, limit: int):
        self.page_calls.append({"name_pattern": name_pattern, "due_after": due_after, "offset": offset, "limit": limit})
        return [o.to_summary() for o in self._matching(name_pattern, due_after)[offset:offset + limit]]

    def count_matching(self, *, name_pattern, due_after) -> int:
        return len(self._matching(name_pattern, due_after))

    def find_summaries_due_from(self, due_date: date):
        return [o.to_summary() for o in self._matching(None, None) if o.due_date >= due_date]

    def count_by_due_date(self, due_date: date) -> int:
        return sum(1 for o in self._items.values() if o.due_date == due_date)

    def count_by_due_date_and_states(self, due_date: date, states: Collection[OrderState]) -> int:
        return sum(1 for o in self._items.values() if o.due_date == due_date and o.state in states)

    def count_by_state(self, state: OrderState) -> int:
        return sum(1 for o in self._items.values() if o.state is state)

    def count_per_month(self, state: OrderState, year: int):
        c = Counter(o.due_date.month for o in self._items.values() if o.state is state and o.due_date.year == year)
        return sorted(c.items())

    def count_per_day(self, state: OrderState, year: int, month: int):
        c = Counter(
            o.due_date.day
            for o in self._items.values()
            if o.state is state and (o.due_date.year, o.due_date.month) == (year, month)
        )
        return sorted(c.items())

    def sum_per_month_last_three_years(self, state: OrderState, year: int):
        c: Counter = Counter()
        for o in self._items.values():
            if o.state is state and year - 3 <= o.due_date.year <= year:
                c[(o.due_date.year, o.due_date.month)] += sum(i.quantity * i.product.price for i in o.items)
        return [(y, m, total) for (y, m), total in sorted(c.items())]

    def count_per_product(self, state: OrderState, year: int, month: int):
        quantities: Counter = Counter()
        products: dict[int, Product] = {}
        for o in self._items.values():
            if o.state is state and (o.due_date.year, o.due_date.month) == (year, month):
                for i in o.items:
                    quantities[i.product.id] += i.quantity
                    products[i.product.id] = i.product
        return [(quantities[pid], products[pid]) for pid in sorted(quantities)]


def make_summary(order_id: int, due_date: date, due_time: time = time(10, 0), **kwargs) -> OrderSummary:
    return OrderSummary(
        id=order_id,
        due_date=due_date,
        due_time=due_time,
        state=kwargs.get("state", OrderState.NEW),
        customer_full_name=kwargs.get("customer_full_name", f"Customer {order_id}"),
        pickup_location_name=kwargs.get("pickup_location_name", "Store"),
        items=kwargs.get("items", ()),
    )


@pytest.fixture
def summary():
    return make_summary


@pytest.fixture
def fixed_today() -> date:
    # Monday, ISO week 24
    return date(2024, 6, 10)


@pytest.fixture
def fixed_now(fixed_today) -> datetime:
    return datetime.combine(fixed_today, time(9, 30))


@pytest.fixture
def locations():
    return InMemoryPickupLocations([PickupLocation(1, "Store"), PickupLocation(2, "Bakery")])


@pytest.fixture
def products():
    repo = InMemoryProducts()
    repo.save(Product(id=None, name="Strawberry Bun", price=150))
    repo.save(Product(id=None, name="Vanilla Cracker", price=275))
    repo.save(Product(id=None, name="Blueberry Cheese Cake", price=1200))
    return repo


@pytest.fixture
def users():
    repo = InMemoryUsers()
    repo.save(User(None, "admin@vaadin.com", "Göran", "Rich", generate_password_hash("admin"), Role.ADMIN, locked=True))
    repo.save(User(None, "barista@vaadin.com", "Malin", "Castro", generate_password_hash("barista"), Role.BARISTA, locked=True))
    repo.save(User(None, "baker@vaadin.com", "Lars", "Ulrich", generate_password_hash("baker"), Role.BAKER))
    return repo


@pytest.fixture
def orders():
    return InMemoryOrders()


@pytest.fixture
def add_order(orders, products, locations):
    """Store an order due on the given date; returns the saved Order."""

    def _add(due_date: date, *, due_time: time = time(10, 0), name: str = "Jane Doe", state=OrderState.NEW, quantity=1):
        product = products.get_by_id(1)
        order = Order(
            due_date=due_date,
            due_time=due_time,
            pickup_location=locations.get_by_id(1),
            customer=Customer(full_name=name, phone_number="+358 555 0101"),
            items=[OrderItem(product=product, quantity=quantity, price=product.price)],
            state=state,
        )
        return orders.save(order)

    return _add


@pytest.fixture
def container(users, products, orders, locations, fixed_today, fixed_now):
    return wire(
        users_repo=users,
        products_repo=products,
        orders_repo=orders,
        pickup_locations_repo=locations,
        today=lambda: fixed_today,
        now=lambda: fixed_now,
        page_size=3,
    )


@pytest.fixture
def app(container):
    app = create_app(container=container, settings_module="config.testing")
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def _login(email: str, password: str):
        return client.post("/login", json={"email": email, "password": password})

    return _login
