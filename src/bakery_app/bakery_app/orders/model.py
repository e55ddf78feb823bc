from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import List, Optional, Sequence

from ..core.enums import OrderState
from ..products.model import Product


@dataclass(frozen=True)
class PickupLocation:
    id: int
    name: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class Customer:
    full_name: str = ""
    phone_number: str = ""
    details: Optional[str] = None

    def to_dict(self) -> dict:
        return {"full_name": self.full_name, "phone_number": self.phone_number, "details": self.details}


@dataclass(frozen=True)
class OrderItem:
    """One order line; price is the product price (cents) when the line was written."""

    product: Product
    quantity: int = 1
    comment: Optional[str] = None
    price: int = 0

    @property
    def total_price(self) -> int:
        return self.quantity * self.price

    def to_dict(self) -> dict:
        return {
            "product": self.product.to_dict(),
            "quantity": self.quantity,
            "comment": self.comment,
            "price": self.price,
            "total_price": self.total_price,
        }


@dataclass(frozen=True)
class HistoryItem:
    created_at: datetime
    created_by: str
    message: str
    new_state: Optional[OrderState] = None

    def to_dict(self) -> dict:
        return {
            "created_at": self.created_at.strftime("%Y-%m-%d %H:%M"),
            "created_by": self.created_by,
            "message": self.message,
            "new_state": self.new_state.value if self.new_state else None,
        }


@dataclass(frozen=True)
class OrderSummary:
    """Read-only projection used by listings; produced fresh per page fetch."""

    id: int
    due_date: date
    due_time: time
    state: OrderState
    customer_full_name: str
    pickup_location_name: str
    items: Sequence[OrderItem] = ()

    @property
    def total_price(self) -> int:
        return sum(i.total_price for i in self.items)


@dataclass(frozen=True)
class OrderFilter:
    filter_text: str = ""
    include_past: bool = False


def _author(user) -> str:
    return getattr(user, "full_name", None) or str(user)


@dataclass
class Order:
    """Aggregate root: a bakery order with its items and history.

    Table name is `orders` ("order" is a reserved word).
    """

    id: Optional[int] = None
    due_date: Optional[date] = None
    due_time: Optional[time] = None
    pickup_location: Optional[PickupLocation] = None
    customer: Customer = field(default_factory=Customer)
    items: List[OrderItem] = field(default_factory=list)
    state: OrderState = OrderState.NEW
    history: List[HistoryItem] = field(default_factory=list)

    @classmethod
    def placed_by(cls, created_by, *, now: Optional[datetime] = None) -> "Order":
        order = cls()
        order.add_history_item(created_by, "Order placed", now=now)
        return order

    def add_history_item(self, created_by, message: str, *, now: Optional[datetime] = None) -> HistoryItem:
        item = HistoryItem(
            created_at=now or datetime.now(),
            created_by=_author(created_by),
            message=message,
            new_state=self.state,
        )
        self.history.append(item)
        return item

    def change_state(self, created_by, state: OrderState, *, now: Optional[datetime] = None) -> None:
        create_history = self.state != state and self.state is not None and state is not None
        self.state = state
        if create_history:
            self.add_history_item(created_by, f"Order {state.display_name}", now=now)

    @property
    def total_price(self) -> int:
        return sum(i.total_price for i in self.items)

    def to_summary(self) -> OrderSummary:
        return OrderSummary(
            id=int(self.id) if self.id is not None else 0,
            due_date=self.due_date,
            due_time=self.due_time,
            state=self.state,
            customer_full_name=self.customer.full_name,
            pickup_location_name=self.pickup_location.name if self.pickup_location else "",
            items=tuple(self.items),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "due_date": self.due_date.strftime("%Y-%m-%d") if self.due_date else None,
            "due_time": self.due_time.strftime("%H:%M") if self.due_time else None,
            "pickup_location": self.pickup_location.to_dict() if self.pickup_location else None,
            "customer": self.customer.to_dict(),
            "items": [i.to_dict() for i in self.items],
            "state": self.state.value,
            "total_price": self.total_price,
            "history": [h.to_dict() for h in self.history],
        }
