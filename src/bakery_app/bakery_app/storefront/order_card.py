from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..orders.model import OrderSummary
from .header_chain import Bucket, OrderCardHeader, classify

HOUR_FORMAT = "%H:%M"
SHORT_DAY_FORMAT = "%a"
WEEKDAY_FULLNAME_FORMAT = "%A"


def _month_and_day(d: date) -> str:
    return f"{d.strftime('%b')} {d.day}"


@dataclass(frozen=True)
class OrderCard:
    """What the storefront list shows for one order.

    Recent orders show time and place, this week's orders a short day,
    older or later ones the month, day and weekday.
    """

    order: OrderSummary
    bucket: Bucket

    @classmethod
    def create(cls, order: OrderSummary, today: date) -> "OrderCard":
        return cls(order=order, bucket=classify(order.due_date, today))

    @property
    def recent(self) -> bool:
        return self.bucket is Bucket.RECENT

    @property
    def in_week(self) -> bool:
        return self.bucket is Bucket.THIS_WEEK

    @property
    def place(self) -> Optional[str]:
        return self.order.pickup_location_name if self.recent or self.in_week else None

    @property
    def time(self) -> Optional[str]:
        return self.order.due_time.strftime(HOUR_FORMAT) if self.recent else None

    @property
    def short_day(self) -> Optional[str]:
        return self.order.due_date.strftime(SHORT_DAY_FORMAT) if self.in_week else None

    @property
    def secondary_time(self) -> Optional[str]:
        return self.order.due_time.strftime(HOUR_FORMAT) if self.in_week else None

    @property
    def month(self) -> Optional[str]:
        return None if self.recent or self.in_week else _month_and_day(self.order.due_date)

    @property
    def full_day(self) -> Optional[str]:
        return None if self.recent or self.in_week else self.order.due_date.strftime(WEEKDAY_FULLNAME_FORMAT)

    def to_dict(self, header: Optional[OrderCardHeader] = None) -> dict:
        return {
            "id": self.order.id,
            "header": header.to_dict() if header else None,
            "place": self.place,
            "time": self.time,
            "short_day": self.short_day,
            "secondary_time": self.secondary_time,
            "month": self.month,
            "full_day": self.full_day,
            "state": self.order.state.display_name,
            "full_name": self.order.customer_full_name,
            "items": [
                {"product": i.product.name, "quantity": i.quantity, "comment": i.comment}
                for i in self.order.items
            ],
            "total_price": self.order.total_price,
        }
