from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class DeliveryStats:
    due_today: int = 0
    due_tomorrow: int = 0
    delivered_today: int = 0
    not_available_today: int = 0
    new_orders: int = 0

    def to_dict(self) -> dict:
        return {
            "due_today": self.due_today,
            "due_tomorrow": self.due_tomorrow,
            "delivered_today": self.delivered_today,
            "not_available_today": self.not_available_today,
            "new_orders": self.new_orders,
        }


@dataclass(frozen=True)
class DashboardData:
    """Dashboard read-model.

    None in the per-day/per-month series means "no data", distinct from 0.
    sales_per_month rows are years back from the requested year (row 0 = that year).
    """

    delivery_stats: DeliveryStats
    deliveries_this_month: List[Optional[int]] = field(default_factory=list)
    deliveries_this_year: List[Optional[int]] = field(default_factory=list)
    sales_per_month: List[List[Optional[int]]] = field(default_factory=list)
    product_deliveries: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "delivery_stats": self.delivery_stats.to_dict(),
            "deliveries_this_month": self.deliveries_this_month,
            "deliveries_this_year": self.deliveries_this_year,
            "sales_per_month": self.sales_per_month,
            "product_deliveries": [{"product": k, "quantity": v} for k, v in self.product_deliveries.items()],
        }
