from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Callable, Iterable, Optional, Sequence

from ..common.crud import CrudService, like_pattern
from ..common.datetime_utils import now_local
from ..common.logger import get_logger
from ..common.pagination import Page, PageRequest
from ..common.validators import require_non_empty
from ..core.constants import DEFAULT_DUE_TIME
from ..core.enums import OrderState
from ..core.exceptions import ValidationError
from ..products.repository import ProductRepository
from .model import Customer, Order, OrderItem, OrderSummary, PickupLocation
from .repository import OrderRepository, PickupLocationRepository

log = get_logger(__name__)


@dataclass(frozen=True)
class OrderItemForm:
    product_id: int
    quantity: int
    comment: Optional[str] = None


@dataclass(frozen=True)
class OrderForm:
    """Values bound from the order editor."""

    due_date: date
    due_time: time
    pickup_location_id: int
    customer_full_name: str
    customer_phone_number: str
    customer_details: Optional[str]
    items: Sequence[OrderItemForm]
    state: Optional[OrderState] = None


class OrderService(CrudService[Order]):
    def __init__(
        self,
        orders: OrderRepository,
        products: ProductRepository,
        pickup_locations: PickupLocationRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._orders = orders
        self._products = products
        self._pickup_locations = pickup_locations
        self._clock = clock

    @property
    def repository(self) -> OrderRepository:
        return self._orders

    def create_new(self, current_user) -> Order:
        now = self._clock()
        order = Order.placed_by(current_user, now=now)
        order.due_time = DEFAULT_DUE_TIME
        order.due_date = now.date()
        return order

    def save_order(self, current_user, order_id: Optional[int], filler: Callable[[object, Order], None]) -> Order:
        """Load (or create) an order, let filler bind values onto it, then persist."""

        order = self.create_new(current_user) if order_id is None else self.load(order_id)
        filler(current_user, order)
        return self.save(current_user, order)

    def save(self, current_user, entity: Order) -> Order:
        self._validate(entity)
        is_new = entity.id is None
        saved = super().save(current_user, entity)
        log.info("order %s %s (state=%s)", saved.id, "created" if is_new else "updated", saved.state.value)
        return saved

    def add_comment(self, current_user, order: Order, comment: str) -> Order:
        order.add_history_item(current_user, require_non_empty(comment, "Comment"), now=self._clock())
        return self._orders.save(order)

    def change_state(self, current_user, order: Order, state: OrderState) -> Order:
        order.change_state(current_user, OrderState(state), now=self._clock())
        return self.save(current_user, order)

    def apply_form(self, current_user, order: Order, form: OrderForm) -> None:
        """Bind editor values onto order; item prices are snapshotted from the products."""

        location = self._pickup_locations.get_by_id(int(form.pickup_location_id))
        if location is None:
            raise ValidationError("Please select a pickup location")

        order.due_date = form.due_date
        order.due_time = form.due_time
        order.pickup_location = location
        order.customer = Customer(
            full_name=require_non_empty(form.customer_full_name, "Customer name"),
            phone_number=require_non_empty(form.customer_phone_number, "Phone number"),
            details=(form.customer_details or "").strip() or None,
        )
        order.items = list(self._build_items(form.items))
        if form.state is not None:
            order.change_state(current_user, form.state, now=self._clock())

    def _build_items(self, items: Iterable[OrderItemForm]) -> Iterable[OrderItem]:
        for f in items:
            product = self._products.get_by_id(int(f.product_id))
            if product is None:
                raise ValidationError("Please select a product")
            if int(f.quantity) < 1:
                raise ValidationError("Quantity must be at least 1")
            yield OrderItem(
                product=product,
                quantity=int(f.quantity),
                comment=(f.comment or "").strip() or None,
                price=product.price,
            )

    @staticmethod
    def _validate(order: Order) -> None:
        if order.due_date is None:
            raise ValidationError("Due date is required")
        if order.due_time is None:
            raise ValidationError("Due time is required")
        if order.pickup_location is None:
            raise ValidationError("Pickup location is required")
        if not order.customer.full_name:
            raise ValidationError("Customer name is required")
        if not order.items:
            raise ValidationError("An order needs at least one item")

    def find_any_matching_after_due_date(
        self,
        filter_text: Optional[str],
        filter_date: Optional[date],
        page_request: PageRequest,
    ) -> Page[OrderSummary]:
        pattern = like_pattern(filter_text)
        items = self._orders.find_page(
            name_pattern=pattern,
            due_after=filter_date,
            offset=page_request.offset,
            limit=page_request.size,
        )
        return Page(
            content=list(items),
            page=page_request.page,
            size=page_request.size,
            total=self._orders.count_matching(name_pattern=pattern, due_after=filter_date),
        )

    def count_any_matching_after_due_date(self, filter_text: Optional[str], filter_date: Optional[date]) -> int:
        return self._orders.count_matching(name_pattern=like_pattern(filter_text), due_after=filter_date)

    def find_any_matching_starting_today(self) -> list[OrderSummary]:
        return list(self._orders.find_summaries_due_from(self._clock().date()))

    def list_pickup_locations(self) -> list[PickupLocation]:
        return list(self._pickup_locations.list_all())
