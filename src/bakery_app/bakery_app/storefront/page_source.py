from __future__ import annotations

from datetime import date, timedelta
from typing import Callable, List, Optional, Protocol

from ..common.datetime_utils import today_local
from ..common.pagination import Page, PageRequest
from ..orders.model import OrderSummary
from ..orders.service import OrderService

PageObserver = Callable[[Page[OrderSummary]], None]


class PageSource(Protocol):
    """Supplies pages of order summaries sorted by due date, due time, id."""

    def fetch(self, filter_text: str, include_past: bool, page_number: int, page_size: int) -> Page[OrderSummary]:
        raise NotImplementedError

    def count(self, filter_text: str, include_past: bool) -> int:
        raise NotImplementedError

    def add_page_observer(self, observer: PageObserver) -> None:
        raise NotImplementedError


class OrdersPageSource(PageSource):
    """PageSource over OrderService; notifies observers of every page read."""

    def __init__(self, orders: OrderService, *, clock: Callable[[], date] = today_local):
        self._orders = orders
        self._clock = clock
        self._observers: List[PageObserver] = []

    def add_page_observer(self, observer: PageObserver) -> None:
        self._observers.append(observer)

    def filter_date(self, include_past: bool) -> Optional[date]:
        """Orders due after this date are listed; None lists everything."""
        if include_past:
            return None
        return self._clock() - timedelta(days=1)

    def fetch(self, filter_text: str, include_past: bool, page_number: int, page_size: int) -> Page[OrderSummary]:
        page = self._orders.find_any_matching_after_due_date(
            filter_text,
            self.filter_date(include_past),
            PageRequest(page=int(page_number), size=int(page_size)),
        )
        for observer in self._observers:
            observer(page)
        return page

    def count(self, filter_text: str, include_past: bool) -> int:
        return self._orders.count_any_matching_after_due_date(filter_text, self.filter_date(include_past))
