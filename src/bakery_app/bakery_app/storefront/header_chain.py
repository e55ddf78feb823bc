"""Date-based visual grouping of the storefront order list.

Orders arrive page by page, sorted ascending by due date, due time and id.
The first order of every group gets a header (e.g. "Recent", "This week",
"May 2024"); the rest of the group is rendered without one.
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Callable, Dict, Hashable, Iterable, Optional

from ..common.datetime_utils import today_local
from ..common.logger import get_logger
from ..orders.model import OrderSummary

log = get_logger(__name__)


class Bucket(str, Enum):
    RECENT = "RECENT"
    THIS_WEEK = "THIS_WEEK"
    OTHER = "OTHER"


@dataclass(frozen=True)
class OrderCardHeader:
    main: Optional[str] = None
    secondary: Optional[str] = None

    def to_dict(self) -> dict:
        return {"main": self.main, "secondary": self.secondary}


RECENT_HEADER = OrderCardHeader("Recent", "")
THIS_WEEK_HEADER = OrderCardHeader("This week", "")


def _week_of_year(d: date) -> int:
    return d.isocalendar()[1]


def classify(due_date: date, today: date) -> Bucket:
    """RECENT is today or yesterday; THIS_WEEK is the same year and week number as today.

    The week check compares calendar years, so a week spanning New Year is
    split: Dec 31 and Jan 1 never share the THIS_WEEK bucket.
    """

    if due_date == today or due_date == today - timedelta(days=1):
        return Bucket.RECENT
    if due_date.year == today.year and _week_of_year(due_date) == _week_of_year(today):
        return Bucket.THIS_WEEK
    return Bucket.OTHER


def group_key(due_date: date, today: date) -> Hashable:
    bucket = classify(due_date, today)
    if bucket is Bucket.OTHER:
        return (bucket, due_date.year, due_date.month)
    return (bucket,)


def header_for(due_date: date, today: date) -> OrderCardHeader:
    bucket = classify(due_date, today)
    if bucket is Bucket.RECENT:
        return RECENT_HEADER
    if bucket is Bucket.THIS_WEEK:
        return THIS_WEEK_HEADER
    return OrderCardHeader(calendar.month_name[due_date.month], str(due_date.year))


class HeaderChain:
    """Remembers which order ids start a group and with which header.

    State grows monotonically until reset(); ids already ingested are skipped
    so re-reading a page does not produce duplicate headers.
    """

    def __init__(self, *, clock: Callable[[], date] = today_local):
        self._clock = clock
        self._headers: Dict[int, Optional[OrderCardHeader]] = {}
        self._last_key: Optional[Hashable] = None
        self._include_past = False

    @property
    def include_past(self) -> bool:
        return self._include_past

    def reset(self, include_past: bool) -> None:
        self._headers.clear()
        self._last_key = None
        self._include_past = bool(include_past)
        log.debug("header chain reset (include_past=%s)", self._include_past)

    def ingest(self, orders: Iterable[OrderSummary]) -> None:
        today = self._clock()
        for order in orders:
            if order.id in self._headers:
                continue
            key = group_key(order.due_date, today)
            if self._last_key is None or key != self._last_key:
                self._headers[order.id] = header_for(order.due_date, today)
                self._last_key = key
            else:
                self._headers[order.id] = None

    def get(self, order_id: int) -> Optional[OrderCardHeader]:
        return self._headers.get(order_id)

    def __len__(self) -> int:
        return len(self._headers)
