from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Callable, Optional

from ..common.pagination import Page
from ..core.constants import DEFAULT_PAGE_SIZE
from ..orders.model import OrderFilter, OrderSummary
from .header_chain import HeaderChain, OrderCardHeader
from .page_source import PageSource


class GroupingPresenter:
    """Bridges a paged order source and the header chain for one storefront view.

    A filter change resets the chain before any new page is requested; every
    page read through the source is ingested into the chain.
    """

    def __init__(self, source: PageSource, *, chain: Optional[HeaderChain] = None, page_size: int = DEFAULT_PAGE_SIZE):
        self._source = source
        self._chain = chain if chain is not None else HeaderChain()
        self._page_size = int(page_size)
        self._filter = OrderFilter()
        self._chain.reset(self._filter.include_past)
        self._source.add_page_observer(self._page_received)

    @property
    def filter(self) -> OrderFilter:
        return self._filter

    def _page_received(self, page: Page[OrderSummary]) -> None:
        # empty pages are a no-op for the chain
        self._chain.ingest(page.content)

    def filter_changed(self, filter_text: str, include_past: bool) -> None:
        self._chain.reset(include_past)
        self._filter = OrderFilter(filter_text=filter_text or "", include_past=bool(include_past))

    def load_page(self, page_number: int, page_size: Optional[int] = None) -> Page[OrderSummary]:
        return self._source.fetch(
            self._filter.filter_text,
            self._filter.include_past,
            page_number,
            page_size or self._page_size,
        )

    def count(self) -> int:
        return self._source.count(self._filter.filter_text, self._filter.include_past)

    def get_header_by_order_id(self, order_id: int) -> Optional[OrderCardHeader]:
        return self._chain.get(order_id)


class PresenterRegistry:
    """One GroupingPresenter per storefront view session, created on first use."""

    def __init__(self, factory: Callable[[], GroupingPresenter], *, max_sessions: int = 512):
        self._factory = factory
        self._max_sessions = int(max_sessions)
        self._presenters: "OrderedDict[str, GroupingPresenter]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, view_id: str) -> GroupingPresenter:
        with self._lock:
            presenter = self._presenters.get(view_id)
            if presenter is None:
                presenter = self._factory()
                self._presenters[view_id] = presenter
                while len(self._presenters) > self._max_sessions:
                    self._presenters.popitem(last=False)
            else:
                self._presenters.move_to_end(view_id)
            return presenter

    def discard(self, view_id: str) -> None:
        with self._lock:
            self._presenters.pop(view_id, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._presenters)
