from __future__ import annotations

import threading
from datetime import date, timedelta

from src.bakery_app.bakery_app.common.pagination import Page
from src.bakery_app.bakery_app.storefront.header_chain import RECENT_HEADER, HeaderChain, OrderCardHeader
from src.bakery_app.bakery_app.storefront.page_source import OrdersPageSource
from src.bakery_app.bakery_app.storefront.presenter import GroupingPresenter, PresenterRegistry


class FakeSource:
    """Serves a fixed list of summaries and records every call."""

    def __init__(self, summaries):
        self._summaries = summaries
        self._observers = []
        self.calls = []

    def add_page_observer(self, observer):
        self._observers.append(observer)

    def fetch(self, filter_text, include_past, page_number, page_size):
        self.calls.append(("fetch", filter_text, include_past, page_number, page_size))
        start = page_number * page_size
        page = Page(
            content=self._summaries[start:start + page_size],
            page=page_number,
            size=page_size,
            total=len(self._summaries),
        )
        for observer in self._observers:
            observer(page)
        return page

    def count(self, filter_text, include_past):
        self.calls.append(("count", filter_text, include_past))
        return len(self._summaries)


def _presenter(fixed_today, summaries, page_size=2):
    source = FakeSource(summaries)
    presenter = GroupingPresenter(source, chain=HeaderChain(clock=lambda: fixed_today), page_size=page_size)
    return presenter, source


def test_loaded_pages_feed_the_header_chain(fixed_today, summary):
    presenter, _ = _presenter(
        fixed_today,
        [summary(1, date(2024, 6, 10)), summary(2, date(2024, 6, 10)), summary(3, date(2024, 8, 1))],
    )

    presenter.load_page(0)
    assert presenter.get_header_by_order_id(1) == RECENT_HEADER
    assert presenter.get_header_by_order_id(3) is None

    presenter.load_page(1)
    assert presenter.get_header_by_order_id(3) == OrderCardHeader("August", "2024")


def test_filter_changed_resets_headers_before_next_page(fixed_today, summary):
    presenter, source = _presenter(fixed_today, [summary(1, date(2024, 6, 10))])
    presenter.load_page(0)

    presenter.filter_changed("jane", True)

    assert presenter.get_header_by_order_id(1) is None
    assert presenter.filter.filter_text == "jane"
    assert presenter.filter.include_past is True

    presenter.load_page(0, 5)
    assert source.calls[-1] == ("fetch", "jane", True, 0, 5)
    assert presenter.get_header_by_order_id(1) == RECENT_HEADER


def test_empty_page_is_a_no_op(fixed_today):
    presenter, _ = _presenter(fixed_today, [])

    page = presenter.load_page(0)

    assert page.content == []
    assert presenter.get_header_by_order_id(1) is None


def test_count_uses_current_filter(fixed_today, summary):
    presenter, source = _presenter(fixed_today, [summary(1, date(2024, 6, 10))])
    presenter.filter_changed("", False)

    assert presenter.count() == 1
    assert source.calls[-1] == ("count", "", False)


def test_page_source_filter_date(container, fixed_today):
    source = OrdersPageSource(container.order_service, clock=lambda: fixed_today)

    assert source.filter_date(True) is None
    assert source.filter_date(False) == fixed_today - timedelta(days=1)


def test_page_source_hides_past_orders_unless_requested(container, add_order, fixed_today):
    add_order(fixed_today - timedelta(days=2), name="Old Customer")
    add_order(fixed_today, name="Today Customer")
    source = OrdersPageSource(container.order_service, clock=lambda: fixed_today)
    seen = []
    source.add_page_observer(seen.append)

    upcoming = source.fetch("", False, 0, 10)
    everything = source.fetch("", True, 0, 10)

    assert [o.customer_full_name for o in upcoming.content] == ["Today Customer"]
    assert len(everything.content) == 2
    assert seen == [upcoming, everything]
    assert source.count("", False) == 1
    assert source.count("today", True) == 1


def test_registry_keeps_one_presenter_per_view():
    created = []

    def factory():
        p = GroupingPresenter(FakeSource([]))
        created.append(p)
        return p

    registry = PresenterRegistry(factory, max_sessions=2)
    a = registry.get("a")
    assert registry.get("a") is a

    registry.get("b")
    registry.get("a")
    registry.get("c")

    # "b" was least recently used
    assert len(registry) == 2
    assert registry.get("b") is not created[1]

    registry.discard("a")
    registry.discard("missing")
    assert len(registry) == 2


def test_injected_chain_is_kept_even_when_empty(fixed_today, summary):
    chain = HeaderChain(clock=lambda: fixed_today)
    assert len(chain) == 0

    presenter = GroupingPresenter(FakeSource([summary(1, fixed_today)]), chain=chain)
    presenter.load_page(0)

    assert presenter._chain is chain
    assert chain.get(1) == RECENT_HEADER


def test_registry_creates_one_presenter_per_view_across_threads():
    created = []

    def factory():
        p = GroupingPresenter(FakeSource([]))
        created.append(p)
        return p

    registry = PresenterRegistry(factory, max_sessions=1)
    barrier = threading.Barrier(8)
    errors = []

    def worker(view_id):
        barrier.wait()
        try:
            for _ in range(200):
                registry.get(view_id)
                registry.get("shared")
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(f"view-{n}",)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(registry) == 1
