from __future__ import annotations

from uuid import uuid4

from flask import Flask, jsonify, request, session

from ..common.web import json_errors, login_required, page_request_from_args, parse_bool
from ..container import Container
from ..orders.model import OrderFilter
from .order_card import OrderCard

VIEW_SESSION_KEY = "storefront_view"


def register(app: Flask, container: Container) -> None:
    def _view_id() -> str:
        if VIEW_SESSION_KEY not in session:
            session[VIEW_SESSION_KEY] = uuid4().hex
        return session[VIEW_SESSION_KEY]

    @app.route("/api/storefront/orders", methods=["GET"], endpoint="storefront_orders")
    @login_required
    @json_errors
    def storefront_orders():
        presenter = container.storefront_presenters.get(_view_id())

        wanted = OrderFilter(
            filter_text=(request.args.get("filter") or "").strip(),
            include_past=parse_bool(request.args.get("include_past")),
        )
        if wanted != presenter.filter:
            presenter.filter_changed(wanted.filter_text, wanted.include_past)

        page_request = page_request_from_args()
        page = presenter.load_page(page_request.page, page_request.size)

        today = container.today()
        cards = [
            OrderCard.create(o, today).to_dict(presenter.get_header_by_order_id(o.id))
            for o in page.content
        ]
        body = page.to_dict(cards)
        body["filter"] = {"filter": wanted.filter_text, "include_past": wanted.include_past}
        return jsonify(body)

    @app.route("/api/storefront/orders/<int:order_id>/header", methods=["GET"], endpoint="storefront_header")
    @login_required
    def storefront_header(order_id: int):
        header = container.storefront_presenters.get(_view_id()).get_header_by_order_id(order_id)
        return jsonify({"id": order_id, "header": header.to_dict() if header else None})
