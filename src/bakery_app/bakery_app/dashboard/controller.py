from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import json_errors, login_required, parse_int
from ..container import Container
from ..storefront.order_card import OrderCard


def register(app: Flask, container: Container) -> None:
    @app.route("/api/dashboard", methods=["GET"], endpoint="dashboard")
    @login_required
    @json_errors
    def dashboard():
        today = container.today()
        month = parse_int(request.args.get("month"), "month", default=today.month)
        year = parse_int(request.args.get("year"), "year", default=today.year)
        data = container.dashboard_service.get_dashboard_data(month, year)

        body = data.to_dict()
        # order grid below the charts: everything due from today on
        body["upcoming_orders"] = [
            OrderCard.create(o, today).to_dict()
            for o in container.order_service.find_any_matching_starting_today()
        ]
        return jsonify(body)
