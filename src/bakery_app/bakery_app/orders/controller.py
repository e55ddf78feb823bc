from __future__ import annotations

from typing import Any, Optional

from flask import Flask, jsonify

from ..common.datetime_utils import parse_hhmm, parse_iso_date
from ..common.web import json_errors, login_required, parse_int, request_data, session_user
from ..container import Container
from ..core.enums import OrderState
from ..core.exceptions import ValidationError
from .service import OrderForm, OrderItemForm


def _parse_state(value: Any) -> Optional[OrderState]:
    if value in (None, ""):
        return None
    try:
        return OrderState(str(value).upper())
    except ValueError:
        raise ValidationError("Order state is not valid")


def parse_order_form(data: dict) -> OrderForm:
    try:
        due_date = parse_iso_date(str(data.get("due_date") or ""))
    except ValueError:
        raise ValidationError("Due date is not valid (YYYY-MM-DD)")
    try:
        due_time = parse_hhmm(str(data.get("due_time") or ""))
    except ValueError:
        raise ValidationError("Due time is not valid (HH:MM)")

    customer = data.get("customer") or {}
    if not isinstance(customer, dict):
        raise ValidationError("Customer must be an object")
    raw_items = data.get("items") or []
    if not isinstance(raw_items, list):
        raise ValidationError("Items must be a list")
    if not all(isinstance(i, dict) for i in raw_items):
        raise ValidationError("Each item must be an object")

    return OrderForm(
        due_date=due_date,
        due_time=due_time,
        pickup_location_id=parse_int(data.get("pickup_location_id"), "Pickup location"),
        customer_full_name=customer.get("full_name", ""),
        customer_phone_number=customer.get("phone_number", ""),
        customer_details=customer.get("details"),
        items=[
            OrderItemForm(
                product_id=parse_int(i.get("product_id"), "Product"),
                quantity=parse_int(i.get("quantity"), "Quantity", default=1),
                comment=i.get("comment"),
            )
            for i in raw_items
        ],
        state=_parse_state(data.get("state")),
    )


def register(app: Flask, container: Container) -> None:
    service = container.order_service

    @app.route("/api/pickup-locations", methods=["GET"], endpoint="pickup_locations")
    @login_required
    def pickup_locations():
        return jsonify([loc.to_dict() for loc in service.list_pickup_locations()])

    @app.route("/api/orders/new", methods=["GET"], endpoint="new_order")
    @login_required
    def new_order():
        return jsonify(service.create_new(session_user()).to_dict())

    @app.route("/api/orders/<int:order_id>", methods=["GET"], endpoint="get_order")
    @login_required
    @json_errors
    def get_order(order_id: int):
        return jsonify(service.load(order_id).to_dict())

    @app.route("/api/orders", methods=["POST"], endpoint="create_order")
    @login_required
    @json_errors
    def create_order():
        form = parse_order_form(request_data())
        order = service.save_order(session_user(), None, lambda user, o: service.apply_form(user, o, form))
        return jsonify({"success": True, "order": order.to_dict()}), 201

    @app.route("/api/orders/<int:order_id>", methods=["PUT"], endpoint="update_order")
    @login_required
    @json_errors
    def update_order(order_id: int):
        form = parse_order_form(request_data())
        order = service.save_order(session_user(), order_id, lambda user, o: service.apply_form(user, o, form))
        return jsonify({"success": True, "order": order.to_dict()})

    @app.route("/api/orders/<int:order_id>/comments", methods=["POST"], endpoint="add_order_comment")
    @login_required
    @json_errors
    def add_order_comment(order_id: int):
        data = request_data()
        order = service.add_comment(session_user(), service.load(order_id), data.get("message", ""))
        return jsonify({"success": True, "order": order.to_dict()})

    @app.route("/api/orders/<int:order_id>/state", methods=["POST"], endpoint="change_order_state")
    @login_required
    @json_errors
    def change_order_state(order_id: int):
        state = _parse_state(request_data().get("state"))
        if state is None:
            raise ValidationError("Order state is required")
        order = service.change_state(session_user(), service.load(order_id), state)
        return jsonify({"success": True, "order": order.to_dict()})

    @app.route("/api/orders/<int:order_id>", methods=["DELETE"], endpoint="delete_order")
    @login_required
    @json_errors
    def delete_order(order_id: int):
        service.delete_by_id(session_user(), order_id)
        return jsonify({"success": True})
