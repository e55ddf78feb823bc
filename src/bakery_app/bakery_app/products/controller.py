from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import (
    admin_required,
    json_errors,
    login_required,
    page_request_from_args,
    parse_int,
    request_data,
    session_user,
)
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/products", methods=["GET"], endpoint="products")
    @login_required
    @json_errors
    def products():
        """Product picker for the order editor."""
        page = container.product_service.find_any_matching(request.args.get("filter"), page_request_from_args())
        return jsonify(page.to_dict([p.to_dict() for p in page.content]))

    @app.route("/api/admin/products", methods=["GET"], endpoint="admin_products")
    @admin_required
    @json_errors
    def admin_products():
        page = container.product_service.find_any_matching(request.args.get("filter"), page_request_from_args())
        return jsonify(page.to_dict([p.to_dict() for p in page.content]))

    @app.route("/api/admin/products", methods=["POST"], endpoint="add_product")
    @admin_required
    @json_errors
    def add_product():
        data = request_data()
        service = container.product_service
        product = service.apply_form(
            service.create_new(session_user()),
            name=data.get("name", ""),
            price=parse_int(data.get("price"), "Price"),
        )
        saved = service.save(session_user(), product)
        return jsonify({"success": True, "product": saved.to_dict()}), 201

    @app.route("/api/admin/products/<int:product_id>", methods=["GET"], endpoint="get_product")
    @admin_required
    @json_errors
    def get_product(product_id: int):
        return jsonify(container.product_service.load(product_id).to_dict())

    @app.route("/api/admin/products/<int:product_id>", methods=["PUT"], endpoint="update_product")
    @admin_required
    @json_errors
    def update_product(product_id: int):
        data = request_data()
        service = container.product_service
        existing = service.load(product_id)
        product = service.apply_form(
            existing,
            name=data.get("name", existing.name),
            price=parse_int(data.get("price"), "Price", default=existing.price),
        )
        saved = service.save(session_user(), product)
        return jsonify({"success": True, "product": saved.to_dict()})

    @app.route("/api/admin/products/<int:product_id>", methods=["DELETE"], endpoint="delete_product")
    @admin_required
    @json_errors
    def delete_product(product_id: int):
        container.product_service.delete_by_id(session_user(), product_id)
        return jsonify({"success": True})
