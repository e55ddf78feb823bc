from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.web import (
    admin_required,
    json_errors,
    login_required,
    page_request_from_args,
    parse_bool,
    request_data,
    session_user,
    store_session_user,
)
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..container import Container
from ..storefront.controller import VIEW_SESSION_KEY


def register(app: Flask, container: Container) -> None:
    def _role(value) -> Role:
        try:
            return Role(value or Role.BARISTA.value)
        except ValueError:
            raise ValidationError("Role is not valid")

    @app.route("/login", methods=["POST"], endpoint="login")
    @json_errors
    def login():
        data = request_data()
        s_user = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))

        session.permanent = parse_bool(data.get("remember_me"))
        store_session_user(s_user)

        return jsonify({"success": True, "user": {"id": s_user.id, "name": s_user.full_name, "role": s_user.role.value}})

    @app.route("/logout", methods=["POST"], endpoint="logout")
    def logout():
        view_id = session.get(VIEW_SESSION_KEY)
        if view_id:
            container.storefront_presenters.discard(view_id)
        session.clear()
        return jsonify({"success": True})

    @app.route("/api/me", endpoint="me")
    @login_required
    def me():
        user = session_user()
        return jsonify({"id": user.id, "email": user.email, "name": user.full_name, "role": user.role.value})

    @app.route("/api/admin/users", methods=["GET"], endpoint="admin_users")
    @admin_required
    @json_errors
    def admin_users():
        page = container.user_service.find_any_matching(request.args.get("filter"), page_request_from_args())
        return jsonify(page.to_dict([u.to_dict() for u in page.content]))

    @app.route("/api/admin/users", methods=["POST"], endpoint="add_user")
    @admin_required
    @json_errors
    def add_user():
        data = request_data()
        service = container.user_service
        user = service.apply_form(
            service.create_new(session_user()),
            email=data.get("email", ""),
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            role=_role(data.get("role")),
            password=data.get("password"),
        )
        saved = service.save(session_user(), user)
        return jsonify({"success": True, "user": saved.to_dict()}), 201

    @app.route("/api/admin/users/<int:user_id>", methods=["GET"], endpoint="get_user")
    @admin_required
    @json_errors
    def get_user(user_id: int):
        return jsonify(container.user_service.load(user_id).to_dict())

    @app.route("/api/admin/users/<int:user_id>", methods=["PUT"], endpoint="update_user")
    @admin_required
    @json_errors
    def update_user(user_id: int):
        data = request_data()
        service = container.user_service
        existing = service.load(user_id)
        user = service.apply_form(
            existing,
            email=data.get("email", existing.email),
            first_name=data.get("first_name", existing.first_name),
            last_name=data.get("last_name", existing.last_name),
            role=_role(data.get("role", existing.role.value)),
            password=data.get("password"),
        )
        saved = service.save(session_user(), user)
        return jsonify({"success": True, "user": saved.to_dict()})

    @app.route("/api/admin/users/<int:user_id>", methods=["DELETE"], endpoint="delete_user")
    @admin_required
    @json_errors
    def delete_user(user_id: int):
        container.user_service.delete_by_id(session_user(), user_id)
        return jsonify({"success": True})
