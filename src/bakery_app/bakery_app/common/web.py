from __future__ import annotations

from functools import wraps
from typing import Any, Optional

from flask import current_app, jsonify, request, session

from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    EntityNotFoundError,
    UserFriendlyDataError,
    ValidationError,
)
from ..users.service import SessionUser
from .logger import get_logger
from .pagination import PageRequest

log = get_logger(__name__)

_STATUS_BY_ERROR = (
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (EntityNotFoundError, 404),
    (UserFriendlyDataError, 400),
    (ValidationError, 400),
)


def error_response(message: str, status: int):
    return jsonify({"success": False, "message": message}), status


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return error_response("Please sign in to continue", 401)
        return view(*args, **kwargs)

    return wrapper


def admin_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return error_response("Please sign in to continue", 401)
        if session.get("role") != Role.ADMIN.value:
            return error_response("You do not have permission", 403)
        return view(*args, **kwargs)

    return wrapper


def json_errors(view):
    """Translate domain errors into JSON responses; log anything unexpected."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            for error_type, status in _STATUS_BY_ERROR:
                if isinstance(e, error_type):
                    return error_response(str(e), status)
            return error_response(str(e), 400)
        except Exception as e:
            log.exception("unhandled error in %s", request.path)
            if bool(current_app.config.get("DEBUG", False)):
                return error_response(f"System error: {e}", 500)
            return error_response("System error", 500)

    return wrapper


def session_user() -> Optional[SessionUser]:
    if "user_id" not in session:
        return None
    return SessionUser(
        id=int(session["user_id"]),
        email=session.get("email", ""),
        full_name=session.get("name", ""),
        role=Role(session.get("role")),
    )


def store_session_user(user: SessionUser) -> None:
    session["user_id"] = user.id
    session["email"] = user.email
    session["name"] = user.full_name
    session["role"] = user.role.value


def request_data() -> dict[str, Any]:
    """JSON body when present, else form fields."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}


def parse_int(value: Any, field_name: str, *, default: Optional[int] = None) -> int:
    if value is None or value == "":
        if default is None:
            raise ValidationError(f"{field_name} is required")
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")


def page_request_from_args() -> PageRequest:
    default_size = int(current_app.config.get("PAGE_SIZE", DEFAULT_PAGE_SIZE))
    return PageRequest(
        page=parse_int(request.args.get("page"), "page", default=0),
        size=parse_int(request.args.get("size"), "size", default=default_size),
    )
