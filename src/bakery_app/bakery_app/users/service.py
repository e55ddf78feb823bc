from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.crud import FilterableCrudService
from ..common.logger import get_logger
from ..common.pagination import Page, PageRequest
from ..common.validators import require_min_length, require_non_empty
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, UserFriendlyDataError, ValidationError
from .model import User
from .repository import UserRepository

log = get_logger(__name__)

MODIFY_LOCKED_USER_NOT_PERMITTED = "User has been locked and cannot be modified or deleted"
DELETING_SELF_NOT_PERMITTED = "You cannot delete your own account"
EMAIL_TAKEN = "There is already a user with that email address"


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    id: int
    email: str
    full_name: str
    role: Role

    @classmethod
    def from_user(cls, user: User) -> "SessionUser":
        return cls(id=int(user.id), email=user.email, full_name=user.full_name, role=user.role)


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, email: str, password: str) -> SessionUser:
        user = self._users.get_by_email((email or "").strip())
        if not user:
            raise AuthenticationError("Wrong email or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Wrong email or password")

        log.info("user %s logged in", user.email)
        return SessionUser.from_user(user)


class UserService(FilterableCrudService[User]):
    """Use case: manage users (admin)."""

    def __init__(self, users: UserRepository):
        self._users = users

    @property
    def repository(self) -> UserRepository:
        return self._users

    def create_new(self, current_user) -> User:
        return User(id=None, email="", first_name="", last_name="", password_hash="", role=Role.BARISTA)

    def find_any_matching(self, filter_text: Optional[str], page_request: PageRequest) -> Page[User]:
        pattern = self.like_pattern(filter_text)
        items = self._users.find_page(pattern=pattern, offset=page_request.offset, limit=page_request.size)
        return Page(
            content=list(items),
            page=page_request.page,
            size=page_request.size,
            total=self._users.count_matching(pattern=pattern),
        )

    def count_any_matching(self, filter_text: Optional[str]) -> int:
        return self._users.count_matching(pattern=self.like_pattern(filter_text))

    def apply_form(
        self,
        user: User,
        *,
        email: str,
        first_name: str,
        last_name: str,
        role: Role,
        password: Optional[str] = None,
    ) -> User:
        """Return a copy of user with form values bound, hashing a new password when given."""

        email = require_non_empty(email, "Email")
        if "@" not in email:
            raise ValidationError("Email is not valid")
        first_name = require_non_empty(first_name, "First name")
        last_name = require_non_empty(last_name, "Last name")

        password_hash = user.password_hash
        if password:
            require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
            password_hash = generate_password_hash(password)
        elif user.id is None:
            raise ValidationError("Password is required")

        return replace(
            user,
            email=email,
            first_name=first_name,
            last_name=last_name,
            role=Role(role),
            password_hash=password_hash,
        )

    def save(self, current_user, entity: User) -> User:
        if entity.id is not None:
            self._throw_if_user_locked(self._users.get_by_id(entity.id))
        self._throw_if_locked_on_create(entity)

        same_email = self._users.get_by_email(entity.email)
        if same_email and same_email.id != entity.id:
            raise UserFriendlyDataError(EMAIL_TAKEN)

        saved = self._users.save(entity)
        log.info("user %s saved by %s", saved.email, getattr(current_user, "email", "-"))
        return saved

    def delete(self, current_user, entity: Optional[User]) -> None:
        if entity is not None:
            self._throw_if_deleting_self(current_user, entity)
            self._throw_if_user_locked(entity)
        super().delete(current_user, entity)
        log.info("user %s deleted by %s", entity.email, getattr(current_user, "email", "-"))

    @staticmethod
    def _throw_if_deleting_self(current_user, user: User) -> None:
        if current_user is not None and getattr(current_user, "id", None) == user.id:
            raise UserFriendlyDataError(DELETING_SELF_NOT_PERMITTED)

    @staticmethod
    def _throw_if_user_locked(user: Optional[User]) -> None:
        if user is not None and user.locked:
            raise UserFriendlyDataError(MODIFY_LOCKED_USER_NOT_PERMITTED)

    @staticmethod
    def _throw_if_locked_on_create(user: User) -> None:
        # Locked accounts only come from the demo seed, never from the admin screen.
        if user.id is None and user.locked:
            raise UserFriendlyDataError(MODIFY_LOCKED_USER_NOT_PERMITTED)
