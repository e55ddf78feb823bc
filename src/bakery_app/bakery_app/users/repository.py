from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, entity_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup."""

        raise NotImplementedError

    def save(self, entity: User) -> User:
        """Insert when id is None, update otherwise. Returns the stored user."""

        raise NotImplementedError

    def delete_by_id(self, entity_id: int) -> bool:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def find_page(self, *, pattern: Optional[str], offset: int, limit: int) -> Sequence[User]:
        """Users whose email, first name, last name or role match the LIKE pattern (all when None)."""

        raise NotImplementedError

    def count_matching(self, *, pattern: Optional[str]) -> int:
        raise NotImplementedError
