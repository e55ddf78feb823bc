from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for access control."""

    ADMIN = "admin"
    BARISTA = "barista"
    BAKER = "baker"


class OrderState(str, Enum):
    """Order lifecycle states as stored in the database."""

    NEW = "NEW"
    CONFIRMED = "CONFIRMED"
    READY = "READY"
    DELIVERED = "DELIVERED"
    PROBLEM = "PROBLEM"
    CANCELLED = "CANCELLED"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()
