from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Product


class ProductRepository(Protocol):
    def get_by_id(self, entity_id: int) -> Optional[Product]:
        raise NotImplementedError

    def save(self, entity: Product) -> Product:
        """Insert when id is None, update otherwise.

        Raises DuplicateProductNameError when the unique name constraint is hit.
        """

        raise NotImplementedError

    def delete_by_id(self, entity_id: int) -> bool:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def find_page(self, *, pattern: Optional[str], offset: int, limit: int) -> Sequence[Product]:
        raise NotImplementedError

    def count_matching(self, *, pattern: Optional[str]) -> int:
        raise NotImplementedError


class DuplicateProductNameError(Exception):
    """Storage-level unique constraint violation on product name."""
