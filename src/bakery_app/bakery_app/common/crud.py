from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, Optional, Protocol, TypeVar

from ..core.exceptions import EntityNotFoundError
from .pagination import Page, PageRequest

T = TypeVar("T")


def like_pattern(filter_text: Optional[str]) -> Optional[str]:
    """Wrap a non-empty filter as a SQL LIKE pattern, else None."""
    if filter_text is None or not filter_text.strip():
        return None
    return f"%{filter_text.strip()}%"


class CrudRepository(Protocol[T]):
    """Minimal repository contract the generic CRUD services rely on."""

    def get_by_id(self, entity_id: int) -> Optional[T]:
        raise NotImplementedError

    def save(self, entity: T) -> T:
        raise NotImplementedError

    def delete_by_id(self, entity_id: int) -> bool:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError


class CrudService(ABC, Generic[T]):
    """Template for create/read/update/delete use cases over one repository."""

    @property
    @abstractmethod
    def repository(self) -> CrudRepository[T]:
        raise NotImplementedError

    @abstractmethod
    def create_new(self, current_user: Any) -> T:
        raise NotImplementedError

    @staticmethod
    def entity_id(entity: T) -> Optional[int]:
        return getattr(entity, "id", None)

    def save(self, current_user: Any, entity: T) -> T:
        return self.repository.save(entity)

    def delete(self, current_user: Any, entity: Optional[T]) -> None:
        if entity is None:
            raise EntityNotFoundError("Entity not found")
        entity_id = self.entity_id(entity)
        if entity_id is None or not self.repository.delete_by_id(int(entity_id)):
            raise EntityNotFoundError("Entity not found")

    def delete_by_id(self, current_user: Any, entity_id: int) -> None:
        self.delete(current_user, self.load(entity_id))

    def count(self) -> int:
        return self.repository.count()

    def load(self, entity_id: int) -> T:
        entity = self.repository.get_by_id(int(entity_id))
        if entity is None:
            raise EntityNotFoundError("Entity not found")
        return entity


class FilterableCrudService(CrudService[T]):
    @abstractmethod
    def find_any_matching(self, filter_text: Optional[str], page_request: PageRequest) -> Page[T]:
        raise NotImplementedError

    @abstractmethod
    def count_any_matching(self, filter_text: Optional[str]) -> int:
        raise NotImplementedError

    like_pattern = staticmethod(like_pattern)
