from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Product:
    """Domain entity: Product.

    price is the real price * 100, kept as int to avoid rounding errors.
    """

    id: Optional[int]
    name: str
    price: int = 0

    def __str__(self) -> str:
        return self.name

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "price": self.price}
