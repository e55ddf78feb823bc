from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ..common.crud import FilterableCrudService
from ..common.logger import get_logger
from ..common.pagination import Page, PageRequest
from ..common.validators import require_in_range, require_max_length, require_non_empty
from ..core.constants import MAX_PRODUCT_NAME_LENGTH, MAX_PRODUCT_PRICE, MIN_PRODUCT_PRICE
from ..core.exceptions import UserFriendlyDataError
from .model import Product
from .repository import DuplicateProductNameError, ProductRepository

log = get_logger(__name__)

DUPLICATE_NAME = "There is already a product with that name. Please select a unique name for the product."


class ProductService(FilterableCrudService[Product]):
    def __init__(self, products: ProductRepository):
        self._products = products

    @property
    def repository(self) -> ProductRepository:
        return self._products

    def create_new(self, current_user) -> Product:
        return Product(id=None, name="", price=0)

    def find_any_matching(self, filter_text: Optional[str], page_request: PageRequest) -> Page[Product]:
        pattern = self.like_pattern(filter_text)
        items = self._products.find_page(pattern=pattern, offset=page_request.offset, limit=page_request.size)
        return Page(
            content=list(items),
            page=page_request.page,
            size=page_request.size,
            total=self._products.count_matching(pattern=pattern),
        )

    def count_any_matching(self, filter_text: Optional[str]) -> int:
        return self._products.count_matching(pattern=self.like_pattern(filter_text))

    def apply_form(self, product: Product, *, name: str, price: int) -> Product:
        name = require_max_length(require_non_empty(name, "Name"), "Name", MAX_PRODUCT_NAME_LENGTH)
        price = require_in_range(int(price), "Price", MIN_PRODUCT_PRICE, MAX_PRODUCT_PRICE)
        return replace(product, name=name, price=price)

    def save(self, current_user, entity: Product) -> Product:
        try:
            saved = super().save(current_user, entity)
        except DuplicateProductNameError:
            raise UserFriendlyDataError(DUPLICATE_NAME)
        log.info("product %r saved (price=%s)", saved.name, saved.price)
        return saved
