from __future__ import annotations

from typing import Protocol

from returns.result import Result

from checkout_api.core.domain.model.errors import CheckoutError
from checkout_api.core.domain.model.product import Product


class ProductCatalog(Protocol):
    async def get_product(
        self, product_id: str
    ) -> Result[Product | None, CheckoutError]:
        """Success(None) when the product does not exist; Failure only for store faults."""
        ...
