from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from returns.result import Result

from checkout_api.core.domain.model.errors import CheckoutError
from checkout_api.core.domain.model.product import Product


@dataclass(frozen=True)
class GetProductQuery:
    product_id: str


class GetProductUseCase(Protocol):
    async def get_product(
        self, query: GetProductQuery
    ) -> Result[Product, CheckoutError]: ...
