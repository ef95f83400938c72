from __future__ import annotations

from dataclasses import dataclass

from returns.result import Failure, Result, Success

from checkout_api.core.domain.model.errors import (
    CheckoutError,
    ProductNotFound,
    ValidationError,
)
from checkout_api.core.domain.model.product import Product
from checkout_api.core.ports.inbound.get_product import (
    GetProductQuery,
    GetProductUseCase,
)
from checkout_api.core.ports.outbound.catalog import ProductCatalog


@dataclass(frozen=True)
class GetProductDeps:
    catalog: ProductCatalog


@dataclass(frozen=True)
class GetProductService(GetProductUseCase):
    deps: GetProductDeps

    async def get_product(
        self, query: GetProductQuery
    ) -> Result[Product, CheckoutError]:
        if not query.product_id.strip():
            return Failure(ValidationError(message="product id is required"))

        found = await self.deps.catalog.get_product(query.product_id)
        return found.bind(lambda product: _require(query.product_id, product))


def _require(product_id: str, product: Product | None) -> Result[Product, CheckoutError]:
    if product is None:
        return Failure(ProductNotFound(message="not in catalog", product_id=product_id))
    return Success(product)
