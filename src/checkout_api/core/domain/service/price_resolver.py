from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Sequence, Tuple

from returns.iterables import Fold
from returns.result import Failure, Result, Success

from checkout_api.core.domain.model.errors import (
    CatalogUnavailable,
    CheckoutError,
    ProductNotFound,
    ValidationError,
)
from checkout_api.core.domain.model.order import CartLine, ResolvedLine
from checkout_api.core.domain.model.product import Product
from checkout_api.core.ports.outbound.catalog import ProductCatalog


@dataclass(frozen=True)
class PriceResolver:
    """Replaces client-submitted cart prices with catalog prices.

    Lookups run concurrently in a task group; the resolved lines come back in
    cart order. A missing product fails the whole cart (first missing id in
    cart order).
    """

    catalog: ProductCatalog
    lookup_timeout: float | None = None

    async def resolve_prices(
        self, cart: Sequence[CartLine]
    ) -> Result[Tuple[ResolvedLine, ...], CheckoutError]:
        checked = validate_cart(cart)
        if isinstance(checked, Failure):
            return checked

        # a lookup that raises cancels its siblings
        async with asyncio.TaskGroup() as tg:
            tasks = [tg.create_task(self._resolve_line(line)) for line in cart]
        return Fold.collect([t.result() for t in tasks], Success(()))

    async def _resolve_line(
        self, line: CartLine
    ) -> Result[ResolvedLine, CheckoutError]:
        try:
            found = await asyncio.wait_for(
                self.catalog.get_product(line.product_id), timeout=self.lookup_timeout
            )
        except asyncio.TimeoutError:
            return Failure(
                CatalogUnavailable(
                    message=f"catalog lookup timed out: {line.product_id}"
                )
            )
        return found.bind(lambda product: _to_resolved_line(line, product))


def validate_cart(cart: Sequence[CartLine]) -> Result[Sequence[CartLine], CheckoutError]:
    if not cart:
        return Failure(ValidationError("cart must contain at least one item"))
    for i, ln in enumerate(cart):
        if not ln.product_id.strip():
            return Failure(ValidationError(f"cart[{i}].id is required"))
        if ln.quantity <= 0:
            return Failure(ValidationError(f"cart[{i}].quantity must be > 0"))
    return Success(cart)


def _to_resolved_line(
    line: CartLine, product: Product | None
) -> Result[ResolvedLine, CheckoutError]:
    if product is None:
        return Failure(
            ProductNotFound(message="not in catalog", product_id=line.product_id)
        )
    return Success(ResolvedLine(product_id=line.product_id, amount=product.unit_amount))
