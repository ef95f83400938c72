"""JSON-file-backed product catalog.

The file holds a list of product documents in the same camelCase shape the
storefront reads from ``GET /api/products/{id}``::

    [{"id": "p-1", "name": "Mug", "unitAmount": {"currencyCode": "USD", "value": "12.00"}}]
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Mapping

import structlog
from returns.result import Failure, Result, Success

from checkout_api.core.domain.model.errors import CatalogUnavailable, CheckoutError
from checkout_api.core.domain.model.product import Product, UnitAmount
from checkout_api.core.ports.outbound.catalog import ProductCatalog

logger = structlog.get_logger(__name__)


class JsonFileCatalog(ProductCatalog):
    """Parses the file once and again only after it changes on disk."""

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._stamp: tuple[int, int] | None = None
        self._products: dict[str, Product] = {}

    async def get_product(
        self, product_id: str
    ) -> Result[Product | None, CheckoutError]:
        try:
            products = await asyncio.to_thread(self._current)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(
                "catalog_load_failed", path=str(self._file_path), error=repr(e)
            )
            return Failure(CatalogUnavailable(message="product catalog unavailable"))

        product = products.get(product_id)
        if product is None:
            logger.info("product_not_found", product_id=product_id)
        return Success(product)

    def _current(self) -> dict[str, Product]:
        st = self._file_path.stat()
        stamp = (st.st_mtime_ns, st.st_size)
        if stamp != self._stamp:
            # racing reloads parse the same bytes; the last one wins
            products = self._load()
            self._products, self._stamp = products, stamp
            logger.info("catalog_loaded", path=str(self._file_path), products=len(products))
        return self._products

    def _load(self) -> dict[str, Product]:
        raw = json.loads(self._file_path.read_text(encoding="utf-8"))
        return {doc["id"]: product_from_document(doc) for doc in raw}


def product_from_document(doc: Mapping[str, Any]) -> Product:
    amount = doc["unitAmount"]
    return Product(
        id=str(doc["id"]),
        name=str(doc.get("name", "")),
        description=str(doc.get("description", "")),
        image_urls=tuple(doc.get("imageUrls", ())),
        unit_amount=UnitAmount(
            currency_code=str(amount["currencyCode"]), value=str(amount["value"])
        ),
        original_price=doc.get("originalPrice"),
    )
