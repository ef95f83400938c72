from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Tuple


@dataclass(frozen=True)
class UnitAmount:
    """Currency code plus a decimal string; the string is never turned into a float."""

    currency_code: str
    value: str

    def __post_init__(self) -> None:
        if not self.currency_code.strip():
            raise ValueError("currency_code is required")
        try:
            dec = Decimal(self.value)
        except (InvalidOperation, TypeError):
            raise ValueError(f"invalid_amount: {self.value!r}") from None
        if not dec.is_finite() or dec < 0:
            raise ValueError(f"invalid_amount: {self.value!r}")


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    unit_amount: UnitAmount
    description: str = ""
    image_urls: Tuple[str, ...] = field(default_factory=tuple)
    original_price: str | None = None
