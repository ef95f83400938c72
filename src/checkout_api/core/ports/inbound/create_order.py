from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from returns.result import Result

from checkout_api.core.domain.model.errors import CheckoutError
from checkout_api.core.domain.model.order import CartLine, OrderResponse


@dataclass(frozen=True)
class CreateOrderCommand:
    cart: Sequence[CartLine]


class CreateOrderUseCase(Protocol):
    async def create_order(
        self, command: CreateOrderCommand
    ) -> Result[OrderResponse, CheckoutError]: ...
