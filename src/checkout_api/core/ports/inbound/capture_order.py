from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from returns.result import Result

from checkout_api.core.domain.model.errors import CheckoutError
from checkout_api.core.domain.model.order import OrderResponse


@dataclass(frozen=True)
class CaptureOrderCommand:
    order_id: str  # gateway-assigned id, opaque to us


class CaptureOrderUseCase(Protocol):
    async def capture_order(
        self, command: CaptureOrderCommand
    ) -> Result[OrderResponse, CheckoutError]: ...
