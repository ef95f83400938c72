from __future__ import annotations

from typing import Protocol

from returns.result import Result

from checkout_api.core.domain.model.errors import GatewayError
from checkout_api.core.domain.model.order import (
    GatewayCapture,
    GatewayOrder,
    OrderRequest,
)


class PaymentGateway(Protocol):
    async def create_order(
        self, request: OrderRequest
    ) -> Result[GatewayOrder, GatewayError]: ...

    async def capture_order(
        self, order_id: str
    ) -> Result[GatewayCapture, GatewayError]: ...
