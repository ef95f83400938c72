from __future__ import annotations

from dataclasses import dataclass

import structlog
from returns.result import Failure, Result

from checkout_api.core.domain.model.errors import (
    CheckoutError,
    GatewayApiError,
    PaymentGatewayError,
    ValidationError,
)
from checkout_api.core.domain.model.order import (
    GatewayCapture,
    GatewayOrder,
    OrderResponse,
)
from checkout_api.core.domain.service.order_builder import build_order_request
from checkout_api.core.domain.service.price_resolver import PriceResolver
from checkout_api.core.ports.inbound.capture_order import (
    CaptureOrderCommand,
    CaptureOrderUseCase,
)
from checkout_api.core.ports.inbound.create_order import (
    CreateOrderCommand,
    CreateOrderUseCase,
)
from checkout_api.core.ports.outbound.payment import PaymentGateway

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CheckoutDeps:
    prices: PriceResolver
    payment: PaymentGateway


@dataclass(frozen=True)
class CheckoutService(CreateOrderUseCase, CaptureOrderUseCase):
    """Two-phase checkout: create a gateway order from a cart, capture it later.

    Stateless. The gateway owns the order state machine; capturing an unknown
    or already captured order is rejected by the gateway, not here.
    """

    deps: CheckoutDeps

    async def create_order(
        self, command: CreateOrderCommand
    ) -> Result[OrderResponse, CheckoutError]:
        resolved = await self.deps.prices.resolve_prices(command.cart)
        if isinstance(resolved, Failure):
            logger.warning("cart_resolution_failed", error=str(resolved.failure()))
            return resolved

        request = build_order_request(resolved.unwrap())
        created = await self.deps.payment.create_order(request)
        return created.map(_order_to_response).alt(_hide_gateway_details)

    async def capture_order(
        self, command: CaptureOrderCommand
    ) -> Result[OrderResponse, CheckoutError]:
        if not command.order_id.strip():
            return Failure(ValidationError("order_id is required"))

        captured = await self.deps.payment.capture_order(command.order_id)
        return captured.map(_capture_to_response).alt(_hide_gateway_details)


def _order_to_response(order: GatewayOrder) -> OrderResponse:
    logger.info("order_created", order_id=order.order_id, status=order.status)
    return OrderResponse(json_response=order.body, http_status_code=order.status_code)


def _capture_to_response(capture: GatewayCapture) -> OrderResponse:
    logger.info("order_captured", order_id=capture.order_id, status=capture.status)
    return OrderResponse(
        json_response=capture.body, http_status_code=capture.status_code
    )


def _hide_gateway_details(err: CheckoutError) -> CheckoutError:
    # transport faults pass through as-is
    if not isinstance(err, GatewayApiError):
        return err
    logger.error(
        "gateway_api_error",
        status_code=err.status_code,
        debug_id=err.debug_id,
        body=dict(err.body),
    )
    return PaymentGatewayError(f"payment gateway API error: {err.message}")
