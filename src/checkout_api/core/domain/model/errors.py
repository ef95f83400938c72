from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class CheckoutError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class ValidationError(CheckoutError):
    pass


@dataclass(frozen=True)
class ProductNotFound(CheckoutError):
    product_id: str

    def __str__(self) -> str:
        return f"product_not_found: {self.product_id} ({self.message})"


@dataclass(frozen=True)
class CatalogUnavailable(CheckoutError):
    pass


@dataclass(frozen=True)
class GatewayError(CheckoutError):
    pass


@dataclass(frozen=True)
class GatewayApiError(GatewayError):
    """The gateway answered with a structured error body."""

    status_code: int
    body: Mapping[str, Any] = field(default_factory=dict)
    debug_id: str | None = None

    def __str__(self) -> str:
        return f"gateway_api_error: status={self.status_code} ({self.message})"


@dataclass(frozen=True)
class GatewayTransportError(GatewayError):
    """Anything else that went wrong talking to the gateway."""


@dataclass(frozen=True)
class PaymentGatewayError(CheckoutError):
    """Client-facing replacement for a GatewayApiError; carries no gateway body."""
