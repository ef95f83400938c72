from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Tuple

from checkout_api.core.domain.model.product import UnitAmount


class CheckoutPaymentIntent(str, Enum):
    CAPTURE = "CAPTURE"


@dataclass(frozen=True)
class CartLine:
    product_id: str
    quantity: int = 1
    # whatever price the storefront sent; never used for pricing
    client_unit_amount: UnitAmount | None = None


@dataclass(frozen=True)
class ResolvedLine:
    product_id: str
    amount: UnitAmount


@dataclass(frozen=True)
class PurchaseUnit:
    amount: UnitAmount


@dataclass(frozen=True)
class OrderRequest:
    intent: CheckoutPaymentIntent
    purchase_units: Tuple[PurchaseUnit, ...]

    def to_json(self) -> dict[str, Any]:
        return {
            "intent": self.intent.value,
            "purchase_units": [
                {
                    "amount": {
                        "currency_code": pu.amount.currency_code,
                        "value": pu.amount.value,
                    }
                }
                for pu in self.purchase_units
            ],
        }


@dataclass(frozen=True)
class GatewayOrder:
    order_id: str
    status: str | None
    status_code: int
    body: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class GatewayCapture:
    order_id: str
    status: str | None
    status_code: int
    body: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class OrderResponse:
    json_response: Any
    http_status_code: int
