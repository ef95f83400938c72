from __future__ import annotations

from typing import Sequence

from checkout_api.core.domain.model.order import (
    CheckoutPaymentIntent,
    OrderRequest,
    PurchaseUnit,
    ResolvedLine,
)


def build_order_request(lines: Sequence[ResolvedLine]) -> OrderRequest:
    """純粋：解決済み明細 → 即時キャプチャの注文リクエスト"""
    return OrderRequest(
        intent=CheckoutPaymentIntent.CAPTURE,
        purchase_units=tuple(PurchaseUnit(amount=ln.amount) for ln in lines),
    )
