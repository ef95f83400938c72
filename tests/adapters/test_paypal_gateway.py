"""PayPalGateway against an httpx.MockTransport standing in for PayPal."""

from __future__ import annotations

import asyncio
import json
from typing import Callable

import httpx
import pytest

from checkout_api.adapters.outbound.paypal_gateway import (
    SANDBOX_BASE_URL,
    PayPalCredentials,
    PayPalGateway,
)
from checkout_api.core.domain.model.errors import (
    GatewayApiError,
    GatewayTransportError,
)
from checkout_api.core.domain.model.order import (
    CheckoutPaymentIntent,
    OrderRequest,
    PurchaseUnit,
)
from checkout_api.core.domain.model.product import UnitAmount

ORDER_REQUEST = OrderRequest(
    intent=CheckoutPaymentIntent.CAPTURE,
    purchase_units=(PurchaseUnit(UnitAmount("USD", "19.99")),),
)


class FakePayPal:
    """Routes requests by path and records them."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.token_calls = 0
        self.routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {
            "/v1/oauth2/token": self._token,
        }

    def _token(self, request: httpx.Request) -> httpx.Response:
        self.token_calls += 1
        return httpx.Response(
            200, json={"access_token": f"tok-{self.token_calls}", "expires_in": 32400}
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(request.url.path)
        if handler is None:
            return httpx.Response(404, json={"name": "RESOURCE_NOT_FOUND"})
        return handler(request)


class Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def paypal() -> FakePayPal:
    return FakePayPal()


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
async def gateway(paypal: FakePayPal, clock: Clock):
    async with httpx.AsyncClient(transport=httpx.MockTransport(paypal)) as client:
        yield PayPalGateway(
            client=client,
            credentials=PayPalCredentials("client-id", "client-secret"),
            base_url=SANDBOX_BASE_URL,
            clock=clock,
        )


class TestCreateOrder:

    async def test_posts_purchase_units_with_bearer_token(self, gateway, paypal):
        paypal.routes["/v2/checkout/orders"] = lambda r: httpx.Response(
            201, json={"id": "5O190127TN364715T", "status": "CREATED"}
        )

        result = await gateway.create_order(ORDER_REQUEST)

        order = result.unwrap()
        assert order.order_id == "5O190127TN364715T"
        assert order.status == "CREATED"
        assert order.status_code == 201
        assert order.body == {"id": "5O190127TN364715T", "status": "CREATED"}

        token_req, order_req = paypal.requests
        assert token_req.headers["Authorization"].startswith("Basic ")
        assert order_req.headers["Authorization"] == "Bearer tok-1"
        assert json.loads(order_req.content) == {
            "intent": "CAPTURE",
            "purchase_units": [{"amount": {"currency_code": "USD", "value": "19.99"}}],
        }

    async def test_structured_error_becomes_api_error(self, gateway, paypal):
        body = {
            "name": "UNPROCESSABLE_ENTITY",
            "message": "The requested action could not be performed.",
            "debug_id": "abc123",
        }
        paypal.routes["/v2/checkout/orders"] = lambda r: httpx.Response(422, json=body)

        err = (await gateway.create_order(ORDER_REQUEST)).failure()

        assert isinstance(err, GatewayApiError)
        assert err.status_code == 422
        assert err.message == "The requested action could not be performed."
        assert err.debug_id == "abc123"
        assert err.body == body

    async def test_network_failure_becomes_transport_error(self, gateway, paypal):
        def boom(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        paypal.routes["/v2/checkout/orders"] = boom

        err = (await gateway.create_order(ORDER_REQUEST)).failure()
        assert isinstance(err, GatewayTransportError)

    async def test_non_json_response_becomes_transport_error(self, gateway, paypal):
        paypal.routes["/v2/checkout/orders"] = lambda r: httpx.Response(
            502, text="<html>bad gateway</html>"
        )
        err = (await gateway.create_order(ORDER_REQUEST)).failure()
        assert isinstance(err, GatewayTransportError)

    async def test_no_retry_on_failure(self, gateway, paypal):
        paypal.routes["/v2/checkout/orders"] = lambda r: httpx.Response(
            500, json={"name": "INTERNAL_SERVER_ERROR", "message": "oops"}
        )
        await gateway.create_order(ORDER_REQUEST)
        order_calls = [r for r in paypal.requests if r.url.path == "/v2/checkout/orders"]
        assert len(order_calls) == 1


class TestCaptureOrder:

    async def test_posts_to_capture_endpoint(self, gateway, paypal):
        paypal.routes["/v2/checkout/orders/ORDER123/capture"] = lambda r: httpx.Response(
            201, json={"id": "ORDER123", "status": "COMPLETED"}
        )

        capture = (await gateway.capture_order("ORDER123")).unwrap()

        assert capture.order_id == "ORDER123"
        assert capture.status == "COMPLETED"
        assert capture.status_code == 201
        assert paypal.requests[-1].method == "POST"

    async def test_already_captured_is_api_error(self, gateway, paypal):
        paypal.routes["/v2/checkout/orders/ORDER123/capture"] = lambda r: httpx.Response(
            422,
            json={
                "name": "UNPROCESSABLE_ENTITY",
                "message": "ORDER_ALREADY_CAPTURED",
            },
        )
        err = (await gateway.capture_order("ORDER123")).failure()
        assert isinstance(err, GatewayApiError)
        assert err.message == "ORDER_ALREADY_CAPTURED"


class TestAccessToken:

    async def test_token_is_reused_until_expiry(self, gateway, paypal, clock):
        paypal.routes["/v2/checkout/orders/A/capture"] = lambda r: httpx.Response(
            201, json={"status": "COMPLETED"}
        )

        await gateway.capture_order("A")
        await gateway.capture_order("A")
        assert paypal.token_calls == 1

        clock.now += 32400
        await gateway.capture_order("A")
        assert paypal.token_calls == 2
        assert paypal.requests[-1].headers["Authorization"] == "Bearer tok-2"

    async def test_concurrent_calls_share_one_token_fetch(self, gateway, paypal):
        async def slow_token(request):
            await asyncio.sleep(0.02)
            return paypal._token(request)

        paypal.routes["/v1/oauth2/token"] = slow_token
        paypal.routes["/v2/checkout/orders/A/capture"] = lambda r: httpx.Response(
            201, json={"status": "COMPLETED"}
        )

        results = await asyncio.gather(*(gateway.capture_order("A") for _ in range(5)))

        assert all(r.unwrap().status == "COMPLETED" for r in results)
        assert paypal.token_calls == 1
        captures = [r for r in paypal.requests if r.url.path.endswith("/capture")]
        assert {r.headers["Authorization"] for r in captures} == {"Bearer tok-1"}

    async def test_unauthorized_drops_cached_token(self, gateway, paypal):
        paypal.routes["/v2/checkout/orders/A/capture"] = lambda r: httpx.Response(
            401, json={"name": "AUTHENTICATION_FAILURE", "message": "expired"}
        )
        await gateway.capture_order("A")
        await gateway.capture_order("A")
        assert paypal.token_calls == 2

    async def test_bad_credentials_are_api_error(self, gateway, paypal):
        paypal.routes["/v1/oauth2/token"] = lambda r: httpx.Response(
            401,
            json={"error": "invalid_client", "error_description": "Client Authentication failed"},
        )
        err = (await gateway.capture_order("A")).failure()
        assert isinstance(err, GatewayApiError)
        assert err.message == "Client Authentication failed"
        assert all(r.url.path == "/v1/oauth2/token" for r in paypal.requests)
