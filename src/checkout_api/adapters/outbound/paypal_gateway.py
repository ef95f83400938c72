"""PayPal Orders v2 over plain HTTPS.

One round trip per create/capture, no retries. The OAuth2 client-credentials
token is fetched lazily and reused until shortly before it expires.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping
from urllib.parse import quote

import httpx
import structlog
from returns.result import Failure, Result, Success

from checkout_api.core.domain.model.errors import (
    GatewayApiError,
    GatewayError,
    GatewayTransportError,
)
from checkout_api.core.domain.model.order import (
    GatewayCapture,
    GatewayOrder,
    OrderRequest,
)
from checkout_api.core.ports.outbound.payment import PaymentGateway

logger = structlog.get_logger(__name__)

SANDBOX_BASE_URL = "https://api-m.sandbox.paypal.com"
LIVE_BASE_URL = "https://api-m.paypal.com"

TOKEN_PATH = "/v1/oauth2/token"
ORDERS_PATH = "/v2/checkout/orders"

# refresh this many seconds before PayPal says the token expires
TOKEN_EXPIRY_MARGIN = 60.0


@dataclass(frozen=True)
class PayPalCredentials:
    client_id: str
    client_secret: str

    def __repr__(self) -> str:
        return f"PayPalCredentials(client_id={self.client_id!r}, client_secret='***')"


@dataclass(frozen=True)
class _Reply:
    status_code: int
    body: Mapping[str, Any]


@dataclass(frozen=True)
class _AccessToken:
    value: str
    expires_at: float


class PayPalGateway(PaymentGateway):

    def __init__(
        self,
        client: httpx.AsyncClient,
        credentials: PayPalCredentials,
        base_url: str = SANDBOX_BASE_URL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._client = client
        self._credentials = credentials
        self._base_url = base_url.rstrip("/")
        self._clock = clock
        self._token: _AccessToken | None = None
        # one refresh at a time; concurrent callers wait and reuse its token
        self._token_lock = asyncio.Lock()

    # --- PaymentGateway -------------------------------------------------------

    async def create_order(
        self, request: OrderRequest
    ) -> Result[GatewayOrder, GatewayError]:
        sent = await self._post(ORDERS_PATH, request.to_json())
        return sent.map(
            lambda reply: GatewayOrder(
                order_id=str(reply.body.get("id", "")),
                status=reply.body.get("status"),
                status_code=reply.status_code,
                body=reply.body,
            )
        )

    async def capture_order(
        self, order_id: str
    ) -> Result[GatewayCapture, GatewayError]:
        path = f"{ORDERS_PATH}/{quote(order_id, safe='')}/capture"
        sent = await self._post(path, None)
        return sent.map(
            lambda reply: GatewayCapture(
                order_id=order_id,
                status=reply.body.get("status"),
                status_code=reply.status_code,
                body=reply.body,
            )
        )

    # --- HTTP helpers ---------------------------------------------------------

    async def _post(
        self, path: str, payload: Mapping[str, Any] | None
    ) -> Result[_Reply, GatewayError]:
        token = await self._access_token()
        if isinstance(token, Failure):
            return token

        headers = {
            "Authorization": f"Bearer {token.unwrap()}",
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }
        logger.debug("paypal_request", path=path, body=payload)
        try:
            response = await self._client.post(
                self._base_url + path, json=payload, headers=headers
            )
        except httpx.HTTPError as e:
            logger.error("paypal_unreachable", path=path, error=repr(e))
            return Failure(
                GatewayTransportError(message=f"payment gateway unreachable: {e!r}")
            )

        logger.debug(
            "paypal_response",
            path=path,
            status_code=response.status_code,
            headers=dict(response.headers),
        )
        if response.status_code == 401:
            # stale token; the next call fetches a fresh one
            self._token = None
        return _decode(response)

    async def _access_token(self) -> Result[str, GatewayError]:
        cached = self._cached_token()
        if cached is not None:
            return Success(cached)
        async with self._token_lock:
            cached = self._cached_token()
            if cached is not None:
                return Success(cached)
            return await self._fetch_token()

    def _cached_token(self) -> str | None:
        cached = self._token
        if cached is not None and self._clock() < cached.expires_at:
            return cached.value
        return None

    async def _fetch_token(self) -> Result[str, GatewayError]:
        try:
            response = await self._client.post(
                self._base_url + TOKEN_PATH,
                data={"grant_type": "client_credentials"},
                auth=(self._credentials.client_id, self._credentials.client_secret),
            )
        except httpx.HTTPError as e:
            logger.error("paypal_token_unreachable", error=repr(e))
            return Failure(
                GatewayTransportError(message=f"payment gateway unreachable: {e!r}")
            )
        return _decode(response).bind(self._remember_token)

    def _remember_token(self, reply: _Reply) -> Result[str, GatewayError]:
        value = reply.body.get("access_token")
        if not value:
            return Failure(
                GatewayTransportError(message="token response has no access_token")
            )
        expires_in = float(reply.body.get("expires_in", 0))
        self._token = _AccessToken(
            value=str(value),
            expires_at=self._clock() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0.0),
        )
        return Success(self._token.value)


def _decode(response: httpx.Response) -> Result[_Reply, GatewayError]:
    try:
        body = response.json() if response.content else {}
    except ValueError:
        return Failure(
            GatewayTransportError(
                message=f"undecodable gateway response (HTTP {response.status_code})"
            )
        )

    if not isinstance(body, dict):
        return Failure(
            GatewayTransportError(
                message=f"unexpected gateway payload (HTTP {response.status_code})"
            )
        )

    if response.is_success:
        return Success(_Reply(status_code=response.status_code, body=body))

    return Failure(_api_error(response.status_code, body))


def _api_error(status_code: int, body: Mapping[str, Any]) -> GatewayApiError:
    # orders API: {name, message, debug_id, details}; OAuth: {error, error_description}
    message = (
        body.get("message")
        or body.get("error_description")
        or body.get("name")
        or body.get("error")
        or f"HTTP {status_code}"
    )
    return GatewayApiError(
        message=str(message),
        status_code=status_code,
        body=body,
        debug_id=body.get("debug_id"),
    )
