from __future__ import annotations

from typing import Any, Mapping, Sequence

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from returns.result import Success

from checkout_api.core.domain.model.errors import (
    CheckoutError,
    ProductNotFound,
    ValidationError,
)
from checkout_api.core.domain.model.order import CartLine, OrderResponse
from checkout_api.core.domain.model.product import Product, UnitAmount
from checkout_api.core.ports.inbound.capture_order import (
    CaptureOrderCommand,
    CaptureOrderUseCase,
)
from checkout_api.core.ports.inbound.create_order import (
    CreateOrderCommand,
    CreateOrderUseCase,
)
from checkout_api.core.ports.inbound.get_product import (
    GetProductQuery,
    GetProductUseCase,
)

logger = structlog.get_logger(__name__)

CREATE_ORDER_FAILED = "Failed to create order."
CAPTURE_ORDER_FAILED = "Failed to capture order."
FETCH_PRODUCT_FAILED = "Failed to fetch product."
PRODUCT_NOT_FOUND = "Product not found"

# ---- HTTP DTOs (adapter layer) ---------------------------------------------


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CartLineIn(_CamelModel):
    # blank ids and non-positive quantities are rejected by the price resolver
    id: str = Field(
        validation_alias=AliasChoices("id", "productId"),
        examples=["p-1"],
    )
    quantity: int = Field(default=1, examples=[1])
    # storefront echoes the displayed price; never used for pricing
    unit_amount: dict[str, Any] | None = None


class CreateOrderRequest(BaseModel):
    cart: list[CartLineIn]


class UnitAmountOut(_CamelModel):
    currency_code: str
    value: str


class ProductOut(_CamelModel):
    id: str
    name: str
    description: str
    image_urls: list[str]
    unit_amount: UnitAmountOut
    original_price: str | None = None


class ErrorBody(BaseModel):
    error: str


# ---- Mapping helpers -------------------------------------------------------


def _to_command(req: CreateOrderRequest) -> CreateOrderCommand:
    return CreateOrderCommand(
        cart=tuple(
            CartLine(
                product_id=ln.id,
                quantity=ln.quantity,
                client_unit_amount=_client_amount(ln.unit_amount),
            )
            for ln in req.cart
        )
    )


def _client_amount(raw: Mapping[str, Any] | None) -> UnitAmount | None:
    if not raw:
        return None
    try:
        return UnitAmount(
            currency_code=str(raw.get("currencyCode", "")), value=str(raw.get("value"))
        )
    except ValueError:
        return None


def _product_out(product: Product) -> dict[str, Any]:
    return ProductOut(
        id=product.id,
        name=product.name,
        description=product.description,
        image_urls=list(product.image_urls),
        unit_amount=UnitAmountOut(
            currency_code=product.unit_amount.currency_code,
            value=product.unit_amount.value,
        ),
        original_price=product.original_price,
    ).model_dump(by_alias=True, exclude_none=True)


def _envelope(resp: OrderResponse) -> JSONResponse:
    return JSONResponse(status_code=resp.http_status_code, content=resp.json_response)


def _error(status: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status, content=ErrorBody(error=message).model_dump())


def _product_error_to_http(err: CheckoutError) -> tuple[int, str]:
    if isinstance(err, ProductNotFound):
        return 404, PRODUCT_NOT_FOUND
    if isinstance(err, ValidationError):
        return 400, str(err)
    return 500, FETCH_PRODUCT_FAILED


# ---- App factory -----------------------------------------------------------


def create_app(
    get_product_uc: GetProductUseCase,
    create_order_uc: CreateOrderUseCase,
    capture_order_uc: CaptureOrderUseCase,
    cors_origins: Sequence[str] = ("*",),
    lifespan: Any = None,
) -> FastAPI:
    app = FastAPI(title="checkout_api", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cors_origins),
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    # --- exception handlers --------------------------------------------------

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info("invalid_request", path=request.url.path, errors=exc.errors())
        if request.method == "POST" and request.url.path == "/api/orders":
            return _error(500, CREATE_ORDER_FAILED)
        return _error(400, "invalid request")

    @app.exception_handler(Exception)
    async def handle_unexpected(_: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_error", error=repr(exc))
        return _error(500, "internal server error")

    # --- routes --------------------------------------------------------------

    @app.get("/")
    def root() -> dict[str, str]:
        return {"message": "Server online"}

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get(
        "/api/products/{product_id}",
        responses={404: {"model": ErrorBody}, 500: {"model": ErrorBody}},
    )
    async def get_product(product_id: str) -> JSONResponse:
        try:
            result = await get_product_uc.get_product(GetProductQuery(product_id))
        except Exception:  # noqa: BLE001
            logger.exception("get_product_crashed", product_id=product_id)
            return _error(500, FETCH_PRODUCT_FAILED)

        if isinstance(result, Success):
            return JSONResponse(status_code=200, content=_product_out(result.unwrap()))

        err = result.failure()
        status, message = _product_error_to_http(err)
        if status >= 500:
            logger.error("get_product_failed", product_id=product_id, error=str(err))
        return _error(status, message)

    @app.post("/api/orders", responses={500: {"model": ErrorBody}})
    async def create_order(req: CreateOrderRequest) -> JSONResponse:
        try:
            result = await create_order_uc.create_order(_to_command(req))
        except Exception:  # noqa: BLE001
            logger.exception("create_order_crashed")
            return _error(500, CREATE_ORDER_FAILED)

        if isinstance(result, Success):
            return _envelope(result.unwrap())

        err = result.failure()
        logger.error("create_order_failed", error_type=type(err).__name__, error=str(err))
        return _error(500, CREATE_ORDER_FAILED)

    @app.post("/api/orders/{order_id}/capture", responses={500: {"model": ErrorBody}})
    async def capture_order(order_id: str) -> JSONResponse:
        try:
            result = await capture_order_uc.capture_order(
                CaptureOrderCommand(order_id=order_id)
            )
        except Exception:  # noqa: BLE001
            logger.exception("capture_order_crashed", order_id=order_id)
            return _error(500, CAPTURE_ORDER_FAILED)

        if isinstance(result, Success):
            return _envelope(result.unwrap())

        err = result.failure()
        logger.error(
            "capture_order_failed",
            order_id=order_id,
            error_type=type(err).__name__,
            error=str(err),
        )
        return _error(500, CAPTURE_ORDER_FAILED)

    return app
