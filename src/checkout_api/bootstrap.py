from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

import httpx
import structlog
from fastapi import FastAPI

from checkout_api.adapters.inbound.web.fastapi_app import create_app
from checkout_api.adapters.outbound.json_catalog import JsonFileCatalog
from checkout_api.adapters.outbound.paypal_gateway import (
    LIVE_BASE_URL,
    SANDBOX_BASE_URL,
    PayPalCredentials,
    PayPalGateway,
)
from checkout_api.config import Settings
from checkout_api.core.domain.service.checkout_service import (
    CheckoutDeps,
    CheckoutService,
)
from checkout_api.core.domain.service.get_product_service import (
    GetProductDeps,
    GetProductService,
)
from checkout_api.core.domain.service.price_resolver import PriceResolver
from checkout_api.core.ports.outbound.catalog import ProductCatalog
from checkout_api.core.ports.outbound.payment import PaymentGateway
from checkout_api.log import configure_logging

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class UseCases:
    get_product: GetProductService
    checkout: CheckoutService


def build_usecases(
    catalog: ProductCatalog, payment: PaymentGateway, settings: Settings
) -> UseCases:
    prices = PriceResolver(
        catalog=catalog, lookup_timeout=settings.catalog_timeout_seconds
    )
    return UseCases(
        get_product=GetProductService(GetProductDeps(catalog=catalog)),
        checkout=CheckoutService(CheckoutDeps(prices=prices, payment=payment)),
    )


def build_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level, json=settings.log_json)

    if not (settings.paypal_client_id and settings.paypal_client_secret):
        logger.warning("paypal_credentials_missing")

    # プロセス全体で一度だけ生成し、ユースケースへ注入する
    http = httpx.AsyncClient(timeout=settings.paypal_timeout_seconds)
    gateway = PayPalGateway(
        client=http,
        credentials=PayPalCredentials(
            client_id=settings.paypal_client_id,
            client_secret=settings.paypal_client_secret,
        ),
        base_url=(
            LIVE_BASE_URL
            if settings.paypal_environment == "live"
            else SANDBOX_BASE_URL
        ),
    )
    catalog = JsonFileCatalog(settings.catalog_path)
    usecases = build_usecases(catalog, gateway, settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "server_started",
            environment=settings.paypal_environment,
            catalog=str(settings.catalog_path),
        )
        yield
        await http.aclose()

    return create_app(
        usecases.get_product,
        usecases.checkout,
        usecases.checkout,
        cors_origins=settings.cors_origins,
        lifespan=lifespan,
    )


def create_asgi_app() -> FastAPI:
    return build_app()
