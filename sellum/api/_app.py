"""
Application factory — wires settings, storage, PayPal and services into FastAPI.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from sellum.checkout import CheckoutService
from sellum.config import Settings
from sellum.errors import (
    InvalidAmount,
    InvalidInput,
    MarketplaceError,
    NotFound,
    Unauthorized,
    UpstreamFailure,
)
from sellum.logging_config import get_logger
from sellum.paypal import PayPalClient
from sellum.pricing import FlatRateShipping, StoredFeeRates
from sellum.storage import Repository, create_database
from sellum.stores import StoreService
from sellum.api._routes import health_router, orders_router, stores_router
from sellum.api._schemas import ErrorOut

log = get_logger(__name__)

# First match wins, so subclasses come before their bases.
ERROR_STATUS: tuple[tuple[type[MarketplaceError], int], ...] = (
    (InvalidInput, status.HTTP_400_BAD_REQUEST),
    (InvalidAmount, status.HTTP_400_BAD_REQUEST),
    (Unauthorized, status.HTTP_403_FORBIDDEN),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (UpstreamFailure, status.HTTP_502_BAD_GATEWAY),
)


def status_for(error: MarketplaceError) -> int:
    for kind, code in ERROR_STATUS:
        if isinstance(error, kind):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def marketplace_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, MarketplaceError)
    code = status_for(exc)
    if code >= 500:
        log.error(f"{request.method} {request.url.path} failed: {exc.code} {exc.message}")
    else:
        log.info(f"{request.method} {request.url.path} rejected: {exc.code} {exc.message}")
    body = ErrorOut(code=exc.code, message=exc.message)
    return JSONResponse(status_code=code, content=body.model_dump())


def create_app(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    The database and the PayPal client live as long as the app's lifespan;
    `transport` replaces PayPal's network transport (tests).
    """
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        session_factory, engine = await create_database(settings.database_url)
        repo = Repository(session_factory)
        paypal = PayPalClient(settings, transport=transport)

        app.state.settings = settings
        app.state.repo = repo
        app.state.stores = StoreService(repo, paypal)
        app.state.checkout = CheckoutService(
            repo,
            paypal,
            settings,
            shipping_costs=FlatRateShipping(settings.default_shipping_cost),
            fee_rates=StoredFeeRates(repo, settings.platform_fee_rate_default),
        )
        log.info(f"Sellum API ready (database {engine.url.render_as_string(hide_password=True)})")
        try:
            yield
        finally:
            await paypal.aclose()
            await engine.dispose()

    app = FastAPI(title="Sellum Marketplace", lifespan=lifespan)
    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
    app.include_router(health_router)
    app.include_router(stores_router)
    app.include_router(orders_router)
    return app


__all__ = ("create_app", "status_for", "ERROR_STATUS")
