import itertools
import json
from collections.abc import AsyncIterator
from decimal import Decimal

import httpx
import pytest

from sellum._types import ProductId, StoreId
from sellum.checkout import ShippingAddress
from sellum.config import Settings
from sellum.domain import (
    ActivationSteps,
    LineItem,
    Product,
    Store,
    StoreProfile,
)
from sellum.storage import Repository, create_database


# ═══════════════════════════════════════════════════════════════════════════════
# Settings & storage
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        paypal_base_url="https://paypal.test",
        paypal_client_id="client-id",
        paypal_client_secret="client-secret",
        paypal_platform_merchant_id="PLATFORM-MID",
        paypal_platform_email="payments@sellum.test",
        tax_rate=Decimal("0.07"),
        platform_fee_rate_default=Decimal("0.10"),
        default_shipping_cost=Decimal("4.90"),
    )


@pytest.fixture
async def repo() -> AsyncIterator[Repository]:
    session_factory, engine = await create_database("sqlite+aiosqlite:///:memory:")
    try:
        yield Repository(session_factory)
    finally:
        await engine.dispose()


# ═══════════════════════════════════════════════════════════════════════════════
# Domain builders
# ═══════════════════════════════════════════════════════════════════════════════


def make_store(
    store_id: str = "st_1",
    *,
    merchant_id: str | None = "MID-1",
    title: str = "Corner Bakery Berlin",
    fee_rate: Decimal | None = None,
) -> Store:
    return Store(
        id=StoreId(store_id),
        owner_email=f"owner@{store_id}.test",
        profile=StoreProfile(title=title, description="d" * 120, tags=("bread",)),
        merchant_id=merchant_id,
        fee_rate=fee_rate,
        activation=ActivationSteps(),
    )


def make_line(store: Store, price: str, quantity: int = 1, title: str = "Sourdough") -> LineItem:
    product = Product(
        id=ProductId(f"pr_{store.id}_{title.lower()}"),
        store_id=store.id,
        title=title,
        description=f"{title} from {store.profile.title}",
        price=Decimal(price),
        stock=10,
    )
    return LineItem(product=product, quantity=quantity)


@pytest.fixture
def address() -> ShippingAddress:
    return ShippingAddress(
        first_name="Ada",
        last_name="Lovelace",
        address_line_1="Hauptstraße 1",
        city="Berlin",
        postcode="10115",
    )


# ═══════════════════════════════════════════════════════════════════════════════
# PayPal stand-in
# ═══════════════════════════════════════════════════════════════════════════════


class FakePayPal:
    """Answers the PayPal endpoints the marketplace calls; records every request."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.orders: dict[str, dict] = {}
        self.unknown_merchants: set[str] = set()
        self.fail_with: int | None = None
        self.fail_once: set[str] = set()
        """Paths answered with one 500 before behaving normally again."""
        self.refunds: dict[str, str] = {}
        """Refund id per PayPal-Request-Id; a repeated request id gets the same refund."""
        self.capture_status = "COMPLETED"
        self._ids = itertools.count(1)

    def calls(self, path_part: str) -> list[httpx.Request]:
        return [r for r in self.requests if path_part in r.url.path]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/v1/oauth2/token":
            return httpx.Response(200, json={"access_token": "token-1", "expires_in": 32400})

        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"name": "INTERNAL_SERVER_ERROR"})

        if path in self.fail_once:
            self.fail_once.discard(path)
            return httpx.Response(500, json={"name": "INTERNAL_SERVER_ERROR"})

        if path == "/v2/checkout/orders":
            order_id = f"PAYPAL-{next(self._ids)}"
            self.orders[order_id] = json.loads(request.content)
            return httpx.Response(
                201,
                json={
                    "id": order_id,
                    "status": "CREATED",
                    "links": [
                        {"rel": "self", "href": f"https://paypal.test/v2/checkout/orders/{order_id}"},
                        {"rel": "approve", "href": f"https://paypal.test/checkoutnow?token={order_id}"},
                    ],
                },
            )

        if path.startswith("/v2/checkout/orders/") and path.endswith("/capture"):
            order_id = path.split("/")[-2]
            units = self.orders[order_id]["purchase_units"]
            return httpx.Response(
                201,
                json={
                    "id": order_id,
                    "status": self.capture_status,
                    "purchase_units": [
                        {
                            "reference_id": unit["reference_id"],
                            "payments": {"captures": [{"id": f"CAP-{i}", "status": "COMPLETED"}]},
                        }
                        for i, unit in enumerate(units)
                    ],
                },
            )

        if path.startswith("/v2/payments/captures/") and path.endswith("/refund"):
            request_id = request.headers["PayPal-Request-Id"]
            if request_id not in self.refunds:
                self.refunds[request_id] = f"REF-{next(self._ids)}"
            return httpx.Response(201, json={"id": self.refunds[request_id], "status": "COMPLETED"})

        if path == "/v2/customer/partner-referrals":
            return httpx.Response(
                201,
                json={
                    "links": [
                        {"rel": "self", "href": "https://paypal.test/v1/customer/partner-referrals/1"},
                        {"rel": "action_url", "href": "https://paypal.test/bizsignup/partner/1"},
                    ]
                },
            )

        if "/merchant-integrations/" in path:
            merchant_id = path.rsplit("/", 1)[-1]
            if merchant_id in self.unknown_merchants:
                return httpx.Response(404, json={"name": "RESOURCE_NOT_FOUND"})
            return httpx.Response(200, json={"merchant_id": merchant_id, "payments_receivable": True})

        return httpx.Response(404, json={"name": "NOT_FOUND"})


@pytest.fixture
def fake_paypal() -> FakePayPal:
    return FakePayPal()


@pytest.fixture
def paypal_transport(fake_paypal: FakePayPal) -> httpx.MockTransport:
    return httpx.MockTransport(fake_paypal)
