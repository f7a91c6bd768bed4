import asyncio
from dataclasses import replace
from decimal import Decimal

import pytest

from sellum.checkout import (
    CheckoutRequest,
    ShippingAddress,
    StoreOrder,
    build_order_body,
)
from sellum.config import Settings
from sellum.errors import InvalidInput, InvalidShippingAddress, NegativeAmount

from conftest import make_line, make_store


class FixedShipping:
    def __init__(self, cost: str, delays: dict[str, float] | None = None) -> None:
        self.cost = Decimal(cost)
        self.delays = delays or {}
        self.calls: list[str] = []

    async def shipping_cost(self, store, lines) -> Decimal:
        self.calls.append(str(store.id))
        await asyncio.sleep(self.delays.get(str(store.id), 0))
        return self.cost


class FixedFeeRate:
    def __init__(self, rate: str) -> None:
        self.rate = Decimal(rate)

    async def platform_fee_rate(self, store_id) -> Decimal:
        return self.rate


class BrokenFeeRate:
    async def platform_fee_rate(self, store_id) -> Decimal:
        raise ConnectionError("fee table unavailable")


async def _build(request: CheckoutRequest, settings: Settings, shipping="5.00", rate="0.05"):
    return await build_order_body(
        request,
        settings=settings,
        shipping_costs=FixedShipping(shipping),
        fee_rates=FixedFeeRate(rate),
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Single store
# ═══════════════════════════════════════════════════════════════════════════════


async def test_two_units_of_ten_euro(settings: Settings, address: ShippingAddress) -> None:
    store = make_store()
    request = CheckoutRequest(
        orders=(StoreOrder(store, (make_line(store, "10.00", quantity=2),)),),
        currency="EUR",
        shipping_address=address,
    )

    body = await _build(request, settings)
    unit = body.purchase_units[0]

    assert unit.items[0].tax == Decimal("0.70")
    assert unit.items[0].unit_amount == Decimal("9.30")
    assert unit.amount.item_total == Decimal("18.60")
    assert unit.amount.tax_total == Decimal("1.40")
    assert unit.amount.shipping == Decimal("5.00")
    assert unit.amount.total_sum == Decimal("25.00")
    assert unit.payment_instruction.platform_fee == Decimal("1.25")


async def test_payload_shape(settings: Settings, address: ShippingAddress) -> None:
    store = make_store()
    request = CheckoutRequest(
        orders=(StoreOrder(store, (make_line(store, "10.00", quantity=2),)),),
        currency="EUR",
        shipping_address=address,
    )

    payload = (await _build(request, settings)).to_payload()

    assert payload["intent"] == "CAPTURE"
    assert payload["application_context"] == {
        "brand_name": "MySellum",
        "landing_page": "BILLING",
        "shipping_preference": "SET_PROVIDED_ADDRESS",
        "user_action": "CONTINUE",
    }

    unit = payload["purchase_units"][0]
    assert unit["reference_id"] == "st_1~0"
    assert unit["payee"] == {"merchant_id": "MID-1"}
    assert unit["amount"] == {
        "currency_code": "EUR",
        "value": "25.00",
        "breakdown": {
            "item_total": {"currency_code": "EUR", "value": "18.60"},
            "shipping": {"currency_code": "EUR", "value": "5.00"},
            "tax_total": {"currency_code": "EUR", "value": "1.40"},
        },
    }
    assert unit["items"] == [
        {
            "name": "Sourdough",
            "description": "Sourdough from Corner Bakery Berlin",
            "unit_amount": {"currency_code": "EUR", "value": "9.30"},
            "tax": {"currency_code": "EUR", "value": "0.70"},
            "quantity": "2",
        }
    ]
    assert unit["shipping"] == {
        "name": {"full_name": "Ada Lovelace"},
        "address": {
            "address_line_1": "Hauptstraße 1",
            "address_line_2": "",
            "admin_area_2": "Berlin",
            "admin_area_1": "",
            "postal_code": "10115",
            "country_code": "DE",
        },
    }
    assert unit["payment_instruction"] == {
        "disbursement_mode": "INSTANT",
        "platform_fees": [
            {
                "amount": {"currency_code": "EUR", "value": "1.25"},
                "payee": {"merchant_id": "PLATFORM-MID", "email_address": "payments@sellum.test"},
            }
        ],
    }


@pytest.mark.parametrize(
    "prices",
    [
        [("19.99", 3), ("0.50", 7)],
        [("7.15", 1), ("123.45", 2), ("0.01", 9)],
        [("0.00", 1)],
    ],
)
async def test_breakdown_adds_up(settings: Settings, address: ShippingAddress, prices) -> None:
    store = make_store()
    lines = tuple(
        make_line(store, price, quantity=qty, title=f"Item{i}")
        for i, (price, qty) in enumerate(prices)
    )
    request = CheckoutRequest((StoreOrder(store, lines),), "EUR", address)

    unit = (await _build(request, settings, shipping="3.95")).purchase_units[0]
    amount = unit.amount
    gross = sum(Decimal(p) * q for p, q in prices)

    assert amount.total_sum == amount.item_total + amount.tax_total + amount.shipping
    assert amount.item_total + amount.tax_total == gross
    assert amount.item_total == sum(i.unit_amount * i.quantity for i in unit.items)
    assert Decimal(0) <= unit.payment_instruction.platform_fee <= amount.total_sum


# ═══════════════════════════════════════════════════════════════════════════════
# Several stores
# ═══════════════════════════════════════════════════════════════════════════════


async def test_units_keep_cart_order_whatever_finishes_first(
    settings: Settings, address: ShippingAddress
) -> None:
    stores = [make_store(f"st_{n}", merchant_id=f"MID-{n}") for n in ("a", "b", "c")]
    request = CheckoutRequest(
        orders=tuple(StoreOrder(s, (make_line(s, "12.00"),)) for s in stores),
        currency="EUR",
        shipping_address=address,
    )
    # The first store answers last.
    shipping = FixedShipping("4.90", delays={"st_a": 0.05, "st_b": 0.01})

    body = await build_order_body(
        request,
        settings=settings,
        shipping_costs=shipping,
        fee_rates=FixedFeeRate("0.10"),
    )

    assert [u.reference_id for u in body.purchase_units] == ["st_a~0", "st_b~1", "st_c~2"]
    assert [u.payee_merchant_id for u in body.purchase_units] == ["MID-a", "MID-b", "MID-c"]
    assert sorted(shipping.calls) == ["st_a", "st_b", "st_c"]


async def test_one_failing_store_fails_the_checkout(
    settings: Settings, address: ShippingAddress
) -> None:
    good = make_store("st_good")
    unpaid = make_store("st_unpaid", merchant_id=None)
    request = CheckoutRequest(
        orders=(
            StoreOrder(good, (make_line(good, "5.00"),)),
            StoreOrder(unpaid, (make_line(unpaid, "5.00"),)),
        ),
        currency="EUR",
        shipping_address=address,
    )

    with pytest.raises(InvalidInput, match="st_unpaid cannot receive payments"):
        await _build(request, settings)


async def test_first_failing_store_in_cart_order_is_reported(
    settings: Settings, address: ShippingAddress
) -> None:
    first = make_store("st_first", merchant_id=None)
    second = make_store("st_second", merchant_id="   ")
    request = CheckoutRequest(
        orders=(
            StoreOrder(first, (make_line(first, "5.00"),)),
            StoreOrder(second, (make_line(second, "5.00"),)),
        ),
        currency="EUR",
        shipping_address=address,
    )
    # The second store fails well before the first one.
    shipping = FixedShipping("4.90", delays={"st_first": 0.05})

    with pytest.raises(InvalidInput, match="st_first cannot receive payments"):
        await build_order_body(
            request,
            settings=settings,
            shipping_costs=shipping,
            fee_rates=FixedFeeRate("0.10"),
        )
    assert sorted(shipping.calls) == ["st_first", "st_second"]


async def test_resolver_failure_propagates_unchanged(
    settings: Settings, address: ShippingAddress
) -> None:
    store = make_store()
    request = CheckoutRequest((StoreOrder(store, (make_line(store, "5.00"),)),), "EUR", address)

    with pytest.raises(ConnectionError, match="fee table unavailable"):
        await build_order_body(
            request,
            settings=settings,
            shipping_costs=FixedShipping("1.00"),
            fee_rates=BrokenFeeRate(),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Rejections
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.parametrize(
    "missing",
    ["first_name", "last_name", "address_line_1", "city", "postcode"],
)
async def test_missing_address_field_is_named(
    settings: Settings, address: ShippingAddress, missing: str
) -> None:
    store = make_store()
    request = CheckoutRequest(
        (StoreOrder(store, (make_line(store, "5.00"),)),),
        "EUR",
        replace(address, **{missing: "  "}),
    )

    with pytest.raises(InvalidShippingAddress) as exc_info:
        await _build(request, settings)
    assert exc_info.value.field == missing
    assert missing in exc_info.value.message


async def test_store_without_lines_is_rejected(settings: Settings, address: ShippingAddress) -> None:
    store = make_store()
    request = CheckoutRequest((StoreOrder(store, ()),), "EUR", address)

    with pytest.raises(InvalidInput, match="no line items"):
        await _build(request, settings)


async def test_empty_cart_is_rejected(settings: Settings, address: ShippingAddress) -> None:
    with pytest.raises(InvalidInput, match="empty"):
        await _build(CheckoutRequest((), "EUR", address), settings)


async def test_negative_total_is_rejected(settings: Settings, address: ShippingAddress) -> None:
    store = make_store()
    request = CheckoutRequest((StoreOrder(store, (make_line(store, "1.00"),)),), "EUR", address)

    with pytest.raises(NegativeAmount):
        await _build(request, settings, shipping="-5.00")


async def test_product_from_another_store_is_rejected(
    settings: Settings, address: ShippingAddress
) -> None:
    store = make_store("st_1")
    other = make_store("st_2")
    request = CheckoutRequest((StoreOrder(store, (make_line(other, "1.00"),)),), "EUR", address)

    with pytest.raises(InvalidInput, match="does not belong"):
        await _build(request, settings)


def test_quantity_below_one_is_rejected() -> None:
    store = make_store()
    with pytest.raises(InvalidInput, match="at least 1"):
        make_line(store, "1.00", quantity=0)
