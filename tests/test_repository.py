from dataclasses import replace
from datetime import datetime
from decimal import Decimal

import pytest

from sellum._types import OrderId, ProductId, StoreId
from sellum.domain import (
    Order,
    OrderStatus,
    ShippingTerms,
    StoreAddress,
    StoreProfile,
    StoreTotal,
)
from sellum.errors import InvalidInput, NotFound
from sellum.storage import Repository


def _profile(title: str = "Corner Bakery Berlin", tags: tuple[str, ...] = ("bread",)) -> StoreProfile:
    return StoreProfile(title=title, description="Fresh every morning", tags=tags)


def _at(lat: float, lng: float) -> StoreAddress:
    return StoreAddress(address_line_1="Hauptstraße 1", postcode="10115", city="Berlin", lat=lat, lng=lng)


# ═══════════════════════════════════════════════════════════════════════════════
# Stores
# ═══════════════════════════════════════════════════════════════════════════════


async def test_create_store_links_owner(repo: Repository) -> None:
    store = await repo.create_store(
        "owner@bakery.test",
        _profile(),
        _at(52.52, 13.40),
        ShippingTerms(flat_rate=Decimal("3.50"), free_shipping_threshold=Decimal("40.00")),
        fee_rate=Decimal("0.05"),
    )

    loaded = await repo.get_store(store.id)
    owner = await repo.get_user("owner@bakery.test")

    assert loaded == store
    assert loaded.shipping.flat_rate == Decimal("3.50")
    assert loaded.shipping.free_shipping_threshold == Decimal("40.00")
    assert loaded.fee_rate == Decimal("0.05")
    assert loaded.merchant_id is None
    assert not loaded.activation.activation
    assert owner is not None and owner.owned_store_id == store.id


async def test_one_store_per_owner(repo: Repository) -> None:
    await repo.create_store("owner@bakery.test", _profile(), StoreAddress(), ShippingTerms())

    with pytest.raises(InvalidInput, match="already owns"):
        await repo.create_store("owner@bakery.test", _profile("Second Bakery"), StoreAddress(), ShippingTerms())


async def test_delete_store_frees_owner_and_removes_children(repo: Repository) -> None:
    store = await repo.create_store("owner@bakery.test", _profile(), StoreAddress(), ShippingTerms())
    product = await repo.create_product(store.id, "Sourdough", "", Decimal("4.50"), 2)
    await repo.create_review(store.id, "buyer@example.test", 5, "great")

    await repo.delete_store(store.id)

    with pytest.raises(NotFound):
        await repo.get_store(store.id)
    with pytest.raises(NotFound):
        await repo.get_product(product.id)
    assert await repo.list_reviews(store.id) == []
    assert (await repo.get_user("owner@bakery.test")).owned_store_id is None

    again = await repo.create_store("owner@bakery.test", _profile(), StoreAddress(), ShippingTerms())
    assert again.id != store.id


async def test_stores_with_all_tags(repo: Repository) -> None:
    bakery = await repo.create_store("a@x.test", _profile("Bakery", ("bread", "organic")), StoreAddress(), ShippingTerms())
    await repo.create_store("b@x.test", _profile("Butcher", ("meat",)), StoreAddress(), ShippingTerms())
    await repo.create_store("c@x.test", _profile("Mill", ("bread",)), StoreAddress(), ShippingTerms())

    both = await repo.stores_with_tags(["bread", "organic"])
    bread = await repo.stores_with_tags(["bread"])

    assert [s.id for s in both] == [bakery.id]
    assert [s.profile.title for s in bread] == ["Bakery", "Mill"]


async def test_stores_in_box(repo: Repository) -> None:
    berlin = await repo.create_store("a@x.test", _profile("Berlin"), _at(52.52, 13.40), ShippingTerms())
    await repo.create_store("b@x.test", _profile("Munich"), _at(48.14, 11.58), ShippingTerms())
    await repo.create_store("c@x.test", _profile("Nowhere"), StoreAddress(), ShippingTerms())

    found = await repo.stores_in_box(52.0, 53.0, 13.0, 14.0)

    assert [s.id for s in found] == [berlin.id]


async def test_update_store_details_only_touches_given_groups(repo: Repository) -> None:
    store = await repo.create_store("a@x.test", _profile(), _at(52.52, 13.40), ShippingTerms())

    updated = await repo.update_store_details(
        store.id, shipping=ShippingTerms(flat_rate=Decimal("2.00"))
    )

    assert updated.profile == store.profile
    assert updated.address == store.address
    assert updated.shipping.flat_rate == Decimal("2.00")


async def test_avg_rating_and_fee_rate_round_trip(repo: Repository) -> None:
    store = await repo.create_store("a@x.test", _profile(), StoreAddress(), ShippingTerms())

    await repo.set_avg_rating(store.id, Decimal("4.33"))
    await repo.set_fee_rate(store.id, Decimal("0.035"))
    loaded = await repo.get_store(store.id)

    assert loaded.avg_rating == Decimal("4.33")
    assert loaded.fee_rate == Decimal("0.035")


async def test_missing_store_updates_raise(repo: Repository) -> None:
    with pytest.raises(NotFound):
        await repo.set_merchant_id(StoreId("st_missing"), "MID")
    with pytest.raises(NotFound):
        await repo.delete_store(StoreId("st_missing"))


# ═══════════════════════════════════════════════════════════════════════════════
# Products
# ═══════════════════════════════════════════════════════════════════════════════


async def test_product_search_and_price_filter(repo: Repository) -> None:
    store = await repo.create_store("a@x.test", _profile(), StoreAddress(), ShippingTerms())
    await repo.create_product(store.id, "Sourdough", "Rye and wheat", Decimal("4.50"), 3)
    await repo.create_product(store.id, "Baguette", "French style", Decimal("2.20"), 3)
    await repo.create_product(store.id, "Rye Roll", "Small", Decimal("0.90"), 3)

    rye = await repo.list_products(store.id, search="RYE")
    cheap = await repo.list_products(store.id, price_max=Decimal("2.20"))
    middle = await repo.list_products(store.id, price_min=Decimal("1.00"), price_max=Decimal("3.00"))

    assert [p.title for p in rye] == ["Rye Roll", "Sourdough"]
    assert [p.title for p in cheap] == ["Baguette", "Rye Roll"]
    assert [p.title for p in middle] == ["Baguette"]


async def test_has_products(repo: Repository) -> None:
    store = await repo.create_store("a@x.test", _profile(), StoreAddress(), ShippingTerms())
    assert not await repo.has_products(store.id)

    await repo.create_product(store.id, "Sourdough", "", Decimal("4.50"), 0)
    assert await repo.has_products(store.id)


async def test_get_products_reports_unknown_id(repo: Repository) -> None:
    store = await repo.create_store("a@x.test", _profile(), StoreAddress(), ShippingTerms())
    known = await repo.create_product(store.id, "Sourdough", "", Decimal("4.50"), 1)

    found = await repo.get_products([known.id])
    assert found == {known.id: known}

    with pytest.raises(NotFound, match="pr_missing"):
        await repo.get_products([known.id, ProductId("pr_missing")])


async def test_update_product_and_stock(repo: Repository) -> None:
    store = await repo.create_store("a@x.test", _profile(), StoreAddress(), ShippingTerms())
    product = await repo.create_product(store.id, "Sourdough", "", Decimal("4.50"), 1)

    await repo.update_product(product.id, price=Decimal("4.95"))
    await repo.set_stock(product.id, 0)
    loaded = await repo.get_product(product.id)

    assert loaded.title == "Sourdough"
    assert loaded.price == Decimal("4.95")
    assert loaded.stock == 0


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


async def test_order_round_trip_and_status_update(repo: Repository) -> None:
    order = Order(
        id=OrderId("ord_1"),
        processor_order_id="PAYPAL-1",
        buyer_email="buyer@example.test",
        currency="EUR",
        total=Decimal("30.00"),
        status=OrderStatus.CREATED,
        store_totals=(
            StoreTotal(StoreId("st_a"), Decimal("25.00"), Decimal("1.25")),
            StoreTotal(StoreId("st_b"), Decimal("5.00"), Decimal("0.50")),
        ),
        created_at=datetime(2024, 5, 1, 12, 0),
        approval_url="https://paypal.test/checkoutnow?token=PAYPAL-1",
    )

    assert await repo.create_order(order) == order

    captured = await repo.update_order(
        order.id,
        OrderStatus.COMPLETED,
        tuple(
            StoreTotal(t.store_id, t.total, t.platform_fee, capture_id=f"CAP-{i}")
            for i, t in enumerate(order.store_totals)
        ),
    )
    halfway = await repo.update_order(
        order.id,
        OrderStatus.COMPLETED,
        (replace(captured.store_totals[0], refund_id="REF-1"), captured.store_totals[1]),
    )
    refunded = await repo.update_order(order.id, OrderStatus.REFUNDED)

    assert [t.capture_id for t in captured.store_totals] == ["CAP-0", "CAP-1"]
    assert [t.refund_id for t in halfway.store_totals] == ["REF-1", None]
    assert refunded.status is OrderStatus.REFUNDED
    assert refunded.store_totals == halfway.store_totals
    assert await repo.get_order(order.id) == refunded


async def test_unknown_order(repo: Repository) -> None:
    with pytest.raises(NotFound):
        await repo.get_order(OrderId("ord_missing"))
