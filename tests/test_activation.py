from decimal import Decimal

import pytest

from sellum.activation import (
    ActivationStep,
    evaluate_activation,
    payment_method_registered,
    profile_complete,
)
from sellum.domain import ShippingTerms, StoreAddress, StoreProfile
from sellum.errors import NotFound
from sellum.storage import Repository
from sellum._types import StoreId

from conftest import make_store

COMPLETE = StoreProfile(title="Corner Bakery Berlin", description="d" * 120, tags=("bread",))


async def _store(repo: Repository, profile: StoreProfile = COMPLETE):
    return await repo.create_store("owner@bakery.test", profile, StoreAddress(), ShippingTerms())


# ═══════════════════════════════════════════════════════════════════════════════
# Checks
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.parametrize(
    ("profile", "expected"),
    [
        (COMPLETE, True),
        (StoreProfile(title="x" * 10, description="d" * 100, tags=("a",)), True),
        (StoreProfile(title="x" * 100, description="d" * 1000, tags=tuple("abcdefghijklmno")), True),
        (StoreProfile(title="x" * 9, description="d" * 120, tags=("a",)), False),
        (StoreProfile(title="x" * 101, description="d" * 120, tags=("a",)), False),
        (StoreProfile(title="x" * 20, description="d" * 99, tags=("a",)), False),
        (StoreProfile(title="x" * 20, description="d" * 1001, tags=("a",)), False),
        (StoreProfile(title="x" * 20, description="d" * 120, tags=()), False),
        (StoreProfile(title="x" * 20, description="d" * 120, tags=tuple("abcdefghijklmnop")), False),
    ],
)
def test_profile_bounds(profile: StoreProfile, expected: bool) -> None:
    assert profile_complete(profile) is expected


@pytest.mark.parametrize(
    ("merchant_id", "expected"),
    [("MID-1", True), (None, False), ("", False), ("   ", False)],
)
def test_payment_method(merchant_id, expected: bool) -> None:
    assert payment_method_registered(make_store(merchant_id=merchant_id)) is expected
    assert make_store(merchant_id=merchant_id).can_receive_payments is expected


# ═══════════════════════════════════════════════════════════════════════════════
# Evaluation
# ═══════════════════════════════════════════════════════════════════════════════


async def test_new_store_is_not_active(repo: Repository) -> None:
    store = await _store(repo)

    await evaluate_activation(store.id, repo)
    steps = (await repo.get_store(store.id)).activation

    assert steps.profile_complete
    assert steps.shipping_registered
    assert not steps.min_one_product
    assert not steps.payment_method_registered
    assert not steps.activation


async def test_store_goes_live_once_every_step_holds(repo: Repository) -> None:
    store = await _store(repo)
    await repo.create_product(store.id, "Sourdough", "Rye and wheat", Decimal("4.50"), 3)
    await repo.set_merchant_id(store.id, "MID-1")

    await evaluate_activation(store.id, repo)
    steps = (await repo.get_store(store.id)).activation

    assert steps.to_payload() == {
        "profileComplete": True,
        "minOneProduct": True,
        "shippingRegistered": True,
        "paymentMethodRegistered": True,
        "activation": True,
    }


async def test_losing_a_step_takes_the_store_offline(repo: Repository) -> None:
    store = await _store(repo)
    product = await repo.create_product(store.id, "Sourdough", "", Decimal("4.50"), 3)
    await repo.set_merchant_id(store.id, "MID-1")
    await evaluate_activation(store.id, repo)

    await repo.delete_product(product.id)
    await evaluate_activation(store.id, repo)
    steps = (await repo.get_store(store.id)).activation

    assert not steps.min_one_product
    assert not steps.activation
    assert steps.step(ActivationStep.PAYMENT_METHOD_REGISTERED)


@pytest.mark.parametrize("cleared", [None, "  "])
async def test_clearing_the_merchant_takes_the_store_offline(repo: Repository, cleared) -> None:
    store = await _store(repo)
    await repo.create_product(store.id, "Sourdough", "", Decimal("4.50"), 3)
    await repo.set_merchant_id(store.id, "MID-1")
    await evaluate_activation(store.id, repo)
    assert (await repo.get_store(store.id)).activation.activation

    await repo.set_merchant_id(store.id, cleared)
    await evaluate_activation(store.id, repo)
    steps = (await repo.get_store(store.id)).activation

    assert steps.profile_complete
    assert steps.min_one_product
    assert steps.shipping_registered
    assert not steps.payment_method_registered
    assert not steps.activation


async def test_sold_out_products_still_count(repo: Repository) -> None:
    store = await _store(repo)
    await repo.create_product(store.id, "Sourdough", "", Decimal("4.50"), 0)

    await evaluate_activation(store.id, repo)

    assert (await repo.get_store(store.id)).activation.min_one_product


async def test_incomplete_profile_blocks_activation(repo: Repository) -> None:
    store = await _store(repo, StoreProfile(title="Tiny", description="short", tags=()))
    await repo.create_product(store.id, "Sourdough", "", Decimal("4.50"), 3)
    await repo.set_merchant_id(store.id, "MID-1")

    await evaluate_activation(store.id, repo)
    steps = (await repo.get_store(store.id)).activation

    assert not steps.profile_complete
    assert not steps.activation


async def test_unknown_store(repo: Repository) -> None:
    with pytest.raises(NotFound):
        await evaluate_activation(StoreId("st_missing"), repo)
