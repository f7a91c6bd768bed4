"""
Activation graph — four independent checks, one aggregated update.

    ActivationSubject ─> StoreNode ─┬─> ProfileCompleteNode ──────────┐
                       │            ├─> ShippingRegisteredNode ───────┤
                       │            └─> PaymentMethodRegisteredNode ──┼─> ActivationNode
                       └──────────────> MinOneProductNode ────────────┘

The checks run concurrently; ActivationNode writes all five flags in a
single repository update.
"""

from dataclasses import dataclass

from sellum import graph as G
from sellum._types import StoreId
from sellum.domain import ActivationSteps, Store
from sellum.logging_config import get_logger
from sellum.storage import Repository
from sellum.activation._checks import (
    payment_method_registered,
    profile_complete,
    shipping_registered,
)

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ActivationSubject:
    store_id: StoreId


@G.node
class StoreNode:
    def __init__(self, data: Store) -> None:
        self.data = data

    @classmethod
    async def __compose__(cls, subject: ActivationSubject, repo: Repository) -> "StoreNode":
        return cls(await repo.get_store(subject.store_id))


@G.node
class ProfileCompleteNode:
    def __init__(self, ok: bool) -> None:
        self.ok = ok

    @classmethod
    def __compose__(cls, store: StoreNode) -> "ProfileCompleteNode":
        return cls(profile_complete(store.data.profile))


@G.node
class MinOneProductNode:
    """Existence query; the product count itself is irrelevant."""

    def __init__(self, ok: bool) -> None:
        self.ok = ok

    @classmethod
    async def __compose__(cls, subject: ActivationSubject, repo: Repository) -> "MinOneProductNode":
        return cls(await repo.has_products(subject.store_id))


@G.node
class ShippingRegisteredNode:
    def __init__(self, ok: bool) -> None:
        self.ok = ok

    @classmethod
    def __compose__(cls, store: StoreNode) -> "ShippingRegisteredNode":
        return cls(shipping_registered(store.data))


@G.node
class PaymentMethodRegisteredNode:
    def __init__(self, ok: bool) -> None:
        self.ok = ok

    @classmethod
    def __compose__(cls, store: StoreNode) -> "PaymentMethodRegisteredNode":
        return cls(payment_method_registered(store.data))


@G.node
class ActivationNode:
    """AND of the four steps, persisted together with them."""

    def __init__(self, data: ActivationSteps) -> None:
        self.data = data

    @classmethod
    async def __compose__(
        cls,
        subject: ActivationSubject,
        repo: Repository,
        profile: ProfileCompleteNode,
        products: MinOneProductNode,
        shipping: ShippingRegisteredNode,
        payment: PaymentMethodRegisteredNode,
    ) -> "ActivationNode":
        steps = ActivationSteps(
            profile_complete=profile.ok,
            min_one_product=products.ok,
            shipping_registered=shipping.ok,
            payment_method_registered=payment.ok,
        )
        await repo.update_activation(subject.store_id, steps)
        log.info(f"[Store: {subject.store_id}] Activation re-evaluated: {steps.to_payload()}")
        return cls(steps)


async def evaluate_activation(store_id: StoreId, repo: Repository) -> None:
    """
    Re-derive and persist the store's activation flags.

    Raises:
        NotFound: the store does not exist.
    """
    await G.compose(ActivationNode, ActivationSubject(store_id), repo)


__all__ = (
    "ActivationSubject",
    "StoreNode",
    "ProfileCompleteNode",
    "MinOneProductNode",
    "ShippingRegisteredNode",
    "PaymentMethodRegisteredNode",
    "ActivationNode",
    "evaluate_activation",
)
