"""
Resolvers — where shipping cost and platform fee rate come from.

Checkout only sees the two protocols. The defaults read the store's own
configuration and fall back to platform-wide settings.
"""

from decimal import Decimal
from typing import Protocol
from collections.abc import Sequence

from sellum._types import StoreId
from sellum.domain import LineItem, Store
from sellum.pricing._money import ZERO, quantize


# ═══════════════════════════════════════════════════════════════════════════════
# Protocols
# ═══════════════════════════════════════════════════════════════════════════════


class ShippingCostResolver(Protocol):
    async def shipping_cost(self, store: Store, lines: Sequence[LineItem]) -> Decimal: ...


class FeeRateResolver(Protocol):
    async def platform_fee_rate(self, store_id: StoreId) -> Decimal: ...


class StoreSource(Protocol):
    async def get_store(self, store_id: StoreId) -> Store: ...


# ═══════════════════════════════════════════════════════════════════════════════
# Defaults
# ═══════════════════════════════════════════════════════════════════════════════


class FlatRateShipping:
    """
    One flat rate per store and order.

    The store's own rate wins over the platform default; a store with a
    free-shipping threshold ships for free once the gross item sum reaches it.
    """

    def __init__(self, default_cost: Decimal) -> None:
        self._default = quantize(default_cost)

    async def shipping_cost(self, store: Store, lines: Sequence[LineItem]) -> Decimal:
        terms = store.shipping
        threshold = terms.free_shipping_threshold
        if threshold is not None and sum((line.gross for line in lines), ZERO) >= threshold:
            return ZERO
        if terms.flat_rate is not None:
            return quantize(terms.flat_rate)
        return self._default


class StoredFeeRates:
    """Per-store override kept on the store record, else the platform default."""

    def __init__(self, stores: StoreSource, default_rate: Decimal) -> None:
        self._stores = stores
        self._default = default_rate

    async def platform_fee_rate(self, store_id: StoreId) -> Decimal:
        store = await self._stores.get_store(store_id)
        if store.fee_rate is None:
            return self._default
        return store.fee_rate


__all__ = (
    "ShippingCostResolver",
    "FeeRateResolver",
    "StoreSource",
    "FlatRateShipping",
    "StoredFeeRates",
)
