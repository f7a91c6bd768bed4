"""
Pricing — tax and platform-fee arithmetic plus the shipping/fee-rate lookups.

    from sellum import pricing as P

    tax = P.compute_item_tax(Decimal("10.00"), Decimal("0.07"))   # 0.70
    fee = P.compute_platform_fee(Decimal("25.00"), Decimal("0.05"))  # 1.25
"""

from sellum.pricing._money import (
    CENT,
    ZERO,
    quantize,
    format_amount,
    to_cents,
    from_cents,
)
from sellum.pricing._calc import compute_item_tax, compute_platform_fee
from sellum.pricing._resolvers import (
    ShippingCostResolver,
    FeeRateResolver,
    StoreSource,
    FlatRateShipping,
    StoredFeeRates,
)

__all__ = (
    # Money
    "CENT",
    "ZERO",
    "quantize",
    "format_amount",
    "to_cents",
    "from_cents",
    # Calculator
    "compute_item_tax",
    "compute_platform_fee",
    # Resolvers
    "ShippingCostResolver",
    "FeeRateResolver",
    "StoreSource",
    "FlatRateShipping",
    "StoredFeeRates",
)
