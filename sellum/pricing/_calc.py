"""
Tax/Fee calculator — pure functions, no I/O.

The rate is always an argument; where it comes from (configuration, a
per-store override) is the caller's business.
"""

from decimal import Decimal

from sellum.errors import InvalidAmount, NegativeAmount
from sellum.pricing._money import quantize


def compute_item_tax(price: Decimal, tax_rate: Decimal) -> Decimal:
    """Tax contained in one unit's listed price: round(price × rate, 2)."""
    if price < 0:
        raise InvalidAmount(f"Price must not be negative, got {price}")
    return quantize(price * tax_rate)


def compute_platform_fee(total_sum: Decimal, fee_rate: Decimal) -> Decimal:
    """
    Platform commission on a store's total: round(total × rate, 2).

    Raises:
        NegativeAmount: total_sum is below zero.
        InvalidAmount: fee_rate lies outside [0, 1].
    """
    if total_sum < 0:
        raise NegativeAmount(f"Total sum must not be negative, got {total_sum}")
    if not Decimal(0) <= fee_rate <= Decimal(1):
        raise InvalidAmount(f"Platform fee rate must be within [0, 1], got {fee_rate}")
    return quantize(total_sum * fee_rate)


__all__ = ("compute_item_tax", "compute_platform_fee")
