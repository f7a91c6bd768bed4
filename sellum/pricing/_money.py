"""
Money helpers — two-digit decimals, cents conversion, wire formatting.
"""

from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def quantize(value: Decimal) -> Decimal:
    """Round half-up to two fraction digits."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_amount(value: Decimal) -> str:
    """Decimal string with exactly two fraction digits, as the processor expects."""
    return f"{quantize(value):.2f}"


def to_cents(value: Decimal) -> int:
    return int(quantize(value) * 100)


def from_cents(cents: int) -> Decimal:
    return quantize(Decimal(cents).scaleb(-2))


__all__ = (
    "CENT",
    "ZERO",
    "quantize",
    "format_amount",
    "to_cents",
    "from_cents",
)
