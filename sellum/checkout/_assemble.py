"""
Purchase-unit assembly — the arithmetic of one store's share of a checkout.

Tax is taken out of each unit's listed price and then extended by quantity:

    tax_unit   = round(price × tax_rate, 2)
    tax_total  = Σ tax_unit × qty
    item_total = Σ (price − tax_unit) × qty
    total_sum  = item_total + tax_total + shipping

so `total_sum` equals the gross item sum plus shipping and the breakdown
always adds up to the cent.
"""

from decimal import Decimal
from collections.abc import Sequence

from sellum.domain import LineItem, Store
from sellum.errors import InvalidInput, InvalidShippingAddress
from sellum.pricing import ZERO, quantize, compute_item_tax, compute_platform_fee
from sellum.checkout._domain import (
    AmountBreakdown,
    ItemLine,
    PaymentInstruction,
    PurchaseUnit,
    ShippingAddress,
    ShippingDetail,
)

REQUIRED_ADDRESS_FIELDS = ("first_name", "last_name", "address_line_1", "city", "postcode")


def shipping_detail(address: ShippingAddress, country_code: str) -> ShippingDetail:
    """Validate the buyer's address and shape it for the processor."""
    for field in REQUIRED_ADDRESS_FIELDS:
        value = getattr(address, field)
        if not isinstance(value, str) or not value.strip():
            raise InvalidShippingAddress(field)

    return ShippingDetail(
        full_name=f"{address.first_name} {address.last_name}",
        address_line_1=address.address_line_1,
        address_line_2=address.address_line_2,
        city=address.city,
        postcode=address.postcode,
        country_code=country_code,
    )


def item_lines(lines: Sequence[LineItem], tax_rate: Decimal) -> tuple[ItemLine, ...]:
    items: list[ItemLine] = []
    for line in lines:
        tax = compute_item_tax(line.product.price, tax_rate)
        items.append(
            ItemLine(
                name=line.product.title,
                description=line.product.description,
                unit_amount=quantize(line.product.price - tax),
                tax=tax,
                quantity=line.quantity,
            )
        )
    return tuple(items)


def breakdown(items: Sequence[ItemLine], shipping: Decimal) -> AmountBreakdown:
    item_total = sum((item.unit_amount * item.quantity for item in items), ZERO)
    tax_total = sum((item.tax * item.quantity for item in items), ZERO)
    shipping = quantize(shipping)
    return AmountBreakdown(
        item_total=quantize(item_total),
        tax_total=quantize(tax_total),
        shipping=shipping,
        total_sum=quantize(item_total + tax_total + shipping),
    )


def assemble_purchase_unit(
    *,
    ordinal: int,
    store: Store,
    lines: Sequence[LineItem],
    currency: str,
    shipping: ShippingDetail,
    shipping_cost: Decimal,
    fee_rate: Decimal,
    tax_rate: Decimal,
    platform_merchant_id: str,
    platform_email: str,
) -> PurchaseUnit:
    """
    Build the purchase unit of one store.

    Raises:
        InvalidInput: the store has no lines or cannot receive payments.
        NegativeAmount: the computed total is below zero.
        InvalidAmount: the fee rate lies outside [0, 1].
    """
    if not lines:
        raise InvalidInput(f"Store {store.id} has no line items in this order")
    if not store.can_receive_payments:
        raise InvalidInput(f"Store {store.id} cannot receive payments")
    for line in lines:
        if line.product.store_id != store.id:
            raise InvalidInput(
                f"Product {line.product.id} does not belong to store {store.id}"
            )

    items = item_lines(lines, tax_rate)
    amount = breakdown(items, shipping_cost)
    fee = compute_platform_fee(amount.total_sum, fee_rate)

    return PurchaseUnit(
        reference_id=f"{store.id}~{ordinal}",
        store_id=store.id,
        payee_merchant_id=store.merchant_id,
        currency=currency,
        amount=amount,
        items=items,
        shipping=shipping,
        payment_instruction=PaymentInstruction(
            platform_fee=fee,
            fee_payee_merchant_id=platform_merchant_id,
            fee_payee_email=platform_email,
        ),
    )


__all__ = (
    "REQUIRED_ADDRESS_FIELDS",
    "shipping_detail",
    "item_lines",
    "breakdown",
    "assemble_purchase_unit",
)
