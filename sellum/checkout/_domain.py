"""
Checkout types — the cart going in, the processor order body coming out.

Output records know how to render themselves as the processor's JSON
(`to_payload`); every monetary value is rendered as a two-digit string.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from sellum._types import StoreId
from sellum.domain import LineItem, Store
from sellum.pricing import format_amount


def _money(currency: str, value: Decimal) -> dict[str, str]:
    return {"currency_code": currency, "value": format_amount(value)}


# ═══════════════════════════════════════════════════════════════════════════════
# Input
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ShippingAddress:
    first_name: str
    last_name: str
    address_line_1: str
    city: str
    postcode: str
    address_line_2: str = ""


@dataclass(frozen=True, slots=True)
class StoreOrder:
    """One store's share of a cart."""

    store: Store
    lines: tuple[LineItem, ...]


@dataclass(frozen=True, slots=True)
class CheckoutRequest:
    """
    A resolved cart, grouped by store.

    `orders` keeps the buyer's store order; it decides the ordinal suffix of
    each purchase unit's reference id.
    """

    orders: tuple[StoreOrder, ...]
    currency: str
    shipping_address: ShippingAddress


# ═══════════════════════════════════════════════════════════════════════════════
# Output
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class AmountBreakdown:
    item_total: Decimal
    tax_total: Decimal
    shipping: Decimal
    total_sum: Decimal

    def to_payload(self, currency: str) -> dict[str, Any]:
        return {
            "currency_code": currency,
            "value": format_amount(self.total_sum),
            "breakdown": {
                "item_total": _money(currency, self.item_total),
                "shipping": _money(currency, self.shipping),
                "tax_total": _money(currency, self.tax_total),
            },
        }


@dataclass(frozen=True, slots=True)
class ItemLine:
    """Per-unit net price and per-unit tax; the processor multiplies by quantity."""

    name: str
    description: str
    unit_amount: Decimal
    tax: Decimal
    quantity: int

    def to_payload(self, currency: str) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "unit_amount": _money(currency, self.unit_amount),
            "tax": _money(currency, self.tax),
            "quantity": str(self.quantity),
        }


@dataclass(frozen=True, slots=True)
class ShippingDetail:
    full_name: str
    address_line_1: str
    address_line_2: str
    city: str
    postcode: str
    country_code: str

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": {"full_name": self.full_name},
            "address": {
                "address_line_1": self.address_line_1,
                "address_line_2": self.address_line_2,
                "admin_area_2": self.city,
                "admin_area_1": "",
                "postal_code": self.postcode,
                "country_code": self.country_code,
            },
        }


@dataclass(frozen=True, slots=True)
class PaymentInstruction:
    platform_fee: Decimal
    fee_payee_merchant_id: str
    fee_payee_email: str
    disbursement_mode: str = "INSTANT"

    def to_payload(self, currency: str) -> dict[str, Any]:
        return {
            "disbursement_mode": self.disbursement_mode,
            "platform_fees": [
                {
                    "amount": _money(currency, self.platform_fee),
                    "payee": {
                        "merchant_id": self.fee_payee_merchant_id,
                        "email_address": self.fee_payee_email,
                    },
                }
            ],
        }


@dataclass(frozen=True, slots=True)
class PurchaseUnit:
    reference_id: str
    store_id: StoreId
    payee_merchant_id: str
    currency: str
    amount: AmountBreakdown
    items: tuple[ItemLine, ...]
    shipping: ShippingDetail
    payment_instruction: PaymentInstruction

    def to_payload(self) -> dict[str, Any]:
        return {
            "reference_id": self.reference_id,
            "payee": {"merchant_id": self.payee_merchant_id},
            "amount": self.amount.to_payload(self.currency),
            "items": [item.to_payload(self.currency) for item in self.items],
            "shipping": self.shipping.to_payload(),
            "payment_instruction": self.payment_instruction.to_payload(self.currency),
        }


@dataclass(frozen=True, slots=True)
class OrderBody:
    purchase_units: tuple[PurchaseUnit, ...]
    brand_name: str
    intent: str = "CAPTURE"
    landing_page: str = "BILLING"
    shipping_preference: str = "SET_PROVIDED_ADDRESS"
    user_action: str = "CONTINUE"

    def to_payload(self) -> dict[str, Any]:
        return {
            "intent": self.intent,
            "application_context": {
                "brand_name": self.brand_name,
                "landing_page": self.landing_page,
                "shipping_preference": self.shipping_preference,
                "user_action": self.user_action,
            },
            "purchase_units": [unit.to_payload() for unit in self.purchase_units],
        }


__all__ = (
    "ShippingAddress",
    "StoreOrder",
    "CheckoutRequest",
    "AmountBreakdown",
    "ItemLine",
    "ShippingDetail",
    "PaymentInstruction",
    "PurchaseUnit",
    "OrderBody",
)
