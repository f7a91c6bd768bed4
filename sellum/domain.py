"""
Domain — marketplace entities.

Stores sell products, buyers review stores and check out carts that span
several stores at once. Every entity is a frozen dataclass; changes go
through the repository's typed update methods and come back as new
instances.

Money is `Decimal` with two fraction digits throughout the domain; the
storage layer keeps integer cents.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from sellum._types import StoreId, ProductId, ReviewId, OrderId
from sellum.errors import InvalidInput


# ═══════════════════════════════════════════════════════════════════════════════
# Users
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class User:
    email: str
    owned_store_id: StoreId | None = None


# ═══════════════════════════════════════════════════════════════════════════════
# Activation
# ═══════════════════════════════════════════════════════════════════════════════


class ActivationStep(StrEnum):
    """Onboarding requirements a store has to satisfy before it goes live."""

    PROFILE_COMPLETE = "profileComplete"
    MIN_ONE_PRODUCT = "minOneProduct"
    SHIPPING_REGISTERED = "shippingRegistered"
    PAYMENT_METHOD_REGISTERED = "paymentMethodRegistered"


@dataclass(frozen=True, slots=True)
class ActivationSteps:
    profile_complete: bool = False
    min_one_product: bool = False
    shipping_registered: bool = False
    payment_method_registered: bool = False

    @property
    def activation(self) -> bool:
        return (
            self.profile_complete
            and self.min_one_product
            and self.shipping_registered
            and self.payment_method_registered
        )

    def step(self, step: ActivationStep) -> bool:
        match step:
            case ActivationStep.PROFILE_COMPLETE:
                return self.profile_complete
            case ActivationStep.MIN_ONE_PRODUCT:
                return self.min_one_product
            case ActivationStep.SHIPPING_REGISTERED:
                return self.shipping_registered
            case ActivationStep.PAYMENT_METHOD_REGISTERED:
                return self.payment_method_registered

    def to_payload(self) -> dict[str, bool]:
        payload = {step.value: self.step(step) for step in ActivationStep}
        payload["activation"] = self.activation
        return payload


# ═══════════════════════════════════════════════════════════════════════════════
# Stores
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class StoreProfile:
    title: str
    description: str = ""
    tags: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class StoreAddress:
    address_line_1: str = ""
    postcode: str = ""
    city: str = ""
    lat: float | None = None
    lng: float | None = None


@dataclass(frozen=True, slots=True)
class ShippingTerms:
    """Store-configured shipping; `None` means "use the platform default"."""

    flat_rate: Decimal | None = None
    free_shipping_threshold: Decimal | None = None


@dataclass(frozen=True, slots=True)
class Store:
    id: StoreId
    owner_email: str
    profile: StoreProfile
    address: StoreAddress = field(default_factory=StoreAddress)
    shipping: ShippingTerms = field(default_factory=ShippingTerms)
    merchant_id: str | None = None
    fee_rate: Decimal | None = None
    activation: ActivationSteps = field(default_factory=ActivationSteps)
    avg_rating: Decimal | None = None

    @property
    def can_receive_payments(self) -> bool:
        return bool(self.merchant_id and self.merchant_id.strip())


# ═══════════════════════════════════════════════════════════════════════════════
# Products & Reviews
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Product:
    id: ProductId
    store_id: StoreId
    title: str
    description: str
    price: Decimal
    stock: int = 0


@dataclass(frozen=True, slots=True)
class Review:
    id: ReviewId
    store_id: StoreId
    author_email: str
    rating: int
    text: str = ""


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class LineItem:
    """One product of a cart and how many units of it the buyer wants."""

    product: Product
    quantity: int

    def __post_init__(self) -> None:
        if self.quantity < 1:
            raise InvalidInput(
                f"Quantity of product {self.product.id} must be at least 1, got {self.quantity}"
            )

    @property
    def gross(self) -> Decimal:
        return self.product.price * self.quantity


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


class OrderStatus(StrEnum):
    CREATED = "CREATED"
    COMPLETED = "COMPLETED"
    REFUNDED = "REFUNDED"


@dataclass(frozen=True, slots=True)
class StoreTotal:
    """What one store receives from an order, and the platform's cut of it."""

    store_id: StoreId
    total: Decimal
    platform_fee: Decimal
    capture_id: str | None = None
    refund_id: str | None = None


@dataclass(frozen=True, slots=True)
class Order:
    id: OrderId
    processor_order_id: str
    buyer_email: str
    currency: str
    total: Decimal
    status: OrderStatus
    store_totals: tuple[StoreTotal, ...]
    created_at: datetime
    approval_url: str | None = None


__all__ = (
    "User",
    "ActivationStep",
    "ActivationSteps",
    "StoreProfile",
    "StoreAddress",
    "ShippingTerms",
    "Store",
    "Product",
    "Review",
    "LineItem",
    "OrderStatus",
    "StoreTotal",
    "Order",
)
