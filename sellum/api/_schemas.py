"""
HTTP schemas — pydantic request/response models.

Requests convert to domain values with `to_domain()`, responses are built
from domain values with `from_domain()`. Money leaves the API as two-digit
decimal strings.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from sellum._types import ProductId, StoreId
from sellum.checkout import CartLine, ShippingAddress
from sellum.domain import (
    Order,
    Product,
    Review,
    ShippingTerms,
    Store,
    StoreAddress,
    StoreProfile,
    StoreTotal,
)
from sellum.errors import InvalidInput
from sellum.pricing import format_amount


def _amount(value: Decimal | None) -> str | None:
    return None if value is None else format_amount(value)


# ═══════════════════════════════════════════════════════════════════════════════
# Stores
# ═══════════════════════════════════════════════════════════════════════════════


class StoreProfileIn(BaseModel):
    title: str
    description: str = ""
    tags: list[str] = Field(default_factory=list)

    def to_domain(self) -> StoreProfile:
        return StoreProfile(title=self.title, description=self.description, tags=tuple(self.tags))


class StoreAddressIn(BaseModel):
    address_line_1: str = ""
    postcode: str = ""
    city: str = ""
    lat: float | None = None
    lng: float | None = None

    def to_domain(self) -> StoreAddress:
        return StoreAddress(
            address_line_1=self.address_line_1,
            postcode=self.postcode,
            city=self.city,
            lat=self.lat,
            lng=self.lng,
        )


class ShippingTermsIn(BaseModel):
    flat_rate: Decimal | None = Field(default=None, ge=0)
    free_shipping_threshold: Decimal | None = Field(default=None, ge=0)

    def to_domain(self) -> ShippingTerms:
        return ShippingTerms(
            flat_rate=self.flat_rate,
            free_shipping_threshold=self.free_shipping_threshold,
        )


class StoreCreateIn(BaseModel):
    profile: StoreProfileIn
    address: StoreAddressIn = Field(default_factory=StoreAddressIn)
    shipping: ShippingTermsIn = Field(default_factory=ShippingTermsIn)


class StoreEditIn(BaseModel):
    profile: StoreProfileIn | None = None
    address: StoreAddressIn | None = None
    shipping: ShippingTermsIn | None = None


class StoreProfileOut(BaseModel):
    title: str
    description: str
    tags: list[str]


class StoreAddressOut(BaseModel):
    address_line_1: str
    postcode: str
    city: str
    lat: float | None
    lng: float | None


class ShippingTermsOut(BaseModel):
    flat_rate: str | None
    free_shipping_threshold: str | None


class StoreOut(BaseModel):
    id: str
    owner_email: str
    profile: StoreProfileOut
    address: StoreAddressOut
    shipping: ShippingTermsOut
    merchant_id: str | None
    activation: dict[str, bool]
    avg_rating: str | None

    @classmethod
    def from_domain(cls, store: Store) -> StoreOut:
        return cls(
            id=str(store.id),
            owner_email=store.owner_email,
            profile=StoreProfileOut(
                title=store.profile.title,
                description=store.profile.description,
                tags=list(store.profile.tags),
            ),
            address=StoreAddressOut(
                address_line_1=store.address.address_line_1,
                postcode=store.address.postcode,
                city=store.address.city,
                lat=store.address.lat,
                lng=store.address.lng,
            ),
            shipping=ShippingTermsOut(
                flat_rate=_amount(store.shipping.flat_rate),
                free_shipping_threshold=_amount(store.shipping.free_shipping_threshold),
            ),
            merchant_id=store.merchant_id,
            activation=store.activation.to_payload(),
            avg_rating=None if store.avg_rating is None else f"{store.avg_rating:.2f}",
        )


class OnboardingIn(BaseModel):
    return_url: str


class OnboardingOut(BaseModel):
    action_url: str


class MerchantIn(BaseModel):
    merchant_id: str


# ═══════════════════════════════════════════════════════════════════════════════
# Products
# ═══════════════════════════════════════════════════════════════════════════════


class ProductIn(BaseModel):
    title: str
    description: str = ""
    price: Decimal
    stock: int = 0


class ProductEditIn(BaseModel):
    title: str | None = None
    description: str | None = None
    price: Decimal | None = None


class StockIn(BaseModel):
    stock: int


class ProductOut(BaseModel):
    id: str
    store_id: str
    title: str
    description: str
    price: str
    stock: int

    @classmethod
    def from_domain(cls, product: Product) -> ProductOut:
        return cls(
            id=str(product.id),
            store_id=str(product.store_id),
            title=product.title,
            description=product.description,
            price=format_amount(product.price),
            stock=product.stock,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Reviews
# ═══════════════════════════════════════════════════════════════════════════════


class ReviewIn(BaseModel):
    rating: int
    text: str = ""


class ReviewOut(BaseModel):
    id: str
    store_id: str
    author_email: str
    rating: int
    text: str

    @classmethod
    def from_domain(cls, review: Review) -> ReviewOut:
        return cls(
            id=str(review.id),
            store_id=str(review.store_id),
            author_email=review.author_email,
            rating=review.rating,
            text=review.text,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════


class ShippingAddressIn(BaseModel):
    # Empty defaults: missing fields are reported by the checkout with their name.
    first_name: str = ""
    last_name: str = ""
    address_line_1: str = ""
    address_line_2: str = ""
    city: str = ""
    postcode: str = ""

    def to_domain(self) -> ShippingAddress:
        return ShippingAddress(
            first_name=self.first_name,
            last_name=self.last_name,
            address_line_1=self.address_line_1,
            address_line_2=self.address_line_2,
            city=self.city,
            postcode=self.postcode,
        )


class CartLineIn(BaseModel):
    product_id: str
    quantity: int


class CartStoreIn(BaseModel):
    store_id: str
    lines: list[CartLineIn]


class OrderIn(BaseModel):
    currency: str = Field(default="EUR", min_length=3, max_length=3)
    shipping_address: ShippingAddressIn
    cart: list[CartStoreIn]

    def to_domain(self) -> tuple[dict[StoreId, list[CartLine]], str, ShippingAddress]:
        cart: dict[StoreId, list[CartLine]] = {}
        for entry in self.cart:
            store_id = StoreId(entry.store_id)
            if store_id in cart:
                raise InvalidInput(f"Store {store_id} appears twice in the cart")
            cart[store_id] = [
                CartLine(product_id=ProductId(line.product_id), quantity=line.quantity)
                for line in entry.lines
            ]
        return cart, self.currency.upper(), self.shipping_address.to_domain()


class StoreTotalOut(BaseModel):
    store_id: str
    total: str
    platform_fee: str
    capture_id: str | None
    refund_id: str | None

    @classmethod
    def from_domain(cls, total: StoreTotal) -> StoreTotalOut:
        return cls(
            store_id=str(total.store_id),
            total=format_amount(total.total),
            platform_fee=format_amount(total.platform_fee),
            capture_id=total.capture_id,
            refund_id=total.refund_id,
        )


class OrderOut(BaseModel):
    id: str
    processor_order_id: str
    buyer_email: str
    currency: str
    total: str
    status: str
    approval_url: str | None
    store_totals: list[StoreTotalOut]
    created_at: datetime

    @classmethod
    def from_domain(cls, order: Order) -> OrderOut:
        return cls(
            id=str(order.id),
            processor_order_id=order.processor_order_id,
            buyer_email=order.buyer_email,
            currency=order.currency,
            total=format_amount(order.total),
            status=order.status.value,
            approval_url=order.approval_url,
            store_totals=[StoreTotalOut.from_domain(t) for t in order.store_totals],
            created_at=order.created_at,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════


class ErrorOut(BaseModel):
    success: bool = False
    code: str
    message: str


__all__ = (
    "StoreProfileIn",
    "StoreAddressIn",
    "ShippingTermsIn",
    "StoreCreateIn",
    "StoreEditIn",
    "StoreOut",
    "OnboardingIn",
    "OnboardingOut",
    "MerchantIn",
    "ProductIn",
    "ProductEditIn",
    "StockIn",
    "ProductOut",
    "ReviewIn",
    "ReviewOut",
    "ShippingAddressIn",
    "CartLineIn",
    "CartStoreIn",
    "OrderIn",
    "StoreTotalOut",
    "OrderOut",
    "ErrorOut",
)
