"""
Routes — thin handlers: decode, call a service, encode.
"""

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Query, Request, status

from sellum._types import OrderId, ProductId, ReviewId, StoreId
from sellum.checkout import CheckoutService
from sellum.errors import Unauthorized
from sellum.stores import StoreService
from sellum.api._schemas import (
    MerchantIn,
    OnboardingIn,
    OnboardingOut,
    OrderIn,
    OrderOut,
    ProductEditIn,
    ProductIn,
    ProductOut,
    ReviewIn,
    ReviewOut,
    StockIn,
    StoreCreateIn,
    StoreEditIn,
    StoreOut,
)


# ═══════════════════════════════════════════════════════════════════════════════
# Dependencies
# ═══════════════════════════════════════════════════════════════════════════════


def store_service(request: Request) -> StoreService:
    return request.app.state.stores


def checkout_service(request: Request) -> CheckoutService:
    return request.app.state.checkout


def acting_user(x_user_email: Annotated[str | None, Header()] = None) -> str:
    """Email of the caller; authentication happens in front of this service."""
    if not x_user_email:
        raise Unauthorized("No acting user given (X-User-Email header)")
    return x_user_email


Stores = Annotated[StoreService, Depends(store_service)]
Checkout = Annotated[CheckoutService, Depends(checkout_service)]
Actor = Annotated[str, Depends(acting_user)]


# ═══════════════════════════════════════════════════════════════════════════════
# Health
# ═══════════════════════════════════════════════════════════════════════════════

health_router = APIRouter(tags=["health"])


@health_router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


# ═══════════════════════════════════════════════════════════════════════════════
# Stores
# ═══════════════════════════════════════════════════════════════════════════════

stores_router = APIRouter(prefix="/stores", tags=["stores"])


@stores_router.get("")
async def list_stores(
    stores: Stores,
    tags: Annotated[list[str] | None, Query()] = None,
) -> list[StoreOut]:
    return [StoreOut.from_domain(s) for s in await stores.list_stores(tags or ())]


@stores_router.get("/location")
async def stores_by_location(
    stores: Stores,
    min_lat: float,
    max_lat: float,
    min_lng: float,
    max_lng: float,
) -> list[StoreOut]:
    found = await stores.stores_in_box(min_lat, max_lat, min_lng, max_lng)
    return [StoreOut.from_domain(s) for s in found]


@stores_router.get("/{store_id}")
async def get_store(store_id: str, stores: Stores) -> StoreOut:
    return StoreOut.from_domain(await stores.get_store(StoreId(store_id)))


@stores_router.post("", status_code=status.HTTP_201_CREATED)
async def create_store(body: StoreCreateIn, stores: Stores, actor: Actor) -> StoreOut:
    store = await stores.create_store(
        actor,
        body.profile.to_domain(),
        body.address.to_domain(),
        body.shipping.to_domain(),
    )
    return StoreOut.from_domain(store)


@stores_router.put("/{store_id}")
async def edit_store(store_id: str, body: StoreEditIn, stores: Stores, actor: Actor) -> StoreOut:
    store = await stores.edit_store(
        StoreId(store_id),
        actor,
        profile=body.profile.to_domain() if body.profile else None,
        address=body.address.to_domain() if body.address else None,
        shipping=body.shipping.to_domain() if body.shipping else None,
    )
    return StoreOut.from_domain(store)


@stores_router.delete("/{store_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_store(store_id: str, stores: Stores, actor: Actor) -> None:
    await stores.delete_store(StoreId(store_id), actor)


@stores_router.post("/{store_id}/payment/onboarding")
async def create_onboarding_link(
    store_id: str, body: OnboardingIn, stores: Stores, actor: Actor
) -> OnboardingOut:
    link = await stores.create_onboarding_link(StoreId(store_id), actor, body.return_url)
    return OnboardingOut(action_url=link)


@stores_router.put("/{store_id}/payment")
async def register_merchant(
    store_id: str, body: MerchantIn, stores: Stores, actor: Actor
) -> StoreOut:
    store = await stores.register_merchant(StoreId(store_id), actor, body.merchant_id)
    return StoreOut.from_domain(store)


# ─── Products ────────────────────────────────────────────────────────────────


@stores_router.get("/{store_id}/products")
async def list_products(
    store_id: str,
    stores: Stores,
    search: str | None = None,
    price_min: Decimal | None = None,
    price_max: Decimal | None = None,
) -> list[ProductOut]:
    products = await stores.list_products(
        StoreId(store_id), search=search, price_min=price_min, price_max=price_max
    )
    return [ProductOut.from_domain(p) for p in products]


@stores_router.post("/{store_id}/products", status_code=status.HTTP_201_CREATED)
async def create_product(
    store_id: str, body: ProductIn, stores: Stores, actor: Actor
) -> ProductOut:
    product = await stores.create_product(
        StoreId(store_id),
        actor,
        title=body.title,
        description=body.description,
        price=body.price,
        stock=body.stock,
    )
    return ProductOut.from_domain(product)


@stores_router.get("/{store_id}/products/{product_id}")
async def get_product(store_id: str, product_id: str, stores: Stores) -> ProductOut:
    product = await stores.get_product(StoreId(store_id), ProductId(product_id))
    return ProductOut.from_domain(product)


@stores_router.put("/{store_id}/products/{product_id}")
async def edit_product(
    store_id: str, product_id: str, body: ProductEditIn, stores: Stores, actor: Actor
) -> ProductOut:
    product = await stores.edit_product(
        StoreId(store_id),
        ProductId(product_id),
        actor,
        title=body.title,
        description=body.description,
        price=body.price,
    )
    return ProductOut.from_domain(product)


@stores_router.put("/{store_id}/products/{product_id}/stock")
async def update_stock(
    store_id: str, product_id: str, body: StockIn, stores: Stores, actor: Actor
) -> ProductOut:
    product = await stores.update_stock(StoreId(store_id), ProductId(product_id), actor, body.stock)
    return ProductOut.from_domain(product)


@stores_router.delete("/{store_id}/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(store_id: str, product_id: str, stores: Stores, actor: Actor) -> None:
    await stores.delete_product(StoreId(store_id), ProductId(product_id), actor)


# ─── Reviews ─────────────────────────────────────────────────────────────────


@stores_router.get("/{store_id}/reviews")
async def list_reviews(store_id: str, stores: Stores) -> list[ReviewOut]:
    return [ReviewOut.from_domain(r) for r in await stores.list_reviews(StoreId(store_id))]


@stores_router.post("/{store_id}/reviews", status_code=status.HTTP_201_CREATED)
async def add_review(store_id: str, body: ReviewIn, stores: Stores, actor: Actor) -> ReviewOut:
    review = await stores.add_review(StoreId(store_id), actor, body.rating, body.text)
    return ReviewOut.from_domain(review)


@stores_router.put("/{store_id}/reviews/{review_id}")
async def edit_review(
    store_id: str, review_id: str, body: ReviewIn, stores: Stores, actor: Actor
) -> ReviewOut:
    review = await stores.edit_review(
        StoreId(store_id), ReviewId(review_id), actor, body.rating, body.text
    )
    return ReviewOut.from_domain(review)


@stores_router.delete("/{store_id}/reviews/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_review(store_id: str, review_id: str, stores: Stores, actor: Actor) -> None:
    await stores.delete_review(StoreId(store_id), ReviewId(review_id), actor)


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════

orders_router = APIRouter(prefix="/orders", tags=["orders"])


@orders_router.post("", status_code=status.HTTP_201_CREATED)
async def place_order(body: OrderIn, checkout: Checkout, actor: Actor) -> OrderOut:
    cart, currency, address = body.to_domain()
    order = await checkout.place_order(actor, cart, currency, address)
    return OrderOut.from_domain(order)


@orders_router.get("/{order_id}")
async def get_order(order_id: str, checkout: Checkout, actor: Actor) -> OrderOut:
    order = await checkout.get_order(OrderId(order_id))
    if order.buyer_email != actor:
        raise Unauthorized(f"Order {order_id} belongs to another buyer")
    return OrderOut.from_domain(order)


@orders_router.post("/{order_id}/capture")
async def capture_order(order_id: str, checkout: Checkout, actor: Actor) -> OrderOut:
    order = await checkout.get_order(OrderId(order_id))
    if order.buyer_email != actor:
        raise Unauthorized(f"Order {order_id} belongs to another buyer")
    return OrderOut.from_domain(await checkout.capture_order(order.id))


@orders_router.post("/{order_id}/refund")
async def refund_order(order_id: str, checkout: Checkout, actor: Actor) -> OrderOut:
    return OrderOut.from_domain(await checkout.refund_order(OrderId(order_id), actor))


__all__ = ("health_router", "stores_router", "orders_router")
