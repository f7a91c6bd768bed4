"""
Store service — stores, products, reviews and seller payment onboarding.

Every mutation that can change a store's readiness re-runs the activation
evaluator afterwards. Ownership is checked against the acting user's email.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from sellum._types import ProductId, ReviewId, StoreId
from sellum.activation import evaluate_activation
from sellum.domain import (
    Product,
    Review,
    ShippingTerms,
    Store,
    StoreAddress,
    StoreProfile,
)
from sellum.errors import InvalidInput, NotFound, Unauthorized
from sellum.logging_config import get_logger
from sellum.paypal import PayPalClient
from sellum.pricing import quantize
from sellum.storage import Repository

log = get_logger(__name__)

RATING_RANGE = (1, 5)


def _check_price(price: Decimal) -> None:
    if price < 0:
        raise InvalidInput(f"Price must not be negative, got {price}")


def _check_stock(stock: int) -> None:
    if stock < 0:
        raise InvalidInput(f"Stock must not be negative, got {stock}")


def _check_rating(rating: int) -> None:
    low, high = RATING_RANGE
    if not low <= rating <= high:
        raise InvalidInput(f"Rating must be between {low} and {high}, got {rating}")


def _check_box(min_lat: float, max_lat: float, min_lng: float, max_lng: float) -> None:
    if min_lat > max_lat or min_lng > max_lng:
        raise InvalidInput("Bounding box minimum must not exceed its maximum")


def average_rating(reviews: Sequence[Review]) -> Decimal | None:
    if not reviews:
        return None
    return quantize(Decimal(sum(r.rating for r in reviews)) / len(reviews))


class StoreService:
    def __init__(self, repo: Repository, paypal: PayPalClient) -> None:
        self._repo = repo
        self._paypal = paypal

    async def _owned_store(self, store_id: StoreId, actor: str) -> Store:
        store = await self._repo.get_store(store_id)
        if store.owner_email != actor:
            log.warning(f"[Store: {store_id}] {actor} is not the owner")
            raise Unauthorized(f"Only the owner may change store {store_id}")
        return store

    async def _reevaluate(self, store_id: StoreId) -> Store:
        await evaluate_activation(store_id, self._repo)
        return await self._repo.get_store(store_id)

    # ═══════════════════════════════════════════════════════════════════════════
    # Stores
    # ═══════════════════════════════════════════════════════════════════════════

    async def get_store(self, store_id: StoreId) -> Store:
        return await self._repo.get_store(store_id)

    async def list_stores(self, tags: Sequence[str] = ()) -> list[Store]:
        """All stores, or only those carrying every tag in `tags`."""
        if tags:
            return await self._repo.stores_with_tags(tags)
        return await self._repo.list_stores()

    async def stores_in_box(
        self,
        min_lat: float,
        max_lat: float,
        min_lng: float,
        max_lng: float,
    ) -> list[Store]:
        _check_box(min_lat, max_lat, min_lng, max_lng)
        return await self._repo.stores_in_box(min_lat, max_lat, min_lng, max_lng)

    async def create_store(
        self,
        actor: str,
        profile: StoreProfile,
        address: StoreAddress,
        shipping: ShippingTerms,
    ) -> Store:
        if not profile.title.strip():
            raise InvalidInput("A store needs a title")
        store = await self._repo.create_store(actor, profile, address, shipping)
        return await self._reevaluate(store.id)

    async def edit_store(
        self,
        store_id: StoreId,
        actor: str,
        *,
        profile: StoreProfile | None = None,
        address: StoreAddress | None = None,
        shipping: ShippingTerms | None = None,
    ) -> Store:
        await self._owned_store(store_id, actor)
        await self._repo.update_store_details(
            store_id, profile=profile, address=address, shipping=shipping
        )
        return await self._reevaluate(store_id)

    async def delete_store(self, store_id: StoreId, actor: str) -> None:
        await self._owned_store(store_id, actor)
        await self._repo.delete_store(store_id)

    # ═══════════════════════════════════════════════════════════════════════════
    # Payment onboarding
    # ═══════════════════════════════════════════════════════════════════════════

    async def create_onboarding_link(self, store_id: StoreId, actor: str, return_url: str) -> str:
        await self._owned_store(store_id, actor)
        return await self._paypal.create_sign_up_link(return_url, tracking_id=str(store_id))

    async def register_merchant(self, store_id: StoreId, actor: str, merchant_id: str) -> Store:
        """Attach the seller's PayPal merchant id once PayPal confirms it exists."""
        await self._owned_store(store_id, actor)
        merchant_id = merchant_id.strip()
        if not merchant_id:
            raise InvalidInput("No merchant id provided")

        await self._paypal.validate_merchant_id(merchant_id)
        await self._repo.set_merchant_id(store_id, merchant_id)
        log.info(f"[Store: {store_id}] PayPal merchant {merchant_id} registered")
        return await self._reevaluate(store_id)

    # ═══════════════════════════════════════════════════════════════════════════
    # Products
    # ═══════════════════════════════════════════════════════════════════════════

    async def list_products(
        self,
        store_id: StoreId,
        *,
        search: str | None = None,
        price_min: Decimal | None = None,
        price_max: Decimal | None = None,
    ) -> list[Product]:
        await self._repo.get_store(store_id)
        return await self._repo.list_products(
            store_id, search=search, price_min=price_min, price_max=price_max
        )

    async def get_product(self, store_id: StoreId, product_id: ProductId) -> Product:
        product = await self._repo.get_product(product_id)
        if product.store_id != store_id:
            raise NotFound("Product", product_id)
        return product

    async def create_product(
        self,
        store_id: StoreId,
        actor: str,
        *,
        title: str,
        description: str,
        price: Decimal,
        stock: int = 0,
    ) -> Product:
        await self._owned_store(store_id, actor)
        if not title.strip():
            raise InvalidInput("A product needs a title")
        _check_price(price)
        _check_stock(stock)

        product = await self._repo.create_product(store_id, title, description, price, stock)
        await evaluate_activation(store_id, self._repo)
        return product

    async def edit_product(
        self,
        store_id: StoreId,
        product_id: ProductId,
        actor: str,
        *,
        title: str | None = None,
        description: str | None = None,
        price: Decimal | None = None,
    ) -> Product:
        await self._owned_store(store_id, actor)
        await self.get_product(store_id, product_id)
        if price is not None:
            _check_price(price)
        return await self._repo.update_product(
            product_id, title=title, description=description, price=price
        )

    async def update_stock(
        self,
        store_id: StoreId,
        product_id: ProductId,
        actor: str,
        stock: int,
    ) -> Product:
        await self._owned_store(store_id, actor)
        await self.get_product(store_id, product_id)
        _check_stock(stock)

        product = await self._repo.set_stock(product_id, stock)
        if product.stock == 0:
            log.info(f"[Store: {store_id}] Product {product_id} sold out")
            await evaluate_activation(store_id, self._repo)
        return product

    async def delete_product(self, store_id: StoreId, product_id: ProductId, actor: str) -> None:
        await self._owned_store(store_id, actor)
        await self.get_product(store_id, product_id)
        await self._repo.delete_product(product_id)
        await evaluate_activation(store_id, self._repo)

    # ═══════════════════════════════════════════════════════════════════════════
    # Reviews
    # ═══════════════════════════════════════════════════════════════════════════

    async def list_reviews(self, store_id: StoreId) -> list[Review]:
        await self._repo.get_store(store_id)
        return await self._repo.list_reviews(store_id)

    async def _refresh_rating(self, store_id: StoreId) -> None:
        reviews = await self._repo.list_reviews(store_id)
        await self._repo.set_avg_rating(store_id, average_rating(reviews))

    async def _authored_review(self, store_id: StoreId, review_id: ReviewId, actor: str) -> Review:
        review = await self._repo.get_review(review_id)
        if review.store_id != store_id:
            raise NotFound("Review", review_id)
        if review.author_email != actor:
            raise Unauthorized(f"Only the author may change review {review_id}")
        return review

    async def add_review(self, store_id: StoreId, actor: str, rating: int, text: str) -> Review:
        await self._repo.get_store(store_id)
        _check_rating(rating)
        review = await self._repo.create_review(store_id, actor, rating, text)
        await self._refresh_rating(store_id)
        return review

    async def edit_review(
        self,
        store_id: StoreId,
        review_id: ReviewId,
        actor: str,
        rating: int,
        text: str,
    ) -> Review:
        await self._authored_review(store_id, review_id, actor)
        _check_rating(rating)
        review = await self._repo.update_review(review_id, rating, text)
        await self._refresh_rating(store_id)
        return review

    async def delete_review(self, store_id: StoreId, review_id: ReviewId, actor: str) -> None:
        await self._authored_review(store_id, review_id, actor)
        await self._repo.delete_review(review_id)
        await self._refresh_rating(store_id)


__all__ = ("StoreService", "average_rating", "RATING_RANGE")
