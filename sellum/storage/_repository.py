"""
Repository — typed reads and writes over the tables.

Rows never leave this module: every method returns frozen domain objects.
Partial updates go through one method per field group instead of generic
field-path updates.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from decimal import Decimal

from sqlalchemy import delete, exists, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sellum._types import StoreId, ProductId, ReviewId, OrderId, new_id
from sellum.domain import (
    ActivationSteps,
    Order,
    OrderStatus,
    Product,
    Review,
    ShippingTerms,
    Store,
    StoreAddress,
    StoreProfile,
    StoreTotal,
    User,
)
from sellum.errors import InvalidInput, NotFound
from sellum.logging_config import get_logger
from sellum.pricing import from_cents, to_cents
from sellum.storage._tables import (
    OrderTable,
    ProductTable,
    ReviewTable,
    StoreTable,
    UserTable,
)

log = get_logger(__name__)

LOCATION_SEARCH_LIMIT = 100


# ═══════════════════════════════════════════════════════════════════════════════
# Row mapping
# ═══════════════════════════════════════════════════════════════════════════════


def _cents_or_none(value: Decimal | None) -> int | None:
    return None if value is None else to_cents(value)


def _money_or_none(cents: int | None) -> Decimal | None:
    return None if cents is None else from_cents(cents)


def _store(row: StoreTable) -> Store:
    return Store(
        id=StoreId(row.id),
        owner_email=row.owner_email,
        profile=StoreProfile(
            title=row.title,
            description=row.description,
            tags=tuple(row.tags or ()),
        ),
        address=StoreAddress(
            address_line_1=row.address_line_1,
            postcode=row.postcode,
            city=row.city,
            lat=row.lat,
            lng=row.lng,
        ),
        shipping=ShippingTerms(
            flat_rate=_money_or_none(row.shipping_flat_rate_cents),
            free_shipping_threshold=_money_or_none(row.free_shipping_threshold_cents),
        ),
        merchant_id=row.merchant_id,
        fee_rate=None if row.fee_rate is None else Decimal(row.fee_rate),
        activation=ActivationSteps(
            profile_complete=row.profile_complete,
            min_one_product=row.min_one_product,
            shipping_registered=row.shipping_registered,
            payment_method_registered=row.payment_method_registered,
        ),
        avg_rating=None if row.avg_rating is None else Decimal(row.avg_rating),
    )


def _product(row: ProductTable) -> Product:
    return Product(
        id=ProductId(row.id),
        store_id=StoreId(row.store_id),
        title=row.title,
        description=row.description,
        price=from_cents(row.price_cents),
        stock=row.stock,
    )


def _review(row: ReviewTable) -> Review:
    return Review(
        id=ReviewId(row.id),
        store_id=StoreId(row.store_id),
        author_email=row.author_email,
        rating=row.rating,
        text=row.text,
    )


def _order(row: OrderTable) -> Order:
    return Order(
        id=OrderId(row.id),
        processor_order_id=row.processor_order_id,
        buyer_email=row.buyer_email,
        currency=row.currency,
        total=from_cents(row.total_cents),
        status=OrderStatus(row.status),
        store_totals=tuple(
            StoreTotal(
                store_id=StoreId(entry["store_id"]),
                total=from_cents(entry["total_cents"]),
                platform_fee=from_cents(entry["platform_fee_cents"]),
                capture_id=entry.get("capture_id"),
                refund_id=entry.get("refund_id"),
            )
            for entry in row.store_totals
        ),
        created_at=row.created_at,
        approval_url=row.approval_url,
    )


def _store_totals(totals: Sequence[StoreTotal]) -> list[dict]:
    return [
        {
            "store_id": str(total.store_id),
            "total_cents": to_cents(total.total),
            "platform_fee_cents": to_cents(total.platform_fee),
            "capture_id": total.capture_id,
            "refund_id": total.refund_id,
        }
        for total in totals
    ]


def _apply_profile(row: StoreTable, profile: StoreProfile) -> None:
    row.title = profile.title
    row.description = profile.description
    row.tags = list(profile.tags)


def _apply_address(row: StoreTable, address: StoreAddress) -> None:
    row.address_line_1 = address.address_line_1
    row.postcode = address.postcode
    row.city = address.city
    row.lat = address.lat
    row.lng = address.lng


def _apply_shipping(row: StoreTable, shipping: ShippingTerms) -> None:
    row.shipping_flat_rate_cents = _cents_or_none(shipping.flat_rate)
    row.free_shipping_threshold_cents = _cents_or_none(shipping.free_shipping_threshold)


# ═══════════════════════════════════════════════════════════════════════════════
# Repository
# ═══════════════════════════════════════════════════════════════════════════════


class Repository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session = session_factory

    # ─── Users ───────────────────────────────────────────────────────────────

    async def get_user(self, email: str) -> User | None:
        async with self._session() as session:
            row = await session.get(UserTable, email)
            if row is None:
                return None
            owned = StoreId(row.owned_store_id) if row.owned_store_id else None
            return User(email=row.email, owned_store_id=owned)

    # ─── Stores ──────────────────────────────────────────────────────────────

    async def create_store(
        self,
        owner_email: str,
        profile: StoreProfile,
        address: StoreAddress,
        shipping: ShippingTerms,
        fee_rate: Decimal | None = None,
    ) -> Store:
        """
        Insert the store and mark it as the owner's, in one transaction.

        Raises:
            InvalidInput: the owner already owns a store.
        """
        store_id = new_id("st")
        async with self._session() as session, session.begin():
            user = await session.get(UserTable, owner_email)
            if user is None:
                user = UserTable(email=owner_email, owned_store_id=None)
                session.add(user)
            elif user.owned_store_id:
                raise InvalidInput(f"User {owner_email} already owns store {user.owned_store_id}")

            row = StoreTable(
                id=store_id,
                owner_email=owner_email,
                merchant_id=None,
                avg_rating=None,
                fee_rate=None if fee_rate is None else str(fee_rate),
                profile_complete=False,
                min_one_product=False,
                shipping_registered=False,
                payment_method_registered=False,
                activation=False,
            )
            _apply_profile(row, profile)
            _apply_address(row, address)
            _apply_shipping(row, shipping)
            session.add(row)
            user.owned_store_id = store_id

        log.info(f"[Store: {store_id}] Created for {owner_email}")
        return _store(row)

    async def get_store(self, store_id: StoreId) -> Store:
        async with self._session() as session:
            row = await session.get(StoreTable, str(store_id))
            if row is None:
                raise NotFound("Store", store_id)
            return _store(row)

    async def list_stores(self) -> list[Store]:
        async with self._session() as session:
            rows = (await session.execute(select(StoreTable).order_by(StoreTable.title))).scalars()
            return [_store(row) for row in rows]

    async def stores_with_tags(self, tags: Sequence[str]) -> list[Store]:
        """Stores carrying every one of `tags`."""
        wanted = set(tags)
        return [store for store in await self.list_stores() if wanted <= set(store.profile.tags)]

    async def stores_in_box(
        self,
        min_lat: float,
        max_lat: float,
        min_lng: float,
        max_lng: float,
    ) -> list[Store]:
        async with self._session() as session:
            rows = (
                await session.execute(
                    select(StoreTable)
                    .where(
                        StoreTable.lat.between(min_lat, max_lat),
                        StoreTable.lng.between(min_lng, max_lng),
                    )
                    .limit(LOCATION_SEARCH_LIMIT)
                )
            ).scalars()
            return [_store(row) for row in rows]

    async def _update_store(
        self, store_id: StoreId, apply: Callable[[StoreTable], None]
    ) -> Store:
        async with self._session() as session, session.begin():
            row = await session.get(StoreTable, str(store_id))
            if row is None:
                raise NotFound("Store", store_id)
            apply(row)
        return _store(row)

    async def update_store_details(
        self,
        store_id: StoreId,
        *,
        profile: StoreProfile | None = None,
        address: StoreAddress | None = None,
        shipping: ShippingTerms | None = None,
    ) -> Store:
        def apply(row: StoreTable) -> None:
            if profile is not None:
                _apply_profile(row, profile)
            if address is not None:
                _apply_address(row, address)
            if shipping is not None:
                _apply_shipping(row, shipping)

        return await self._update_store(store_id, apply)

    async def set_merchant_id(self, store_id: StoreId, merchant_id: str | None) -> Store:
        def apply(row: StoreTable) -> None:
            row.merchant_id = merchant_id

        return await self._update_store(store_id, apply)

    async def set_fee_rate(self, store_id: StoreId, fee_rate: Decimal | None) -> Store:
        def apply(row: StoreTable) -> None:
            row.fee_rate = None if fee_rate is None else str(fee_rate)

        return await self._update_store(store_id, apply)

    async def update_activation(self, store_id: StoreId, steps: ActivationSteps) -> Store:
        """Write the four step flags and the overall flag in one update."""

        def apply(row: StoreTable) -> None:
            row.profile_complete = steps.profile_complete
            row.min_one_product = steps.min_one_product
            row.shipping_registered = steps.shipping_registered
            row.payment_method_registered = steps.payment_method_registered
            row.activation = steps.activation

        return await self._update_store(store_id, apply)

    async def set_avg_rating(self, store_id: StoreId, avg_rating: Decimal | None) -> Store:
        def apply(row: StoreTable) -> None:
            row.avg_rating = None if avg_rating is None else str(avg_rating)

        return await self._update_store(store_id, apply)

    async def delete_store(self, store_id: StoreId) -> None:
        """Remove the store with its products and reviews; the owner is free to open a new one."""
        async with self._session() as session, session.begin():
            row = await session.get(StoreTable, str(store_id))
            if row is None:
                raise NotFound("Store", store_id)

            owner = await session.get(UserTable, row.owner_email)
            if owner is not None and owner.owned_store_id == row.id:
                owner.owned_store_id = None

            await session.execute(delete(ProductTable).where(ProductTable.store_id == row.id))
            await session.execute(delete(ReviewTable).where(ReviewTable.store_id == row.id))
            await session.delete(row)

        log.info(f"[Store: {store_id}] Deleted")

    # ─── Products ────────────────────────────────────────────────────────────

    async def has_products(self, store_id: StoreId) -> bool:
        async with self._session() as session:
            query = select(exists().where(ProductTable.store_id == str(store_id)))
            return bool((await session.execute(query)).scalar())

    async def create_product(
        self,
        store_id: StoreId,
        title: str,
        description: str,
        price: Decimal,
        stock: int,
    ) -> Product:
        row = ProductTable(
            id=new_id("pr"),
            store_id=str(store_id),
            title=title,
            description=description,
            price_cents=to_cents(price),
            stock=stock,
        )
        async with self._session() as session, session.begin():
            session.add(row)
        return _product(row)

    async def get_product(self, product_id: ProductId) -> Product:
        async with self._session() as session:
            row = await session.get(ProductTable, str(product_id))
            if row is None:
                raise NotFound("Product", product_id)
            return _product(row)

    async def get_products(self, product_ids: Sequence[ProductId]) -> dict[ProductId, Product]:
        """Fetch several products at once; unknown ids raise NotFound."""
        wanted = {str(pid) for pid in product_ids}
        async with self._session() as session:
            rows = (
                await session.execute(select(ProductTable).where(ProductTable.id.in_(wanted)))
            ).scalars()
            found = {ProductId(row.id): _product(row) for row in rows}

        for pid in product_ids:
            if pid not in found:
                raise NotFound("Product", pid)
        return found

    async def list_products(
        self,
        store_id: StoreId,
        *,
        search: str | None = None,
        price_min: Decimal | None = None,
        price_max: Decimal | None = None,
    ) -> list[Product]:
        query = select(ProductTable).where(ProductTable.store_id == str(store_id))
        if search:
            pattern = f"%{search.lower()}%"
            query = query.where(
                or_(
                    func.lower(ProductTable.title).like(pattern),
                    func.lower(ProductTable.description).like(pattern),
                )
            )
        if price_min is not None:
            query = query.where(ProductTable.price_cents >= to_cents(price_min))
        if price_max is not None:
            query = query.where(ProductTable.price_cents <= to_cents(price_max))

        async with self._session() as session:
            rows = (await session.execute(query.order_by(ProductTable.title))).scalars()
            return [_product(row) for row in rows]

    async def update_product(
        self,
        product_id: ProductId,
        *,
        title: str | None = None,
        description: str | None = None,
        price: Decimal | None = None,
    ) -> Product:
        async with self._session() as session, session.begin():
            row = await session.get(ProductTable, str(product_id))
            if row is None:
                raise NotFound("Product", product_id)
            if title is not None:
                row.title = title
            if description is not None:
                row.description = description
            if price is not None:
                row.price_cents = to_cents(price)
        return _product(row)

    async def set_stock(self, product_id: ProductId, stock: int) -> Product:
        async with self._session() as session, session.begin():
            row = await session.get(ProductTable, str(product_id))
            if row is None:
                raise NotFound("Product", product_id)
            row.stock = stock
        return _product(row)

    async def delete_product(self, product_id: ProductId) -> None:
        async with self._session() as session, session.begin():
            row = await session.get(ProductTable, str(product_id))
            if row is None:
                raise NotFound("Product", product_id)
            await session.delete(row)

    # ─── Reviews ─────────────────────────────────────────────────────────────

    async def create_review(
        self,
        store_id: StoreId,
        author_email: str,
        rating: int,
        text: str,
    ) -> Review:
        row = ReviewTable(
            id=new_id("rv"),
            store_id=str(store_id),
            author_email=author_email,
            rating=rating,
            text=text,
        )
        async with self._session() as session, session.begin():
            session.add(row)
        return _review(row)

    async def get_review(self, review_id: ReviewId) -> Review:
        async with self._session() as session:
            row = await session.get(ReviewTable, str(review_id))
            if row is None:
                raise NotFound("Review", review_id)
            return _review(row)

    async def list_reviews(self, store_id: StoreId) -> list[Review]:
        async with self._session() as session:
            rows = (
                await session.execute(
                    select(ReviewTable).where(ReviewTable.store_id == str(store_id))
                )
            ).scalars()
            return [_review(row) for row in rows]

    async def update_review(self, review_id: ReviewId, rating: int, text: str) -> Review:
        async with self._session() as session, session.begin():
            row = await session.get(ReviewTable, str(review_id))
            if row is None:
                raise NotFound("Review", review_id)
            row.rating = rating
            row.text = text
        return _review(row)

    async def delete_review(self, review_id: ReviewId) -> None:
        async with self._session() as session, session.begin():
            row = await session.get(ReviewTable, str(review_id))
            if row is None:
                raise NotFound("Review", review_id)
            await session.delete(row)

    # ─── Orders ──────────────────────────────────────────────────────────────

    async def create_order(self, order: Order) -> Order:
        row = OrderTable(
            id=str(order.id),
            processor_order_id=order.processor_order_id,
            buyer_email=order.buyer_email,
            currency=order.currency,
            total_cents=to_cents(order.total),
            status=order.status.value,
            store_totals=_store_totals(order.store_totals),
            approval_url=order.approval_url,
            created_at=order.created_at,
        )
        async with self._session() as session, session.begin():
            session.add(row)
        return _order(row)

    async def get_order(self, order_id: OrderId) -> Order:
        async with self._session() as session:
            row = await session.get(OrderTable, str(order_id))
            if row is None:
                raise NotFound("Order", order_id)
            return _order(row)

    async def update_order(
        self,
        order_id: OrderId,
        status: OrderStatus,
        store_totals: Sequence[StoreTotal] | None = None,
    ) -> Order:
        async with self._session() as session, session.begin():
            row = await session.get(OrderTable, str(order_id))
            if row is None:
                raise NotFound("Order", order_id)
            row.status = status.value
            if store_totals is not None:
                row.store_totals = _store_totals(store_totals)
        return _order(row)


__all__ = ("Repository", "LOCATION_SEARCH_LIMIT")
