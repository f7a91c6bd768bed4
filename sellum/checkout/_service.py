"""
Checkout service — place, capture, refund and look up orders.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from datetime import datetime, timezone

from sellum._types import OrderId, ProductId, StoreId, new_id
from sellum.config import Settings
from sellum.domain import LineItem, Order, OrderStatus, StoreTotal
from sellum.errors import InvalidInput, Unauthorized, UpstreamFailure
from sellum.logging_config import get_logger
from sellum.paypal import PayPalClient
from sellum.pricing import ZERO, FeeRateResolver, ShippingCostResolver
from sellum.storage import Repository
from sellum.checkout._domain import CheckoutRequest, ShippingAddress, StoreOrder
from sellum.checkout._nodes import build_order_body

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class CartLine:
    product_id: ProductId
    quantity: int


def _store_of_reference(reference_id: str) -> StoreId:
    return StoreId(reference_id.rsplit("~", 1)[0])


class CheckoutService:
    def __init__(
        self,
        repo: Repository,
        paypal: PayPalClient,
        settings: Settings,
        shipping_costs: ShippingCostResolver,
        fee_rates: FeeRateResolver,
    ) -> None:
        self._repo = repo
        self._paypal = paypal
        self._settings = settings
        self._shipping_costs = shipping_costs
        self._fee_rates = fee_rates

    async def resolve_cart(
        self,
        cart: Mapping[StoreId, Sequence[CartLine]],
        currency: str,
        shipping_address: ShippingAddress,
    ) -> CheckoutRequest:
        """
        Turn store/product ids into entities, keeping the cart's store order.

        Raises:
            NotFound: unknown store or product.
            InvalidInput: a product listed under a store it does not belong to.
        """
        product_ids = [line.product_id for lines in cart.values() for line in lines]
        products = await self._repo.get_products(product_ids)

        orders: list[StoreOrder] = []
        for store_id, lines in cart.items():
            store = await self._repo.get_store(store_id)
            items: list[LineItem] = []
            for line in lines:
                product = products[line.product_id]
                if product.store_id != store.id:
                    raise InvalidInput(
                        f"Product {product.id} does not belong to store {store.id}"
                    )
                items.append(LineItem(product=product, quantity=line.quantity))
            orders.append(StoreOrder(store=store, lines=tuple(items)))

        return CheckoutRequest(
            orders=tuple(orders),
            currency=currency,
            shipping_address=shipping_address,
        )

    async def place_order(
        self,
        buyer_email: str,
        cart: Mapping[StoreId, Sequence[CartLine]],
        currency: str,
        shipping_address: ShippingAddress,
    ) -> Order:
        request = await self.resolve_cart(cart, currency, shipping_address)
        body = await build_order_body(
            request,
            settings=self._settings,
            shipping_costs=self._shipping_costs,
            fee_rates=self._fee_rates,
        )

        order_id = OrderId(new_id("ord"))
        created = await self._paypal.create_order(body.to_payload(), request_id=str(order_id))

        totals = tuple(
            StoreTotal(
                store_id=unit.store_id,
                total=unit.amount.total_sum,
                platform_fee=unit.payment_instruction.platform_fee,
            )
            for unit in body.purchase_units
        )
        order = Order(
            id=order_id,
            processor_order_id=created.id,
            buyer_email=buyer_email,
            currency=currency,
            total=sum((t.total for t in totals), ZERO),
            status=OrderStatus.CREATED,
            store_totals=totals,
            created_at=datetime.now(timezone.utc).replace(tzinfo=None),
            approval_url=created.approval_url,
        )
        order = await self._repo.create_order(order)
        log.info(
            f"[Order: {order.id}] Placed by {buyer_email}: {len(totals)} store(s), "
            f"total {order.total} {currency}, PayPal order {created.id}"
        )
        return order

    async def get_order(self, order_id: OrderId) -> Order:
        return await self._repo.get_order(order_id)

    async def capture_order(self, order_id: OrderId) -> Order:
        order = await self._repo.get_order(order_id)
        if order.status is not OrderStatus.CREATED:
            raise InvalidInput(f"Order {order_id} is {order.status}, cannot capture")

        captured = await self._paypal.capture_order(order.processor_order_id)
        if captured.status != "COMPLETED":
            log.error(f"[Order: {order_id}] Capture ended in status {captured.status}")
            raise UpstreamFailure(f"Capture ended in status {captured.status}")

        capture_by_store = {
            _store_of_reference(ref): capture_id for ref, capture_id in captured.captures.items()
        }
        totals = tuple(
            replace(total, capture_id=capture_by_store.get(total.store_id))
            for total in order.store_totals
        )
        order = await self._repo.update_order(order_id, OrderStatus.COMPLETED, totals)
        log.info(f"[Order: {order_id}] Captured")
        return order

    async def refund_order(self, order_id: OrderId, actor: str) -> Order:
        """
        Refund every store's capture in full.

        Each store's refund is recorded as soon as PayPal confirms it, so a
        retry after a failure only refunds the stores still outstanding.

        Raises:
            Unauthorized: `actor` is not the buyer.
            InvalidInput: the order was never captured or is refunded already.
        """
        order = await self._repo.get_order(order_id)
        if order.buyer_email != actor:
            raise Unauthorized(f"Only the buyer may refund order {order_id}")
        if order.status is not OrderStatus.COMPLETED:
            raise InvalidInput(f"Order {order_id} is {order.status}, cannot refund")

        totals = list(order.store_totals)
        for i, total in enumerate(totals):
            if total.capture_id is None:
                log.warning(f"[Order: {order_id}] No capture for store {total.store_id}, skipped")
                continue
            if total.refund_id is not None:
                continue
            store = await self._repo.get_store(total.store_id)
            refund_id = await self._paypal.refund_capture(
                total.capture_id,
                amount=None,
                currency=order.currency,
                merchant_id=store.merchant_id or "",
            )
            totals[i] = replace(total, refund_id=refund_id)
            await self._repo.update_order(order_id, OrderStatus.COMPLETED, totals)
            log.info(f"[Order: {order_id}] Store {total.store_id} refunded ({refund_id})")

        order = await self._repo.update_order(order_id, OrderStatus.REFUNDED, totals)
        log.info(f"[Order: {order_id}] Refunded on request of {actor}")
        return order


__all__ = ("CartLine", "CheckoutService")
