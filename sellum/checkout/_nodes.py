"""
Checkout graph — cart in, processor order body out.

    CheckoutNode ─┬─> ShippingDetailNode ─┐
                  └───────────────────────┴─> PurchaseUnitsNode ─> OrderBodyNode

Purchase units are assembled per store in parallel via combinators.traverse_par;
results keep the cart's store order, and the first failing store (in that
order) fails the whole checkout.
"""

from decimal import Decimal

from kungfu import Ok, Error

import combinators as C
from sellum import graph as G
from sellum._types import Lazy
from sellum.config import Settings
from sellum.errors import InvalidInput
from sellum.logging_config import get_logger
from sellum.pricing import ShippingCostResolver, FeeRateResolver
from sellum.checkout._assemble import assemble_purchase_unit, shipping_detail
from sellum.checkout._domain import (
    CheckoutRequest,
    OrderBody,
    PurchaseUnit,
    ShippingDetail,
    StoreOrder,
)

log = get_logger(__name__)


@G.node
class CheckoutNode:
    """Entry point: wraps the resolved cart."""

    def __init__(self, data: CheckoutRequest) -> None:
        self.data = data

    @classmethod
    def __compose__(cls, request: CheckoutRequest) -> "CheckoutNode":
        if not request.orders:
            raise InvalidInput("The cart is empty")
        return cls(request)


@G.node
class ShippingDetailNode:
    """Buyer's address, validated once and shared by every purchase unit."""

    def __init__(self, data: ShippingDetail) -> None:
        self.data = data

    @classmethod
    def __compose__(cls, checkout: CheckoutNode, settings: Settings) -> "ShippingDetailNode":
        return cls(shipping_detail(checkout.data.shipping_address, settings.shipping_country_code))


@G.node
class PurchaseUnitsNode:
    """One purchase unit per store, assembled concurrently."""

    def __init__(self, units: list[PurchaseUnit]) -> None:
        self.units = units

    @classmethod
    async def __compose__(
        cls,
        checkout: CheckoutNode,
        shipping: ShippingDetailNode,
        settings: Settings,
        shipping_costs: ShippingCostResolver,
        fee_rates: FeeRateResolver,
    ) -> "PurchaseUnitsNode":
        request = checkout.data

        async def assemble(ordinal: int, order: StoreOrder) -> PurchaseUnit:
            store = order.store
            resolved = await C.parallel(
                C.catching_async(
                    lambda: shipping_costs.shipping_cost(store, order.lines),
                    on_error=lambda e: e,
                ),
                C.catching_async(
                    lambda: fee_rates.platform_fee_rate(store.id),
                    on_error=lambda e: e,
                ),
            )()
            match resolved:
                case Ok(values):
                    shipping_cost, fee_rate = values
                case Error(e):
                    log.error(f"[Store: {store.id}] Could not resolve shipping or fee rate: {e}")
                    raise e

            unit = assemble_purchase_unit(
                ordinal=ordinal,
                store=store,
                lines=order.lines,
                currency=request.currency,
                shipping=shipping.data,
                shipping_cost=Decimal(shipping_cost),
                fee_rate=Decimal(fee_rate),
                tax_rate=settings.tax_rate,
                platform_merchant_id=settings.paypal_platform_merchant_id,
                platform_email=settings.paypal_platform_email,
            )
            log.debug(
                f"[Store: {store.id}] Purchase unit {unit.reference_id}: "
                f"total {unit.amount.total_sum}, fee {unit.payment_instruction.platform_fee}"
            )
            return unit

        def process_store(entry: tuple[int, StoreOrder]) -> Lazy[PurchaseUnit, Exception]:
            ordinal, order = entry
            return C.catching_async(lambda: assemble(ordinal, order), on_error=lambda e: e)

        result = await C.traverse_par(
            list(enumerate(request.orders)),
            process_store,
            concurrency=settings.checkout_concurrency,
        )()

        match result:
            case Ok(units):
                return cls(units)
            case Error(e):
                raise e


@G.node
class OrderBodyNode:
    """Final processor request body."""

    def __init__(self, data: OrderBody) -> None:
        self.data = data

    @classmethod
    def __compose__(cls, units: PurchaseUnitsNode, settings: Settings) -> "OrderBodyNode":
        return cls(OrderBody(purchase_units=tuple(units.units), brand_name=settings.brand_name))


_ORDER_BODY = G.graph(OrderBodyNode)


async def build_order_body(
    request: CheckoutRequest,
    *,
    settings: Settings,
    shipping_costs: ShippingCostResolver,
    fee_rates: FeeRateResolver,
) -> OrderBody:
    """
    Build the processor order body for a resolved cart.

    Raises whatever the first failing store raised (InvalidInput,
    InvalidShippingAddress, NegativeAmount, ...); no partial body is returned.
    """
    node = await (
        _ORDER_BODY.run()
        .inject(request)
        .inject(settings)
        .inject_as(ShippingCostResolver, shipping_costs)
        .inject_as(FeeRateResolver, fee_rates)
    )
    return node.data


__all__ = (
    "CheckoutNode",
    "ShippingDetailNode",
    "PurchaseUnitsNode",
    "OrderBodyNode",
    "build_order_body",
)
