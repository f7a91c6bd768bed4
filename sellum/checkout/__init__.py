"""
Checkout — multi-seller order pricing and the processor order body.

    body = await build_order_body(
        request,
        settings=settings,
        shipping_costs=FlatRateShipping(settings.default_shipping_cost),
        fee_rates=StoredFeeRates(repo, settings.platform_fee_rate_default),
    )
    payload = body.to_payload()

One purchase unit per store, in cart order. Any failing store fails the
whole build.
"""

from sellum.checkout._domain import (
    ShippingAddress,
    StoreOrder,
    CheckoutRequest,
    AmountBreakdown,
    ItemLine,
    ShippingDetail,
    PaymentInstruction,
    PurchaseUnit,
    OrderBody,
)
from sellum.checkout._assemble import (
    REQUIRED_ADDRESS_FIELDS,
    shipping_detail,
    item_lines,
    breakdown,
    assemble_purchase_unit,
)
from sellum.checkout._nodes import (
    CheckoutNode,
    ShippingDetailNode,
    PurchaseUnitsNode,
    OrderBodyNode,
    build_order_body,
)
from sellum.checkout._service import CartLine, CheckoutService

__all__ = (
    # Types
    "ShippingAddress",
    "StoreOrder",
    "CheckoutRequest",
    "AmountBreakdown",
    "ItemLine",
    "ShippingDetail",
    "PaymentInstruction",
    "PurchaseUnit",
    "OrderBody",
    # Assembly
    "REQUIRED_ADDRESS_FIELDS",
    "shipping_detail",
    "item_lines",
    "breakdown",
    "assemble_purchase_unit",
    # Graph
    "CheckoutNode",
    "ShippingDetailNode",
    "PurchaseUnitsNode",
    "OrderBodyNode",
    "build_order_body",
    # Service
    "CartLine",
    "CheckoutService",
)
