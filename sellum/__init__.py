"""
sellum — marketplace backend: stores, multi-seller checkout, store activation.

    from sellum import graph as G        # Computation graphs
    from sellum import pricing as P      # Tax / fee arithmetic, resolvers
    from sellum import checkout          # Purchase units, order body, CheckoutService
    from sellum import activation        # Store readiness evaluator
"""

from sellum import graph
from sellum import pricing
from sellum import storage
from sellum import activation
from sellum import paypal
from sellum import checkout
from sellum import stores
from sellum._types import (
    Lazy,
    StoreId,
    ProductId,
    ReviewId,
    OrderId,
)

__version__ = "0.1.0"

__all__ = (
    "graph",
    "pricing",
    "storage",
    "activation",
    "paypal",
    "checkout",
    "stores",
    "Lazy",
    "StoreId",
    "ProductId",
    "ReviewId",
    "OrderId",
)
