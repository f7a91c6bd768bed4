"""
Errors — one exception class per error kind.

Every error carries a stable `code` (used by the HTTP layer) and a
human-readable `message`.
"""

from __future__ import annotations


class MarketplaceError(Exception):
    code = "MARKETPLACE_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidInput(MarketplaceError):
    code = "INVALID_INPUT"


class InvalidShippingAddress(InvalidInput):
    """A required shipping-address field is missing or empty."""

    code = "INVALID_SHIPPING_ADDRESS"

    def __init__(self, field: str) -> None:
        super().__init__(f"No {field} was provided with the shipping address.")
        self.field = field


class NotFound(MarketplaceError):
    code = "NOT_FOUND"

    def __init__(self, entity: str, id: object) -> None:
        super().__init__(f"{entity} {id} not found")
        self.entity = entity
        self.id = id


class Unauthorized(MarketplaceError):
    code = "UNAUTHORIZED"


class InvalidAmount(MarketplaceError):
    code = "INVALID_AMOUNT"


class NegativeAmount(InvalidAmount):
    code = "NEGATIVE_AMOUNT"


class UpstreamFailure(MarketplaceError):
    """Payment processor (or another remote API) failed or answered non-2xx."""

    code = "UPSTREAM_FAILURE"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


__all__ = (
    "MarketplaceError",
    "InvalidInput",
    "InvalidShippingAddress",
    "NotFound",
    "Unauthorized",
    "InvalidAmount",
    "NegativeAmount",
    "UpstreamFailure",
)
