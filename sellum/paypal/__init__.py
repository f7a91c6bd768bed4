"""
PayPal — payment-processor client for multi-seller checkout.
"""

from sellum.paypal._bodies import auth_assertion, refund_body, partner_referral_body
from sellum.paypal._client import (
    PayPalClient,
    CreatedOrder,
    CapturedOrder,
    TOKEN_EXPIRY_MARGIN,
    MERCHANT_ID_PATTERN,
)

__all__ = (
    "PayPalClient",
    "CreatedOrder",
    "CapturedOrder",
    "TOKEN_EXPIRY_MARGIN",
    "MERCHANT_ID_PATTERN",
    "auth_assertion",
    "refund_body",
    "partner_referral_body",
)
