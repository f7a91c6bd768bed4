"""
Request bodies and headers for the PayPal REST API that are not order bodies.
"""

import base64
import json
from decimal import Decimal
from typing import Any

from sellum.pricing import format_amount


def _b64(data: str) -> str:
    return base64.b64encode(data.encode()).decode()


def auth_assertion(client_id: str, merchant_id: str) -> str:
    """Unsigned JWT telling PayPal the platform acts on behalf of `merchant_id`."""
    header = _b64(json.dumps({"alg": "none"}, separators=(",", ":")))
    claims = _b64(json.dumps({"iss": client_id, "payer_id": merchant_id}, separators=(",", ":")))
    return f"{header}.{claims}."


def refund_body(amount: Decimal | None, currency: str) -> dict[str, Any]:
    """Partial refund when `amount` is given, full refund of the capture otherwise."""
    if amount is None:
        return {}
    return {"amount": {"value": format_amount(amount), "currency_code": currency}}


def partner_referral_body(return_url: str, tracking_id: str) -> dict[str, Any]:
    return {
        "tracking_id": tracking_id,
        "partner_config_override": {"return_url": return_url},
        "operations": [
            {
                "operation": "API_INTEGRATION",
                "api_integration_preference": {
                    "rest_api_integration": {
                        "integration_method": "PAYPAL",
                        "integration_type": "THIRD_PARTY",
                        "third_party_details": {"features": ["PAYMENT", "REFUND"]},
                    }
                },
            }
        ],
        "products": ["EXPRESS_CHECKOUT"],
        "legal_consents": [{"type": "SHARE_DATA_CONSENT", "granted": True}],
    }


__all__ = ("auth_assertion", "refund_body", "partner_referral_body")
