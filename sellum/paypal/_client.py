"""
PayPal REST client (async, httpx).

Every transport error and every non-2xx answer is logged with its context
and raised as UpstreamFailure; nothing is retried here.
"""

from __future__ import annotations

import re
import time
import uuid
from urllib.parse import quote
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import httpx

from sellum.config import Settings
from sellum.errors import InvalidInput, UpstreamFailure
from sellum.logging_config import get_logger
from sellum.paypal._bodies import auth_assertion, partner_referral_body, refund_body

log = get_logger(__name__)

# Renew the token this many seconds before PayPal says it expires.
TOKEN_EXPIRY_MARGIN = 60

# Merchant ids go into a URL path; only plain id characters are accepted.
MERCHANT_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]{1,64}")


# ═══════════════════════════════════════════════════════════════════════════════
# Results
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CreatedOrder:
    id: str
    status: str
    approval_url: str | None


@dataclass(frozen=True, slots=True)
class CapturedOrder:
    id: str
    status: str
    captures: dict[str, str]
    """Capture id per purchase-unit reference id."""


def _decode(response: httpx.Response, log_prefix: str) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError as e:
        log.error(
            f"{log_prefix} PayPal answered {response.status_code} "
            f"with a non-JSON body: {response.text!r}"
        )
        raise UpstreamFailure("Payment processor answered with an unreadable body") from e
    if not isinstance(payload, dict):
        log.error(f"{log_prefix} PayPal answered {response.status_code} with {payload!r}")
        raise UpstreamFailure("Payment processor answered with an unreadable body")
    return payload


def _required(payload: dict[str, Any], key: str, log_prefix: str) -> Any:
    if key not in payload:
        log.error(f"{log_prefix} PayPal answer lacks \"{key}\": {payload}")
        raise UpstreamFailure(f"Payment processor answer lacks \"{key}\"")
    return payload[key]


def _link(payload: dict[str, Any], rel: str) -> str | None:
    for link in payload.get("links", []):
        if link.get("rel") == rel:
            return link.get("href")
    return None


# ═══════════════════════════════════════════════════════════════════════════════
# Client
# ═══════════════════════════════════════════════════════════════════════════════


class PayPalClient:
    """
    Thin wrapper over the PayPal endpoints the marketplace needs.

    Pass `transport` to route requests somewhere other than the network
    (tests use `httpx.MockTransport`).
    """

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._client = httpx.AsyncClient(
            base_url=settings.paypal_base_url,
            timeout=httpx.Timeout(settings.paypal_timeout_seconds),
            headers={"Accept": "application/json"},
            transport=transport,
        )
        self._token: str | None = None
        self._token_expires_at = 0.0

    async def aclose(self) -> None:
        await self._client.aclose()

    # ─── Transport ───────────────────────────────────────────────────────────

    async def _access_token(self) -> str:
        if self._token is not None and time.monotonic() < self._token_expires_at:
            return self._token

        try:
            response = await self._client.post(
                "/v1/oauth2/token",
                data={"grant_type": "client_credentials"},
                auth=(self._settings.paypal_client_id, self._settings.paypal_client_secret),
            )
        except httpx.HTTPError as e:
            log.error(f"PayPal token request failed: {e!r}")
            raise UpstreamFailure(f"Payment processor unreachable: {e}") from e

        if response.is_error:
            log.error(f"PayPal token request rejected: {response.status_code} {response.text}")
            raise UpstreamFailure(
                "Payment processor rejected the platform credentials",
                status_code=response.status_code,
            )

        payload = _decode(response, "[Token]")
        self._token = _required(payload, "access_token", "[Token]")
        expires_in = int(payload.get("expires_in", 0))
        self._token_expires_at = time.monotonic() + max(expires_in - TOKEN_EXPIRY_MARGIN, 0)
        return self._token

    async def _send(
        self,
        method: str,
        url: str,
        *,
        log_prefix: str,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        token = await self._access_token()
        all_headers = {"Authorization": f"Bearer {token}", **(headers or {})}
        try:
            return await self._client.request(method, url, json=json, headers=all_headers)
        except httpx.HTTPError as e:
            log.error(f"{log_prefix} PayPal {method} {url} failed: {e!r}")
            raise UpstreamFailure(f"Payment processor unreachable: {e}") from e

    async def _request(
        self,
        method: str,
        url: str,
        *,
        log_prefix: str,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        response = await self._send(method, url, log_prefix=log_prefix, json=json, headers=headers)
        if response.is_error:
            log.error(
                f"{log_prefix} PayPal {method} {url} answered "
                f"{response.status_code}: {response.text}"
            )
            raise UpstreamFailure(
                f"Payment processor answered {response.status_code}",
                status_code=response.status_code,
            )
        if not response.content:
            return {}
        return _decode(response, log_prefix)

    # ─── Orders ──────────────────────────────────────────────────────────────

    async def create_order(self, body: dict[str, Any], request_id: str | None = None) -> CreatedOrder:
        request_id = request_id or str(uuid.uuid4())
        payload = await self._request(
            "POST",
            "/v2/checkout/orders",
            log_prefix=f"[Order: {request_id}]",
            json=body,
            headers={"PayPal-Request-Id": request_id},
        )
        order = CreatedOrder(
            id=_required(payload, "id", f"[Order: {request_id}]"),
            status=payload.get("status", ""),
            approval_url=_link(payload, "approve"),
        )
        log.info(f"[Order: {order.id}] Created at PayPal ({order.status})")
        return order

    async def capture_order(self, processor_order_id: str) -> CapturedOrder:
        payload = await self._request(
            "POST",
            f"/v2/checkout/orders/{processor_order_id}/capture",
            log_prefix=f"[Order: {processor_order_id}]",
            json={},
        )
        captures: dict[str, str] = {}
        for unit in payload.get("purchase_units", []):
            unit_captures = unit.get("payments", {}).get("captures", [])
            if unit_captures:
                captures[unit.get("reference_id", "")] = _required(
                    unit_captures[0], "id", f"[Order: {processor_order_id}]"
                )

        order = CapturedOrder(
            id=payload.get("id", processor_order_id),
            status=payload.get("status", ""),
            captures=captures,
        )
        log.info(f"[Order: {order.id}] Captured ({order.status}), {len(captures)} capture(s)")
        return order

    async def refund_capture(
        self,
        capture_id: str,
        *,
        amount: Decimal | None,
        currency: str,
        merchant_id: str,
    ) -> str:
        """
        Refund a capture on behalf of the seller that received it; returns the refund id.

        The request id is derived from the capture: PayPal answers a repeated
        refund of the same capture with the first result.
        """
        log_prefix = f"[Capture: {capture_id}]"
        payload = await self._request(
            "POST",
            f"/v2/payments/captures/{capture_id}/refund",
            log_prefix=log_prefix,
            json=refund_body(amount, currency),
            headers={
                "PayPal-Auth-Assertion": auth_assertion(
                    self._settings.paypal_client_id, merchant_id
                ),
                "PayPal-Request-Id": f"refund-{capture_id}",
            },
        )
        return _required(payload, "id", log_prefix)

    # ─── Seller onboarding ───────────────────────────────────────────────────

    async def create_sign_up_link(self, return_url: str, tracking_id: str) -> str:
        """Partner-referral link the seller follows to connect their PayPal account."""
        payload = await self._request(
            "POST",
            "/v2/customer/partner-referrals",
            log_prefix=f"[Store: {tracking_id}]",
            json=partner_referral_body(return_url, tracking_id),
        )
        link = _link(payload, "action_url")
        if link is None:
            log.error(f"[Store: {tracking_id}] Partner referral without action_url: {payload}")
            raise UpstreamFailure("Payment processor returned no sign-up link")
        return link

    async def validate_merchant_id(self, merchant_id: str) -> dict[str, Any]:
        """
        Look the merchant up among the platform's integrations.

        Raises:
            InvalidInput: malformed merchant id, or PayPal does not know it (404).
            UpstreamFailure: any other failure.
        """
        if MERCHANT_ID_PATTERN.fullmatch(merchant_id) is None:
            log.warning(f"[Merchant: {merchant_id!r}] Rejected malformed merchant id")
            raise InvalidInput("Invalid PayPal merchant id provided")

        url = (
            f"/v1/customer/partners/{self._settings.paypal_platform_merchant_id}"
            f"/merchant-integrations/{quote(merchant_id, safe='')}"
        )
        response = await self._send("GET", url, log_prefix=f"[Merchant: {merchant_id}]")
        if response.status_code == 404:
            log.warning(f"[Merchant: {merchant_id}] Unknown to PayPal")
            raise InvalidInput("Invalid PayPal merchant id provided")
        if response.is_error:
            log.error(
                f"[Merchant: {merchant_id}] Merchant lookup answered "
                f"{response.status_code}: {response.text}"
            )
            raise UpstreamFailure(
                f"Payment processor answered {response.status_code}",
                status_code=response.status_code,
            )
        return _decode(response, f"[Merchant: {merchant_id}]")


__all__ = (
    "PayPalClient",
    "CreatedOrder",
    "CapturedOrder",
    "TOKEN_EXPIRY_MARGIN",
    "MERCHANT_ID_PATTERN",
)
