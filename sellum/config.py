"""
Configuration — process environment (plus an optional `.env` file).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from collections.abc import Mapping

from dotenv import load_dotenv


def _decimal(env: Mapping[str, str], key: str, default: str) -> Decimal:
    raw = env.get(key, default)
    try:
        return Decimal(raw)
    except InvalidOperation:
        raise ValueError(f"{key} must be a decimal number, got {raw!r}") from None


def _rate(env: Mapping[str, str], key: str, default: str) -> Decimal:
    value = _decimal(env, key, default)
    if not Decimal(0) <= value <= Decimal(1):
        raise ValueError(f"{key} must be within [0, 1], got {value}")
    return value


@dataclass(frozen=True, slots=True)
class Settings:
    database_url: str = "sqlite+aiosqlite:///./sellum.db"

    paypal_base_url: str = "https://api-m.sandbox.paypal.com"
    paypal_client_id: str = ""
    paypal_client_secret: str = ""
    paypal_platform_merchant_id: str = ""
    paypal_platform_email: str = ""
    paypal_timeout_seconds: float = 20.0

    tax_rate: Decimal = Decimal("0.07")
    platform_fee_rate_default: Decimal = Decimal("0.10")
    default_shipping_cost: Decimal = Decimal("4.90")
    shipping_country_code: str = "DE"
    brand_name: str = "MySellum"
    checkout_concurrency: int = 5

    log_level: str = "INFO"

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        """
        Build settings from the environment.

        When `env` is omitted, a `.env` file in the working directory is
        loaded first (existing variables win) and `os.environ` is read.
        """
        if env is None:
            load_dotenv()
            env = os.environ

        shipping = _decimal(env, "DEFAULT_SHIPPING_COST", "4.90")
        if shipping < 0:
            raise ValueError(f"DEFAULT_SHIPPING_COST must not be negative, got {shipping}")

        concurrency = int(env.get("CHECKOUT_CONCURRENCY", "5"))
        if concurrency < 1:
            raise ValueError("CHECKOUT_CONCURRENCY must be at least 1")

        return cls(
            database_url=env.get("DATABASE_URL", "sqlite+aiosqlite:///./sellum.db"),
            paypal_base_url=env.get("PAYPAL_BASE_URL", "https://api-m.sandbox.paypal.com").rstrip("/"),
            paypal_client_id=env.get("PAYPAL_CLIENT_ID", ""),
            paypal_client_secret=env.get("PAYPAL_CLIENT_SECRET", ""),
            paypal_platform_merchant_id=env.get("PAYPAL_PLATFORM_MERCHANT_ID", ""),
            paypal_platform_email=env.get("PAYPAL_PLATFORM_EMAIL", ""),
            paypal_timeout_seconds=float(env.get("PAYPAL_TIMEOUT_SECONDS", "20")),
            tax_rate=_rate(env, "TAX_RATE", "0.07"),
            platform_fee_rate_default=_rate(env, "PLATFORM_FEE_RATE_DEFAULT", "0.10"),
            default_shipping_cost=shipping,
            shipping_country_code=env.get("SHIPPING_COUNTRY_CODE", "DE"),
            brand_name=env.get("BRAND_NAME", "MySellum"),
            checkout_concurrency=concurrency,
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
        )


__all__ = ("Settings",)
