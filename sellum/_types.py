"""
Identifiers and shared aliases.

Ids are opaque strings with a short type prefix (`st_`, `pr_`, `rv_`, `ord_`)
wrapped in their own frozen type, so a ProductId never slips in where a StoreId
belongs.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass

from kungfu import LazyCoroResult

type Lazy[T, E] = LazyCoroResult[T, E]
"""Deferred async computation returning Ok(T) or Error(E)."""


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


# ═══════════════════════════════════════════════════════════════════════════════
# Identifiers
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class StoreId:
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class ProductId:
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class ReviewId:
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class OrderId:
    value: str

    def __str__(self) -> str:
        return self.value


__all__ = ("Lazy", "new_id", "StoreId", "ProductId", "ReviewId", "OrderId")
