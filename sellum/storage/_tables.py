"""
Tables — SQLAlchemy models.

Money columns hold integer cents. Rates and averages are kept as decimal
strings so they round-trip exactly on every backend.
"""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# ═══════════════════════════════════════════════════════════════════════════════
# Base
# ═══════════════════════════════════════════════════════════════════════════════

class Base(DeclarativeBase):
    pass


# ═══════════════════════════════════════════════════════════════════════════════
# Users
# ═══════════════════════════════════════════════════════════════════════════════

class UserTable(Base):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), primary_key=True)
    owned_store_id: Mapped[str | None] = mapped_column(String(50), nullable=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Stores
# ═══════════════════════════════════════════════════════════════════════════════

class StoreTable(Base):
    __tablename__ = "stores"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    owner_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    # Profile
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    # Address / map
    address_line_1: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    postcode: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    city: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    lat: Mapped[float | None] = mapped_column(Float, nullable=True, index=True)
    lng: Mapped[float | None] = mapped_column(Float, nullable=True, index=True)

    # Shipping
    shipping_flat_rate_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)
    free_shipping_threshold_cents: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Payment
    merchant_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    fee_rate: Mapped[str | None] = mapped_column(String(16), nullable=True)

    # Activation steps
    profile_complete: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    min_one_product: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    shipping_registered: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    payment_method_registered: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    activation: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    avg_rating: Mapped[str | None] = mapped_column(String(8), nullable=True)


# ═══════════════════════════════════════════════════════════════════════════════
# Products & Reviews
# ═══════════════════════════════════════════════════════════════════════════════

class ProductTable(Base):
    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    store_id: Mapped[str] = mapped_column(
        String(50), ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class ReviewTable(Base):
    __tablename__ = "reviews"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    store_id: Mapped[str] = mapped_column(
        String(50), ForeignKey("stores.id", ondelete="CASCADE"), nullable=False, index=True
    )
    author_email: Mapped[str] = mapped_column(String(255), nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False, default="")


# ═══════════════════════════════════════════════════════════════════════════════
# Orders
# ═══════════════════════════════════════════════════════════════════════════════

class OrderTable(Base):
    """
    Orders placed at the payment processor.

    `store_totals` is a JSON list of
    {"store_id", "total_cents", "platform_fee_cents", "capture_id", "refund_id"}.
    """
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    processor_order_id: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    buyer_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    total_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    store_totals: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    approval_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


__all__ = (
    "Base",
    "UserTable",
    "StoreTable",
    "ProductTable",
    "ReviewTable",
    "OrderTable",
)
