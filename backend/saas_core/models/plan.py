"""Subscription plans. Read-mostly reference data."""

import uuid
from sqlalchemy import String, Boolean, BigInteger, Numeric, JSON, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from saas_core.db.postgres import Base
from saas_core.utils.time import now_ms

JSONType = JSON().with_variant(JSONB(), "postgresql")


class Plan(Base):
    __tablename__ = "plans"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100))
    slug: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    price: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), default=0)
    billing_period: Mapped[str] = mapped_column(String(20), default="monthly")

    # e.g., {"storage": "1GB", "support": "Community"}
    features: Mapped[dict] = mapped_column(JSONType, default=dict)
    # e.g., {"api_calls_per_month": 1000, "max_users": 1}
    limits: Mapped[dict] = mapped_column(JSONType, default=dict)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[int] = mapped_column(BigInteger, default=now_ms)
    updated_at: Mapped[int] = mapped_column(BigInteger, default=now_ms, onupdate=now_ms)
    deleted_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True, index=True)


DEFAULT_PLAN_SLUG = "free"

# Plans every installation starts with
DEFAULT_PLANS = {
    "free": {
        "name": "Free",
        "price": 0.00,
        "features": {"storage": "1GB", "users": "1", "support": "Community"},
        "limits": {"api_calls_per_month": 1000, "max_users": 1, "storage_gb": 1},
    },
    "pro": {
        "name": "Pro",
        "price": 29.00,
        "features": {"storage": "50GB", "users": "10", "support": "Email"},
        "limits": {"api_calls_per_month": 100000, "max_users": 10, "storage_gb": 50},
    },
    "enterprise": {
        "name": "Enterprise",
        "price": 99.00,
        "features": {"storage": "Unlimited", "users": "Unlimited", "support": "Priority"},
        "limits": {"api_calls_per_month": -1, "max_users": -1, "storage_gb": -1},
    },
}
