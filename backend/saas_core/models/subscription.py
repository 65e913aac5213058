"""Subscription of an organization to a plan."""

import uuid
from sqlalchemy import String, BigInteger, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from saas_core.db.postgres import Base
from saas_core.utils.time import now_ms

STATUS_ACTIVE = "active"
STATUS_CANCELLED = "cancelled"


class Subscription(Base):
    """At most one active subscription per organization."""

    __tablename__ = "subscriptions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id"), index=True
    )
    plan_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("plans.id"))
    status: Mapped[str] = mapped_column(String(20), default=STATUS_ACTIVE)  # active, cancelled
    current_period_start: Mapped[int] = mapped_column(BigInteger)
    current_period_end: Mapped[int] = mapped_column(BigInteger)
    created_at: Mapped[int] = mapped_column(BigInteger, default=now_ms)
    updated_at: Mapped[int] = mapped_column(BigInteger, default=now_ms, onupdate=now_ms)
    deleted_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True, index=True)

    organization = relationship("Organization", back_populates="subscriptions")
    plan = relationship("Plan")
