"""Organization model for multi-tenancy support."""

import uuid
from sqlalchemy import String, BigInteger, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from saas_core.db.postgres import Base
from saas_core.utils.time import now_ms


class Organization(Base):
    __tablename__ = "organizations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200))
    slug: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    created_at: Mapped[int] = mapped_column(BigInteger, default=now_ms)
    updated_at: Mapped[int] = mapped_column(BigInteger, default=now_ms, onupdate=now_ms)
    deleted_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True, index=True)

    # Relationships
    users = relationship("User", back_populates="organization")
    members = relationship("OrganizationMember", back_populates="organization")
    subscriptions = relationship("Subscription", back_populates="organization")


def slugify_organization_name(name: str) -> str:
    """Derive a slug: lower-case the name and replace spaces with hyphens."""
    return name.lower().replace(" ", "-")
