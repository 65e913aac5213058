"""User model with organization support."""

import uuid
from sqlalchemy import String, Boolean, BigInteger, Enum, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from saas_core.db.postgres import Base
from saas_core.models.role import SystemRole, is_system_admin, is_super_admin, is_support
from saas_core.utils.time import now_ms


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100))
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    password: Mapped[str] = mapped_column(String(255))
    system_role: Mapped[SystemRole] = mapped_column(
        Enum(
            SystemRole,
            name="system_role",
            native_enum=False,
            length=20,
            values_callable=lambda roles: [role.value for role in roles],
        ),
        default=SystemRole.USER,
        index=True,
    )

    # Email ownership proof
    email_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    email_verified_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    verification_token: Mapped[str | None] = mapped_column(
        String(64), nullable=True, unique=True, index=True
    )

    # One live refresh token per user
    refresh_token: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    refresh_token_expires_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("organizations.id"),
        index=True
    )
    organization = relationship("Organization", back_populates="users")

    created_at: Mapped[int] = mapped_column(BigInteger, default=now_ms)
    updated_at: Mapped[int] = mapped_column(BigInteger, default=now_ms, onupdate=now_ms)
    deleted_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True, index=True)

    @property
    def is_system_admin(self) -> bool:
        """Platform admin access."""
        return is_system_admin(self.system_role)

    @property
    def is_super_admin(self) -> bool:
        return is_super_admin(self.system_role)

    @property
    def is_support(self) -> bool:
        return is_support(self.system_role)
