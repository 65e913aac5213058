"""Membership of a user in an organization, with an organization role."""

import uuid
from sqlalchemy import BigInteger, Enum, ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from saas_core.db.postgres import Base
from saas_core.models.role import OrganizationRole, is_owner, is_admin, is_member
from saas_core.utils.time import now_ms


class OrganizationMember(Base):
    """Exactly one member per organization holds the owner role."""

    __tablename__ = "organization_members"

    organization_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("organizations.id"), primary_key=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), primary_key=True
    )
    role: Mapped[OrganizationRole] = mapped_column(
        Enum(
            OrganizationRole,
            name="organization_role",
            native_enum=False,
            length=20,
            values_callable=lambda roles: [role.value for role in roles],
        ),
        default=OrganizationRole.MEMBER,
        index=True,
    )
    joined_at: Mapped[int] = mapped_column(BigInteger, default=now_ms)
    deleted_at: Mapped[int | None] = mapped_column(BigInteger, nullable=True, index=True)

    organization = relationship("Organization", back_populates="members")
    user = relationship("User")

    @property
    def is_owner(self) -> bool:
        return is_owner(self.role)

    @property
    def is_admin(self) -> bool:
        return is_admin(self.role)

    @property
    def is_member(self) -> bool:
        return is_member(self.role)
