"""Organization reads, renames and member management."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from saas_core.db.postgres import unit_of_work
from saas_core.errors import Forbidden, NotFound
from saas_core.models.organization import Organization
from saas_core.models.organization_member import OrganizationMember
from saas_core.models.role import OrganizationRole, validate_organization_role
from saas_core.schemas.organization import (
    OrganizationMemberResponse,
    OrganizationResponse,
    OrganizationUpdate,
)
from saas_core.services.audit import record_audit
from saas_core.utils.tenant import not_deleted, tenant_filter
from saas_core.utils.time import now_ms

logger = logging.getLogger(__name__)


class OrganizationService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_organization(self, organization_id: uuid.UUID) -> Organization:
        result = await self.db.execute(
            select(Organization).where(
                Organization.id == organization_id, not_deleted(Organization)
            )
        )
        organization = result.scalar_one_or_none()
        if organization is None:
            logger.warning("Organization %s not found", organization_id)
            raise NotFound("Organization not found")
        return organization

    async def _get_member(self, organization_id: uuid.UUID, user_id: uuid.UUID) -> OrganizationMember:
        result = await self.db.execute(
            select(OrganizationMember).where(
                tenant_filter(OrganizationMember, organization_id),
                OrganizationMember.user_id == user_id,
            )
        )
        member = result.scalar_one_or_none()
        if member is None:
            logger.warning("Member %s not found in organization %s", user_id, organization_id)
            raise NotFound("Member not found")
        return member

    async def get(self, organization_id: uuid.UUID) -> OrganizationResponse:
        async with unit_of_work(self.db):
            organization = await self._get_organization(organization_id)
        return OrganizationResponse.model_validate(organization)

    async def update(self, organization_id: uuid.UUID, data: OrganizationUpdate) -> OrganizationResponse:
        """Rename the organization. The slug keeps its original value."""
        async with unit_of_work(self.db):
            organization = await self._get_organization(organization_id)
            if data.name:
                organization.name = data.name
        return OrganizationResponse.model_validate(organization)

    async def list_members(self, organization_id: uuid.UUID) -> list[OrganizationMemberResponse]:
        async with unit_of_work(self.db):
            result = await self.db.execute(
                select(OrganizationMember)
                .options(selectinload(OrganizationMember.user))
                .where(tenant_filter(OrganizationMember, organization_id))
                .order_by(OrganizationMember.joined_at)
            )
            members = result.scalars().all()
        return [OrganizationMemberResponse.model_validate(member) for member in members]

    async def remove_member(
        self, organization_id: uuid.UUID, user_id: uuid.UUID, acting_user_id: uuid.UUID
    ) -> None:
        """Soft-delete a membership. The owner can never be removed."""
        async with unit_of_work(self.db):
            member = await self._get_member(organization_id, user_id)
            if member.is_owner:
                logger.warning("Cannot remove owner from organization %s", organization_id)
                raise Forbidden("Cannot remove owner from organization")

            member.deleted_at = now_ms()
            record_audit(
                self.db,
                user_id=acting_user_id,
                organization_id=organization_id,
                action="organization_member.remove",
                resource="organization_member",
                resource_id=user_id,
            )

    async def change_member_role(
        self,
        organization_id: uuid.UUID,
        user_id: uuid.UUID,
        role: str,
        acting_user_id: uuid.UUID,
    ) -> OrganizationMemberResponse:
        """Change a member's role without ever creating or removing an owner."""
        new_role = validate_organization_role(role)
        if new_role == OrganizationRole.OWNER:
            raise Forbidden("Ownership cannot be granted")

        async with unit_of_work(self.db):
            member = await self._get_member(organization_id, user_id)
            if member.is_owner:
                raise Forbidden("Cannot change the owner's role")

            previous_role = member.role
            member.role = new_role
            record_audit(
                self.db,
                user_id=acting_user_id,
                organization_id=organization_id,
                action="organization_member.role_change",
                resource="organization_member",
                resource_id=user_id,
                details={"from": previous_role.value, "to": new_role.value},
            )
        return OrganizationMemberResponse(
            user_id=member.user_id, role=member.role, joined_at=member.joined_at
        )
