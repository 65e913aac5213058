"""Organization endpoints. Changes require the organization admin role."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.db.postgres import get_db
from saas_core.models.organization_member import OrganizationMember
from saas_core.models.role import OrganizationRole
from saas_core.schemas.organization import (
    MemberRoleUpdate,
    OrganizationMemberResponse,
    OrganizationResponse,
    OrganizationUpdate,
)
from saas_core.security import require_org_role
from saas_core.services.organizations import OrganizationService

router = APIRouter()

require_member = require_org_role(OrganizationRole.MEMBER)
require_admin = require_org_role(OrganizationRole.ADMIN)


@router.get("/current", response_model=OrganizationResponse)
async def get_current_organization(
    member: OrganizationMember = Depends(require_member),
    db: AsyncSession = Depends(get_db),
):
    return await OrganizationService(db).get(member.organization_id)


@router.patch("/current", response_model=OrganizationResponse)
async def update_current_organization(
    data: OrganizationUpdate,
    member: OrganizationMember = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await OrganizationService(db).update(member.organization_id, data)


@router.get("/members", response_model=list[OrganizationMemberResponse])
async def list_members(
    member: OrganizationMember = Depends(require_member),
    db: AsyncSession = Depends(get_db),
):
    return await OrganizationService(db).list_members(member.organization_id)


@router.delete("/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    user_id: UUID,
    member: OrganizationMember = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await OrganizationService(db).remove_member(
        member.organization_id, user_id, acting_user_id=member.user_id
    )


@router.patch("/members/{user_id}", response_model=OrganizationMemberResponse)
async def change_member_role(
    user_id: UUID,
    data: MemberRoleUpdate,
    member: OrganizationMember = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await OrganizationService(db).change_member_role(
        member.organization_id, user_id, data.role, acting_user_id=member.user_id
    )
