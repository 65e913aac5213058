from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.db.postgres import get_db
from saas_core.models.organization_member import OrganizationMember
from saas_core.models.role import OrganizationRole
from saas_core.schemas.subscription import (
    PlanResponse,
    SubscriptionResponse,
    UpgradeSubscriptionRequest,
)
from saas_core.security import require_org_role
from saas_core.services.subscriptions import SubscriptionService

router = APIRouter()
plans_router = APIRouter()

require_member = require_org_role(OrganizationRole.MEMBER)
require_admin = require_org_role(OrganizationRole.ADMIN)


@plans_router.get("", response_model=list[PlanResponse])
async def list_plans(db: AsyncSession = Depends(get_db)):
    return await SubscriptionService(db).list_plans()


@router.get("/current", response_model=SubscriptionResponse)
async def get_current_subscription(
    member: OrganizationMember = Depends(require_member),
    db: AsyncSession = Depends(get_db),
):
    return await SubscriptionService(db).current(member.organization_id)


@router.post("/upgrade", response_model=SubscriptionResponse)
async def upgrade_subscription(
    data: UpgradeSubscriptionRequest,
    member: OrganizationMember = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await SubscriptionService(db).upgrade(
        member.organization_id, data.plan_id, acting_user_id=member.user_id
    )


@router.post("/cancel", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_subscription(
    member: OrganizationMember = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await SubscriptionService(db).cancel(member.organization_id, acting_user_id=member.user_id)
