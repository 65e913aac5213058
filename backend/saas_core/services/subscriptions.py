"""Plan listing and subscription changes."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from saas_core.db.postgres import unit_of_work
from saas_core.errors import NotFound
from saas_core.models.plan import Plan
from saas_core.models.subscription import Subscription, STATUS_ACTIVE, STATUS_CANCELLED
from saas_core.schemas.subscription import PlanResponse, SubscriptionResponse
from saas_core.services.audit import record_audit
from saas_core.utils.tenant import not_deleted, tenant_filter
from saas_core.utils.time import billing_period

logger = logging.getLogger(__name__)


class SubscriptionService:
    """
    Keeps at most one active subscription per organization: a change cancels
    the active row and creates its replacement in the same transaction.

    Two concurrent upgrades for one organization can still both commit; there
    is no row lock or unique constraint on (organization_id, status='active').
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_active(self, organization_id: uuid.UUID) -> Subscription:
        result = await self.db.execute(
            select(Subscription)
            .options(selectinload(Subscription.plan))
            .where(
                tenant_filter(Subscription, organization_id),
                Subscription.status == STATUS_ACTIVE,
            )
        )
        subscription = result.scalars().first()
        if subscription is None:
            logger.warning("No active subscription for organization %s", organization_id)
            raise NotFound("Subscription not found")
        return subscription

    async def list_plans(self) -> list[PlanResponse]:
        async with unit_of_work(self.db):
            result = await self.db.execute(
                select(Plan)
                .where(Plan.is_active.is_(True), not_deleted(Plan))
                .order_by(Plan.price)
            )
            plans = result.scalars().all()
        return [PlanResponse.model_validate(plan) for plan in plans]

    async def current(self, organization_id: uuid.UUID) -> SubscriptionResponse:
        async with unit_of_work(self.db):
            subscription = await self._get_active(organization_id)
        return SubscriptionResponse.model_validate(subscription)

    async def upgrade(
        self, organization_id: uuid.UUID, plan_id: uuid.UUID, acting_user_id: uuid.UUID
    ) -> SubscriptionResponse:
        """Move the organization to another plan (upgrade or downgrade)."""
        async with unit_of_work(self.db):
            current = await self._get_active(organization_id)

            result = await self.db.execute(
                select(Plan).where(
                    Plan.id == plan_id, Plan.is_active.is_(True), not_deleted(Plan)
                )
            )
            plan = result.scalar_one_or_none()
            if plan is None:
                logger.warning("Plan %s not found", plan_id)
                raise NotFound("Plan not found")

            current.status = STATUS_CANCELLED
            await self.db.flush()

            period_start, period_end = billing_period()
            subscription = Subscription(
                id=uuid.uuid4(),
                organization_id=organization_id,
                plan_id=plan.id,
                status=STATUS_ACTIVE,
                current_period_start=period_start,
                current_period_end=period_end,
            )
            subscription.plan = plan
            self.db.add(subscription)
            record_audit(
                self.db,
                user_id=acting_user_id,
                organization_id=organization_id,
                action="subscription.change",
                resource="subscription",
                resource_id=subscription.id,
                details={"from_plan": str(current.plan_id), "to_plan": str(plan.id)},
            )
        return SubscriptionResponse.model_validate(subscription)

    async def cancel(self, organization_id: uuid.UUID, acting_user_id: uuid.UUID) -> None:
        async with unit_of_work(self.db):
            subscription = await self._get_active(organization_id)
            subscription.status = STATUS_CANCELLED
            record_audit(
                self.db,
                user_id=acting_user_id,
                organization_id=organization_id,
                action="subscription.cancel",
                resource="subscription",
                resource_id=subscription.id,
            )
