"""Tenant signup: organization, owner, membership and default subscription as one unit."""

import logging
import secrets
import uuid

from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.db.postgres import unit_of_work
from saas_core.errors import DefaultPlanMissing, EmailConflict, InternalError
from saas_core.models.organization import Organization, slugify_organization_name
from saas_core.models.organization_member import OrganizationMember
from saas_core.models.plan import Plan, DEFAULT_PLAN_SLUG
from saas_core.models.role import (
    OrganizationRole,
    SystemRole,
    validate_organization_role,
    validate_system_role,
)
from saas_core.models.subscription import Subscription, STATUS_ACTIVE
from saas_core.models.user import User
from saas_core.schemas.auth import RegisterRequest, RegisterResponse
from saas_core.schemas.organization import OrganizationResponse
from saas_core.schemas.user import UserResponse
from saas_core.security import generate_verification_token, get_password_hash
from saas_core.services.audit import record_audit
from saas_core.services.notifications import NotificationDispatcher
from saas_core.utils.tenant import not_deleted
from saas_core.utils.time import billing_period, now_ms

logger = logging.getLogger(__name__)


class ProvisioningService:
    """Creates a tenant. Either every row commits or none does."""

    def __init__(self, db: AsyncSession, dispatcher: NotificationDispatcher):
        self.db = db
        self.dispatcher = dispatcher

    async def register(self, data: RegisterRequest) -> RegisterResponse:
        try:
            async with unit_of_work(self.db):
                await self._ensure_email_available(data.email)
                organization = await self._create_organization(data.organization_name)
                user, verification_token = await self._create_owner(data, organization)
                await self._add_owner_membership(organization, user)
                await self._create_default_subscription(organization)
                record_audit(
                    self.db,
                    user_id=user.id,
                    organization_id=organization.id,
                    action="organization.create",
                    resource="organization",
                    resource_id=organization.id,
                    details={"slug": organization.slug},
                )
        except SQLAlchemyError:
            logger.exception("Failed to provision organization for %s", data.email)
            raise InternalError()

        logger.info("Provisioned organization %s with owner %s", organization.id, user.id)
        self.dispatcher.send_verification_email(user.email, user.name, verification_token)

        return RegisterResponse(
            user=UserResponse.model_validate(user),
            organization=OrganizationResponse.model_validate(organization),
        )

    async def _ensure_email_available(self, email: str) -> None:
        # Deleted users still hold their email: the column is unique.
        result = await self.db.execute(
            select(func.count(User.id)).where(User.email == email)
        )
        if result.scalar():
            logger.warning("Email already exists: %s", email)
            raise EmailConflict()

    async def _unique_slug(self, name: str) -> str:
        slug = slugify_organization_name(name)
        result = await self.db.execute(
            select(func.count(Organization.id)).where(Organization.slug == slug)
        )
        if result.scalar():
            slug = f"{slug}-{secrets.token_hex(3)}"
        return slug

    async def _create_organization(self, name: str) -> Organization:
        organization = Organization(
            id=uuid.uuid4(),
            name=name,
            slug=await self._unique_slug(name),
        )
        self.db.add(organization)
        await self.db.flush()
        return organization

    async def _create_owner(
        self, data: RegisterRequest, organization: Organization
    ) -> tuple[User, str]:
        verification_token = generate_verification_token()
        user = User(
            id=uuid.uuid4(),
            name=data.name,
            email=data.email,
            password=get_password_hash(data.password),
            system_role=validate_system_role(SystemRole.USER),
            email_verified=False,
            verification_token=verification_token,
            organization_id=organization.id,
        )
        self.db.add(user)
        await self.db.flush()
        return user, verification_token

    async def _add_owner_membership(self, organization: Organization, user: User) -> OrganizationMember:
        member = OrganizationMember(
            organization_id=organization.id,
            user_id=user.id,
            role=validate_organization_role(OrganizationRole.OWNER),
            joined_at=now_ms(),
        )
        self.db.add(member)
        await self.db.flush()
        return member

    async def _create_default_subscription(self, organization: Organization) -> Subscription:
        result = await self.db.execute(
            select(Plan).where(
                Plan.slug == DEFAULT_PLAN_SLUG,
                Plan.is_active.is_(True),
                not_deleted(Plan),
            )
        )
        plan = result.scalar_one_or_none()
        if plan is None:
            logger.error("Default plan %r is missing; seed the plans table", DEFAULT_PLAN_SLUG)
            raise DefaultPlanMissing()

        period_start, period_end = billing_period()
        subscription = Subscription(
            id=uuid.uuid4(),
            organization_id=organization.id,
            plan_id=plan.id,
            status=STATUS_ACTIVE,
            current_period_start=period_start,
            current_period_end=period_end,
        )
        self.db.add(subscription)
        await self.db.flush()
        return subscription
