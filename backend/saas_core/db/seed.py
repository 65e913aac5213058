"""Reference data every installation needs before the first signup."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.models.plan import Plan, DEFAULT_PLANS

logger = logging.getLogger(__name__)


async def seed_plans(db: AsyncSession) -> int:
    """Insert missing default plans. Existing plans are left untouched."""
    result = await db.execute(select(Plan.slug))
    existing = set(result.scalars().all())

    created = 0
    for slug, plan_data in DEFAULT_PLANS.items():
        if slug in existing:
            continue
        db.add(Plan(
            id=uuid.uuid4(),
            name=plan_data["name"],
            slug=slug,
            price=plan_data["price"],
            billing_period="monthly",
            features=plan_data["features"],
            limits=plan_data["limits"],
            is_active=True,
        ))
        created += 1

    await db.commit()
    if created:
        logger.info("Seeded %d default plans", created)
    return created
