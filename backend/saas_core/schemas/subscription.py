from pydantic import BaseModel
from uuid import UUID


class PlanResponse(BaseModel):
    id: UUID
    name: str
    slug: str
    price: float
    billing_period: str
    features: dict
    limits: dict
    is_active: bool
    created_at: int
    updated_at: int

    class Config:
        from_attributes = True


class SubscriptionResponse(BaseModel):
    id: UUID
    organization_id: UUID
    plan: PlanResponse | None = None
    status: str
    current_period_start: int
    current_period_end: int
    created_at: int
    updated_at: int

    class Config:
        from_attributes = True


class UpgradeSubscriptionRequest(BaseModel):
    plan_id: UUID
