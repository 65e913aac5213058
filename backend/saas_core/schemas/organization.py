from pydantic import BaseModel, Field
from uuid import UUID

from saas_core.models.role import OrganizationRole
from saas_core.schemas.user import UserResponse


class OrganizationResponse(BaseModel):
    id: UUID
    name: str
    slug: str
    created_at: int
    updated_at: int

    class Config:
        from_attributes = True


class OrganizationUpdate(BaseModel):
    name: str | None = Field(None, max_length=200)


class OrganizationMemberResponse(BaseModel):
    user_id: UUID
    user: UserResponse | None = None
    role: OrganizationRole
    joined_at: int

    class Config:
        from_attributes = True


class MemberRoleUpdate(BaseModel):
    # Validated against OrganizationRole by the workflow
    role: str = Field(min_length=1, max_length=20)
