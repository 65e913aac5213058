from pydantic import BaseModel, Field, field_validator
from uuid import UUID

# bcrypt only reads the first 72 bytes of a password
PASSWORD_MAX_BYTES = 72


def check_password_bytes(value: str | None) -> str | None:
    if value is not None and len(value.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
    return value


class UserResponse(BaseModel):
    id: UUID
    name: str
    email: str
    email_verified: bool
    organization_id: UUID | None = None
    created_at: int
    updated_at: int

    class Config:
        from_attributes = True


class UserUpdate(BaseModel):
    name: str | None = Field(None, max_length=100)
    password: str | None = Field(None, min_length=8, max_length=100)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str | None) -> str | None:
        return check_password_bytes(value)
