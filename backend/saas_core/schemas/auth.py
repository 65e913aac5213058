"""Request and response bodies for the authentication endpoints."""

from pydantic import BaseModel, EmailStr, Field, field_validator

from saas_core.schemas.organization import OrganizationResponse
from saas_core.schemas.user import UserResponse, check_password_bytes


class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr = Field(max_length=255)
    password: str = Field(min_length=8, max_length=100)
    organization_name: str = Field(min_length=1, max_length=200)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str | None) -> str | None:
        return check_password_bytes(value)


class RegisterResponse(BaseModel):
    user: UserResponse
    organization: OrganizationResponse


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class Token(BaseModel):
    access_token: str
    expires_in: int
    token_type: str = "Bearer"


class LoginResponse(Token):
    refresh_token: str
    user: UserResponse


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(min_length=1)


class VerifyEmailRequest(BaseModel):
    token: str = Field(min_length=1)


class ResendVerificationRequest(BaseModel):
    email: EmailStr


class MessageResponse(BaseModel):
    message: str
