import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Callable

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.config import get_settings
from saas_core.db.postgres import get_db
from saas_core.errors import Forbidden, Unauthenticated, ValidationError
from saas_core.models.organization_member import OrganizationMember
from saas_core.models.role import OrganizationRole, has_organization_role
from saas_core.schemas.user import PASSWORD_MAX_BYTES
from saas_core.utils.tenant import not_deleted

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False, scheme_name="bearerAuth")

ALGORITHM = "HS256"
TOKEN_TYPE = "Bearer"
VERIFICATION_TOKEN_BYTES = 32


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Return False on mismatch; a malformed stored hash raises ValueError."""
    password = plain_password.encode()
    # No stored hash can come from a longer password.
    if len(password) > PASSWORD_MAX_BYTES:
        return False
    return bcrypt.checkpw(password, hashed_password.encode())


def get_password_hash(password: str) -> str:
    encoded = password.encode()
    if len(encoded) > PASSWORD_MAX_BYTES:
        raise ValidationError(f"Password must be at most {PASSWORD_MAX_BYTES} bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt()).decode()


def generate_verification_token() -> str:
    """Single-use email verification token: 32 random bytes as 64 hex chars."""
    return secrets.token_hex(VERIFICATION_TOKEN_BYTES)


def generate_refresh_token() -> str:
    return secrets.token_urlsafe(32)


@dataclass(frozen=True)
class AuthContext:
    """Identity carried by a verified access token."""

    user_id: uuid.UUID
    email: str
    organization_id: uuid.UUID


class TokenSigner:
    """
    Issues and verifies HS256 access tokens.

    Holds only immutable configuration, so one instance is shared by every
    request and verify() can run concurrently without locking.
    """

    def __init__(self, secret_key: str, access_expire_minutes: int, refresh_expire_days: int):
        self._secret_key = secret_key
        self.access_token_expiration = timedelta(minutes=access_expire_minutes)
        self.refresh_token_expiration = timedelta(days=refresh_expire_days)

    @property
    def access_expires_in(self) -> int:
        """Access token lifetime in seconds."""
        return int(self.access_token_expiration.total_seconds())

    def create_access_token(
        self,
        user_id: uuid.UUID,
        email: str,
        organization_id: uuid.UUID,
        expires_delta: timedelta | None = None,
    ) -> str:
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta if expires_delta is not None else self.access_token_expiration)
        to_encode = {
            "sub": str(user_id),
            "user_id": str(user_id),
            "email": email,
            "organization_id": str(organization_id),
            "iat": int(now.timestamp()),
            "exp": int(expire.timestamp()),
        }
        return jwt.encode(to_encode, self._secret_key, algorithm=ALGORITHM)

    def refresh_token_expires_at(self) -> int:
        """Expiry, in epoch milliseconds, for a refresh token issued now."""
        expire = datetime.now(timezone.utc) + self.refresh_token_expiration
        return int(expire.timestamp() * 1000)

    def verify(self, token: str) -> AuthContext:
        """Validate signature and expiry; raise Unauthenticated on any failure."""
        if token.startswith(f"{TOKEN_TYPE} "):
            token = token[len(TOKEN_TYPE) + 1:]

        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[ALGORITHM])
        except JWTError as e:
            logger.warning("Invalid access token: %s", e)
            raise Unauthenticated()

        try:
            return AuthContext(
                user_id=uuid.UUID(payload["user_id"]),
                email=payload["email"],
                organization_id=uuid.UUID(payload["organization_id"]),
            )
        except (KeyError, TypeError, ValueError):
            logger.warning("Access token is missing identity claims")
            raise Unauthenticated()


@lru_cache
def get_token_signer() -> TokenSigner:
    settings = get_settings()
    return TokenSigner(
        settings.jwt_secret,
        settings.jwt_access_expire_minutes,
        settings.jwt_refresh_expire_days,
    )


async def get_current_auth(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    signer: TokenSigner = Depends(get_token_signer),
) -> AuthContext:
    if credentials is None:
        logger.warning("Missing authorization header")
        raise Unauthenticated()
    return signer.verify(credentials.credentials)


def require_org_role(minimum: OrganizationRole) -> Callable:
    """
    Dependency factory that checks the caller's role in their organization.

    Usage:
        @router.delete("/members/{user_id}")
        async def remove_member(
            user_id: UUID,
            member: OrganizationMember = Depends(require_org_role(OrganizationRole.ADMIN))
        ):
            ...
    """
    async def role_checker(
        auth: AuthContext = Depends(get_current_auth),
        db: AsyncSession = Depends(get_db),
    ) -> OrganizationMember:
        result = await db.execute(
            select(OrganizationMember).where(
                OrganizationMember.organization_id == auth.organization_id,
                OrganizationMember.user_id == auth.user_id,
                not_deleted(OrganizationMember),
            )
        )
        member = result.scalar_one_or_none()
        if member is None or not has_organization_role(member.role, minimum):
            logger.warning(
                "User %s lacks %s role in organization %s",
                auth.user_id, minimum.value, auth.organization_id,
            )
            raise Forbidden(f"Requires organization role: {minimum.value}")
        return member
    return role_checker
