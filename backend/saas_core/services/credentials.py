"""Login, logout, refresh and access-token verification."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.db.postgres import unit_of_work
from saas_core.errors import (
    InvalidCredentials,
    InvalidRefreshToken,
    NotFound,
    RefreshTokenExpired,
)
from saas_core.models.user import User
from saas_core.schemas.auth import LoginRequest, LoginResponse, Token
from saas_core.schemas.user import UserResponse
from saas_core.security import (
    AuthContext,
    TOKEN_TYPE,
    TokenSigner,
    generate_refresh_token,
    verify_password,
)
from saas_core.utils.tenant import not_deleted
from saas_core.utils.time import now_ms

logger = logging.getLogger(__name__)


class CredentialService:
    def __init__(self, db: AsyncSession, signer: TokenSigner):
        self.db = db
        self.signer = signer

    async def login(self, data: LoginRequest) -> LoginResponse:
        """
        Exchange email and password for an access token and a refresh token.

        An unknown email and a wrong password fail identically. Logging in
        replaces the user's previous refresh token.
        """
        async with unit_of_work(self.db):
            result = await self.db.execute(
                select(User).where(User.email == data.email, not_deleted(User))
            )
            user = result.scalar_one_or_none()
            if user is None:
                logger.warning("Login failed: unknown email")
                raise InvalidCredentials()
            if not verify_password(data.password, user.password):
                logger.warning("Login failed: invalid password for user %s", user.id)
                raise InvalidCredentials()

            access_token = self.signer.create_access_token(
                user.id, user.email, user.organization_id
            )
            user.refresh_token = generate_refresh_token()
            user.refresh_token_expires_at = self.signer.refresh_token_expires_at()

        return LoginResponse(
            access_token=access_token,
            refresh_token=user.refresh_token,
            expires_in=self.signer.access_expires_in,
            token_type=TOKEN_TYPE,
            user=UserResponse.model_validate(user),
        )

    async def refresh(self, refresh_token: str) -> Token:
        """Mint a new access token. The refresh token itself is not rotated."""
        async with unit_of_work(self.db):
            result = await self.db.execute(
                select(User).where(User.refresh_token == refresh_token, not_deleted(User))
            )
            user = result.scalar_one_or_none()
            if user is None:
                logger.warning("Refresh failed: unknown refresh token")
                raise InvalidRefreshToken()
            if user.refresh_token_expires_at is None or user.refresh_token_expires_at < now_ms():
                logger.warning("Refresh token expired for user: %s", user.id)
                raise RefreshTokenExpired()

            access_token = self.signer.create_access_token(
                user.id, user.email, user.organization_id
            )

        return Token(
            access_token=access_token,
            expires_in=self.signer.access_expires_in,
            token_type=TOKEN_TYPE,
        )

    async def logout(self, user_id: uuid.UUID) -> None:
        async with unit_of_work(self.db):
            result = await self.db.execute(
                select(User).where(User.id == user_id, not_deleted(User))
            )
            user = result.scalar_one_or_none()
            if user is None:
                logger.warning("Logout failed: user %s not found", user_id)
                raise NotFound("User not found")

            user.refresh_token = None
            user.refresh_token_expires_at = None

    def verify_token(self, token: str) -> AuthContext:
        return self.signer.verify(token)
