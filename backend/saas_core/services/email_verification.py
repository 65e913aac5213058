"""Email ownership proof: token redemption and resend."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.db.postgres import unit_of_work
from saas_core.errors import InvalidVerificationToken
from saas_core.models.user import User
from saas_core.security import generate_verification_token
from saas_core.services.notifications import NotificationDispatcher
from saas_core.utils.tenant import not_deleted
from saas_core.utils.time import now_ms

logger = logging.getLogger(__name__)

MESSAGE_VERIFIED = "Email verified successfully"
MESSAGE_ALREADY_VERIFIED = "Email already verified"
# Returned whether or not the address is registered
MESSAGE_RESENT = "If the email exists, a verification link has been sent"


class EmailVerificationService:
    def __init__(self, db: AsyncSession, dispatcher: NotificationDispatcher):
        self.db = db
        self.dispatcher = dispatcher

    async def verify_email(self, token: str) -> str:
        """Redeem a verification token. A used token is indistinguishable from an unknown one."""
        async with unit_of_work(self.db):
            result = await self.db.execute(
                select(User).where(User.verification_token == token, not_deleted(User))
            )
            user = result.scalar_one_or_none()
            if user is None:
                logger.warning("Invalid verification token")
                raise InvalidVerificationToken()

            if user.email_verified:
                return MESSAGE_ALREADY_VERIFIED

            user.email_verified = True
            user.email_verified_at = now_ms()
            user.verification_token = None

        logger.info("Email verified for user: %s", user.id)
        return MESSAGE_VERIFIED

    async def resend_verification(self, email: str) -> str:
        """Issue a fresh token, invalidating the previous one, and email it."""
        async with unit_of_work(self.db):
            result = await self.db.execute(
                select(User).where(User.email == email, not_deleted(User))
            )
            user = result.scalar_one_or_none()
            if user is None:
                logger.warning("Resend verification requested for unknown email")
                return MESSAGE_RESENT

            if user.email_verified:
                return MESSAGE_ALREADY_VERIFIED

            verification_token = generate_verification_token()
            user.verification_token = verification_token

        self.dispatcher.send_verification_email(user.email, user.name, verification_token)
        return MESSAGE_RESENT
