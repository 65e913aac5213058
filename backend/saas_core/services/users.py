"""Current-user profile reads and updates."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.db.postgres import unit_of_work
from saas_core.errors import NotFound
from saas_core.models.user import User
from saas_core.schemas.user import UserResponse, UserUpdate
from saas_core.security import get_password_hash
from saas_core.utils.tenant import not_deleted

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_user(self, user_id: uuid.UUID) -> User:
        result = await self.db.execute(
            select(User).where(User.id == user_id, not_deleted(User))
        )
        user = result.scalar_one_or_none()
        if user is None:
            logger.warning("User %s not found", user_id)
            raise NotFound("User not found")
        return user

    async def current(self, user_id: uuid.UUID) -> UserResponse:
        async with unit_of_work(self.db):
            user = await self._get_user(user_id)
        return UserResponse.model_validate(user)

    async def update(self, user_id: uuid.UUID, data: UserUpdate) -> UserResponse:
        """Change name and/or password; empty fields are left as they are."""
        async with unit_of_work(self.db):
            user = await self._get_user(user_id)
            if data.name:
                user.name = data.name
            if data.password:
                user.password = get_password_hash(data.password)
        return UserResponse.model_validate(user)
