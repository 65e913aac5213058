from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.db.postgres import get_db
from saas_core.schemas.user import UserResponse, UserUpdate
from saas_core.security import AuthContext, get_current_auth
from saas_core.services.users import UserService

router = APIRouter()


@router.get("/current", response_model=UserResponse)
async def get_current_user(
    auth: AuthContext = Depends(get_current_auth),
    db: AsyncSession = Depends(get_db),
):
    return await UserService(db).current(auth.user_id)


@router.patch("/current", response_model=UserResponse)
async def update_current_user(
    data: UserUpdate,
    auth: AuthContext = Depends(get_current_auth),
    db: AsyncSession = Depends(get_db),
):
    return await UserService(db).update(auth.user_id, data)
