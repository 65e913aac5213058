from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from saas_core.db.postgres import get_db
from saas_core.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RefreshTokenRequest,
    RegisterRequest,
    RegisterResponse,
    ResendVerificationRequest,
    Token,
    VerifyEmailRequest,
)
from saas_core.security import AuthContext, TokenSigner, get_current_auth, get_token_signer
from saas_core.services.credentials import CredentialService
from saas_core.services.email_verification import EmailVerificationService
from saas_core.services.notifications import NotificationDispatcher, get_dispatcher
from saas_core.services.provisioning import ProvisioningService

router = APIRouter()


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    return await ProvisioningService(db, dispatcher).register(data)


@router.post("/login", response_model=LoginResponse)
async def login(
    data: LoginRequest,
    db: AsyncSession = Depends(get_db),
    signer: TokenSigner = Depends(get_token_signer),
):
    return await CredentialService(db, signer).login(data)


@router.post("/refresh", response_model=Token)
async def refresh(
    data: RefreshTokenRequest,
    db: AsyncSession = Depends(get_db),
    signer: TokenSigner = Depends(get_token_signer),
):
    return await CredentialService(db, signer).refresh(data.refresh_token)


@router.delete("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    auth: AuthContext = Depends(get_current_auth),
    db: AsyncSession = Depends(get_db),
    signer: TokenSigner = Depends(get_token_signer),
):
    await CredentialService(db, signer).logout(auth.user_id)


@router.post("/verify-email", response_model=MessageResponse)
async def verify_email(
    data: VerifyEmailRequest,
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    message = await EmailVerificationService(db, dispatcher).verify_email(data.token)
    return MessageResponse(message=message)


@router.post("/resend-verification", response_model=MessageResponse)
async def resend_verification(
    data: ResendVerificationRequest,
    db: AsyncSession = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    message = await EmailVerificationService(db, dispatcher).resend_verification(data.email)
    return MessageResponse(message=message)
