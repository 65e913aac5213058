import uuid

import pytest
from sqlalchemy import select

from saas_core.errors import (
    InvalidCredentials,
    InvalidRefreshToken,
    NotFound,
    RefreshTokenExpired,
)
from saas_core.models.user import User
from saas_core.schemas.auth import LoginRequest
from saas_core.services.credentials import CredentialService
from saas_core.utils.time import now_ms
from conftest import PASSWORD


@pytest.fixture
def credentials(db, signer):
    return CredentialService(db, signer)


@pytest.mark.asyncio
async def test_login_returns_tokens(credentials, provision, signer):
    registered = await provision()

    response = await credentials.login(LoginRequest(email="owner@example.com", password=PASSWORD))

    assert response.token_type == "Bearer"
    assert response.expires_in == 3600
    assert response.refresh_token
    assert response.user.id == registered.user.id

    context = signer.verify(response.access_token)
    assert context.user_id == registered.user.id
    assert context.organization_id == registered.organization.id


@pytest.mark.asyncio
async def test_wrong_password_and_unknown_email_fail_identically(credentials, provision):
    await provision()

    with pytest.raises(InvalidCredentials) as wrong_password:
        await credentials.login(LoginRequest(email="owner@example.com", password="not-the-password"))
    with pytest.raises(InvalidCredentials) as unknown_email:
        await credentials.login(LoginRequest(email="nobody@example.com", password=PASSWORD))

    assert wrong_password.value.message == unknown_email.value.message == "Invalid email or password"
    assert wrong_password.value.status_code == unknown_email.value.status_code == 401


@pytest.mark.asyncio
async def test_login_replaces_previous_refresh_token(credentials, provision):
    await provision()
    request = LoginRequest(email="owner@example.com", password=PASSWORD)

    first = await credentials.login(request)
    second = await credentials.login(request)

    assert first.refresh_token != second.refresh_token
    with pytest.raises(InvalidRefreshToken):
        await credentials.refresh(first.refresh_token)
    assert (await credentials.refresh(second.refresh_token)).access_token


@pytest.mark.asyncio
async def test_refresh_issues_new_access_token(credentials, provision, signer):
    registered = await provision()
    login = await credentials.login(LoginRequest(email="owner@example.com", password=PASSWORD))

    token = await credentials.refresh(login.refresh_token)

    assert token.token_type == "Bearer"
    assert signer.verify(token.access_token).user_id == registered.user.id


@pytest.mark.asyncio
async def test_refresh_after_logout_fails(credentials, provision, db):
    registered = await provision()
    login = await credentials.login(LoginRequest(email="owner@example.com", password=PASSWORD))

    await credentials.logout(registered.user.id)

    with pytest.raises(InvalidRefreshToken):
        await credentials.refresh(login.refresh_token)

    user = await db.get(User, registered.user.id)
    assert user.refresh_token is None
    assert user.refresh_token_expires_at is None


@pytest.mark.asyncio
async def test_expired_refresh_token(credentials, provision, db):
    await provision()
    login = await credentials.login(LoginRequest(email="owner@example.com", password=PASSWORD))

    user = (await db.execute(select(User).where(User.email == "owner@example.com"))).scalar_one()
    user.refresh_token_expires_at = now_ms() - 1000
    await db.commit()

    with pytest.raises(RefreshTokenExpired) as exc_info:
        await credentials.refresh(login.refresh_token)
    assert exc_info.value.message == "Refresh token expired"


@pytest.mark.asyncio
async def test_unknown_refresh_token(credentials):
    with pytest.raises(InvalidRefreshToken):
        await credentials.refresh("never-issued")


@pytest.mark.asyncio
async def test_logout_unknown_user(credentials):

    with pytest.raises(NotFound):
        await credentials.logout(uuid.uuid4())


@pytest.mark.asyncio
async def test_verify_token(credentials, provision):
    registered = await provision()
    login = await credentials.login(LoginRequest(email="owner@example.com", password=PASSWORD))

    context = credentials.verify_token(login.access_token)

    assert context.email == "owner@example.com"
    assert context.user_id == registered.user.id


@pytest.mark.asyncio
async def test_login_with_overlong_password_is_invalid_credentials(credentials, provision):
    await provision()

    with pytest.raises(InvalidCredentials):
        await credentials.login(LoginRequest(email="owner@example.com", password="x" * 80))
