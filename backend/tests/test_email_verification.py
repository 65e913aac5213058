import pytest

from saas_core.errors import InvalidVerificationToken
from saas_core.models.user import User
from saas_core.services.email_verification import (
    MESSAGE_ALREADY_VERIFIED,
    MESSAGE_RESENT,
    MESSAGE_VERIFIED,
    EmailVerificationService,
)


@pytest.fixture
def verification(db, dispatcher):
    return EmailVerificationService(db, dispatcher)


async def current_token(db, user_id):
    user = await db.get(User, user_id)
    await db.refresh(user)
    return user.verification_token


@pytest.mark.asyncio
async def test_verify_email_marks_user_verified(db, verification, provision):
    registered = await provision()
    token = await current_token(db, registered.user.id)

    assert await verification.verify_email(token) == MESSAGE_VERIFIED

    user = await db.get(User, registered.user.id)
    assert user.email_verified is True
    assert user.email_verified_at is not None
    assert user.verification_token is None


@pytest.mark.asyncio
async def test_token_cannot_be_redeemed_twice(db, verification, provision):
    registered = await provision()
    token = await current_token(db, registered.user.id)
    await verification.verify_email(token)

    with pytest.raises(InvalidVerificationToken) as exc_info:
        await verification.verify_email(token)
    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "Invalid or expired verification token"


@pytest.mark.asyncio
async def test_unknown_token_rejected(verification):
    with pytest.raises(InvalidVerificationToken):
        await verification.verify_email("0" * 64)


@pytest.mark.asyncio
async def test_resend_does_not_reveal_registration(verification, provision):
    await provision()

    known = await verification.resend_verification("owner@example.com")
    unknown = await verification.resend_verification("stranger@example.com")

    assert known == unknown == MESSAGE_RESENT


@pytest.mark.asyncio
async def test_resend_invalidates_previous_token(db, verification, provision, dispatcher, notifier):
    registered = await provision()
    old_token = await current_token(db, registered.user.id)

    await verification.resend_verification("owner@example.com")
    new_token = await current_token(db, registered.user.id)

    assert new_token != old_token
    with pytest.raises(InvalidVerificationToken):
        await verification.verify_email(old_token)
    assert await verification.verify_email(new_token) == MESSAGE_VERIFIED

    dispatcher.shutdown(wait=True)
    assert [email["token"] for email in notifier.sent] == [old_token, new_token]


@pytest.mark.asyncio
async def test_resend_for_verified_user(db, verification, provision, dispatcher, notifier):
    registered = await provision()
    await verification.verify_email(await current_token(db, registered.user.id))

    assert await verification.resend_verification("owner@example.com") == MESSAGE_ALREADY_VERIFIED

    dispatcher.shutdown(wait=True)
    assert len(notifier.sent) == 1
