import uuid
from datetime import timedelta

import pydantic
import pytest

from saas_core.errors import Unauthenticated, ValidationError
from saas_core.schemas.auth import RegisterRequest
from saas_core.schemas.user import UserUpdate
from saas_core.security import (
    TokenSigner,
    generate_refresh_token,
    generate_verification_token,
    get_password_hash,
    verify_password,
)
from saas_core.utils.time import add_months, now_ms


def test_password_hash_round_trip():
    hashed = get_password_hash("s3cret-pass")
    assert hashed != "s3cret-pass"
    assert verify_password("s3cret-pass", hashed)
    assert not verify_password("wrong-pass", hashed)


def test_password_hash_is_salted():
    assert get_password_hash("same-password") != get_password_hash("same-password")


def test_verification_token_is_64_hex_chars():
    token = generate_verification_token()
    assert len(token) == 64
    int(token, 16)
    assert token != generate_verification_token()


def test_refresh_tokens_are_unique():
    assert generate_refresh_token() != generate_refresh_token()


class TestTokenSigner:
    def test_round_trip(self, signer):
        user_id, organization_id = uuid.uuid4(), uuid.uuid4()
        token = signer.create_access_token(user_id, "ada@example.com", organization_id)

        context = signer.verify(token)

        assert context.user_id == user_id
        assert context.email == "ada@example.com"
        assert context.organization_id == organization_id

    def test_accepts_bearer_prefix(self, signer):
        user_id = uuid.uuid4()
        token = signer.create_access_token(user_id, "ada@example.com", uuid.uuid4())
        assert signer.verify(f"Bearer {token}").user_id == user_id

    def test_expired_token_rejected(self, signer):
        token = signer.create_access_token(
            uuid.uuid4(), "ada@example.com", uuid.uuid4(), expires_delta=timedelta(minutes=-5)
        )
        with pytest.raises(Unauthenticated):
            signer.verify(token)

    def test_token_from_other_secret_rejected(self, signer):
        other = TokenSigner("another-secret", access_expire_minutes=60, refresh_expire_days=7)
        token = other.create_access_token(uuid.uuid4(), "ada@example.com", uuid.uuid4())
        with pytest.raises(Unauthenticated):
            signer.verify(token)

    def test_garbage_rejected(self, signer):
        with pytest.raises(Unauthenticated):
            signer.verify("not-a-jwt")

    def test_expires_in_is_seconds(self, signer):
        assert signer.access_expires_in == 3600

    def test_refresh_expiry_is_in_future(self, signer):
        expires_at = signer.refresh_token_expires_at()
        seven_days_ms = 7 * 24 * 60 * 60 * 1000
        assert abs(expires_at - now_ms() - seven_days_ms) < 5000


def test_add_months_clamps_to_last_day():
    from datetime import datetime, timezone

    assert add_months(datetime(2025, 1, 31, tzinfo=timezone.utc), 1).day == 28
    assert add_months(datetime(2024, 1, 31, tzinfo=timezone.utc), 1).day == 29
    assert add_months(datetime(2025, 12, 15, tzinfo=timezone.utc), 1).month == 1


class TestPasswordLength:
    def test_long_password_never_matches(self):
        hashed = get_password_hash("p" * 72)
        assert not verify_password("p" * 100, hashed)

    def test_hashing_over_72_bytes_is_rejected(self):
        with pytest.raises(ValidationError):
            get_password_hash("é" * 40)

    def test_register_request_limits_bytes_not_characters(self):
        with pytest.raises(pydantic.ValidationError):
            RegisterRequest(
                name="Ada", email="ada@example.com", password="p" * 100, organization_name="Acme"
            )
        with pytest.raises(pydantic.ValidationError):
            RegisterRequest(
                name="Ada", email="ada@example.com", password="é" * 40, organization_name="Acme"
            )

        request = RegisterRequest(
            name="Ada", email="ada@example.com", password="é" * 36, organization_name="Acme"
        )
        assert verify_password(request.password, get_password_hash(request.password))

    def test_profile_update_limits_bytes(self):
        with pytest.raises(pydantic.ValidationError):
            UserUpdate(password="p" * 100)
        assert UserUpdate(password="p" * 72).password == "p" * 72
