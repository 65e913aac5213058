"""Pytest configuration and fixtures."""

import os

# Must be set before saas_core builds its settings and engine.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SEED_PLANS"] = "false"
os.environ["JWT_SECRET"] = "test-secret"

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import saas_core.models  # noqa: F401
from saas_core.db.postgres import Base, get_db
from saas_core.db.seed import seed_plans
from saas_core.main import app
from saas_core.models.organization_member import OrganizationMember
from saas_core.models.role import OrganizationRole
from saas_core.models.user import User
from saas_core.schemas.auth import RegisterRequest
from saas_core.security import TokenSigner, get_password_hash, get_token_signer
from saas_core.services.notifications import NotificationDispatcher, get_dispatcher
from saas_core.services.provisioning import ProvisioningService
from saas_core.utils.time import now_ms

PASSWORD = "correct-horse-battery"


class RecordingNotifier:
    """Collects verification emails instead of talking to SMTP."""

    def __init__(self):
        self.sent = []
        self.fail = False

    def send_verification_email(self, to, name, token, base_url):
        if self.fail:
            raise ConnectionError("SMTP server unavailable")
        self.sent.append({"to": to, "name": name, "token": token, "base_url": base_url})


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def plans(session_factory):
    async with session_factory() as session:
        await seed_plans(session)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def dispatcher(notifier):
    dispatcher = NotificationDispatcher(notifier, base_url="http://app.test", max_workers=1)
    yield dispatcher
    dispatcher.shutdown(wait=True)


@pytest.fixture
def signer():
    return TokenSigner("test-secret", access_expire_minutes=60, refresh_expire_days=7)


@pytest.fixture
def provision(db, dispatcher, plans):
    """Register a tenant through the real workflow."""

    async def _provision(
        email="owner@example.com", name="Olivia Owner", organization_name="Acme Corp"
    ):
        request = RegisterRequest(
            name=name, email=email, password=PASSWORD, organization_name=organization_name
        )
        return await ProvisioningService(db, dispatcher).register(request)

    return _provision


@pytest.fixture
def add_member(db):
    """Add a verified user to an organization with the given role."""

    async def _add_member(organization_id, role=OrganizationRole.MEMBER, email=None):
        user = User(
            id=uuid.uuid4(),
            name="Member",
            email=email or f"member-{uuid.uuid4().hex[:8]}@example.com",
            password=get_password_hash(PASSWORD),
            email_verified=True,
            organization_id=organization_id,
        )
        db.add(user)
        await db.flush()
        db.add(OrganizationMember(
            organization_id=organization_id,
            user_id=user.id,
            role=role,
            joined_at=now_ms(),
        ))
        await db.commit()
        return user

    return _add_member


@pytest_asyncio.fixture
async def client(session_factory, dispatcher, signer, plans):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    app.dependency_overrides[get_token_signer] = lambda: signer

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
