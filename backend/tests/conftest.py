"""Shared pytest fixtures for the Agent Workspace test suite.

Provides:
- Per-test async SQLite database (no PostgreSQL needed for tests)
- AsyncSession factory patched into ``db.database``
- FastAPI test client (httpx.AsyncClient over ASGITransport)
- Pre-seeded tenants: organizations, users, memberships, a department
- Auth helpers (JWT tokens)
- Fake AI provider and notifier in place of the network
"""

import os
from functools import lru_cache
from dataclasses import dataclass
from typing import Any, AsyncGenerator, Optional
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine

# Override settings BEFORE any app imports
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_FORMAT", "text")

from core.constants import DepartmentRole, MemberRole  # noqa: E402
from core.security import create_access_token, hash_password  # noqa: E402
from db.database import create_session_factory, create_tables  # noqa: E402
from integrations.ai_providers import AIProviderRegistry, Generation  # noqa: E402
from notifications.channels import DeliveryResult, NotificationChannel  # noqa: E402

TEST_PASSWORD = "TestPassword123!"


# ---------------------------------------------------------------------------
# Fakes for external collaborators
# ---------------------------------------------------------------------------

class FakeProvider:
    """AI provider that echoes a canned reply and records every call."""

    def __init__(self, name: str = "gemini", reply: str = "generated text", error: Exception = None):
        self.name = name
        self.reply = reply
        self.error = error
        self.calls: list[tuple[str, Any]] = []

    async def generate_with_usage(self, prompt: str, context: Any = None) -> Generation:
        self.calls.append((prompt, context))
        if self.error is not None:
            raise self.error
        return Generation(text=self.reply, input_tokens=10, output_tokens=20, duration_ms=120000)

    async def generate(self, prompt: str, context: Any = None) -> str:
        generation = await self.generate_with_usage(prompt, context)
        return generation.text

    async def close(self) -> None:
        pass


class FakeNotifier:
    """Notification manager stand-in that records emails instead of sending them."""

    def __init__(self, success: bool = True):
        self.success = success
        self.sent: list[dict] = []

    async def send_email(self, to, subject, body, organization_id=None, metadata=None) -> DeliveryResult:
        self.sent.append({
            "to": to,
            "subject": subject,
            "body": body,
            "organization_id": organization_id,
            "metadata": metadata or {},
        })
        return DeliveryResult(
            success=self.success,
            channel=NotificationChannel.EMAIL,
            recipient=to,
            error=None if self.success else "SMTP unavailable",
        )


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def ai_registry(fake_provider) -> AIProviderRegistry:
    return AIProviderRegistry({"gemini": fake_provider})


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """A fresh SQLite database file per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine, monkeypatch):
    """Session factory bound to the test engine and patched into ``db.database``."""
    import db.database as db_mod

    factory = create_session_factory(db_engine)
    monkeypatch.setattr(db_mod, "engine", db_engine)
    monkeypatch.setattr(db_mod, "AsyncSessionLocal", factory)
    return factory


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for direct service tests; committed on teardown."""
    async with session_factory() as session:
        yield session
        await session.commit()


# ---------------------------------------------------------------------------
# Test data fixtures
# ---------------------------------------------------------------------------

@dataclass
class Workspace:
    """Seeded tenants used across the API tests."""

    organization: Any
    other_organization: Any
    department: Any
    owner: Any
    admin: Any
    head: Any
    member: Any
    loner: Any  # member without any department
    outsider: Any  # other organization
    newcomer: Any  # no organization at all


@lru_cache()
def _password_hash() -> str:
    return hash_password(TEST_PASSWORD)


async def _add_user(session, email_prefix: str, full_name: str):
    from db.models import User

    user = User(
        email=f"{email_prefix}-{uuid4().hex[:8]}@example.com",
        full_name=full_name,
        password_hash=_password_hash(),
        is_active=True,
    )
    session.add(user)
    await session.flush()
    return user


async def _add_membership(session, organization, user, role: str, department=None):
    from db.models import OrganizationMember

    session.add(OrganizationMember(
        organization_id=organization.id,
        user_id=user.id,
        role=role,
        department_id=department.id if department else None,
    ))
    await session.flush()


@pytest_asyncio.fixture
async def workspace(session_factory) -> Workspace:
    """Two organizations, one department and users in every role."""
    from db.models import Department, DepartmentMember, Organization

    async with session_factory() as session:
        suffix = uuid4().hex[:8]
        org = Organization(name=f"Acme {suffix}", slug=f"acme-{suffix}")
        other_org = Organization(name=f"Globex {suffix}", slug=f"globex-{suffix}")
        session.add_all([org, other_org])
        await session.flush()

        owner = await _add_user(session, "owner", "Olive Owner")
        admin = await _add_user(session, "admin", "Adam Admin")
        head = await _add_user(session, "head", "Hana Head")
        member = await _add_user(session, "member", "Mo Member")
        loner = await _add_user(session, "loner", "Lee Loner")
        outsider = await _add_user(session, "outsider", "Oz Outsider")
        newcomer = await _add_user(session, "newcomer", "Nia Newcomer")

        department = Department(
            organization_id=org.id,
            name="Operations",
            description="Back office",
            head_user_id=head.id,
        )
        session.add(department)
        await session.flush()

        await _add_membership(session, org, owner, MemberRole.OWNER.value)
        await _add_membership(session, org, admin, MemberRole.ADMIN.value)
        await _add_membership(session, org, head, MemberRole.DEPARTMENT_HEAD.value, department)
        await _add_membership(session, org, member, MemberRole.MEMBER.value, department)
        await _add_membership(session, org, loner, MemberRole.MEMBER.value)
        await _add_membership(session, other_org, outsider, MemberRole.OWNER.value)

        session.add_all([
            DepartmentMember(department_id=department.id, user_id=head.id, role=DepartmentRole.HEAD.value),
            DepartmentMember(department_id=department.id, user_id=member.id, role=DepartmentRole.MEMBER.value),
        ])
        await session.commit()

    return Workspace(
        organization=org,
        other_organization=other_org,
        department=department,
        owner=owner,
        admin=admin,
        head=head,
        member=member,
        loner=loner,
        outsider=outsider,
        newcomer=newcomer,
    )


def auth_headers_for(user) -> dict:
    """Authorization header with a valid access token for ``user``."""
    token = create_access_token(user_id=user.id, email=user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(workspace) -> dict:
    """Owner's Authorization header."""
    return auth_headers_for(workspace.owner)


async def make_workflow(
    session_factory,
    organization,
    steps: list,
    is_active: bool = True,
    created_by=None,
    name: str = "Test Workflow",
):
    """Persist a workflow without going through definition validation."""
    from db.models import Workflow

    async with session_factory() as session:
        workflow = Workflow(
            organization_id=organization.id,
            created_by_id=created_by.id if created_by else None,
            name=name,
            description="A workflow for testing",
            steps=steps,
            is_active=is_active,
        )
        session.add(workflow)
        await session.commit()
        return workflow


def make_context(user, organization=None, role: Optional[str] = None, department_ids=()):
    from app.dependencies import RequestContext

    return RequestContext(
        user_id=user.id,
        email=user.email,
        organization_id=organization.id if organization else None,
        role=role,
        department_ids=frozenset(department_ids),
    )


# ---------------------------------------------------------------------------
# App / HTTP client fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def app(session_factory, ai_registry, notifier):
    """FastAPI app wired to the test database and the fakes."""
    from app.config import get_settings
    from app.dependencies import get_db
    from app.main import create_app
    from integrations.ai_providers import get_ai_registry
    from workflow.executor import WorkflowExecutor, get_workflow_executor

    test_app = create_app()

    async def _get_test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    test_app.dependency_overrides[get_db] = _get_test_db
    test_app.dependency_overrides[get_ai_registry] = lambda: ai_registry
    test_app.dependency_overrides[get_workflow_executor] = lambda: WorkflowExecutor(
        ai_registry=ai_registry,
        notifier=notifier,
        settings=get_settings(),
    )

    yield test_app

    test_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
