"""Shared test fixtures — async DB, client, auth helpers, factories.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Set test JWT_SECRET before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")

import hashlib
import uuid
from datetime import date, datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from leave_balance.common.constants import UserRole
from leave_balance.config import settings
from leave_balance.database import Base, get_db
from leave_balance.main import create_app

# Import ALL model modules so SQLAlchemy can resolve cross-module relationships
import leave_balance.auth.models  # noqa: F401
import leave_balance.core_hr.models  # noqa: F401
import leave_balance.attendance.models  # noqa: F401
import leave_balance.leave.models  # noqa: F401

# ── SQLite compat: compile PG-specific types to TEXT/CHAR ───────────

from sqlalchemy.dialects.postgresql import JSONB, UUID as PG_UUID
from sqlalchemy.ext.compiler import compiles


@compiles(JSONB, "sqlite")
def _jsonb_sqlite(element, compiler, **kw):
    return "TEXT"


@compiles(PG_UUID, "sqlite")
def _uuid_sqlite(element, compiler, **kw):
    return "CHAR(36)"


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine.sync_engine, "connect")
def _register_sqlite_functions(dbapi_conn, connection_record):
    """Register NOW() as a SQLite custom function."""
    dbapi_conn.create_function(
        "NOW", 0, lambda: datetime.now(timezone.utc).isoformat(),
    )


TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from leave_balance.common.rate_limit import limiter

    limiter.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Model factories ─────────────────────────────────────────────────

def _make_location(*, name: str = "Mumbai HQ") -> dict:
    return dict(
        id=uuid.uuid4(),
        name=name,
        timezone="Asia/Kolkata",
        is_active=True,
        created_at=datetime.now(timezone.utc),
    )


def _make_employee(
    *,
    email: str = "test.user@example.com",
    first_name: str = "Test",
    last_name: str = "User",
    location_id: uuid.UUID | None = None,
    reporting_manager_id: uuid.UUID | None = None,
) -> dict:
    return dict(
        id=uuid.uuid4(),
        employee_code=f"EMP-{uuid.uuid4().hex[:6].upper()}",
        first_name=first_name,
        last_name=last_name,
        email=email,
        date_of_joining=date(2020, 1, 15),
        location_id=location_id,
        reporting_manager_id=reporting_manager_id,
        is_active=True,
        created_at=datetime.now(timezone.utc),
    )


@pytest.fixture
async def test_location(db) -> dict:
    """Insert a test location and return its data dict."""
    from leave_balance.core_hr.models import Location

    data = _make_location()
    db.add(Location(**data))
    await db.flush()
    return data


@pytest.fixture
async def test_employee(db, test_location) -> dict:
    """Insert an active employee at test_location."""
    from leave_balance.core_hr.models import Employee

    data = _make_employee(location_id=test_location["id"])
    db.add(Employee(**data))
    await db.flush()
    return data


# ── Auth helpers ────────────────────────────────────────────────────

def create_access_token(
    employee_id: uuid.UUID,
    role: UserRole = UserRole.employee,
    expired: bool = False,
) -> str:
    """Generate a JWT access token for testing."""
    if expired:
        exp = datetime.now(timezone.utc) - timedelta(hours=1)
    else:
        exp = datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRY_HOURS)
    payload = {
        "sub": str(employee_id),
        "role": role.value,
        "type": "access",
        "exp": exp,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


async def persist_session(db: AsyncSession, employee_id: uuid.UUID, token: str) -> None:
    """Create a UserSession row matching the token so auth passes."""
    from leave_balance.auth.models import UserSession

    db.add(
        UserSession(
            id=uuid.uuid4(),
            employee_id=employee_id,
            token_hash=hashlib.sha256(token.encode()).hexdigest(),
            expires_at=datetime.now(timezone.utc) + timedelta(hours=settings.JWT_EXPIRY_HOURS),
            is_revoked=False,
            created_at=datetime.now(timezone.utc),
        )
    )
    await db.flush()


async def make_auth_headers(
    db: AsyncSession,
    employee_id: uuid.UUID,
    role: UserRole = UserRole.employee,
) -> dict[str, str]:
    """Bearer headers for ``employee_id`` with a persisted session."""
    token = create_access_token(employee_id, role=role)
    await persist_session(db, employee_id, token)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def auth_headers(db, test_employee) -> dict[str, str]:
    """Return Bearer auth headers with a valid session persisted in the DB."""
    return await make_auth_headers(db, test_employee["id"])
