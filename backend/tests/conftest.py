"""
Pytest configuration and shared fixtures for the orders API tests.

Provides an in-memory SQLite session, an httpx client bound to the app with
that session injected, per-role users and tokens, and an OrderSnapshot
factory for engine tests.
"""
import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from datetime import datetime, timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from config import settings

# Test-only values for settings that would normally come from .env
if not settings.jwt_secret:
    settings.jwt_secret = "test-jwt-secret-for-pytest-only"
settings.test_auth_enabled = True

from main import app  # noqa: E402
from database import Base, get_db  # noqa: E402
from domain.enums import UserRole  # noqa: E402
from middleware.auth import issue_access_token  # noqa: E402
from middleware.rate_limit import limiter  # noqa: E402
from models import OrderSnapshot  # noqa: E402

SALES_USER_ID = "user-sales-1"
OTHER_SALES_USER_ID = "user-sales-2"


def make_snapshot(**overrides) -> OrderSnapshot:
    """OrderSnapshot with neutral defaults: normal priority, no dates, created now."""
    fields = {
        "id": 1,
        "status": "new",
        "design_approved": False,
        "sizes_validated": False,
        "deposit_received": False,
        "invoice_url": None,
        "priority": "normal",
        "est_delivery": None,
        "created_at": datetime.utcnow(),
        "salesperson_id": None,
    }
    fields.update(overrides)
    return OrderSnapshot(**fields)


def days_ago(days: int) -> datetime:
    return datetime.utcnow() - timedelta(days=days)


# ── Database Fixtures ────────────────────────────────────────────────


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create an in-memory SQLite database session for each test.

    Uses StaticPool to allow in-memory SQLite with async SQLAlchemy.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """httpx client against the app, with get_db overridden to the test session."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def _reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


# ── Users & Auth ─────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def users(db_session: AsyncSession) -> dict:
    """One active user per role; sales gets two so ownership can be tested."""
    from db_models import User

    created = {}
    for role in UserRole:
        user_id = SALES_USER_ID if role == UserRole.SALES else f"user-{role.value}"
        created[role.value] = User(id=user_id, name=f"{role.value.title()} User", role=role.value)
    created["other_sales"] = User(id=OTHER_SALES_USER_ID, name="Other Sales", role="sales")
    db_session.add_all(created.values())
    await db_session.commit()
    return created


def auth_headers(user) -> dict:
    token = issue_access_token(user_id=user.id, role=user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for(users):
    """headers_for("ops") -> Authorization header for the ops user."""
    def _headers(key: str) -> dict:
        return auth_headers(users[key])
    return _headers


# ── Order Fixtures ───────────────────────────────────────────────────


@pytest_asyncio.fixture
async def sample_orders(db_session: AsyncSession, users):
    """
    A small pipeline:
      - 2 drafts (one owned by the other salesperson, one 20 days old)
      - 1 awaiting sizes, 1 ready to invoice, 1 in production (high priority)
      - 1 shipped, 1 cancelled
    """
    from db_models import Order, Organization

    org = Organization(name="Lincoln High Wrestling")
    db_session.add(org)
    await db_session.flush()

    rows = [
        Order(order_code="O-00001", order_name="Spring singlets", status="new",
              salesperson_id=SALES_USER_ID, org_id=org.id, created_at=days_ago(1)),
        Order(order_code="O-00002", order_name="Stale warmups", status="new",
              salesperson_id=OTHER_SALES_USER_ID, created_at=days_ago(20)),
        Order(order_code="O-00003", order_name="Travel hoodies", status="waiting_sizes",
              salesperson_id=SALES_USER_ID, created_at=days_ago(2)),
        Order(order_code="O-00004", order_name="Team polos", status="sizes_validated",
              sizes_validated=True, salesperson_id=SALES_USER_ID, created_at=days_ago(3)),
        Order(order_code="O-00005", order_name="Rush shorts", status="production", priority="high",
              invoice_url="https://invoices.example/5", salesperson_id=SALES_USER_ID,
              created_at=days_ago(4)),
        Order(order_code="O-00006", order_name="Coach jackets", status="shipped", priority="high",
              salesperson_id=OTHER_SALES_USER_ID, created_at=days_ago(30)),
        Order(order_code="O-00007", order_name="Cancelled caps", status="cancelled",
              salesperson_id=SALES_USER_ID, created_at=days_ago(5)),
    ]
    db_session.add_all(rows)
    await db_session.commit()
    return {o.order_code: o for o in rows}
