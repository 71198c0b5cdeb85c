"""Pytest configuration for all tests."""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from warden.core.config import Settings, get_settings
from warden.domain.entities import (
    DataPermissionRule,
    FieldPermissionEntry,
    Role,
)
from warden.infrastructure.persistence.database import Base
from warden.infrastructure.persistence.models import (  # noqa: F401
    DataPermissionRuleModel,
    FieldPermissionModel,
    RoleModel,
    UserRoleModel,
)


@pytest.fixture(autouse=True)
def _testing_environment(monkeypatch):
    """Run every test against fresh testing settings."""
    monkeypatch.setenv("WARDEN_ENVIRONMENT", "testing")
    monkeypatch.setenv("WARDEN_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    """Settings of a (non-production) testing build."""
    return get_settings()


@pytest.fixture
def production_settings() -> Settings:
    """Settings of a production build."""
    return Settings(environment="production", database_url="sqlite+aiosqlite:///:memory:")


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Uses an in-memory SQLite database for testing.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


# Roles shared by the scenario tests


@pytest.fixture
def admin_role() -> Role:
    return Role(id=1, name="ADMIN", level=1, permissions=("*",), is_system=True)


@pytest.fixture
def viewer_role() -> Role:
    return Role(id=2, name="VIEWER", level=10, permissions=("goods:read", "orders:read"))


@pytest.fixture
def cashier_role() -> Role:
    return Role(id=3, name="CASHIER", level=50, permissions=("goods:read", "orders:*"))


@pytest.fixture
def point_owner_role() -> Role:
    return Role(id=4, name="POINT_OWNER", level=40, permissions=("orders:read", "goods:read"))


@pytest.fixture
def cashier_cost_hidden(cashier_role) -> FieldPermissionEntry:
    """CASHIER may neither read nor write goods.cost."""
    return FieldPermissionEntry(
        role_id=cashier_role.id,
        resource="goods",
        field="cost",
        can_read=False,
        can_write=False,
    )


@pytest.fixture
def own_orders_rule(point_owner_role) -> DataPermissionRule:
    """POINT_OWNER only sees orders they own."""
    return DataPermissionRule(
        id="rule-own-orders",
        role_id=point_owner_role.id,
        resource="orders",
        field="ownerId",
        operator="equals",
        value_type="own",
    )
