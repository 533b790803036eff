# Fixtures shared by every test module
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from common.db.base import Base
from packages.billing.config import BillingConfig
from packages.billing.models.database.subscription import SubscriptionEntity
from packages.billing.models.database.usage import UsageEventEntity  # noqa: F401
from packages.billing.models.domain.enums import StoredSubscriptionStatus
from packages.billing.models.domain.usage import BillingPeriod
from tests.fixtures import (
    PERIOD_END,
    PERIOD_START,
    InMemorySubscriptionStore,
    InMemoryUsageStore,
    make_record,
)


@pytest_asyncio.fixture
async def test_engine():
    """In-memory billing schema, rebuilt for every test."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def test_connection(test_engine):
    # Everything a test writes is discarded with this outer transaction
    async with test_engine.connect() as connection:
        outer = await connection.begin()
        yield connection
        await outer.rollback()


@pytest_asyncio.fixture
async def test_session_factory(test_connection):
    """
    Sessions bound to the test connection.

    Commits issued by repositories or transaction() only release a
    savepoint, so the outer rollback still cleans up.
    """
    return async_sessionmaker(
        bind=test_connection,
        class_=AsyncSession,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )


@pytest_asyncio.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest_asyncio.fixture(autouse=True)
async def patch_lazy_sessions(test_session_factory, monkeypatch):
    """Route get_session() and transaction() to the test connection."""
    for factory_name in ("AsyncSessionLocal", "AsyncSessionLocalReadonly"):
        monkeypatch.setattr(f"common.db.scoped.{factory_name}", test_session_factory)


@pytest.fixture
def billing_config():
    """Default catalog with the default tunables."""
    return BillingConfig()


@pytest.fixture
def billing_period():
    return BillingPeriod(start=PERIOD_START, end=PERIOD_END)


@pytest.fixture
def usage_store():
    return InMemoryUsageStore()


@pytest.fixture
def subscription_store():
    return InMemorySubscriptionStore({"sub_1": make_record()})


@pytest_asyncio.fixture(scope="function")
async def sample_subscription_entity(test_db: AsyncSession):
    """Active pro subscription for sub_1 in the March 2025 period."""
    entity = SubscriptionEntity(
        subscriber_id="sub_1",
        plan_id="pro",
        status=StoredSubscriptionStatus.ACTIVE.value,
        current_period_start=PERIOD_START,
        current_period_end=PERIOD_END,
        created_at=PERIOD_START,
    )
    test_db.add(entity)
    await test_db.commit()
    await test_db.refresh(entity)
    return entity
