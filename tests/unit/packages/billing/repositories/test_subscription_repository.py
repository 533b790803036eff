"""
Unit tests for SubscriptionRepository.

Tests record selection against a real (sqlite) database.
"""

import pytest
from datetime import timedelta

from packages.billing.models.database.subscription import SubscriptionEntity
from packages.billing.models.domain.enums import StoredSubscriptionStatus
from packages.billing.repositories.subscription_repository import SubscriptionRepository
from tests.fixtures import PERIOD_END, PERIOD_START


async def add_subscription(test_db, subscriber_id, plan_id, status, created_offset_days):
    entity = SubscriptionEntity(
        subscriber_id=subscriber_id,
        plan_id=plan_id,
        status=status,
        current_period_start=PERIOD_START,
        current_period_end=PERIOD_END,
        created_at=PERIOD_START + timedelta(days=created_offset_days),
    )
    test_db.add(entity)
    await test_db.flush()
    return entity


@pytest.mark.asyncio
class TestSubscriptionRepository:
    """Tests for SubscriptionRepository."""

    async def test_get_record(self, test_db, sample_subscription_entity):
        """Test getting the governing record for a subscriber."""
        repo = SubscriptionRepository(test_db)

        record = await repo.get_record("sub_1")

        assert record is not None
        assert record.subscriber_id == "sub_1"
        assert record.plan_id == "pro"
        assert record.status == "active"
        assert record.current_period_start == PERIOD_START
        assert record.current_period_end == PERIOD_END
        assert record.cancel_at_period_end is False
        assert record.canceled_at is None

    async def test_get_record_returns_none_for_unknown_subscriber(self, test_db):
        """Test that a subscriber without records yields None."""
        repo = SubscriptionRepository(test_db)

        assert await repo.get_record("nobody") is None

    async def test_get_record_prefers_active_record(self, test_db):
        """Test that an active record wins over a newer canceled one."""
        await add_subscription(
            test_db, "sub_2", "pro", StoredSubscriptionStatus.ACTIVE.value, 1
        )
        await add_subscription(
            test_db, "sub_2", "enterprise", StoredSubscriptionStatus.CANCELED.value, 5
        )
        repo = SubscriptionRepository(test_db)

        record = await repo.get_record("sub_2")

        assert record.plan_id == "pro"
        assert record.status == "active"

    async def test_get_record_falls_back_to_most_recent(self, test_db):
        """Test that without an active record the most recent one is used."""
        await add_subscription(
            test_db, "sub_3", "pro", StoredSubscriptionStatus.CANCELED.value, 1
        )
        await add_subscription(
            test_db, "sub_3", "enterprise", StoredSubscriptionStatus.PAST_DUE.value, 3
        )
        repo = SubscriptionRepository(test_db)

        record = await repo.get_record("sub_3")

        assert record.plan_id == "enterprise"
        assert record.status == "past_due"

    async def test_get_record_uses_lazy_session(self, sample_subscription_entity):
        """Test that get_record works without an explicit session."""
        repo = SubscriptionRepository()

        record = await repo.get_record("sub_1")

        assert record is not None
        assert record.plan_id == "pro"

    async def test_get_history(self, test_db):
        """Test listing all records newest first."""
        await add_subscription(
            test_db, "sub_4", "free", StoredSubscriptionStatus.CANCELED.value, 0
        )
        await add_subscription(
            test_db, "sub_4", "pro", StoredSubscriptionStatus.ACTIVE.value, 2
        )
        repo = SubscriptionRepository(test_db)

        history = await repo.get_history("sub_4")

        assert [r.plan_id for r in history] == ["pro", "free"]
