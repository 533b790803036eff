# Sample billing data and in-memory store doubles shared by tests
from datetime import datetime, timezone
from typing import Optional

from packages.billing.models.domain.enums import StoredSubscriptionStatus
from packages.billing.models.domain.subscription import SubscriptionRecord
from packages.billing.providers.subscription_store.interface import (
    SubscriptionStoreInterface,
)
from packages.billing.providers.usage_store.interface import UsageStoreInterface

# Fixed clock for deterministic period and expiry checks
NOW = datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc)
PERIOD_START = datetime(2025, 3, 1, tzinfo=timezone.utc)
PERIOD_END = datetime(2025, 4, 1, tzinfo=timezone.utc)


class InMemoryUsageStore(UsageStoreInterface):
    """Usage store backed by a dict of (subscriber_id, feature_key) -> count."""

    def __init__(self, counts: Optional[dict] = None):
        self.counts = dict(counts or {})
        self.calls = []

    async def sum_usage(self, subscriber_id, feature_key, period_start, period_end):
        self.calls.append((subscriber_id, feature_key, period_start, period_end))
        return self.counts.get((subscriber_id, feature_key), 0)


class InMemorySubscriptionStore(SubscriptionStoreInterface):
    """Subscription store backed by a dict of subscriber_id -> record."""

    def __init__(self, records: Optional[dict] = None):
        self.records = dict(records or {})

    async def get_record(self, subscriber_id):
        return self.records.get(subscriber_id)


def make_record(
    subscriber_id: str = "sub_1",
    plan_id: str = "pro",
    status: str = StoredSubscriptionStatus.ACTIVE.value,
    period_start: datetime = PERIOD_START,
    period_end: datetime = PERIOD_END,
    **kwargs,
) -> SubscriptionRecord:
    return SubscriptionRecord(
        subscriber_id=subscriber_id,
        plan_id=plan_id,
        status=status,
        current_period_start=period_start,
        current_period_end=period_end,
        **kwargs,
    )
