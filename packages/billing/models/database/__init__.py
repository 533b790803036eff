"""Database models for billing."""

from packages.billing.models.database.subscription import SubscriptionEntity
from packages.billing.models.database.usage import UsageEventEntity

__all__ = [
    "SubscriptionEntity",
    "UsageEventEntity",
]
