"""Billing repositories - SQL-backed usage and subscription stores."""

from packages.billing.repositories.usage_repository import UsageEventRepository
from packages.billing.repositories.subscription_repository import (
    SubscriptionRepository,
)

__all__ = [
    "UsageEventRepository",
    "SubscriptionRepository",
]
