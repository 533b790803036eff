"""Subscription stores - read-only access to subscription records."""

from packages.billing.providers.subscription_store.interface import (
    SubscriptionStoreInterface,
)

__all__ = [
    "SubscriptionStoreInterface",
]
