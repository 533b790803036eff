"""
Factory for getting subscription store instance.
"""

from packages.billing.providers.subscription_store.interface import (
    SubscriptionStoreInterface,
)
from packages.billing.repositories.subscription_repository import (
    SubscriptionRepository,
)


def get_subscription_store() -> SubscriptionStoreInterface:
    """Get subscription store instance backed by the subscriptions table."""
    return SubscriptionRepository()
