"""
Interface for subscription stores.
"""

from abc import ABC, abstractmethod
from typing import Optional

from packages.billing.models.domain.subscription import SubscriptionRecord


class SubscriptionStoreInterface(ABC):
    """Abstract interface for subscription-record stores."""

    @abstractmethod
    async def get_record(self, subscriber_id: str) -> Optional[SubscriptionRecord]:
        """
        Get the subscription record that governs a subscriber.

        Args:
            subscriber_id: Subscriber to look up

        Returns:
            The governing record, or None if the subscriber has never subscribed
        """
        pass
