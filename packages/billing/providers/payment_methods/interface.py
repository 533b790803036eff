"""
Interface for payment-method lookups.

Used by the hard-cap entitlement policy to decide whether chargeable usage
may proceed. The engine never charges a payment method itself.
"""

from abc import ABC, abstractmethod


class PaymentMethodLookupInterface(ABC):
    """Abstract interface for checking whether a subscriber can be charged."""

    @abstractmethod
    async def has_payment_method(self, subscriber_id: str) -> bool:
        """
        Check if a payment method is on file for the subscriber.

        Args:
            subscriber_id: Subscriber to check

        Returns:
            True if overage charges can be collected
        """
        pass
