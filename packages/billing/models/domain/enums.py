"""
Billing enums - strongly typed enumerations for subscription and entitlement states.
"""

from enum import Enum


class SubscriptionStatus(str, Enum):
    """
    Resolved subscription lifecycle status.

    Derived at read time from a subscription record; expiration always wins
    over the stored status.
    """

    NONE = "none"  # No record, or a stored status with no usable subscription
    ACTIVE = "active"  # Paid up and within the current period
    CANCELED = "canceled"  # Canceled, access may remain until period end
    EXPIRED = "expired"  # Current period ended

    def has_access(self) -> bool:
        """Check if this status allows product access."""
        return self == SubscriptionStatus.ACTIVE


class StoredSubscriptionStatus(str, Enum):
    """Status values written by the payment platform into subscription records."""

    ACTIVE = "active"
    CANCELED = "canceled"
    PAST_DUE = "past_due"
    INCOMPLETE = "incomplete"


class SubscriptionErrorType(str, Enum):
    """Reason a subscriber has a record but no active subscription."""

    CANCELED = "canceled"
    EXPIRED = "expired"
    GENERAL = "general"


class MeteredFeature(str, Enum):
    """Feature keys metered by the default plan catalog."""

    AGENT_DOWNLOADS = "agent_downloads"
    AGENT_SHARES = "agent_shares"
    API_CALLS = "api_calls"


class EntitlementDecision(str, Enum):
    """Outcome of an entitlement check."""

    ALLOWED = "allowed"  # Within included quota
    ALLOWED_WITH_CHARGE = "allowed_with_charge"  # Permitted, billed as overage
    DENIED = "denied"  # Blocked by policy

    @property
    def allowed(self) -> bool:
        return self != EntitlementDecision.DENIED
