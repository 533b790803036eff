"""
Billing error taxonomy.

Lookup and aggregation failures propagate to the caller; they are never
defaulted to zero usage or to the free plan.
"""

from typing import Optional

from common.core.exceptions import AppException, NotFoundError, StorageError


class BillingError(AppException):
    """Base class for billing engine errors."""

    pass


class PlanNotFoundError(NotFoundError, BillingError):
    """Plan id is not present in the catalog."""

    def __init__(self, plan_id: str):
        self.plan_id = plan_id
        super().__init__(f"Billing plan not found: {plan_id!r}")


class InvalidFeatureKeyError(NotFoundError, BillingError):
    """Feature key is not catalogued on the plan."""

    def __init__(self, feature_key: str, plan_id: Optional[str] = None):
        self.feature_key = feature_key
        self.plan_id = plan_id
        where = f" on plan {plan_id!r}" if plan_id else ""
        super().__init__(f"Unknown feature key {feature_key!r}{where}")


class SubscriberNotFoundError(NotFoundError, BillingError):
    """No usable subscription exists and no fallback plan is configured."""

    def __init__(self, subscriber_id: str):
        self.subscriber_id = subscriber_id
        super().__init__(f"No usable subscription for subscriber {subscriber_id!r}")


class UsageUnavailableError(StorageError, BillingError):
    """The usage store could not produce an exact count."""

    def __init__(self, message: str, subscriber_id: Optional[str] = None):
        self.subscriber_id = subscriber_id
        super().__init__(message)
