"""
Domain models for subscriptions.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict

from packages.billing.models.domain.enums import (
    SubscriptionErrorType,
    SubscriptionStatus,
)
from packages.billing.models.domain.timestamps import UtcDatetime


class SubscriptionRecord(BaseModel):
    """
    Subscription record as written by the payment platform.

    Read-only to the billing engine. The stored `status` may lag reality;
    resolve it with SubscriptionService instead of reading it directly.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    subscriber_id: str
    plan_id: str
    status: str

    # Billing cycle
    current_period_start: UtcDatetime
    current_period_end: UtcDatetime

    # Lifecycle
    cancel_at_period_end: bool = False
    canceled_at: Optional[UtcDatetime] = None
    created_at: Optional[UtcDatetime] = None


class SubscriptionDetails(BaseModel):
    """Resolved subscription state with a user-facing explanation."""

    has_subscription: bool
    status: SubscriptionStatus
    record: Optional[SubscriptionRecord] = None
    message: Optional[str] = None
    error_type: Optional[SubscriptionErrorType] = None


class TierInfo(BaseModel):
    """Tier-gated feature flags for a subscriber."""

    tier: str
    has_heavy_access: bool
    multi_agent_enabled: bool
    parallel_processing: bool
    context_limit_tokens: int
    context_limit_label: str


class ModelCompatibility(BaseModel):
    """Whether a subscriber's tier supports a model."""

    model_config = ConfigDict(protected_namespaces=())

    model_id: str
    compatible: bool
    required_tier: Optional[str] = None
    message: str
