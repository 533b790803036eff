"""
Domain models for usage tracking and aggregation.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator

from packages.billing.models.domain.timestamps import UtcDatetime, as_utc


class BillingPeriod(BaseModel):
    """Half-open billing period [start, end)."""

    model_config = ConfigDict(frozen=True)

    start: UtcDatetime
    end: UtcDatetime

    @model_validator(mode="after")
    def validate_bounds(self) -> "BillingPeriod":
        if self.end <= self.start:
            raise ValueError("Billing period end must be after start")
        return self

    @classmethod
    def calendar_month(cls, moment: datetime) -> "BillingPeriod":
        """The UTC calendar month containing the given moment."""
        moment = as_utc(moment)
        start = moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        if start.month == 12:
            end = start.replace(year=start.year + 1, month=1)
        else:
            end = start.replace(month=start.month + 1)
        return cls(start=start, end=end)

    def contains(self, moment: datetime) -> bool:
        return self.start <= as_utc(moment) < self.end


class UsageSnapshot(BaseModel):
    """
    A subscriber's consumption per feature within one billing period.

    Computed on demand from the usage store, never persisted.
    """

    model_config = ConfigDict(frozen=True)

    subscriber_id: str
    period_start: UtcDatetime
    period_end: UtcDatetime
    counts: dict[str, int]

    def get_count(self, feature_key: str) -> int:
        """Consumed units for a feature; missing features count as zero."""
        return self.counts.get(feature_key, 0)


class FeatureUsage(BaseModel):
    """Consumption of one feature against its included quota."""

    feature_key: str
    label: str
    consumed: int
    included_units: int
    remaining: int
    percentage_used: float  # Capped at 100 for display
    warning_threshold_reached: bool
    over_limit: bool


class UsageReport(BaseModel):
    """
    Usage for every catalogued feature of a subscriber's plan.

    Aggregates usage metrics for display in dashboards.
    """

    subscriber_id: str
    plan_id: str
    period_start: datetime
    period_end: datetime
    features: list[FeatureUsage]

    def get_feature(self, feature_key: str) -> Optional[FeatureUsage]:
        return next((f for f in self.features if f.feature_key == feature_key), None)

    def get_user_messages(self) -> list[str]:
        """User-facing notices for features near or over their quota."""
        messages = []
        for feature in self.features:
            if feature.over_limit:
                messages.append(
                    f"{feature.label}: included quota of {feature.included_units:,} used up. "
                    "Further usage is billed as overage."
                )
            elif feature.warning_threshold_reached:
                messages.append(
                    f"You've used {feature.percentage_used:.0f}% of your {feature.label} quota "
                    f"({feature.consumed:,}/{feature.included_units:,})."
                )
        return messages


class UsageEvent(BaseModel):
    """
    Individual usage event record.

    Tracks every metered action for audit trail and aggregation.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int
    subscriber_id: str
    feature_key: str

    # Quantity of units in this event (for batched tracking)
    quantity: int = 1

    event_metadata: dict = {}

    created_at: UtcDatetime


class UsageEventCreateModel(BaseModel):
    """Model for creating a usage event."""

    subscriber_id: str
    feature_key: str
    quantity: int = Field(default=1, ge=0)
    event_metadata: dict = {}
    created_at: Optional[datetime] = None
