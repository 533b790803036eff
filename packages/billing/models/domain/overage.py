"""Domain models for overage calculation."""

from pydantic import BaseModel, ConfigDict, Field

from packages.billing.models.domain.timestamps import UtcDatetime


class FeatureOverage(BaseModel):
    """Overage quantity and cost for one feature."""

    model_config = ConfigDict(frozen=True)

    feature_key: str
    consumed: int = Field(ge=0)
    included_units: int = Field(ge=0)
    overage_units: int = Field(ge=0)
    billable_batches: int = Field(ge=0)
    unit_batch_size: int = Field(ge=1)
    unit_price_cents: int = Field(ge=0)  # Per batch
    cost_cents: int = Field(ge=0)


class OverageResult(BaseModel):
    """Per-feature overage for a subscriber's billing period."""

    model_config = ConfigDict(frozen=True)

    subscriber_id: str
    plan_id: str
    period_start: UtcDatetime
    period_end: UtcDatetime
    features: dict[str, FeatureOverage]
    total_overage_cents: int = Field(ge=0)

    def get_feature(self, feature_key: str) -> FeatureOverage:
        return self.features[feature_key]
