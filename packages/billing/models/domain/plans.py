"""Domain models for billing plans."""

from pydantic import BaseModel, ConfigDict, Field, model_validator

from packages.billing.exceptions import InvalidFeatureKeyError, PlanNotFoundError


class FeatureQuota(BaseModel):
    """Included quota and overage pricing for one metered feature on a plan."""

    model_config = ConfigDict(frozen=True)

    included_units: int = Field(ge=0)
    overage_unit_price_cents: int = Field(ge=0)  # Price per batch of overage
    unit_batch_size: int = Field(default=1, ge=1)  # e.g. 1000 for "per 1,000 calls"


class BillingPlan(BaseModel):
    """Immutable catalog entry: base price plus per-feature quotas."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str
    base_price_cents: int = Field(ge=0)
    features: dict[str, FeatureQuota]

    def get_feature(self, feature_key: str) -> FeatureQuota:
        """Get the quota for a feature, raising if it is not catalogued."""
        quota = self.features.get(feature_key)
        if quota is None:
            raise InvalidFeatureKeyError(feature_key, plan_id=self.id)
        return quota


class PlanCatalog(BaseModel):
    """
    Static registry of billing plans.

    Every plan must carry the same set of feature keys, so any feature
    referenced anywhere in the system is priced on every plan.
    """

    model_config = ConfigDict(frozen=True)

    plans: dict[str, BillingPlan]
    feature_labels: dict[str, str] = {}

    @model_validator(mode="after")
    def validate_catalog(self) -> "PlanCatalog":
        if not self.plans:
            raise ValueError("Plan catalog must define at least one plan")

        for key, plan in self.plans.items():
            if key != plan.id:
                raise ValueError(f"Catalog key {key!r} does not match plan id {plan.id!r}")

        feature_sets = {plan.id: set(plan.features) for plan in self.plans.values()}
        expected = set().union(*feature_sets.values())
        for plan_id, keys in feature_sets.items():
            missing = expected - keys
            if missing:
                raise ValueError(
                    f"Plan {plan_id!r} is missing features: {', '.join(sorted(missing))}"
                )
        return self

    @property
    def feature_keys(self) -> list[str]:
        """Feature keys in catalog order (taken from the first plan)."""
        first = next(iter(self.plans.values()))
        return list(first.features)

    def get_plan(self, plan_id: str) -> BillingPlan:
        plan = self.plans.get(plan_id)
        if plan is None:
            raise PlanNotFoundError(plan_id)
        return plan

    def list_plans(self) -> list[BillingPlan]:
        return list(self.plans.values())

    def get_feature_label(self, feature_key: str) -> str:
        """Human-readable feature name, falling back to a title-cased key."""
        return self.feature_labels.get(
            feature_key, feature_key.replace("_", " ").title()
        )


class FeatureInfo(BaseModel):
    """Display information for one feature quota on a plan."""

    feature_key: str
    label: str
    included_units: int
    overage_unit_price_cents: int
    unit_batch_size: int


class PlanInfo(BaseModel):
    """Complete plan information combining pricing and limits."""

    id: str
    name: str
    base_price_cents: int
    price_formatted: str
    billing_period: str
    features: list[FeatureInfo]
    feature_descriptions: list[str]
    is_heavy_tier: bool = False


class PlansResponse(BaseModel):
    """Response model for plan listings."""

    plans: list[PlanInfo]
