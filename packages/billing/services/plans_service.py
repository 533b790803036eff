"""Service for retrieving billing plan information."""

from typing import Optional

from common.core.telemetry import trace_span
from packages.billing.config import BillingConfig, get_billing_config
from packages.billing.models.domain.plans import (
    BillingPlan,
    FeatureInfo,
    PlanInfo,
    PlansResponse,
)


def format_cents(amount_cents: int) -> str:
    """Format a whole-cent amount as dollars: "$0", "$29", "$12.50"."""
    if amount_cents == 0:
        return "$0"
    dollars, cents = divmod(amount_cents, 100)
    if cents == 0:
        return f"${dollars:,}"
    return f"${dollars:,}.{cents:02d}"


class PlansService:
    """Read-only access to the plan catalog."""

    def __init__(self, config: Optional[BillingConfig] = None):
        self.config = config or get_billing_config()

    @property
    def catalog(self):
        return self.config.catalog

    @trace_span
    def get_plan(self, plan_id: str) -> BillingPlan:
        """
        Get a plan by id.

        Raises PlanNotFoundError for unknown ids; callers choose the fallback.
        """
        return self.catalog.get_plan(plan_id)

    @trace_span
    def get_all_plans(self) -> PlansResponse:
        """Get all available plans with pricing and included quotas."""
        return PlansResponse(
            plans=[self._build_plan_info(plan) for plan in self.catalog.list_plans()]
        )

    def _build_plan_info(self, plan: BillingPlan) -> PlanInfo:
        features = [
            FeatureInfo(
                feature_key=feature_key,
                label=self.catalog.get_feature_label(feature_key),
                included_units=quota.included_units,
                overage_unit_price_cents=quota.overage_unit_price_cents,
                unit_batch_size=quota.unit_batch_size,
            )
            for feature_key, quota in plan.features.items()
        ]

        return PlanInfo(
            id=plan.id,
            name=plan.name,
            base_price_cents=plan.base_price_cents,
            price_formatted=format_cents(plan.base_price_cents),
            billing_period="month",
            features=features,
            feature_descriptions=[self._describe_feature(f) for f in features],
            is_heavy_tier=self.config.is_heavy_tier(plan.id),
        )

    def _describe_feature(self, feature: FeatureInfo) -> str:
        """e.g. "10,000 API Calls included, then $3.00 per 1,000"."""
        dollars, cents = divmod(feature.overage_unit_price_cents, 100)
        price = f"${dollars:,}.{cents:02d}"
        if feature.unit_batch_size > 1:
            per = f"per {feature.unit_batch_size:,}"
        else:
            per = "each"
        return (
            f"{feature.included_units:,} {feature.label} included, "
            f"then {price} {per}"
        )
