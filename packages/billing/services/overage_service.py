"""
Overage calculation.

All amounts are whole cents and all quantities whole units. Partial batches
are billed in full.
"""

from typing import Optional

from common.core.telemetry import trace_span, get_logger, log_span_event
from packages.billing.config import BillingConfig, get_billing_config
from packages.billing.models.domain.overage import FeatureOverage, OverageResult
from packages.billing.models.domain.plans import BillingPlan, FeatureQuota
from packages.billing.models.domain.usage import BillingPeriod, UsageSnapshot
from packages.billing.services.usage_service import UsageService

logger = get_logger(__name__)


def ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def calculate_feature_overage(
    feature_key: str, quota: FeatureQuota, consumed: int
) -> FeatureOverage:
    """Overage units and cost for one feature given consumed units."""
    overage_units = max(0, consumed - quota.included_units)
    billable_batches = ceil_div(overage_units, quota.unit_batch_size)
    return FeatureOverage(
        feature_key=feature_key,
        consumed=consumed,
        included_units=quota.included_units,
        overage_units=overage_units,
        billable_batches=billable_batches,
        unit_batch_size=quota.unit_batch_size,
        unit_price_cents=quota.overage_unit_price_cents,
        cost_cents=billable_batches * quota.overage_unit_price_cents,
    )


def calculate_plan_overage(plan: BillingPlan, snapshot: UsageSnapshot) -> OverageResult:
    """Overage for every feature of a plan against a usage snapshot."""
    features = {
        feature_key: calculate_feature_overage(
            feature_key, quota, snapshot.get_count(feature_key)
        )
        for feature_key, quota in plan.features.items()
    }
    return OverageResult(
        subscriber_id=snapshot.subscriber_id,
        plan_id=plan.id,
        period_start=snapshot.period_start,
        period_end=snapshot.period_end,
        features=features,
        total_overage_cents=sum(f.cost_cents for f in features.values()),
    )


class OverageService:
    """Computes overage for a subscriber's billing period."""

    def __init__(
        self,
        config: Optional[BillingConfig] = None,
        usage_service: Optional[UsageService] = None,
    ):
        self.config = config or get_billing_config()
        self.usage_service = usage_service or UsageService(config=self.config)

    @trace_span
    async def calculate_overage(
        self,
        subscriber_id: str,
        plan_id: str,
        period: Optional[BillingPeriod] = None,
    ) -> OverageResult:
        """
        Calculate overage for all features of a plan.

        Raises PlanNotFoundError for an unknown plan and UsageUnavailableError
        when usage cannot be read.
        """
        plan = self.config.catalog.get_plan(plan_id)
        period = period or await self.usage_service.get_current_period(subscriber_id)
        snapshot = await self.usage_service.get_usage(
            subscriber_id, period.start, period.end, feature_keys=plan.features
        )

        result = calculate_plan_overage(plan, snapshot)

        if result.total_overage_cents:
            log_span_event(
                f"Subscriber {subscriber_id} has {result.total_overage_cents} cents of overage",
                {
                    "subscriber_id": subscriber_id,
                    "plan_id": plan.id,
                    "total_overage_cents": result.total_overage_cents,
                },
            )

        return result
