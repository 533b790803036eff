"""
Service for entitlement checks.

Decides whether a subscriber may perform one more metered action and whether
it will be billed as overage.
"""

from datetime import datetime
from typing import Optional

from common.core.telemetry import trace_span, get_logger
from packages.billing.config import BillingConfig, get_billing_config
from packages.billing.models.domain.entitlement import EntitlementResult
from packages.billing.models.domain.usage import BillingPeriod
from packages.billing.services.entitlement_policies import (
    EntitlementPolicy,
    SoftCapPolicy,
)
from packages.billing.services.usage_service import UsageService

logger = get_logger(__name__)


class EntitlementService:
    """Entitlement resolution against the plan catalog and current usage."""

    def __init__(
        self,
        config: Optional[BillingConfig] = None,
        usage_service: Optional[UsageService] = None,
        policy: Optional[EntitlementPolicy] = None,
    ):
        self.config = config or get_billing_config()
        self.usage_service = usage_service or UsageService(config=self.config)
        self.policy = policy or SoftCapPolicy()

    @trace_span
    async def can_perform_action(
        self,
        subscriber_id: str,
        plan_id: str,
        feature_key: str,
        period: Optional[BillingPeriod] = None,
        now: Optional[datetime] = None,
    ) -> EntitlementResult:
        """
        Check whether one more unit of a feature may be consumed.

        Raises PlanNotFoundError, InvalidFeatureKeyError for a feature not on
        the plan, and UsageUnavailableError when usage cannot be read.
        """
        plan = self.config.catalog.get_plan(plan_id)
        quota = plan.get_feature(feature_key)

        period = period or await self.usage_service.get_current_period(
            subscriber_id, now=now
        )
        consumed = await self.usage_service.get_feature_usage(
            subscriber_id, feature_key, period.start, period.end
        )

        will_incur_charge = consumed >= quota.included_units
        decision = await self.policy.decide(
            subscriber_id, feature_key, will_incur_charge
        )

        result = EntitlementResult(
            decision=decision,
            subscriber_id=subscriber_id,
            plan_id=plan.id,
            feature_key=feature_key,
            consumed=consumed,
            included_units=quota.included_units,
            will_incur_charge=will_incur_charge,
            estimated_unit_cost_cents=(
                quota.overage_unit_price_cents if will_incur_charge else 0
            ),
        )

        if will_incur_charge:
            logger.info(
                f"Subscriber {subscriber_id} is over the included {feature_key} quota: {decision.value}",
                extra={
                    "subscriber_id": subscriber_id,
                    "plan_id": plan.id,
                    "feature_key": feature_key,
                    "consumed": consumed,
                    "included_units": quota.included_units,
                },
            )

        return result
