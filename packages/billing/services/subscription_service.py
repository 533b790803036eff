"""
Service for resolving subscription state.

Status is recomputed from the subscription record on every call; a stored
status can lag reality, so an elapsed period always reads as expired.
"""

from datetime import datetime
from typing import Optional

from common.core.telemetry import trace_span, get_logger
from packages.billing.config import BillingConfig, get_billing_config
from packages.billing.exceptions import SubscriberNotFoundError
from packages.billing.models.domain.enums import (
    StoredSubscriptionStatus,
    SubscriptionErrorType,
    SubscriptionStatus,
)
from packages.billing.models.domain.subscription import (
    ModelCompatibility,
    SubscriptionDetails,
    SubscriptionRecord,
    TierInfo,
)
from packages.billing.models.domain.timestamps import as_utc, utc_now
from packages.billing.providers.subscription_store.factory import (
    get_subscription_store,
)
from packages.billing.providers.subscription_store.interface import (
    SubscriptionStoreInterface,
)

logger = get_logger(__name__)


def resolve_status(
    record: Optional[SubscriptionRecord], now: datetime
) -> SubscriptionStatus:
    """
    Resolve a subscription record to a lifecycle status at `now`.

    Precedence: no record, stored canceled, elapsed period, stored active.
    Any other stored status is no usable subscription.
    """
    if record is None:
        return SubscriptionStatus.NONE
    if record.status == StoredSubscriptionStatus.CANCELED.value:
        return SubscriptionStatus.CANCELED
    if as_utc(now) > record.current_period_end:
        return SubscriptionStatus.EXPIRED
    if record.status == StoredSubscriptionStatus.ACTIVE.value:
        return SubscriptionStatus.ACTIVE
    return SubscriptionStatus.NONE


class SubscriptionService:
    """Subscription state and tier resolution."""

    def __init__(
        self,
        config: Optional[BillingConfig] = None,
        subscription_store: Optional[SubscriptionStoreInterface] = None,
    ):
        self.config = config or get_billing_config()
        self.subscription_store = subscription_store or get_subscription_store()

    @trace_span
    async def get_subscription_status(
        self, subscriber_id: str, now: Optional[datetime] = None
    ) -> SubscriptionStatus:
        """Resolved status; a subscriber without a record is NONE, not an error."""
        record = await self.subscription_store.get_record(subscriber_id)
        return resolve_status(record, now or utc_now())

    @trace_span
    async def get_subscription_details(
        self, subscriber_id: str, now: Optional[datetime] = None
    ) -> SubscriptionDetails:
        """Resolved status with the record and a user-facing explanation."""
        record = await self.subscription_store.get_record(subscriber_id)
        status = resolve_status(record, now or utc_now())

        if record is None:
            return SubscriptionDetails(has_subscription=False, status=status)

        if status == SubscriptionStatus.ACTIVE:
            return SubscriptionDetails(
                has_subscription=True, status=status, record=record
            )

        if status == SubscriptionStatus.CANCELED:
            message = "Subscription has been canceled"
            error_type = SubscriptionErrorType.CANCELED
        elif status == SubscriptionStatus.EXPIRED:
            message = "Subscription has expired"
            error_type = SubscriptionErrorType.EXPIRED
        else:
            message = "Subscription is not active"
            error_type = SubscriptionErrorType.GENERAL

        return SubscriptionDetails(
            has_subscription=False,
            status=status,
            record=record,
            message=message,
            error_type=error_type,
        )

    @trace_span
    async def resolve_plan_id(
        self, subscriber_id: str, now: Optional[datetime] = None
    ) -> str:
        """
        Plan a subscriber is billed and entitled under.

        The record's plan while active, or while canceled up to the end of
        the paid period; otherwise the configured fallback plan.

        Raises SubscriberNotFoundError when neither applies.
        """
        now = as_utc(now or utc_now())
        record = await self.subscription_store.get_record(subscriber_id)
        status = resolve_status(record, now)

        if status == SubscriptionStatus.ACTIVE or (
            status == SubscriptionStatus.CANCELED
            and now <= record.current_period_end
        ):
            return record.plan_id

        if not self.config.fallback_plan_id:
            raise SubscriberNotFoundError(subscriber_id)

        logger.info(
            f"Subscriber {subscriber_id} is {status.value}, using fallback plan {self.config.fallback_plan_id}",
            extra={
                "subscriber_id": subscriber_id,
                "status": status.value,
                "fallback_plan_id": self.config.fallback_plan_id,
            },
        )
        return self.config.fallback_plan_id

    @trace_span
    async def is_subscribed(
        self, subscriber_id: str, now: Optional[datetime] = None
    ) -> bool:
        status = await self.get_subscription_status(subscriber_id, now=now)
        return status == SubscriptionStatus.ACTIVE

    @trace_span
    async def has_access_to_plan(
        self, subscriber_id: str, plan_id: str, now: Optional[datetime] = None
    ) -> bool:
        """Active subscription on exactly this plan."""
        record = await self.subscription_store.get_record(subscriber_id)
        status = resolve_status(record, now or utc_now())
        return status == SubscriptionStatus.ACTIVE and record.plan_id == plan_id

    @trace_span
    async def get_tier_info(
        self, subscriber_id: str, now: Optional[datetime] = None
    ) -> TierInfo:
        """
        Tier-gated feature flags.

        Heavy access requires an active subscription on a heavy-tier plan.
        Subscribers without one get the lowest tier.
        """
        record = await self.subscription_store.get_record(subscriber_id)
        status = resolve_status(record, now or utc_now())

        if status != SubscriptionStatus.ACTIVE:
            return self._build_tier_info(self.config.fallback_plan_id or "free", False)

        return self._build_tier_info(
            record.plan_id, self.config.is_heavy_tier(record.plan_id)
        )

    def _build_tier_info(self, tier: str, has_heavy_access: bool) -> TierInfo:
        if has_heavy_access:
            context_limit = self.config.heavy_context_limit_tokens
        else:
            context_limit = self.config.standard_context_limit_tokens

        return TierInfo(
            tier=tier,
            has_heavy_access=has_heavy_access,
            multi_agent_enabled=has_heavy_access,
            parallel_processing=has_heavy_access,
            context_limit_tokens=context_limit,
            context_limit_label=f"{context_limit // 1000}K tokens",
        )

    @trace_span
    async def check_model_compatibility(
        self, subscriber_id: str, model_id: str, now: Optional[datetime] = None
    ) -> ModelCompatibility:
        """Whether the subscriber's tier supports a model."""
        if model_id in self.config.heavy_tier_models:
            tier_info = await self.get_tier_info(subscriber_id, now=now)
            if tier_info.has_heavy_access:
                return ModelCompatibility(
                    model_id=model_id,
                    compatible=True,
                    message=f"{model_id} fully supported with heavy tier access",
                )
            return ModelCompatibility(
                model_id=model_id,
                compatible=False,
                required_tier=self.config.upgrade_plan_id,
                message=f"{model_id} requires a heavy tier subscription for multi-agent features",
            )

        if model_id in self.config.standard_models:
            return ModelCompatibility(
                model_id=model_id,
                compatible=True,
                message=f"{model_id} supported on all tiers",
            )

        return ModelCompatibility(
            model_id=model_id, compatible=False, message=f"Unknown model: {model_id}"
        )
