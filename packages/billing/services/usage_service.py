"""
Service for aggregating usage within billing periods.
"""

from datetime import datetime
from typing import Iterable, Optional

from common.core.telemetry import trace_span, get_logger
from packages.billing.config import BillingConfig, get_billing_config
from packages.billing.exceptions import UsageUnavailableError
from packages.billing.models.domain.timestamps import as_utc, utc_now
from packages.billing.models.domain.usage import (
    BillingPeriod,
    FeatureUsage,
    UsageReport,
    UsageSnapshot,
)
from packages.billing.providers.subscription_store.factory import (
    get_subscription_store,
)
from packages.billing.providers.subscription_store.interface import (
    SubscriptionStoreInterface,
)
from packages.billing.providers.usage_store.factory import get_usage_store
from packages.billing.providers.usage_store.interface import UsageStoreInterface

logger = get_logger(__name__)


class UsageService:
    """
    Usage aggregation over the usage store.

    Missing usage counts as zero. A store failure is never read as zero
    usage: it surfaces as UsageUnavailableError.
    """

    def __init__(
        self,
        config: Optional[BillingConfig] = None,
        usage_store: Optional[UsageStoreInterface] = None,
        subscription_store: Optional[SubscriptionStoreInterface] = None,
    ):
        self.config = config or get_billing_config()
        self.usage_store = usage_store or get_usage_store()
        self.subscription_store = subscription_store or get_subscription_store()

    @trace_span
    async def get_current_period(
        self, subscriber_id: str, now: Optional[datetime] = None
    ) -> BillingPeriod:
        """
        Billing period containing `now` for a subscriber.

        Uses the subscription record's current period when it covers `now`,
        otherwise the UTC calendar month.
        """
        now = now or utc_now()
        record = await self.subscription_store.get_record(subscriber_id)
        if record and record.current_period_start < record.current_period_end:
            period = BillingPeriod(
                start=record.current_period_start, end=record.current_period_end
            )
            if period.contains(now):
                return period
        return BillingPeriod.calendar_month(now)

    @trace_span
    async def get_invoice_period(
        self, subscriber_id: str, issue_date: datetime
    ) -> BillingPeriod:
        """
        Billing period an invoice issued at `issue_date` covers.

        An invoice issued at or after the subscription period's end bills the
        period that just closed, as long as it is issued before a period of
        the same length would have elapsed again. Otherwise this is the
        period containing `issue_date`.
        """
        record = await self.subscription_store.get_record(subscriber_id)
        if record and record.current_period_start < record.current_period_end:
            closed = BillingPeriod(
                start=record.current_period_start, end=record.current_period_end
            )
            length = closed.end - closed.start
            if closed.end <= as_utc(issue_date) < closed.end + length:
                logger.info(
                    f"Invoicing closed period {closed.start:%Y-%m-%d}..{closed.end:%Y-%m-%d} "
                    f"for subscriber {subscriber_id}",
                    extra={"subscriber_id": subscriber_id},
                )
                return closed
        return await self.get_current_period(subscriber_id, now=issue_date)

    @trace_span
    async def get_feature_usage(
        self,
        subscriber_id: str,
        feature_key: str,
        period_start: datetime,
        period_end: datetime,
    ) -> int:
        """Exact units of one feature consumed in [period_start, period_end)."""
        try:
            count = await self.usage_store.sum_usage(
                subscriber_id, feature_key, period_start, period_end
            )
        except UsageUnavailableError:
            raise
        except Exception as e:
            logger.error(
                f"Usage store failed for subscriber {subscriber_id}: {e}",
                extra={"subscriber_id": subscriber_id, "feature_key": feature_key},
            )
            raise UsageUnavailableError(
                f"Usage store failed: {e}", subscriber_id=subscriber_id
            ) from e

        if count is None:
            return 0
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise UsageUnavailableError(
                f"Usage store returned an invalid count for {feature_key}: {count!r}",
                subscriber_id=subscriber_id,
            )
        return count

    @trace_span
    async def get_usage(
        self,
        subscriber_id: str,
        period_start: datetime,
        period_end: datetime,
        feature_keys: Optional[Iterable[str]] = None,
    ) -> UsageSnapshot:
        """
        Sum usage per feature within [period_start, period_end).

        Defaults to every catalogued feature.
        """
        period = BillingPeriod(start=period_start, end=period_end)
        keys = list(feature_keys) if feature_keys is not None else None
        if keys is None:
            keys = self.config.catalog.feature_keys

        counts = {}
        for feature_key in keys:
            counts[feature_key] = await self.get_feature_usage(
                subscriber_id, feature_key, period.start, period.end
            )

        return UsageSnapshot(
            subscriber_id=subscriber_id,
            period_start=period.start,
            period_end=period.end,
            counts=counts,
        )

    @trace_span
    async def get_usage_report(
        self,
        subscriber_id: str,
        plan_id: str,
        period: Optional[BillingPeriod] = None,
    ) -> UsageReport:
        """Usage against included quota for every feature of a plan."""
        plan = self.config.catalog.get_plan(plan_id)
        period = period or await self.get_current_period(subscriber_id)
        snapshot = await self.get_usage(
            subscriber_id, period.start, period.end, feature_keys=plan.features
        )

        threshold = self.config.usage_warning_threshold_percent
        features = []
        for feature_key, quota in plan.features.items():
            consumed = snapshot.get_count(feature_key)
            percentage_used = _percentage(consumed, quota.included_units)
            feature = FeatureUsage(
                feature_key=feature_key,
                label=self.config.catalog.get_feature_label(feature_key),
                consumed=consumed,
                included_units=quota.included_units,
                remaining=max(0, quota.included_units - consumed),
                percentage_used=percentage_used,
                warning_threshold_reached=percentage_used >= threshold,
                over_limit=consumed > quota.included_units,
            )
            if feature.warning_threshold_reached:
                logger.warning(
                    f"Subscriber {subscriber_id} used {percentage_used:.0f}% of {feature_key}",
                    extra={
                        "subscriber_id": subscriber_id,
                        "feature_key": feature_key,
                        "consumed": consumed,
                        "included_units": quota.included_units,
                    },
                )
            features.append(feature)

        return UsageReport(
            subscriber_id=subscriber_id,
            plan_id=plan.id,
            period_start=period.start,
            period_end=period.end,
            features=features,
        )


def _percentage(consumed: int, included_units: int) -> float:
    """Share of the included quota used, capped at 100 for display."""
    if included_units == 0:
        return 100.0 if consumed > 0 else 0.0
    return min(100.0, consumed * 100 / included_units)
