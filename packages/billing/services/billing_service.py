"""
Billing engine entry point.

Resolves the subscriber's plan and billing period, then delegates to the
component services. This is the surface an API or CLI layer calls.
"""

from datetime import datetime
from typing import Optional

from common.core.telemetry import trace_span, get_logger
from packages.billing.config import BillingConfig, get_billing_config
from packages.billing.models.domain.entitlement import EntitlementResult
from packages.billing.models.domain.enums import SubscriptionStatus
from packages.billing.models.domain.invoice import Invoice
from packages.billing.models.domain.overage import OverageResult
from packages.billing.models.domain.plans import BillingPlan
from packages.billing.models.domain.subscription import TierInfo
from packages.billing.models.domain.summary import BillingSummary
from packages.billing.models.domain.timestamps import utc_now
from packages.billing.models.domain.usage import BillingPeriod
from packages.billing.providers.subscription_store.factory import (
    get_subscription_store,
)
from packages.billing.providers.subscription_store.interface import (
    SubscriptionStoreInterface,
)
from packages.billing.providers.usage_store.factory import get_usage_store
from packages.billing.providers.usage_store.interface import UsageStoreInterface
from packages.billing.services.entitlement_policies import EntitlementPolicy
from packages.billing.services.entitlement_service import EntitlementService
from packages.billing.services.invoice_service import InvoiceService
from packages.billing.services.overage_service import OverageService
from packages.billing.services.plans_service import PlansService
from packages.billing.services.subscription_service import SubscriptionService
from packages.billing.services.usage_service import UsageService

logger = get_logger(__name__)


class BillingService:
    """Facade over plan, usage, entitlement, overage, invoice and subscription services."""

    def __init__(
        self,
        config: Optional[BillingConfig] = None,
        usage_store: Optional[UsageStoreInterface] = None,
        subscription_store: Optional[SubscriptionStoreInterface] = None,
        policy: Optional[EntitlementPolicy] = None,
    ):
        self.config = config or get_billing_config()
        usage_store = usage_store or get_usage_store()
        subscription_store = subscription_store or get_subscription_store()

        self.plans = PlansService(config=self.config)
        self.subscriptions = SubscriptionService(
            config=self.config, subscription_store=subscription_store
        )
        self.usage = UsageService(
            config=self.config,
            usage_store=usage_store,
            subscription_store=subscription_store,
        )
        self.entitlements = EntitlementService(
            config=self.config, usage_service=self.usage, policy=policy
        )
        self.overage = OverageService(config=self.config, usage_service=self.usage)
        self.invoices = InvoiceService(
            config=self.config, overage_service=self.overage
        )

    def get_plan(self, plan_id: str) -> BillingPlan:
        return self.plans.get_plan(plan_id)

    @trace_span
    async def check_entitlement(
        self, subscriber_id: str, feature_key: str, now: Optional[datetime] = None
    ) -> EntitlementResult:
        now = now or utc_now()
        plan_id = await self.subscriptions.resolve_plan_id(subscriber_id, now=now)
        return await self.entitlements.can_perform_action(
            subscriber_id, plan_id, feature_key, now=now
        )

    @trace_span
    async def calculate_overage(
        self, subscriber_id: str, now: Optional[datetime] = None
    ) -> OverageResult:
        """Overage for the subscriber's current billing period."""
        now = now or utc_now()
        plan_id = await self.subscriptions.resolve_plan_id(subscriber_id, now=now)
        period = await self.usage.get_current_period(subscriber_id, now=now)
        return await self.overage.calculate_overage(
            subscriber_id, plan_id, period=period
        )

    @trace_span
    async def generate_invoice(
        self,
        subscriber_id: str,
        issue_date: datetime,
        period: Optional[BillingPeriod] = None,
    ) -> Invoice:
        """
        Generate the invoice for a billing period.

        Defaults to the period that just closed when issued at its end (the
        periodic invoicing run), otherwise the period containing
        `issue_date`. The plan is the one in effect at the period's start.
        """
        if period is None:
            period = await self.usage.get_invoice_period(subscriber_id, issue_date)

        plan_id = await self.subscriptions.resolve_plan_id(
            subscriber_id, now=period.start
        )
        return await self.invoices.generate_invoice(
            subscriber_id, plan_id, issue_date, period=period
        )

    async def get_subscription_status(
        self, subscriber_id: str, now: Optional[datetime] = None
    ) -> SubscriptionStatus:
        return await self.subscriptions.get_subscription_status(subscriber_id, now=now)

    async def get_tier_info(
        self, subscriber_id: str, now: Optional[datetime] = None
    ) -> TierInfo:
        return await self.subscriptions.get_tier_info(subscriber_id, now=now)

    @trace_span
    async def get_billing_summary(
        self, subscriber_id: str, now: Optional[datetime] = None
    ) -> BillingSummary:
        """Current usage, overage so far and the estimated next bill."""
        now = now or utc_now()
        status = await self.subscriptions.get_subscription_status(
            subscriber_id, now=now
        )
        plan_id = await self.subscriptions.resolve_plan_id(subscriber_id, now=now)
        plan = self.plans.get_plan(plan_id)
        period = await self.usage.get_current_period(subscriber_id, now=now)

        usage = await self.usage.get_usage_report(subscriber_id, plan.id, period=period)
        overage = await self.overage.calculate_overage(
            subscriber_id, plan.id, period=period
        )

        return BillingSummary(
            subscriber_id=subscriber_id,
            plan_id=plan.id,
            status=status,
            usage=usage,
            overage=overage,
            base_amount_cents=plan.base_price_cents,
            estimated_total_cents=plan.base_price_cents + overage.total_overage_cents,
            next_bill_date=period.end,
        )
