"""
Service for building invoices.

An invoice is computed from the plan's base price and the period's overage.
It is returned to the caller for storage; nothing is persisted here.
"""

from datetime import datetime, timedelta
from typing import Optional

from common.core.telemetry import trace_span, get_logger
from packages.billing.config import BillingConfig, get_billing_config
from packages.billing.models.domain.invoice import Invoice, InvoiceLineItem
from packages.billing.models.domain.overage import FeatureOverage, OverageResult
from packages.billing.models.domain.timestamps import as_utc
from packages.billing.models.domain.usage import BillingPeriod
from packages.billing.services.overage_service import OverageService

logger = get_logger(__name__)


class InvoiceService:
    """Builds invoices for a subscriber's billing period."""

    def __init__(
        self,
        config: Optional[BillingConfig] = None,
        overage_service: Optional[OverageService] = None,
    ):
        self.config = config or get_billing_config()
        self.overage_service = overage_service or OverageService(config=self.config)

    def build_invoice_id(self, subscriber_id: str, period_start: datetime) -> str:
        """Deterministic id: one invoice per subscriber per billing period."""
        return f"{self.config.invoice_prefix}-{subscriber_id}-{as_utc(period_start):%Y%m%d}"

    @trace_span
    async def generate_invoice(
        self,
        subscriber_id: str,
        plan_id: str,
        issue_date: datetime,
        period: Optional[BillingPeriod] = None,
    ) -> Invoice:
        """
        Generate an invoice for the billing period.

        Fails as a whole if overage cannot be calculated; a partial invoice is
        never produced.
        """
        plan = self.config.catalog.get_plan(plan_id)
        overage = await self.overage_service.calculate_overage(
            subscriber_id, plan.id, period=period
        )
        return self.build_invoice(overage, plan.base_price_cents, issue_date)

    def build_invoice(
        self, overage: OverageResult, base_amount_cents: int, issue_date: datetime
    ) -> Invoice:
        """Assemble an invoice from a computed overage result."""
        issue_date = as_utc(issue_date)
        line_items = tuple(
            self._build_line_item(feature)
            for feature in overage.features.values()
            if feature.overage_units > 0
        )
        overage_amount_cents = sum(item.amount_cents for item in line_items)
        invoice_id = self.build_invoice_id(overage.subscriber_id, overage.period_start)

        invoice = Invoice(
            id=invoice_id,
            idempotency_key=invoice_id,
            subscriber_id=overage.subscriber_id,
            plan_id=overage.plan_id,
            period_start=overage.period_start,
            period_end=overage.period_end,
            issue_date=issue_date,
            due_date=issue_date
            + timedelta(days=self.config.invoice_grace_period_days),
            base_amount_cents=base_amount_cents,
            overage_amount_cents=overage_amount_cents,
            total_amount_cents=base_amount_cents + overage_amount_cents,
            line_items=line_items,
        )

        logger.info(
            f"Generated invoice {invoice.id} for subscriber {overage.subscriber_id}",
            extra={
                "invoice_id": invoice.id,
                "subscriber_id": overage.subscriber_id,
                "plan_id": overage.plan_id,
                "total_amount_cents": invoice.total_amount_cents,
                "line_items": len(line_items),
            },
        )

        return invoice

    def _build_line_item(self, feature: FeatureOverage) -> InvoiceLineItem:
        label = self.config.catalog.get_feature_label(feature.feature_key)
        description = f"{label} ({feature.overage_units:,} over limit)"
        if feature.unit_batch_size > 1:
            description = f"{label} ({feature.overage_units:,} over limit, billed per {feature.unit_batch_size:,})"

        return InvoiceLineItem(
            feature_key=feature.feature_key,
            description=description,
            quantity=feature.billable_batches,
            unit_price_cents=feature.unit_price_cents,
            amount_cents=feature.cost_cents,
            overage_units=feature.overage_units,
        )
