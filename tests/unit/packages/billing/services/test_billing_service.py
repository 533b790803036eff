"""
Unit tests for BillingService, the engine's entry point.

Wires every component over in-memory stores, as a host application would
wire its own stores.
"""

import pytest
from datetime import datetime, timezone, timedelta
from unittest.mock import AsyncMock

from packages.billing.config import BillingConfig
from packages.billing.exceptions import PlanNotFoundError, SubscriberNotFoundError
from packages.billing.models.domain.enums import (
    EntitlementDecision,
    StoredSubscriptionStatus,
    SubscriptionStatus,
)
from packages.billing.models.domain.usage import BillingPeriod
from packages.billing.services.billing_service import BillingService
from packages.billing.services.entitlement_policies import HardCapPolicy
from tests.fixtures import (
    NOW,
    PERIOD_END,
    PERIOD_START,
    InMemorySubscriptionStore,
    InMemoryUsageStore,
    make_record,
)


def make_service(counts=None, records=None, config=None, policy=None):
    return BillingService(
        config=config or BillingConfig(),
        usage_store=InMemoryUsageStore(counts),
        subscription_store=InMemorySubscriptionStore(records),
        policy=policy,
    )


@pytest.mark.asyncio
class TestBillingService:
    """Tests for the exposed billing operations."""

    async def test_get_plan(self):
        service = make_service()

        assert service.get_plan("enterprise").base_price_cents == 9900
        with pytest.raises(PlanNotFoundError):
            service.get_plan("platinum")

    async def test_check_entitlement_uses_subscription_plan(self):
        service = make_service(
            counts={("sub_1", "agent_downloads"): 50},
            records={"sub_1": make_record(plan_id="pro")},
        )

        result = await service.check_entitlement("sub_1", "agent_downloads", now=NOW)

        assert result.plan_id == "pro"
        assert result.decision == EntitlementDecision.ALLOWED_WITH_CHARGE
        assert result.estimated_unit_cost_cents == 25

    async def test_check_entitlement_without_subscription_uses_fallback(self):
        service = make_service(counts={("guest", "agent_downloads"): 2})

        result = await service.check_entitlement("guest", "agent_downloads", now=NOW)

        assert result.plan_id == "free"
        assert result.decision == EntitlementDecision.ALLOWED
        assert result.remaining_included_units == 3

    async def test_check_entitlement_without_fallback_raises(self):
        service = make_service(config=BillingConfig(fallback_plan_id=None))

        with pytest.raises(SubscriberNotFoundError):
            await service.check_entitlement("guest", "api_calls", now=NOW)

    async def test_check_entitlement_with_hard_cap(self):
        lookup = AsyncMock()
        lookup.has_payment_method = AsyncMock(return_value=False)
        service = make_service(
            counts={("sub_1", "api_calls"): 10_000},
            records={"sub_1": make_record()},
            policy=HardCapPolicy(lookup),
        )

        result = await service.check_entitlement("sub_1", "api_calls", now=NOW)

        assert result.decision == EntitlementDecision.DENIED

    async def test_calculate_overage_uses_subscription_period(self):
        service = make_service(
            counts={("sub_1", "api_calls"): 10_500},
            records={"sub_1": make_record()},
        )

        result = await service.calculate_overage("sub_1", now=NOW)

        assert result.period_start == PERIOD_START
        assert result.period_end == PERIOD_END
        assert result.get_feature("api_calls").overage_units == 500
        assert result.total_overage_cents == 300

    async def test_generate_invoice_pro_scenario(self):
        service = make_service(
            counts={("sub_1", "api_calls"): 10_500},
            records={"sub_1": make_record()},
        )

        invoice = await service.generate_invoice("sub_1", issue_date=NOW)

        assert invoice.id == "INV-sub_1-20250301"
        assert invoice.plan_id == "pro"
        assert invoice.total_amount_cents == 3200
        assert invoice.due_date == NOW + timedelta(days=30)

    async def test_generate_invoice_for_closed_period(self):
        """Invoicing after the period ended bills the plan in effect during it."""
        service = make_service(
            counts={("sub_1", "agent_shares"): 110},
            records={"sub_1": make_record()},
        )
        issue_date = PERIOD_END + timedelta(hours=1)

        invoice = await service.generate_invoice(
            "sub_1",
            issue_date=issue_date,
            period=BillingPeriod(start=PERIOD_START, end=PERIOD_END),
        )

        assert invoice.plan_id == "pro"
        assert invoice.total_amount_cents == 2900 + 50
        assert invoice.due_date == issue_date + timedelta(days=30)

    async def test_generate_invoice_at_period_end_bills_closing_period(self):
        usage_store = InMemoryUsageStore({("sub_1", "api_calls"): 10_500})
        service = BillingService(
            config=BillingConfig(),
            usage_store=usage_store,
            subscription_store=InMemorySubscriptionStore({"sub_1": make_record()}),
        )

        invoice = await service.generate_invoice("sub_1", issue_date=PERIOD_END)

        assert invoice.id == "INV-sub_1-20250301"
        assert invoice.period_start == PERIOD_START
        assert invoice.period_end == PERIOD_END
        assert invoice.plan_id == "pro"
        assert invoice.total_amount_cents == 3200
        assert {call[2:] for call in usage_store.calls} == {(PERIOD_START, PERIOD_END)}

    async def test_generate_invoice_long_after_cancellation_uses_fallback(self):
        service = make_service(
            counts={("sub_1", "api_calls"): 10_500},
            records={
                "sub_1": make_record(status=StoredSubscriptionStatus.CANCELED.value)
            },
        )
        issue_date = PERIOD_END + timedelta(days=180)

        invoice = await service.generate_invoice("sub_1", issue_date=issue_date)
        entitlement = await service.check_entitlement(
            "sub_1", "api_calls", now=issue_date
        )

        assert invoice.id == "INV-sub_1-20250901"
        assert invoice.plan_id == "free"
        assert invoice.base_amount_cents == 0
        assert entitlement.plan_id == "free"

    async def test_get_subscription_status(self):
        service = make_service(records={"sub_1": make_record()})

        assert await service.get_subscription_status("sub_1", now=NOW) == (
            SubscriptionStatus.ACTIVE
        )
        after_period = PERIOD_END + timedelta(seconds=1)
        assert await service.get_subscription_status("sub_1", now=after_period) == (
            SubscriptionStatus.EXPIRED
        )
        assert await service.get_subscription_status("nobody", now=NOW) == (
            SubscriptionStatus.NONE
        )

    async def test_get_tier_info_without_subscription(self):
        tier_info = await make_service().get_tier_info("nobody", now=NOW)

        assert tier_info.tier == "free"
        assert tier_info.has_heavy_access is False

    async def test_billing_summary(self):
        service = make_service(
            counts={("sub_1", "api_calls"): 10_500, ("sub_1", "agent_downloads"): 45},
            records={"sub_1": make_record()},
        )

        summary = await service.get_billing_summary("sub_1", now=NOW)

        assert summary.status == SubscriptionStatus.ACTIVE
        assert summary.plan_id == "pro"
        assert summary.base_amount_cents == 2900
        assert summary.overage.total_overage_cents == 300
        assert summary.estimated_total_cents == 3200
        assert summary.next_bill_date == PERIOD_END
        assert summary.usage.get_feature("agent_downloads").warning_threshold_reached

    async def test_billing_summary_for_canceled_subscription(self):
        service = make_service(
            records={
                "sub_1": make_record(
                    plan_id="enterprise",
                    status=StoredSubscriptionStatus.CANCELED.value,
                    cancel_at_period_end=True,
                    canceled_at=datetime(2025, 3, 10, tzinfo=timezone.utc),
                )
            }
        )

        summary = await service.get_billing_summary("sub_1", now=NOW)

        assert summary.status == SubscriptionStatus.CANCELED
        assert summary.plan_id == "enterprise"
        assert summary.estimated_total_cents == 9900
