"""
Billing engine configuration.

Components receive an immutable BillingConfig at construction instead of
reading module-level plan tables. get_billing_config() builds one from
application settings.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from common.core.config import Settings, settings
from common.core.telemetry import get_logger
from packages.billing.models.domain.enums import MeteredFeature
from packages.billing.models.domain.plans import BillingPlan, FeatureQuota, PlanCatalog

logger = get_logger(__name__)


DEFAULT_PLAN_CATALOG = PlanCatalog(
    plans={
        "free": BillingPlan(
            id="free",
            name="Free",
            base_price_cents=0,
            features={
                MeteredFeature.AGENT_DOWNLOADS.value: FeatureQuota(
                    included_units=5, overage_unit_price_cents=50
                ),  # $0.50 per extra download
                MeteredFeature.AGENT_SHARES.value: FeatureQuota(
                    included_units=10, overage_unit_price_cents=10
                ),  # $0.10 per extra share
                MeteredFeature.API_CALLS.value: FeatureQuota(
                    included_units=1_000,
                    overage_unit_price_cents=500,
                    unit_batch_size=1_000,
                ),  # $5.00 per 1000 extra calls
            },
        ),
        "pro": BillingPlan(
            id="pro",
            name="Pro",
            base_price_cents=2900,  # $29/month
            features={
                MeteredFeature.AGENT_DOWNLOADS.value: FeatureQuota(
                    included_units=50, overage_unit_price_cents=25
                ),
                MeteredFeature.AGENT_SHARES.value: FeatureQuota(
                    included_units=100, overage_unit_price_cents=5
                ),
                MeteredFeature.API_CALLS.value: FeatureQuota(
                    included_units=10_000,
                    overage_unit_price_cents=300,
                    unit_batch_size=1_000,
                ),
            },
        ),
        "enterprise": BillingPlan(
            id="enterprise",
            name="Enterprise",
            base_price_cents=9900,  # $99/month
            features={
                MeteredFeature.AGENT_DOWNLOADS.value: FeatureQuota(
                    included_units=500, overage_unit_price_cents=10
                ),
                MeteredFeature.AGENT_SHARES.value: FeatureQuota(
                    included_units=1_000, overage_unit_price_cents=2
                ),
                MeteredFeature.API_CALLS.value: FeatureQuota(
                    included_units=100_000,
                    overage_unit_price_cents=200,
                    unit_batch_size=1_000,
                ),
            },
        ),
    },
    feature_labels={
        MeteredFeature.AGENT_DOWNLOADS.value: "Agent Downloads",
        MeteredFeature.AGENT_SHARES.value: "Agent Shares",
        MeteredFeature.API_CALLS.value: "API Calls",
    },
)


class BillingConfig(BaseModel):
    """Immutable configuration shared by all billing components."""

    model_config = ConfigDict(frozen=True)

    catalog: PlanCatalog = DEFAULT_PLAN_CATALOG
    invoice_grace_period_days: int = Field(default=30, ge=0)
    invoice_prefix: str = "INV"
    fallback_plan_id: Optional[str] = "free"
    heavy_tier_plan_ids: frozenset[str] = frozenset({"enterprise"})
    # Suggested when a heavy model is gated; defaults to the first heavy-tier plan
    heavy_tier_upgrade_plan_id: Optional[str] = None
    usage_warning_threshold_percent: int = Field(default=80, ge=0, le=100)

    # Tier-gated limits
    standard_context_limit_tokens: int = 32_000
    heavy_context_limit_tokens: int = 256_000

    # Models gated on heavy-tier access vs available on every tier
    heavy_tier_models: frozenset[str] = frozenset({"grok-4-0709"})
    standard_models: frozenset[str] = frozenset({"grok-beta"})

    @model_validator(mode="after")
    def validate_plan_references(self) -> "BillingConfig":
        if self.fallback_plan_id and self.fallback_plan_id not in self.catalog.plans:
            raise ValueError(
                f"Fallback plan {self.fallback_plan_id!r} is not in the plan catalog"
            )
        if (
            self.heavy_tier_upgrade_plan_id
            and self.heavy_tier_upgrade_plan_id not in self.catalog.plans
        ):
            raise ValueError(
                f"Upgrade plan {self.heavy_tier_upgrade_plan_id!r} is not in the plan catalog"
            )
        return self

    def is_heavy_tier(self, plan_id: Optional[str]) -> bool:
        return plan_id in self.heavy_tier_plan_ids

    @property
    def upgrade_plan_id(self) -> Optional[str]:
        """Plan to suggest for heavy-tier models, None if the catalog has no heavy plan."""
        if self.heavy_tier_upgrade_plan_id:
            return self.heavy_tier_upgrade_plan_id
        return next(
            (plan.id for plan in self.catalog.list_plans() if self.is_heavy_tier(plan.id)),
            None,
        )


def load_plan_catalog(path: str) -> PlanCatalog:
    """Load and validate a plan catalog from a JSON file."""
    catalog = PlanCatalog.model_validate_json(Path(path).read_text(encoding="utf-8"))
    logger.info(
        f"Loaded plan catalog with {len(catalog.plans)} plans from {path}",
        extra={"plan_ids": sorted(catalog.plans)},
    )
    return catalog


def get_billing_config(app_settings: Optional[Settings] = None) -> BillingConfig:
    """Build the billing configuration from application settings."""
    app_settings = app_settings or settings

    catalog = DEFAULT_PLAN_CATALOG
    if app_settings.billing_plan_catalog_file:
        catalog = load_plan_catalog(app_settings.billing_plan_catalog_file)

    return BillingConfig(
        catalog=catalog,
        invoice_grace_period_days=app_settings.billing_invoice_grace_period_days,
        invoice_prefix=app_settings.billing_invoice_prefix,
        fallback_plan_id=app_settings.billing_fallback_plan_id or None,
        heavy_tier_plan_ids=frozenset(app_settings.billing_heavy_tier_plan_ids),
        usage_warning_threshold_percent=app_settings.billing_usage_warning_threshold_percent,
    )
