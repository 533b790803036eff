"""Domain models for billing."""

from packages.billing.models.domain.enums import (
    EntitlementDecision,
    MeteredFeature,
    StoredSubscriptionStatus,
    SubscriptionErrorType,
    SubscriptionStatus,
)
from packages.billing.models.domain.entitlement import EntitlementResult
from packages.billing.models.domain.invoice import Invoice, InvoiceLineItem
from packages.billing.models.domain.overage import FeatureOverage, OverageResult
from packages.billing.models.domain.plans import (
    BillingPlan,
    FeatureInfo,
    FeatureQuota,
    PlanCatalog,
    PlanInfo,
    PlansResponse,
)
from packages.billing.models.domain.subscription import (
    ModelCompatibility,
    SubscriptionDetails,
    SubscriptionRecord,
    TierInfo,
)
from packages.billing.models.domain.summary import BillingSummary
from packages.billing.models.domain.usage import (
    BillingPeriod,
    FeatureUsage,
    UsageEvent,
    UsageEventCreateModel,
    UsageReport,
    UsageSnapshot,
)

__all__ = [
    # Enums
    "EntitlementDecision",
    "MeteredFeature",
    "StoredSubscriptionStatus",
    "SubscriptionErrorType",
    "SubscriptionStatus",
    # Plans
    "BillingPlan",
    "FeatureInfo",
    "FeatureQuota",
    "PlanCatalog",
    "PlanInfo",
    "PlansResponse",
    # Usage
    "BillingPeriod",
    "FeatureUsage",
    "UsageEvent",
    "UsageEventCreateModel",
    "UsageReport",
    "UsageSnapshot",
    # Charges
    "EntitlementResult",
    "FeatureOverage",
    "OverageResult",
    "Invoice",
    "InvoiceLineItem",
    "BillingSummary",
    # Subscription
    "ModelCompatibility",
    "SubscriptionDetails",
    "SubscriptionRecord",
    "TierInfo",
]
