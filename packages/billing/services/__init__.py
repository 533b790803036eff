"""Billing services."""

from packages.billing.services.billing_service import BillingService
from packages.billing.services.entitlement_policies import (
    EntitlementPolicy,
    HardCapPolicy,
    SoftCapPolicy,
)
from packages.billing.services.entitlement_service import EntitlementService
from packages.billing.services.invoice_service import InvoiceService
from packages.billing.services.overage_service import OverageService
from packages.billing.services.plans_service import PlansService
from packages.billing.services.subscription_service import SubscriptionService
from packages.billing.services.usage_service import UsageService

__all__ = [
    "BillingService",
    "EntitlementPolicy",
    "HardCapPolicy",
    "SoftCapPolicy",
    "EntitlementService",
    "InvoiceService",
    "OverageService",
    "PlansService",
    "SubscriptionService",
    "UsageService",
]
