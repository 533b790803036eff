"""
Entitlement policies.

A policy turns "will this action incur an overage charge" into a decision.
"""

from abc import ABC, abstractmethod

from common.core.telemetry import get_logger
from packages.billing.models.domain.enums import EntitlementDecision
from packages.billing.providers.payment_methods.interface import (
    PaymentMethodLookupInterface,
)

logger = get_logger(__name__)


class EntitlementPolicy(ABC):
    """Abstract policy deciding whether an action may proceed."""

    @abstractmethod
    async def decide(
        self, subscriber_id: str, feature_key: str, will_incur_charge: bool
    ) -> EntitlementDecision:
        pass


class SoftCapPolicy(EntitlementPolicy):
    """Always allow; usage beyond the included quota is billed as overage."""

    async def decide(
        self, subscriber_id: str, feature_key: str, will_incur_charge: bool
    ) -> EntitlementDecision:
        if will_incur_charge:
            return EntitlementDecision.ALLOWED_WITH_CHARGE
        return EntitlementDecision.ALLOWED


class HardCapPolicy(EntitlementPolicy):
    """Deny chargeable actions for subscribers without a payment method on file."""

    def __init__(self, payment_methods: PaymentMethodLookupInterface):
        self.payment_methods = payment_methods

    async def decide(
        self, subscriber_id: str, feature_key: str, will_incur_charge: bool
    ) -> EntitlementDecision:
        if not will_incur_charge:
            return EntitlementDecision.ALLOWED

        if await self.payment_methods.has_payment_method(subscriber_id):
            return EntitlementDecision.ALLOWED_WITH_CHARGE

        logger.warning(
            f"Denying {feature_key} for subscriber {subscriber_id}: quota used and no payment method",
            extra={"subscriber_id": subscriber_id, "feature_key": feature_key},
        )
        return EntitlementDecision.DENIED
