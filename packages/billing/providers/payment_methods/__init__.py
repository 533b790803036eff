"""Payment-method lookups used by entitlement policies."""

from packages.billing.providers.payment_methods.interface import (
    PaymentMethodLookupInterface,
)

__all__ = [
    "PaymentMethodLookupInterface",
]
