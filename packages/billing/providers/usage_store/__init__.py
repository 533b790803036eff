"""Usage stores - exact usage counts per subscriber, feature and period."""

from packages.billing.providers.usage_store.interface import UsageStoreInterface

__all__ = [
    "UsageStoreInterface",
]
