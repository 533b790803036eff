"""
Factory for getting usage store instance.
"""

from packages.billing.providers.usage_store.interface import UsageStoreInterface
from packages.billing.repositories.usage_repository import UsageEventRepository


def get_usage_store() -> UsageStoreInterface:
    """
    Get usage store instance.

    Uses the SQL usage-event table by default. Host applications that meter
    elsewhere inject their own UsageStoreInterface into the services.
    """
    return UsageEventRepository()
