"""
Interface for usage stores.

The billing engine never persists raw usage events; it reads exact counts
from whichever store the host application records usage into.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class UsageStoreInterface(ABC):
    """Abstract interface for usage-record stores."""

    @abstractmethod
    async def sum_usage(
        self,
        subscriber_id: str,
        feature_key: str,
        period_start: datetime,
        period_end: datetime,
    ) -> int:
        """
        Sum recorded usage for a feature within [period_start, period_end).

        Args:
            subscriber_id: Subscriber whose usage is summed
            feature_key: Catalogued feature key
            period_start: Inclusive lower bound
            period_end: Exclusive upper bound

        Returns:
            Exact non-negative unit count (0 when nothing was recorded)

        Raises:
            UsageUnavailableError: If the store cannot be read. A store error
                must never be reported as zero usage.
        """
        pass
