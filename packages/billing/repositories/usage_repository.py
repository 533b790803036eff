"""
Repository for usage event tracking.
"""

from datetime import datetime
from typing import Optional
from sqlalchemy import select, func
from sqlalchemy.exc import SQLAlchemyError

from common.core.telemetry import trace_span, get_logger
from common.repositories.base import BaseRepository
from packages.billing.exceptions import UsageUnavailableError
from packages.billing.models.database.usage import UsageEventEntity
from packages.billing.models.domain.usage import UsageEvent
from packages.billing.providers.usage_store.interface import UsageStoreInterface

logger = get_logger(__name__)


class UsageEventRepository(
    BaseRepository[UsageEventEntity, UsageEvent], UsageStoreInterface
):
    """Repository for usage events; the default usage store."""

    def __init__(self, db_session=None):
        super().__init__(UsageEventEntity, UsageEvent, db_session)

    @trace_span
    async def sum_usage(
        self,
        subscriber_id: str,
        feature_key: str,
        period_start: datetime,
        period_end: datetime,
    ) -> int:
        """Sum of quantity for a feature within [period_start, period_end)."""
        query = select(func.coalesce(func.sum(UsageEventEntity.quantity), 0)).where(
            UsageEventEntity.subscriber_id == subscriber_id,
            UsageEventEntity.feature_key == feature_key,
            UsageEventEntity.created_at >= period_start,
            UsageEventEntity.created_at < period_end,
        )

        try:
            async with self._get_session(readonly=True) as session:
                result = await session.execute(query)
                return int(result.scalar_one() or 0)
        except SQLAlchemyError as e:
            logger.error(
                f"Failed to sum usage for subscriber {subscriber_id}: {e}",
                extra={"subscriber_id": subscriber_id, "feature_key": feature_key},
            )
            raise UsageUnavailableError(
                f"Usage store unavailable: {e}", subscriber_id=subscriber_id
            ) from e

    @trace_span
    async def get_by_subscriber_date_range(
        self,
        subscriber_id: str,
        start_date: datetime,
        end_date: datetime,
        feature_key: Optional[str] = None,
    ) -> list[UsageEvent]:
        """Get usage events for a subscriber within a date range, newest first."""
        query = select(UsageEventEntity).where(
            UsageEventEntity.subscriber_id == subscriber_id,
            UsageEventEntity.created_at >= start_date,
            UsageEventEntity.created_at < end_date,
        )

        if feature_key:
            query = query.where(UsageEventEntity.feature_key == feature_key)

        query = query.order_by(UsageEventEntity.created_at.desc())

        async with self._get_session(readonly=True) as session:
            result = await session.execute(query)
            return self._entities_to_domain(result.scalars().all())
