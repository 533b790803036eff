"""
Repository for subscription records.
"""

from typing import Optional
from sqlalchemy import select

from common.core.telemetry import trace_span
from common.repositories.base import BaseRepository
from packages.billing.models.database.subscription import SubscriptionEntity
from packages.billing.models.domain.enums import StoredSubscriptionStatus
from packages.billing.models.domain.subscription import SubscriptionRecord
from packages.billing.providers.subscription_store.interface import (
    SubscriptionStoreInterface,
)


class SubscriptionRepository(
    BaseRepository[SubscriptionEntity, SubscriptionRecord], SubscriptionStoreInterface
):
    """Repository for subscription records; the default subscription store."""

    def __init__(self, db_session=None):
        super().__init__(SubscriptionEntity, SubscriptionRecord, db_session)

    @trace_span
    async def get_record(self, subscriber_id: str) -> Optional[SubscriptionRecord]:
        """
        Get the governing subscription record for a subscriber.

        Prefers the most recent record stored as active; otherwise the most
        recent record of any status.
        """
        async with self._get_session(readonly=True) as session:
            result = await session.execute(
                select(SubscriptionEntity)
                .where(SubscriptionEntity.subscriber_id == subscriber_id)
                .order_by(
                    SubscriptionEntity.created_at.desc(), SubscriptionEntity.id.desc()
                )
            )
            records = self._entities_to_domain(result.scalars().all())

        if not records:
            return None

        active = next(
            (r for r in records if r.status == StoredSubscriptionStatus.ACTIVE.value),
            None,
        )
        return active or records[0]

    @trace_span
    async def get_history(self, subscriber_id: str) -> list[SubscriptionRecord]:
        """All records for a subscriber, newest first."""
        async with self._get_session(readonly=True) as session:
            result = await session.execute(
                select(SubscriptionEntity)
                .where(SubscriptionEntity.subscriber_id == subscriber_id)
                .order_by(
                    SubscriptionEntity.created_at.desc(), SubscriptionEntity.id.desc()
                )
            )
            return self._entities_to_domain(result.scalars().all())
