"""
Database entity for usage events.
"""

from sqlalchemy import Column, String, DateTime, Index, JSON, Integer
from sqlalchemy.sql import func

from common.db.base import Base


class UsageEventEntity(Base):
    """
    Usage event database entity.

    Records every metered action for audit trail and aggregation.
    High volume table - partitioned by created_at in production.
    """

    __tablename__ = "usage_events"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    subscriber_id = Column(String(255), nullable=False, index=True)

    # Catalogued feature key: agent_downloads, agent_shares, api_calls, ...
    feature_key = Column(String(100), nullable=False, index=True)

    # Quantity of units in this event (for batched tracking)
    # e.g., 500 API calls reported at once = quantity=500
    quantity = Column(Integer, nullable=False, server_default="1")

    # Event-specific metadata (JSON for flexibility)
    event_metadata = Column("metadata", JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    # Composite index for period aggregation
    __table_args__ = (
        Index(
            "idx_usage_subscriber_feature_date",
            "subscriber_id",
            "feature_key",
            "created_at",
        ),
    )
