"""
Database entity for subscription records.
"""

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String
from sqlalchemy.sql import func

from common.db.base import Base


class SubscriptionEntity(Base):
    """
    Subscription record database entity.

    Written by the payment platform webhook handler; read-only to the
    billing engine. A subscriber may have several records over time.
    """

    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    subscriber_id = Column(String(255), nullable=False, index=True)

    # Subscription details
    plan_id = Column(String(50), nullable=False, index=True)  # free, pro, enterprise
    status = Column(String(50), nullable=False, index=True)  # active, canceled, ...

    # Billing cycle
    current_period_start = Column(DateTime(timezone=True), nullable=False)
    current_period_end = Column(DateTime(timezone=True), nullable=False)

    # Lifecycle
    cancel_at_period_end = Column(Boolean, nullable=False, default=False)
    canceled_at = Column(DateTime(timezone=True), nullable=True)

    # Standard timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_subscription_subscriber_created", "subscriber_id", "created_at"),
    )
