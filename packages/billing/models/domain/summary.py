"""Domain model for the billing estimate shown to subscribers."""

from pydantic import BaseModel

from packages.billing.models.domain.enums import SubscriptionStatus
from packages.billing.models.domain.overage import OverageResult
from packages.billing.models.domain.timestamps import UtcDatetime
from packages.billing.models.domain.usage import UsageReport


class BillingSummary(BaseModel):
    """Current-period usage with the estimated amount of the next bill."""

    subscriber_id: str
    plan_id: str
    status: SubscriptionStatus
    usage: UsageReport
    overage: OverageResult
    base_amount_cents: int
    estimated_total_cents: int
    next_bill_date: UtcDatetime
