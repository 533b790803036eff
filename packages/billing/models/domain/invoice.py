"""Domain models for invoices."""

from pydantic import BaseModel, ConfigDict, Field

from packages.billing.models.domain.timestamps import UtcDatetime


class InvoiceLineItem(BaseModel):
    """One overage charge on an invoice."""

    model_config = ConfigDict(frozen=True)

    feature_key: str
    description: str
    quantity: int = Field(ge=1)  # Billable batches
    unit_price_cents: int = Field(ge=0)  # Per batch
    amount_cents: int = Field(ge=0)
    overage_units: int = Field(ge=1)


class Invoice(BaseModel):
    """
    Invoice for one subscriber and billing period.

    Created fresh on each invoicing run and immutable once returned. The id
    is derived from subscriber and period, so regenerating the same period
    yields the same id.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    idempotency_key: str
    subscriber_id: str
    plan_id: str
    period_start: UtcDatetime
    period_end: UtcDatetime
    issue_date: UtcDatetime
    due_date: UtcDatetime
    base_amount_cents: int = Field(ge=0)
    overage_amount_cents: int = Field(ge=0)
    total_amount_cents: int = Field(ge=0)
    line_items: tuple[InvoiceLineItem, ...] = ()
