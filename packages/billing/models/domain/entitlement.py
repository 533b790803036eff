"""Domain models for entitlement checks."""

from pydantic import BaseModel, ConfigDict, Field

from packages.billing.models.domain.enums import EntitlementDecision


class EntitlementResult(BaseModel):
    """
    Result of an entitlement check for one action on one feature.

    `decision` is the tagged outcome; `allowed` and `will_incur_charge`
    are kept for callers that only need the flags.
    """

    model_config = ConfigDict(frozen=True)

    decision: EntitlementDecision
    subscriber_id: str
    plan_id: str
    feature_key: str
    consumed: int = Field(ge=0)
    included_units: int = Field(ge=0)
    will_incur_charge: bool
    estimated_unit_cost_cents: int = Field(ge=0)

    @property
    def allowed(self) -> bool:
        return self.decision.allowed

    @property
    def remaining_included_units(self) -> int:
        return max(0, self.included_units - self.consumed)
