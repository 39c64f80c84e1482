"""
Business rules for claim intake.

Pure checks evaluated against the data handed to them:
- BR1: vehicle claims reported late need manual review
- BR2: high-value property claims are escalated
- BR3: travel claims must be reported soon after returning home
- BR5: repeated recent claims on the same vehicle are suspicious

None of the checks touch storage. The intake workflow supplies the existing
claims, and the clock is injectable so tests can pin "today".
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Callable, Iterable, Optional

from pydantic import BaseModel, Field

from .schema import Claim, PropertyClaim, TravelClaim, VehicleClaim


class BusinessRule(str, Enum):
    """Rule codes used in fired-rule lists and violations."""
    LATE_REPORT = "BR1"
    HIGH_VALUE = "BR2"
    TRAVEL_REPORTING_DEADLINE = "BR3"
    SUSPICIOUS_PATTERN = "BR5"


class RuleSettings(BaseModel):
    """Thresholds for the business rules."""

    late_report_days: int = Field(default=30, ge=0, description="BR1: days before a vehicle report is late")
    escalation_threshold: Decimal = Field(
        default=Decimal("100000"), ge=0, description="BR2: estimated value above which to escalate"
    )
    suspicious_lookback_days: int = Field(default=90, ge=0, description="BR5: window in days")
    suspicious_claim_threshold: int = Field(
        default=3, ge=1, description="BR5: earlier claims in the window that trigger the flag"
    )
    travel_reporting_deadline_days: int = Field(
        default=14, ge=0, description="BR3: days after returning within which to report"
    )


class ClaimBusinessRules:
    """
    Stateless evaluator for the claim business rules.

    Usage:
        rules = ClaimBusinessRules()
        if rules.requires_manual_review(claim):
            ...

        # Pin the clock in tests
        rules = ClaimBusinessRules(clock=lambda: date(2024, 6, 1))
    """

    def __init__(
        self,
        settings: Optional[RuleSettings] = None,
        clock: Optional[Callable[[], date]] = None,
    ):
        self.settings = settings or RuleSettings()
        self._clock = clock or date.today

    def today(self) -> date:
        return self._clock()

    def is_reported_in_future(self, claim: Claim) -> bool:
        """Report date lies after this evaluator's today."""
        return claim.reported_date > self.today()

    def requires_manual_review(self, claim: Claim) -> bool:
        """BR1: vehicle claim reported more than late_report_days ago."""
        if not isinstance(claim, VehicleClaim):
            return False
        return claim.age_in_days(self.today()) > self.settings.late_report_days

    def requires_escalation(self, claim: Claim) -> bool:
        """BR2: property claim whose estimated value exceeds the threshold."""
        if not isinstance(claim, PropertyClaim):
            return False
        return claim.estimated_value > self.settings.escalation_threshold

    def exceeds_reporting_deadline(self, claim: Claim) -> bool:
        """BR3: completed trip that ended more than the deadline ago."""
        if not isinstance(claim, TravelClaim):
            return False
        days_since_return = claim.days_since_return(self.today())
        if days_since_return is None:
            return False
        return days_since_return > self.settings.travel_reporting_deadline_days

    def is_suspicious_pattern(self, claim: Claim, existing_claims: Iterable[Claim]) -> bool:
        """
        BR5: too many recent claims on the same vehicle.

        Counts existing vehicle claims with the same registration number that
        were reported within the lookback window. The new claim is expected
        not to be part of existing_claims yet.
        """
        if not isinstance(claim, VehicleClaim):
            return False

        today = self.today()
        recent_claims_count = sum(
            1
            for existing in existing_claims
            if isinstance(existing, VehicleClaim)
            and existing.registration_number == claim.registration_number
            and existing.age_in_days(today) <= self.settings.suspicious_lookback_days
        )
        return recent_claims_count >= self.settings.suspicious_claim_threshold
