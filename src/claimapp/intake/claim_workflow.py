"""
Claim intake workflow.

Handles registration of a new, already validated claim:
- Report date check against the rules' clock (blocking)
- Reporting deadline check for travel claims (blocking, BR3)
- Flagging rules that set the claim status (BR1, BR2, BR5)
- Persisting the claim

The flagging rules run in a fixed order and each one that fires overwrites the
status set before it. Only the last status survives; the fired rules are kept
on the processing result.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..domain.errors import BusinessRuleViolation, InvalidReportDateError
from ..domain.rules import BusinessRule, ClaimBusinessRules
from ..domain.schema import Claim, ClaimStatus, TravelClaim
from ..storage.claim_store import ClaimRepository

logger = logging.getLogger(__name__)


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class ClaimProcessingResult:
    """Result of claim intake."""
    claim: Claim

    # Flagging rules that fired, in evaluation order
    fired_rules: List[BusinessRule] = field(default_factory=list)

    @property
    def final_status(self) -> ClaimStatus:
        return self.claim.status

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "claim_id": self.claim.claim_id,
            "claim_type": self.claim.claim_type,
            "fired_rules": [rule.value for rule in self.fired_rules],
            "final_status": self.final_status.value,
        }


# =============================================================================
# Main API
# =============================================================================


class ClaimService:
    """
    Register claims through the business rules and into the store.

    Usage:
        service = ClaimService(InMemoryClaimStore())
        claim = service.create_claim(vehicle_claim)
    """

    def __init__(
        self,
        repository: ClaimRepository,
        business_rules: Optional[ClaimBusinessRules] = None,
    ):
        self.repository = repository
        self.business_rules = business_rules or ClaimBusinessRules()

    def create_claim(self, claim: Claim) -> Claim:
        """
        Register a claim and return it with its final status.

        Raises:
            InvalidReportDateError: if the report date is after the rules' today.
            BusinessRuleViolation: if a travel claim is reported too long after
                the trip ended. Nothing is stored in either case.
        """
        return self.process_claim(claim).claim

    def process_claim(self, claim: Claim) -> ClaimProcessingResult:
        """
        Register a claim through the full workflow.

        Args:
            claim: A constructed (and therefore validated) claim

        Returns:
            ClaimProcessingResult with the stored claim and the rules that fired
        """
        rules = self.business_rules
        result = ClaimProcessingResult(claim=claim)

        logger.info(f"Processing {claim.claim_type} claim {claim.claim_id}")

        # Step 0: Report date must not be after the rules' today
        if rules.is_reported_in_future(claim):
            raise InvalidReportDateError(
                f"Report date {claim.reported_date.isoformat()} is after "
                f"{rules.today().isoformat()}",
                field="reported_date",
            )

        # Step 1: Reporting deadline (travel only), before anything is changed
        if rules.exceeds_reporting_deadline(claim):
            self._reject_late_travel_claim(claim)

        # Step 2: Late report
        if rules.requires_manual_review(claim):
            self._flag(result, BusinessRule.LATE_REPORT, ClaimStatus.REQUIRES_MANUAL_REVIEW)

        # Step 3: High value
        if rules.requires_escalation(claim):
            self._flag(result, BusinessRule.HIGH_VALUE, ClaimStatus.ESCALATED)

        # Step 4: Suspicious pattern against what is already stored
        existing_claims = self.repository.get_all()
        if rules.is_suspicious_pattern(claim, existing_claims):
            self._flag(result, BusinessRule.SUSPICIOUS_PATTERN, ClaimStatus.REQUIRES_MANUAL_REVIEW)

        # Step 5: Persist
        result.claim = self.repository.save(claim)

        logger.info(
            f"Claim {claim.claim_id} registered: status={result.final_status.value}, "
            f"fired_rules={[rule.value for rule in result.fired_rules]}"
        )
        return result

    def get_claim_by_id(self, claim_id: str) -> Optional[Claim]:
        return self.repository.get_by_id(claim_id)

    def get_all_claims(self) -> List[Claim]:
        return self.repository.get_all()

    def get_claims_by_registration_number(self, registration_number: str) -> List[Claim]:
        return self.repository.get_by_registration_number(registration_number)

    def _flag(self, result: ClaimProcessingResult, rule: BusinessRule, status: ClaimStatus) -> None:
        if result.fired_rules:
            logger.info(
                f"{rule.value} overrides status {result.claim.status.value} "
                f"with {status.value} for claim {result.claim.claim_id}"
            )
        else:
            logger.info(f"{rule.value} fired for claim {result.claim.claim_id}: {status.value}")
        result.fired_rules.append(rule)
        result.claim.update_status(status)

    def _reject_late_travel_claim(self, claim: TravelClaim) -> None:
        days_since_return = claim.days_since_return(self.business_rules.today())
        deadline = self.business_rules.settings.travel_reporting_deadline_days
        logger.warning(
            f"Rejected travel claim {claim.claim_id}: reported {days_since_return} days "
            f"after return (deadline {deadline})"
        )
        raise BusinessRuleViolation(
            f"Travel claims must be reported within {deadline} days of returning home. "
            f"{days_since_return} days have passed since the trip ended.",
            rule_code=BusinessRule.TRAVEL_REPORTING_DEADLINE.value,
        )
