"""
Claim domain: models, value objects, errors and business rules.
"""

from .errors import (
    BusinessRuleViolation,
    ClaimError,
    ClaimErrorType,
    ClaimValidationError,
    InvalidDescriptionError,
    InvalidFormatError,
    InvalidRangeError,
    InvalidReportDateError,
    MissingFieldError,
)
from .rules import BusinessRule, ClaimBusinessRules, RuleSettings
from .schema import (
    # Enums
    ClaimStatus,
    ClaimType,
    PropertyDamageType,
    TravelIncidentType,
    # Value objects
    RegistrationNumber,
    TravelInterval,
    # Models
    AnyClaim,
    Claim,
    ClaimAdapter,
    PropertyClaim,
    TravelClaim,
    VehicleClaim,
)

__all__ = [
    # Errors
    "BusinessRuleViolation",
    "ClaimError",
    "ClaimErrorType",
    "ClaimValidationError",
    "InvalidDescriptionError",
    "InvalidFormatError",
    "InvalidRangeError",
    "InvalidReportDateError",
    "MissingFieldError",
    # Rules
    "BusinessRule",
    "ClaimBusinessRules",
    "RuleSettings",
    # Enums
    "ClaimStatus",
    "ClaimType",
    "PropertyDamageType",
    "TravelIncidentType",
    # Value objects
    "RegistrationNumber",
    "TravelInterval",
    # Models
    "AnyClaim",
    "Claim",
    "ClaimAdapter",
    "PropertyClaim",
    "TravelClaim",
    "VehicleClaim",
]
