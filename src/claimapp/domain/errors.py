"""Error types for claim construction and intake."""

from enum import Enum
from typing import Any, Dict, Optional


class ClaimErrorType(str, Enum):
    """Classification of claim errors."""
    INVALID_FORMAT = "invalid_format"
    MISSING_FIELD = "missing_field"
    INVALID_DESCRIPTION = "invalid_description"
    INVALID_RANGE = "invalid_range"
    INVALID_REPORT_DATE = "invalid_report_date"
    BUSINESS_RULE_VIOLATION = "business_rule_violation"


class ClaimError(Exception):
    """
    Base exception for all claim errors.

    Attributes:
        message: Human-readable error message
        field: Name of the offending field, if any
        recoverable: Whether the caller can recover by correcting its input
    """

    error_type: ClaimErrorType

    def __init__(self, message: str, field: Optional[str] = None, recoverable: bool = True):
        self.message = message
        self.field = field
        self.recoverable = recoverable
        super().__init__(message)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error_type": self.error_type.value,
            "message": self.message,
            "field": self.field,
            "recoverable": self.recoverable,
        }


class ClaimValidationError(ClaimError, ValueError):
    """Raised when a claim or value object cannot be constructed."""


class InvalidFormatError(ClaimValidationError):
    error_type = ClaimErrorType.INVALID_FORMAT


class MissingFieldError(ClaimValidationError):
    error_type = ClaimErrorType.MISSING_FIELD


class InvalidDescriptionError(ClaimValidationError):
    error_type = ClaimErrorType.INVALID_DESCRIPTION


class InvalidRangeError(ClaimValidationError):
    error_type = ClaimErrorType.INVALID_RANGE


class InvalidReportDateError(ClaimValidationError):
    error_type = ClaimErrorType.INVALID_REPORT_DATE


class BusinessRuleViolation(ClaimError):
    """
    Raised by the intake workflow when a blocking business rule rejects a claim.

    The claim itself is valid; the violation prevents it from being stored.
    """

    error_type = ClaimErrorType.BUSINESS_RULE_VIOLATION

    def __init__(self, message: str, rule_code: str = ""):
        super().__init__(message)
        self.rule_code = rule_code

    def __str__(self) -> str:
        if self.rule_code:
            return f"{self.rule_code}: {self.message}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["rule_code"] = self.rule_code
        return data
