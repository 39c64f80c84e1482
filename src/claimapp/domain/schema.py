"""
Canonical claim schema for vehicle, property and travel claims.

Defines Pydantic models for the three claim kinds and the value objects they
carry. Every model validates on construction, so an invalid claim cannot exist:
constructors either return a valid object or raise a ClaimValidationError.
"""

import re
import uuid
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_serializer,
    field_validator,
    model_validator,
)

from .errors import (
    ClaimValidationError,
    InvalidDescriptionError,
    InvalidFormatError,
    InvalidRangeError,
    InvalidReportDateError,
    MissingFieldError,
)


MIN_DESCRIPTION_LENGTH = 20

# Swedish plate: three letters, two digits, then a letter or digit (ABC123, ABC12D)
REGISTRATION_NUMBER_PATTERN = re.compile(r"[A-Z]{3}[0-9]{2}[A-Z0-9]")


# ============================================================================
# Enums
# ============================================================================


class ClaimStatus(str, Enum):
    """Processing status of a claim."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    REQUIRES_MANUAL_REVIEW = "requires_manual_review"
    ESCALATED = "escalated"


class ClaimType(str, Enum):
    """Kind of claim. Fixed when the claim is created."""
    VEHICLE = "vehicle"
    PROPERTY = "property"
    TRAVEL = "travel"


class PropertyDamageType(str, Enum):
    """Cause of damage to property."""
    FIRE = "fire"
    WATER = "water"
    THEFT = "theft"
    VANDALISM = "vandalism"


class TravelIncidentType(str, Enum):
    """What went wrong during the trip."""
    LOST_LUGGAGE = "lost_luggage"
    FLIGHT_CANCELLATION = "flight_cancellation"
    MEDICAL_EMERGENCY = "medical_emergency"


# ============================================================================
# Validation helpers
# ============================================================================


def classify_validation_error(exc: ValidationError) -> ClaimValidationError:
    """
    Translate a pydantic ValidationError into the matching claim error.

    Errors raised by our own validators travel inside the pydantic error context
    and are returned unchanged. Pydantic's own errors are mapped by type: a
    missing field becomes MissingFieldError, anything else InvalidFormatError.
    """
    first = exc.errors()[0]
    wrapped = (first.get("ctx") or {}).get("error")
    if isinstance(wrapped, ClaimValidationError):
        return wrapped

    field = ".".join(str(part) for part in first["loc"]) or None
    if first["type"] == "missing":
        return MissingFieldError(f"{field} is required", field=field)
    return InvalidFormatError(f"{field}: {first['msg']}", field=field)


def _require_text(value: Any, field: str, message: str) -> str:
    """Return the stripped text or raise MissingFieldError if blank."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise MissingFieldError(message, field=field)
    if not isinstance(value, str):
        raise InvalidFormatError(f"{field} must be text", field=field)
    return value.strip()


class ValidatedModel(BaseModel):
    """Base model whose constructor raises ClaimValidationError, never ValidationError."""

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise classify_validation_error(exc) from exc


# ============================================================================
# Value Objects
# ============================================================================


class RegistrationNumber(ValidatedModel):
    """
    Vehicle registration number.

    Input is normalized (spaces and hyphens removed, uppercased) before the
    format check, so "abc 123", "ABC-123" and "abc123" are the same value.
    Equality and hashing use the normalized value.
    """

    model_config = ConfigDict(frozen=True)

    value: str

    def __init__(self, value: Optional[str] = None, **data: Any):
        data.setdefault("value", value)
        super().__init__(**data)

    @field_validator("value", mode="before")
    @classmethod
    def normalize(cls, v: Any) -> str:
        """Normalize and check the Swedish plate format."""
        if not isinstance(v, str) or not v.strip():
            raise InvalidFormatError(
                "Registration number cannot be empty",
                field="registration_number",
            )
        normalized = v.replace(" ", "").replace("-", "").upper()
        if not REGISTRATION_NUMBER_PATTERN.fullmatch(normalized):
            raise InvalidFormatError(
                f"Invalid registration number: '{v}'. Expected format: ABC123 or ABC12D",
                field="registration_number",
            )
        return normalized

    def __str__(self) -> str:
        return self.value


class TravelInterval(ValidatedModel):
    """
    Travel period with a required start and an optional end.

    An interval without an end date is an ongoing trip.
    """

    model_config = ConfigDict(frozen=True)

    start: date
    end: Optional[date] = None

    def __init__(self, start: Optional[date] = None, end: Optional[date] = None, **data: Any):
        data.setdefault("start", start)
        data.setdefault("end", end)
        super().__init__(**data)

    @field_validator("start", mode="before")
    @classmethod
    def require_start(cls, v: Any) -> Any:
        if v is None:
            raise MissingFieldError("Travel start date is required", field="start")
        if isinstance(v, datetime):
            return v.date()
        return v

    @field_validator("end", mode="before")
    @classmethod
    def strip_time(cls, v: Any) -> Any:
        if isinstance(v, datetime):
            return v.date()
        return v

    @model_validator(mode="after")
    def check_range(self) -> "TravelInterval":
        """End date must not precede start date."""
        if self.end is not None and self.end < self.start:
            raise InvalidRangeError(
                f"End date {self.end.isoformat()} is before start date {self.start.isoformat()}",
                field="end",
            )
        return self

    @property
    def is_completed(self) -> bool:
        """Whether the trip has an end date."""
        return self.end is not None

    def is_ongoing(self, today: Optional[date] = None) -> bool:
        today = today or date.today()
        return self.end is None or self.end >= today

    def days_since_end(self, today: Optional[date] = None) -> Optional[int]:
        """
        Whole days between the end date and today.

        Returns None for an ongoing trip. Negative when the end date lies in
        the future.
        """
        if self.end is None:
            return None
        today = today or date.today()
        return (today - self.end).days

    def duration_in_days(self, today: Optional[date] = None) -> int:
        """Inclusive number of days, counting to today for an ongoing trip."""
        end = self.end or today or date.today()
        return (end - self.start).days + 1

    def __str__(self) -> str:
        if self.end is None:
            return f"{self.start.isoformat()} to ongoing"
        return f"{self.start.isoformat()} to {self.end.isoformat()}"


# ============================================================================
# Claims
# ============================================================================


class Claim(ValidatedModel):
    """
    Fields shared by every claim kind.

    Not instantiated directly: construct a VehicleClaim, PropertyClaim or
    TravelClaim. Only the status can change after construction.
    """

    model_config = ConfigDict(validate_assignment=True)

    claim_id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        frozen=True,
        description="Unique claim identifier",
    )
    description: str = Field(default="", frozen=True, description="Narrative description of the damage")
    reported_date: date = Field(frozen=True, description="Date the claim was reported")
    status: ClaimStatus = Field(default=ClaimStatus.PENDING, description="Processing status")

    def __init__(self, **data: Any):
        if type(self) is Claim:
            raise TypeError("Claim is abstract; construct a VehicleClaim, PropertyClaim or TravelClaim")
        super().__init__(**data)

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, v: Any) -> str:
        """Empty is allowed; otherwise at least MIN_DESCRIPTION_LENGTH characters."""
        if v is None:
            return ""
        if not isinstance(v, str):
            raise InvalidFormatError("Description must be text", field="description")
        text = v.strip()
        if text and len(text) < MIN_DESCRIPTION_LENGTH:
            raise InvalidDescriptionError(
                f"Description must be at least {MIN_DESCRIPTION_LENGTH} characters "
                f"(currently {len(text)})",
                field="description",
            )
        return text

    @field_validator("reported_date", mode="before")
    @classmethod
    def require_reported_date(cls, v: Any) -> Any:
        if v is None:
            raise MissingFieldError("Report date is required", field="reported_date")
        if isinstance(v, datetime):
            return v.date()
        return v

    @field_validator("reported_date")
    @classmethod
    def reject_future_date(cls, v: date) -> date:
        if v > date.today():
            raise InvalidReportDateError(
                f"Report date {v.isoformat()} is in the future",
                field="reported_date",
            )
        return v

    def update_status(self, new_status: ClaimStatus) -> None:
        self.status = new_status

    def age_in_days(self, today: Optional[date] = None) -> int:
        """Whole days since the claim was reported."""
        today = today or date.today()
        return (today - self.reported_date).days


class VehicleClaim(Claim):
    """Damage to a vehicle, identified by its registration number."""

    claim_type: Literal["vehicle"] = Field(default="vehicle", frozen=True)
    registration_number: RegistrationNumber = Field(frozen=True)
    police_report_number: str = Field(frozen=True, description="Police report reference")

    @field_validator("registration_number", mode="before")
    @classmethod
    def coerce_registration_number(cls, v: Any) -> Any:
        """Accept a raw plate string as well as a RegistrationNumber."""
        if v is None:
            raise MissingFieldError(
                "Registration number is required for vehicle claims",
                field="registration_number",
            )
        if isinstance(v, str):
            return RegistrationNumber(v)
        return v

    @field_validator("police_report_number", mode="before")
    @classmethod
    def validate_police_report_number(cls, v: Any) -> str:
        return _require_text(
            v, "police_report_number", "Police report number is required for vehicle claims"
        )

    @field_serializer("registration_number")
    def serialize_registration_number(self, v: RegistrationNumber) -> str:
        return v.value


class PropertyClaim(Claim):
    """Damage to a building or its contents."""

    claim_type: Literal["property"] = Field(default="property", frozen=True)
    address: str = Field(frozen=True, description="Address of the damaged property")
    damage_type: PropertyDamageType = Field(frozen=True)
    estimated_value: Decimal = Field(frozen=True, description="Estimated loss, must be > 0")

    @field_validator("address", mode="before")
    @classmethod
    def validate_address(cls, v: Any) -> str:
        return _require_text(v, "address", "Address is required for property claims")

    @field_validator("damage_type", mode="before")
    @classmethod
    def require_damage_type(cls, v: Any) -> Any:
        if v is None:
            raise MissingFieldError("Damage type is required for property claims", field="damage_type")
        return v

    @field_validator("estimated_value", mode="before")
    @classmethod
    def coerce_estimated_value(cls, v: Any) -> Any:
        if v is None:
            raise MissingFieldError("Estimated value is required for property claims", field="estimated_value")
        if isinstance(v, float):
            # Go through str so the binary float does not leak into the Decimal
            return Decimal(str(v))
        return v

    @field_validator("estimated_value")
    @classmethod
    def validate_estimated_value(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise InvalidFormatError("Estimated value must be greater than 0", field="estimated_value")
        return v


class TravelClaim(Claim):
    """Incident during a trip."""

    claim_type: Literal["travel"] = Field(default="travel", frozen=True)
    destination: str = Field(frozen=True)
    travel_period: TravelInterval = Field(frozen=True)
    incident_type: TravelIncidentType = Field(frozen=True)

    @field_validator("destination", mode="before")
    @classmethod
    def validate_destination(cls, v: Any) -> str:
        return _require_text(v, "destination", "Destination is required for travel claims")

    @field_validator("travel_period", mode="before")
    @classmethod
    def require_travel_period(cls, v: Any) -> Any:
        if v is None:
            raise MissingFieldError("Travel period is required for travel claims", field="travel_period")
        return v

    @field_validator("incident_type", mode="before")
    @classmethod
    def require_incident_type(cls, v: Any) -> Any:
        if v is None:
            raise MissingFieldError("Incident type is required for travel claims", field="incident_type")
        return v

    @property
    def start_date(self) -> date:
        return self.travel_period.start

    @property
    def end_date(self) -> Optional[date]:
        return self.travel_period.end

    def is_travel_completed(self) -> bool:
        return self.travel_period.is_completed

    def days_since_return(self, today: Optional[date] = None) -> Optional[int]:
        """Days since the trip ended, or None while it is ongoing."""
        return self.travel_period.days_since_end(today)


# ============================================================================
# Union
# ============================================================================


AnyClaim = Annotated[
    Union[VehicleClaim, PropertyClaim, TravelClaim],
    Field(discriminator="claim_type"),
]

# Rebuilds a claim of the right kind from its model_dump() output
ClaimAdapter = TypeAdapter(AnyClaim)
