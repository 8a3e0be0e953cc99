"""
Core Enumerations for Submission and Claim Validation.
Source: Claims Data, Provider Details and Fee Scheme service contracts
Verified: 2025-12-18
"""

from enum import Enum
from typing import Optional


# =============================================================================
# Submission Enums
# =============================================================================


class AreaOfLaw(str, Enum):
    """Classification of legal work carried by a submission."""

    LEGAL_HELP = "LEGAL HELP"
    CRIME_LOWER = "CRIME LOWER"
    MEDIATION = "MEDIATION"
    CIVIL = "CIVIL"

    @classmethod
    def _missing_(cls, value: object) -> Optional["AreaOfLaw"]:
        # Accept member names ("LEGAL_HELP") and any casing of the values
        if isinstance(value, str):
            normalised = value.strip().upper().replace("_", " ")
            for member in cls:
                if member.value == normalised:
                    return member
        return None

    @classmethod
    def from_value(cls, value: str) -> "AreaOfLaw":
        """Convert a raw area of law, raising UnknownAreaOfLawError if unrecognised."""
        from claims_validation.utils.errors import UnknownAreaOfLawError

        try:
            return cls(value)
        except ValueError as e:
            raise UnknownAreaOfLawError(f"Unknown area of law: {value}") from e


class SubmissionStatus(str, Enum):
    """Submission lifecycle owned by the Claims Data service."""

    CREATED = "CREATED"
    READY_FOR_VALIDATION = "READY_FOR_VALIDATION"
    VALIDATION_IN_PROGRESS = "VALIDATION_IN_PROGRESS"
    VALIDATION_SUCCEEDED = "VALIDATION_SUCCEEDED"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    REPLACED = "REPLACED"


# =============================================================================
# Claim Enums
# =============================================================================


class ClaimStatus(str, Enum):
    """Claim status as stored by the Claims Data service."""

    READY_TO_PROCESS = "READY_TO_PROCESS"
    VALID = "VALID"
    INVALID = "INVALID"
    NOT_VALIDATED = "NOT_VALIDATED"


# =============================================================================
# Validation Message Enums
# =============================================================================


class MessageType(str, Enum):
    """Severity of a validation message."""

    ERROR = "ERROR"
    WARNING = "WARNING"


class MessageSource(str, Enum):
    """Originating system of a validation message."""

    EVENT_SERVICE = "Data-Claims-Event-Service"
    FEE_SCHEME_PLATFORM = "Fee-Scheme-Platform"


class SubmissionEventType(str, Enum):
    """Inbound event types understood by the engine."""

    VALIDATE_SUBMISSION = "VALIDATE_SUBMISSION"
