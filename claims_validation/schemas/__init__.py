"""
Pydantic schemas for collaborator payloads and inbound events.
"""

from claims_validation.schemas.claim import Claim, ClaimPatch, ClaimsPage
from claims_validation.schemas.events import SubmissionValidationEvent
from claims_validation.schemas.fee_scheme import (
    FeeCalculationOutcome,
    FeeCalculationRequest,
    FeeCalculationResponse,
    FeeCalculationWarning,
    FeeDetails,
)
from claims_validation.schemas.provider import (
    FirmOfficeSummary,
    ProviderSchedules,
    Schedule,
    ScheduleLine,
)
from claims_validation.schemas.submission import (
    Submission,
    SubmissionClaimRef,
    SubmissionPatch,
    SubmissionSummary,
    SubmissionsPage,
    ValidationMessagePatch,
)

__all__ = [
    "Claim",
    "ClaimPatch",
    "ClaimsPage",
    "FeeCalculationOutcome",
    "FeeCalculationRequest",
    "FeeCalculationResponse",
    "FeeCalculationWarning",
    "FeeDetails",
    "FirmOfficeSummary",
    "ProviderSchedules",
    "Schedule",
    "ScheduleLine",
    "Submission",
    "SubmissionClaimRef",
    "SubmissionPatch",
    "SubmissionSummary",
    "SubmissionValidationEvent",
    "SubmissionsPage",
    "ValidationMessagePatch",
]
