"""
Pydantic Schemas for Claims Data Submissions.
Source: Claims Data service submission endpoints
Verified: 2025-12-18
"""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from claims_validation.core.enums import ClaimStatus, MessageType, SubmissionStatus


class ValidationMessagePatch(BaseModel):
    """Validation message as written back to the Claims Data service."""

    display_message: str
    technical_message: str
    source: str
    type: MessageType = MessageType.ERROR


class SubmissionClaimRef(BaseModel):
    """Reference to a claim held by a submission."""

    model_config = ConfigDict(extra="ignore")

    claim_id: str
    status: Optional[ClaimStatus] = None


class Submission(BaseModel):
    """
    Submission header plus claim references.

    Area of law and period are kept as raw strings so that malformed values
    are reported by validation rather than rejected on load.
    """

    model_config = ConfigDict(extra="ignore")

    submission_id: UUID
    bulk_submission_id: Optional[UUID] = None
    office_account_number: Optional[str] = None
    area_of_law: Optional[str] = None
    submission_period: Optional[str] = None
    status: Optional[SubmissionStatus] = None
    is_nil_submission: Optional[bool] = None
    claims: list[SubmissionClaimRef] = Field(default_factory=list)

    @property
    def has_claims(self) -> bool:
        """Check if the submission references any claims."""
        return bool(self.claims)


class SubmissionSummary(BaseModel):
    """Submission row returned by the submission search endpoint."""

    model_config = ConfigDict(extra="ignore")

    submission_id: UUID
    office_account_number: Optional[str] = None
    area_of_law: Optional[str] = None
    submission_period: Optional[str] = None
    status: Optional[SubmissionStatus] = None


class SubmissionsPage(BaseModel):
    """One page of submission search results."""

    model_config = ConfigDict(extra="ignore")

    content: list[SubmissionSummary] = Field(default_factory=list)
    number: int = 0
    size: int = 0
    total_pages: int = 0
    total_elements: int = 0


class SubmissionPatch(BaseModel):
    """Status update requested for a submission."""

    submission_id: UUID
    status: SubmissionStatus
    validation_messages: list[ValidationMessagePatch] = Field(default_factory=list)
