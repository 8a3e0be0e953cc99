"""
Inbound submission event payloads.
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict

from claims_validation.core.enums import SubmissionEventType


class SubmissionValidationEvent(BaseModel):
    """Request to validate one submission."""

    model_config = ConfigDict(extra="ignore")

    submission_id: UUID
    event_type: SubmissionEventType = SubmissionEventType.VALIDATE_SUBMISSION
