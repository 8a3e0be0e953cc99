"""
Submission Event Handling.

Turns an inbound "validate submission" message into a validation run. The
queue listener itself lives outside this package; it hands the decoded
message body to SubmissionEventHandler.handle.
"""

from typing import Any, Mapping, Optional

from pydantic import ValidationError

from claims_validation.schemas.events import SubmissionValidationEvent
from claims_validation.services.validation.orchestrator import (
    SubmissionValidationResult,
    SubmissionValidationService,
    get_submission_validation_service,
)
from claims_validation.utils.errors import SubmissionEventError
from claims_validation.utils.logging import get_logger

logger = get_logger(__name__)


class SubmissionEventHandler:
    """Validate the submission named by an inbound event."""

    def __init__(self, service: Optional[SubmissionValidationService] = None):
        self._service = service

    @property
    def service(self) -> SubmissionValidationService:
        if self._service is None:
            self._service = get_submission_validation_service()
        return self._service

    @staticmethod
    def parse(payload: Mapping[str, Any]) -> SubmissionValidationEvent:
        """
        Parse an event payload.

        Raises:
            SubmissionEventError: if the payload is malformed or of an unsupported type
        """
        if not isinstance(payload, Mapping):
            raise SubmissionEventError(f"Event payload must be an object, got {type(payload).__name__}")
        try:
            event = SubmissionValidationEvent.model_validate(payload)
        except ValidationError as e:
            raise SubmissionEventError(f"Invalid submission event: {e}") from e
        return event

    async def handle(self, payload: Mapping[str, Any]) -> SubmissionValidationResult:
        """Parse the payload and run validation for its submission."""
        event = self.parse(payload)
        logger.info(f"Received {event.event_type.value} for submission {event.submission_id}")
        return await self.service.validate_submission(str(event.submission_id))
