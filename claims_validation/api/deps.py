"""
FastAPI Dependencies
Dependency injection for the validation service and event handler
Source: https://fastapi.tiangolo.com/tutorial/dependencies/
"""

from claims_validation.services.submission_events import SubmissionEventHandler
from claims_validation.services.validation.orchestrator import (
    SubmissionValidationService,
    get_submission_validation_service,
)


def get_validation_service() -> SubmissionValidationService:
    """Validation service used by the request."""
    return get_submission_validation_service()


def get_event_handler() -> SubmissionEventHandler:
    """Event handler bound to the shared validation service."""
    return SubmissionEventHandler(get_submission_validation_service())
