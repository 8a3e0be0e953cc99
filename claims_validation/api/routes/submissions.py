"""
Submission Validation Routes.

Operator endpoints to run validation for a submission on demand, either by
id or by posting the same event body the queue listener receives.
"""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends

from claims_validation.api.deps import get_event_handler, get_validation_service
from claims_validation.gateways.base import GatewayError
from claims_validation.services.submission_events import SubmissionEventHandler
from claims_validation.services.validation.orchestrator import SubmissionValidationService
from claims_validation.utils.errors import (
    BadGatewayError,
    ClaimRetrievalError,
    NotFoundError,
    SubmissionEventError,
    SubmissionRetrievalError,
    UnprocessableEntityError,
)
from claims_validation.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(
    prefix="/api/v1/submissions",
    tags=["Submissions"],
    responses={404: {"description": "Not found"}},
)


@router.post("/{submission_id}/validation")
async def validate_submission(
    submission_id: UUID,
    service: SubmissionValidationService = Depends(get_validation_service),
) -> dict[str, Any]:
    """Validate a submission and return the result summary."""
    try:
        result = await service.validate_submission(str(submission_id))
    except SubmissionRetrievalError as e:
        raise NotFoundError(str(e)) from e
    except (ClaimRetrievalError, GatewayError) as e:
        logger.error(f"Validation of submission {submission_id} failed: {e}")
        raise BadGatewayError(str(e)) from e
    return result.to_dict()


@router.post("/events")
async def handle_submission_event(
    payload: dict[str, Any],
    handler: SubmissionEventHandler = Depends(get_event_handler),
) -> dict[str, Any]:
    """Process a submission event body."""
    try:
        result = await handler.handle(payload)
    except SubmissionEventError as e:
        raise UnprocessableEntityError(str(e)) from e
    except SubmissionRetrievalError as e:
        raise NotFoundError(str(e)) from e
    except (ClaimRetrievalError, GatewayError) as e:
        logger.error(f"Submission event failed: {e}")
        raise BadGatewayError(str(e)) from e
    return result.to_dict()
