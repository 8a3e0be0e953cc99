"""
Custom Exceptions
Engine error taxonomy and HTTP error mapping
Source: https://fastapi.tiangolo.com/tutorial/handling-errors/
Verified: 2025-11-14
"""

from typing import Optional

from fastapi import HTTPException, status


# =============================================================================
# Engine Errors
# =============================================================================


class ValidationEngineError(Exception):
    """Base exception for the validation engine."""

    pass


class InvalidDateError(ValidationEngineError, ValueError):
    """Raised when a date value cannot be resolved or parsed."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class SubmissionRetrievalError(ValidationEngineError):
    """Raised when a submission cannot be loaded from the Claims Data service."""

    def __init__(self, submission_id: str, original_error: Optional[Exception] = None):
        super().__init__(f"Failed to retrieve submission {submission_id}")
        self.submission_id = submission_id
        self.original_error = original_error


class ClaimRetrievalError(ValidationEngineError):
    """Raised when a claim referenced by a submission cannot be loaded."""

    def __init__(
        self,
        submission_id: str,
        claim_id: str,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(f"Failed to retrieve claim {claim_id} for submission {submission_id}")
        self.submission_id = submission_id
        self.claim_id = claim_id
        self.original_error = original_error


class SubmissionEventError(ValidationEngineError):
    """Raised when an inbound submission event cannot be processed."""

    pass


class UnknownAreaOfLawError(ValidationEngineError, ValueError):
    """Raised when an area of law is not recognised."""

    pass


# =============================================================================
# HTTP Errors
# =============================================================================


class NotFoundError(HTTPException):
    """Raised when resource not found"""

    def __init__(self, detail: str = "Resource not found"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
        )


class UnprocessableEntityError(HTTPException):
    """Raised when a request cannot be processed"""

    def __init__(self, detail: str = "Unprocessable entity"):
        super().__init__(
            status_code=422,
            detail=detail,
        )


class BadGatewayError(HTTPException):
    """Raised when a collaborator service fails"""

    def __init__(self, detail: str = "Upstream service failure"):
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=detail,
        )
