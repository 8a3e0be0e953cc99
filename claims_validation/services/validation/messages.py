"""
Validation Messages and Error Catalogue.

Every finding recorded during a validation run is a ValidationMessage.
Catalogue entries are display templates; positional arguments are
substituted with %-formatting when a message is built.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from claims_validation.core.enums import MessageSource, MessageType
from claims_validation.schemas.submission import ValidationMessagePatch


@dataclass(frozen=True)
class ValidationMessage:
    """A single validation finding."""

    display_message: str
    technical_message: str
    source: str = MessageSource.EVENT_SERVICE.value
    type: MessageType = MessageType.ERROR

    @classmethod
    def error(
        cls,
        display_message: str,
        technical_message: Optional[str] = None,
        source: MessageSource = MessageSource.EVENT_SERVICE,
    ) -> "ValidationMessage":
        return cls(
            display_message=display_message,
            technical_message=technical_message or display_message,
            source=source.value,
            type=MessageType.ERROR,
        )

    @classmethod
    def warning(
        cls,
        display_message: str,
        technical_message: Optional[str] = None,
        source: MessageSource = MessageSource.EVENT_SERVICE,
    ) -> "ValidationMessage":
        return cls(
            display_message=display_message,
            technical_message=technical_message or display_message,
            source=source.value,
            type=MessageType.WARNING,
        )

    @property
    def is_error(self) -> bool:
        return self.type == MessageType.ERROR

    def to_patch(self) -> ValidationMessagePatch:
        """Convert to the Claims Data write-back shape."""
        return ValidationMessagePatch(
            display_message=self.display_message,
            technical_message=self.technical_message,
            source=self.source,
            type=self.type,
        )


class ErrorCatalogue(Enum):
    """Shared behaviour for error code enums."""

    def format(self, *args: object) -> str:
        return self.value % args if args else self.value

    def to_message(self, *args: object) -> ValidationMessage:
        text = self.format(*args)
        return ValidationMessage.error(text, technical_message=f"{self.name}: {text}")


class ClaimValidationError(ErrorCatalogue):
    """Claim-level (and legacy submission-level) error codes."""

    INVALID_AREA_OF_LAW_FOR_PROVIDER = (
        "A contract schedule with the provided area of law could not be found for this provider"
    )
    INVALID_CATEGORY_OF_LAW_AND_FEE_CODE = (
        "A category of law could not be found for the provided fee code"
    )
    INVALID_CATEGORY_OF_LAW_NOT_AUTHORISED_FOR_PROVIDER = (
        "The provider is not contracted for the category of law associated with the fee code"
    )
    INVALID_NIL_SUBMISSION_CONTAINS_CLAIMS = (
        "Submission is marked as nil submission, but contains claims"
    )
    NON_NIL_SUBMISSION_CONTAINS_NO_CLAIMS = (
        "Submission is not marked as nil submission, but does not contain any claims"
    )
    INVALID_FEE_CALCULATION_VALIDATION_FAILED = (
        "A validation error occurred when attempting to calculate the fee for this claim"
    )
    INVALID_CLAIM_HAS_DUPLICATE_IN_EXISTING_SUBMISSION = (
        "A duplicate of this claim exists in the current submission"
    )
    INVALID_CLAIM_HAS_DUPLICATE_IN_ANOTHER_SUBMISSION = (
        "A duplicate of this claim exists in another submission for this office"
    )
    INVALID_DATE_IN_UNIQUE_FILE_NUMBER = (
        "The unique file number contains an invalid date or a date that is not in the past"
    )
    TECHNICAL_ERROR_PROVIDER_DETAILS_API = (
        "A technical error occurred while checking the provider's contract. Please try again later"
    )
    TECHNICAL_ERROR_FEE_SCHEME_API = (
        "A technical error occurred while checking the fee code. Please try again later"
    )
    TECHNICAL_ERROR_CLAIMS_DATA_API = (
        "A technical error occurred while checking for duplicate claims. Please try again later"
    )


class SubmissionValidationError(ErrorCatalogue):
    """Submission-level error codes."""

    SUBMISSION_STATE_IS_NULL = "Submission state is null"
    SUBMISSION_STATE_INVALID = "Submission cannot be validated in state %s"
    SUBMISSION_PERIOD_MISSING = (
        "Submission period is required. Please provide a submission period in the format MMM-YYYY"
    )
    SUBMISSION_PERIOD_INVALID_FORMAT = (
        "Submission period wrong format, should be in the format MMM-YYYY"
    )
    SUBMISSION_PERIOD_SAME_MONTH = (
        "Submissions for the current month (%s) are not accepted. "
        "Please submit for a previous month."
    )
    SUBMISSION_PERIOD_FUTURE_MONTH = (
        "Submissions for after the current month (%s) are not accepted. "
        "Please submit for a previous month."
    )
    SUBMISSION_VALIDATION_MINIMUM_PERIOD = (
        "Submissions for periods before %s are not accepted."
    )
    SUBMISSION_ALREADY_EXISTS = (
        "A submission already exists for office %s, area of law %s and period %s"
    )
    SUBMISSION_TECHNICAL_ERROR = (
        "A technical error occurred while validating the submission (%s). Please try again later"
    )
