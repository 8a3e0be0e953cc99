"""
Submission-level Validators.

Each validator inspects the submission header and records findings in the
run's context. Validators run in ascending priority; the status validator
has the lowest priority and is the only one allowed to stop the run.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Callable, Optional

from claims_validation.core.config import get_validation_settings
from claims_validation.core.enums import AreaOfLaw, SubmissionStatus
from claims_validation.gateways.base import GatewayError
from claims_validation.gateways.claims_data_gateway import ClaimsDataGateway
from claims_validation.schemas.submission import Submission, SubmissionPatch
from claims_validation.services.provider_schedule_cache import ProviderScheduleCache
from claims_validation.services.validation.context import SubmissionValidationContext
from claims_validation.services.validation.messages import (
    ClaimValidationError,
    SubmissionValidationError,
)
from claims_validation.services.validation.schema_validator import SchemaValidator
from claims_validation.utils.dates import (
    first_of_month,
    format_month,
    is_blank,
    parse_submission_period,
    try_parse_submission_period,
)
from claims_validation.utils.errors import InvalidDateError
from claims_validation.utils.logging import get_logger

logger = get_logger(__name__)

Today = Callable[[], date]

STATUS_PRIORITY = 1
DEFAULT_PRIORITY = 10
UNIQUENESS_PRIORITY = 100


class SubmissionValidator(ABC):
    """Base class for submission-level checks."""

    PRIORITY = DEFAULT_PRIORITY

    # When True, the run stops if this validator records a submission error
    halts_on_error = False

    def priority(self) -> int:
        return self.PRIORITY

    @property
    def name(self) -> str:
        return type(self).__name__

    @abstractmethod
    async def validate(
        self, submission: Submission, context: SubmissionValidationContext
    ) -> None:
        """Inspect the submission and record findings in the context."""
        pass


# =============================================================================
# Status Gate
# =============================================================================


class SubmissionStatusValidator(SubmissionValidator):
    """
    Gate the run on the submission's status.

    READY_FOR_VALIDATION is moved to VALIDATION_IN_PROGRESS before any other
    check runs; VALIDATION_IN_PROGRESS resumes an interrupted run. Anything
    else is recorded as an error and stops the run.
    """

    PRIORITY = STATUS_PRIORITY
    halts_on_error = True

    def __init__(self, claims_data: ClaimsDataGateway):
        self._claims_data = claims_data

    async def validate(
        self, submission: Submission, context: SubmissionValidationContext
    ) -> None:
        status = submission.status
        if status is None:
            logger.warning(f"Submission {submission.submission_id} has no status")
            context.add_submission_error(SubmissionValidationError.SUBMISSION_STATE_IS_NULL)
            return

        if status == SubmissionStatus.READY_FOR_VALIDATION:
            await self._claims_data.update_submission(
                str(submission.submission_id),
                SubmissionPatch(
                    submission_id=submission.submission_id,
                    status=SubmissionStatus.VALIDATION_IN_PROGRESS,
                ),
            )
            logger.info(f"Submission {submission.submission_id} moved to VALIDATION_IN_PROGRESS")
            return

        if status == SubmissionStatus.VALIDATION_IN_PROGRESS:
            logger.info(f"Resuming validation of submission {submission.submission_id}")
            return

        logger.warning(
            f"Submission {submission.submission_id} cannot be validated in state {status.value}"
        )
        context.add_submission_error(SubmissionValidationError.SUBMISSION_STATE_INVALID, status.value)


# =============================================================================
# Header Checks
# =============================================================================


class SubmissionSchemaValidator(SubmissionValidator):
    """Check header fields against the submission schema."""

    def __init__(self, schema_validator: Optional[SchemaValidator] = None):
        self._schema_validator = schema_validator or SchemaValidator()

    async def validate(
        self, submission: Submission, context: SubmissionValidationContext
    ) -> None:
        context.add_submission_messages(self._schema_validator.validate("submission", submission))


class NilSubmissionValidator(SubmissionValidator):
    """A nil submission must carry no claims; any other submission needs at least one."""

    async def validate(
        self, submission: Submission, context: SubmissionValidationContext
    ) -> None:
        if submission.is_nil_submission and submission.has_claims:
            context.add_submission_error(ClaimValidationError.INVALID_NIL_SUBMISSION_CONTAINS_CLAIMS)
        elif not submission.is_nil_submission and not submission.has_claims:
            context.add_submission_error(ClaimValidationError.NON_NIL_SUBMISSION_CONTAINS_NO_CLAIMS)


class SubmissionProviderContractValidator(SubmissionValidator):
    """
    The office must hold a contract schedule for the submission's area of law.

    Schedules are looked up through the provider schedule cache for the first
    day of the submission period, or today when the period is unusable.
    """

    def __init__(self, schedule_cache: ProviderScheduleCache, today: Optional[Today] = None):
        self._schedule_cache = schedule_cache
        self._today = today or date.today

    async def validate(
        self, submission: Submission, context: SubmissionValidationContext
    ) -> None:
        office_code = submission.office_account_number
        if is_blank(office_code) or is_blank(submission.area_of_law):
            return

        try:
            area_of_law = AreaOfLaw.from_value(submission.area_of_law)
        except ValueError:
            # Reported by the schema validator
            return

        effective_date = try_parse_submission_period(submission.submission_period) or self._today()
        try:
            schedules = await self._schedule_cache.get_schedules(
                office_code, area_of_law.value, effective_date
            )
        except GatewayError as e:
            logger.error(f"Provider contract lookup failed for office {office_code}: {e}")
            context.add_submission_error(
                SubmissionValidationError.SUBMISSION_TECHNICAL_ERROR, "provider contract"
            )
            return

        if schedules is None or not schedules.categories_of_law():
            logger.debug(f"Office {office_code} has no {area_of_law.value} contract")
            context.add_submission_error(ClaimValidationError.INVALID_AREA_OF_LAW_FOR_PROVIDER)


class SubmissionPeriodValidator(SubmissionValidator):
    """The period must be MMM-yyyy, in a past month and not before the configured minimum."""

    def __init__(
        self,
        minimum_period: Optional[date] = None,
        today: Optional[Today] = None,
    ):
        self._minimum_period = minimum_period
        self._today = today or date.today

    async def validate(
        self, submission: Submission, context: SubmissionValidationContext
    ) -> None:
        value = submission.submission_period
        if is_blank(value):
            context.add_submission_error(SubmissionValidationError.SUBMISSION_PERIOD_MISSING)
            return

        try:
            period = parse_submission_period(value)  # type: ignore[arg-type]
        except InvalidDateError:
            context.add_submission_error(SubmissionValidationError.SUBMISSION_PERIOD_INVALID_FORMAT)
            return

        current_month = first_of_month(self._today())
        if period == current_month:
            context.add_submission_error(
                SubmissionValidationError.SUBMISSION_PERIOD_SAME_MONTH, format_month(current_month)
            )
        elif period > current_month:
            context.add_submission_error(
                SubmissionValidationError.SUBMISSION_PERIOD_FUTURE_MONTH, format_month(current_month)
            )
        elif self._minimum_period is not None and period < self._minimum_period:
            context.add_submission_error(
                SubmissionValidationError.SUBMISSION_VALIDATION_MINIMUM_PERIOD,
                format_month(self._minimum_period),
            )


class SubmissionOfficeAreaOfLawAndPeriodValidator(SubmissionValidator):
    """No other successfully validated submission may share office, area of law and period."""

    PRIORITY = UNIQUENESS_PRIORITY

    def __init__(self, claims_data: ClaimsDataGateway):
        self._claims_data = claims_data

    async def validate(
        self, submission: Submission, context: SubmissionValidationContext
    ) -> None:
        office_code = submission.office_account_number
        area_of_law = submission.area_of_law
        period = submission.submission_period
        if is_blank(office_code) or is_blank(area_of_law) or is_blank(period):
            return

        try:
            existing = await self._find_validated_submissions(office_code, area_of_law, period)
        except GatewayError as e:
            logger.error(f"Submission uniqueness lookup failed for office {office_code}: {e}")
            context.add_submission_error(
                SubmissionValidationError.SUBMISSION_TECHNICAL_ERROR, "submission uniqueness"
            )
            return

        others = [found for found in existing if found != submission.submission_id]
        if others:
            logger.debug(
                f"Submission {submission.submission_id} duplicates "
                f"{', '.join(str(found) for found in others)}"
            )
            context.add_submission_error(
                SubmissionValidationError.SUBMISSION_ALREADY_EXISTS,
                office_code,
                area_of_law,
                period,
            )

    async def _find_validated_submissions(
        self, office_code: str, area_of_law: str, period: str
    ) -> list:
        found = []
        page = 0
        while True:
            result = await self._claims_data.get_submissions(
                [office_code],
                area_of_law=area_of_law,
                submission_period=period,
                statuses=[SubmissionStatus.VALIDATION_SUCCEEDED],
                page=page,
            )
            found.extend(
                summary.submission_id
                for summary in result.content
                if summary.status in (None, SubmissionStatus.VALIDATION_SUCCEEDED)
            )
            page += 1
            if page >= result.total_pages or not result.content:
                return found


def default_submission_validators(
    claims_data: ClaimsDataGateway,
    schedule_cache: ProviderScheduleCache,
    schema_validator: Optional[SchemaValidator] = None,
    today: Optional[Today] = None,
) -> list[SubmissionValidator]:
    """Build the standard submission validator chain in registration order."""
    settings = get_validation_settings()
    return [
        SubmissionStatusValidator(claims_data),
        SubmissionSchemaValidator(schema_validator),
        NilSubmissionValidator(),
        SubmissionProviderContractValidator(schedule_cache, today),
        SubmissionPeriodValidator(settings.minimum_submission_period, today),
        SubmissionOfficeAreaOfLawAndPeriodValidator(claims_data),
    ]
