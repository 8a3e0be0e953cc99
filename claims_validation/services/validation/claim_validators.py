"""
Claim-level Validators.

Validators run once per ready claim, in ascending priority, after the
submission-level chain. Per-run collaborators (fee details, duplicate
strategy, schedule cache) reach them through a ClaimValidationScope built
once per submission.
"""

import re
from decimal import Decimal
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Optional

from claims_validation.core.enums import AreaOfLaw, MessageSource
from claims_validation.gateways.base import GatewayError
from claims_validation.gateways.fee_scheme_gateway import FeeSchemeGateway
from claims_validation.schemas.claim import Claim
from claims_validation.schemas.fee_scheme import FeeCalculationRequest
from claims_validation.schemas.submission import Submission
from claims_validation.services.fee_details import FeeDetailsLookup
from claims_validation.services.provider_schedule_cache import ProviderScheduleCache
from claims_validation.services.validation.context import SubmissionValidationContext
from claims_validation.services.validation.duplicates import DuplicateClaimStrategy
from claims_validation.services.validation.messages import ClaimValidationError, ValidationMessage
from claims_validation.services.validation.schema_validator import SchemaValidator
from claims_validation.utils.dates import (
    UNIQUE_FILE_NUMBER_PATTERN,
    add_months,
    format_display_date,
    is_blank,
    parse_iso_date,
    parse_unique_file_number,
    submission_period_cutoff_date,
)
from claims_validation.utils.errors import InvalidDateError
from claims_validation.utils.logging import get_logger

logger = get_logger(__name__)

Today = Callable[[], date]

SCHEMA_PRIORITY = 10
DEFAULT_PRIORITY = 100
LOOKUP_PRIORITY = 1000
FEE_CALCULATION_PRIORITY = 2000
# After fee calculation, so crime lower can skip claims flagged for retry
DUPLICATE_PRIORITY = 10000

MINIMUM_DATE = date(1995, 1, 1)
MINIMUM_REPRESENTATION_ORDER_DATE = date(2016, 4, 1)
MINIMUM_DATE_OF_BIRTH = date(1900, 1, 1)
MINIMUM_CRIME_LOWER_CONCLUDED_DATE = date(2016, 4, 1)

REGEX_MESSAGE = "%s (%s): does not match the regex pattern %s (provided value: %s)"


@dataclass
class ClaimValidationScope:
    """Submission-wide inputs shared by every claim check in one run."""

    submission: Submission
    area_of_law: AreaOfLaw
    office_code: str
    submission_period: Optional[date]
    claims: list[Claim]
    fee_details: FeeDetailsLookup
    duplicate_strategy: DuplicateClaimStrategy
    effective_dates: dict[str, Optional[date]] = field(default_factory=dict)

    def effective_date(self, claim: Claim) -> Optional[date]:
        return self.effective_dates.get(claim.id)


class ClaimValidator(ABC):
    """Base class for per-claim checks."""

    PRIORITY = DEFAULT_PRIORITY

    def priority(self) -> int:
        return self.PRIORITY

    @abstractmethod
    async def validate(
        self,
        claim: Claim,
        scope: ClaimValidationScope,
        context: SubmissionValidationContext,
    ) -> None:
        """Inspect the claim and record findings in the context."""
        pass


# =============================================================================
# Field Checks
# =============================================================================


class ClaimSchemaValidator(ClaimValidator):
    PRIORITY = SCHEMA_PRIORITY

    def __init__(self, schema_validator: Optional[SchemaValidator] = None):
        self._schema_validator = schema_validator or SchemaValidator()

    async def validate(
        self,
        claim: Claim,
        scope: ClaimValidationScope,
        context: SubmissionValidationContext,
    ) -> None:
        context.add_claim_messages(claim.id, self._schema_validator.validate("claim", claim))


class UniqueFileNumberClaimValidator(ClaimValidator):
    """The date encoded in a well-formed unique file number must be a real date in the past."""

    def __init__(self, today: Optional[Today] = None):
        self._today = today or date.today

    async def validate(
        self,
        claim: Claim,
        scope: ClaimValidationScope,
        context: SubmissionValidationContext,
    ) -> None:
        value = claim.unique_file_number
        # Malformed numbers are reported by the schema check
        if is_blank(value) or not UNIQUE_FILE_NUMBER_PATTERN.match(value.strip()):
            return
        try:
            file_date = parse_unique_file_number(value)
        except InvalidDateError:
            context.add_claim_error(claim.id, ClaimValidationError.INVALID_DATE_IN_UNIQUE_FILE_NUMBER)
            return
        if file_date >= self._today():
            context.add_claim_error(claim.id, ClaimValidationError.INVALID_DATE_IN_UNIQUE_FILE_NUMBER)


class CaseDatesClaimValidator(ClaimValidator):
    """
    Case and client dates must fall between a field-specific minimum and today.

    The case concluded date is instead bounded above by the 20th of the month
    following the submission period.
    """

    DATE_RANGES: tuple[tuple[str, str, date], ...] = (
        ("case_start_date", "Case Start Date", MINIMUM_DATE),
        ("transfer_date", "Transfer Date", MINIMUM_DATE),
        ("representation_order_date", "Representation Order Date", MINIMUM_REPRESENTATION_ORDER_DATE),
        ("client_date_of_birth", "Client Date of Birth", MINIMUM_DATE_OF_BIRTH),
        ("client_2_date_of_birth", "Client2 Date of Birth", MINIMUM_DATE_OF_BIRTH),
    )

    def __init__(self, today: Optional[Today] = None):
        self._today = today or date.today

    async def validate(
        self,
        claim: Claim,
        scope: ClaimValidationScope,
        context: SubmissionValidationContext,
    ) -> None:
        today = self._today()
        for attribute, label, minimum in self.DATE_RANGES:
            value = self._parse(claim, attribute, label, context)
            if value is not None and not minimum <= value <= today:
                context.add_claim_error(
                    claim.id, f"{label} must be between {format_display_date(minimum)} and today"
                )
        self._validate_case_concluded_date(claim, scope, context)

    def _validate_case_concluded_date(
        self,
        claim: Claim,
        scope: ClaimValidationScope,
        context: SubmissionValidationContext,
    ) -> None:
        concluded = self._parse(claim, "case_concluded_date", "Case Concluded Date", context)
        if concluded is None or scope.submission_period is None:
            return
        minimum = (
            MINIMUM_CRIME_LOWER_CONCLUDED_DATE
            if scope.area_of_law == AreaOfLaw.CRIME_LOWER
            else MINIMUM_DATE
        )
        latest = submission_period_cutoff_date(scope.submission_period)
        if not minimum <= concluded <= latest:
            context.add_claim_error(
                claim.id,
                "Case Concluded Date cannot be later than the 20th of the month following "
                f"the submission period or before {format_display_date(minimum)}",
            )

    @staticmethod
    def _parse(
        claim: Claim, attribute: str, label: str, context: SubmissionValidationContext
    ) -> Optional[date]:
        value = getattr(claim, attribute)
        if is_blank(value):
            return None
        try:
            return parse_iso_date(value, attribute)
        except InvalidDateError:
            context.add_claim_error(claim.id, f"Invalid date value provided for {label}: {value}")
            return None


class RegexClaimValidator(ClaimValidator):
    """Match a claim field against a pattern chosen by area of law."""

    field_name: str
    patterns: dict[AreaOfLaw, str]

    async def validate(
        self,
        claim: Claim,
        scope: ClaimValidationScope,
        context: SubmissionValidationContext,
    ) -> None:
        pattern = self.patterns.get(scope.area_of_law)
        value = getattr(claim, self.field_name)
        if pattern is None or is_blank(value):
            return
        if not re.match(pattern, value):
            context.add_claim_error(
                claim.id, REGEX_MESSAGE, self.field_name, scope.area_of_law.value, pattern, value
            )


CIVIL_STAGE_REACHED_PATTERN = r"^[a-zA-Z0-9]{2}$"
CRIME_LOWER_STAGE_REACHED_PATTERN = (
    r"^(INV[A-M]|PRI[A-E]|PRO[C-FH-LP-TUVW]|APP[ABC]|AS(MS|PL|AS)|YOU[EFKLXY]|VOID)$"
)
CIVIL_MATTER_TYPE_PATTERN = r"^[a-zA-Z0-9]{1,4}[-:][a-zA-Z0-9]{1,4}$"
MEDIATION_MATTER_TYPE_PATTERN = r"^[A-Z]{4}[-:][A-Z]{4}$"


class StageReachedClaimValidator(RegexClaimValidator):
    field_name = "stage_reached_code"
    patterns = {
        AreaOfLaw.LEGAL_HELP: CIVIL_STAGE_REACHED_PATTERN,
        AreaOfLaw.CIVIL: CIVIL_STAGE_REACHED_PATTERN,
        AreaOfLaw.CRIME_LOWER: CRIME_LOWER_STAGE_REACHED_PATTERN,
    }


class MatterTypeClaimValidator(RegexClaimValidator):
    field_name = "matter_type_code"
    patterns = {
        AreaOfLaw.LEGAL_HELP: CIVIL_MATTER_TYPE_PATTERN,
        AreaOfLaw.CIVIL: CIVIL_MATTER_TYPE_PATTERN,
        AreaOfLaw.MEDIATION: MEDIATION_MATTER_TYPE_PATTERN,
    }


LEGAL_HELP_OUTCOME_CODE_PATTERN = r"^[A-Za-z0-9-]{2}$"
CRIME_LOWER_OUTCOME_CODE_PATTERN = (
    r"(?i)^(CP(0[1-9]|1[0-9]|2[0-8])|CN(0[1-9]|1[0-3])|PL(0[1-9]|1[0-4]))?$"
)
MEDIATION_OUTCOME_CODE_PATTERN = r"(?i)^(A|B|S|C|P)?$"
CIVIL_SCHEDULE_REFERENCE_PATTERN = r"^[a-zA-Z0-9/.\-]{1,20}$"


class OutcomeCodeClaimValidator(RegexClaimValidator):
    field_name = "outcome_code"
    patterns = {
        AreaOfLaw.LEGAL_HELP: LEGAL_HELP_OUTCOME_CODE_PATTERN,
        AreaOfLaw.CIVIL: LEGAL_HELP_OUTCOME_CODE_PATTERN,
        AreaOfLaw.CRIME_LOWER: CRIME_LOWER_OUTCOME_CODE_PATTERN,
        AreaOfLaw.MEDIATION: MEDIATION_OUTCOME_CODE_PATTERN,
    }


class ScheduleReferenceClaimValidator(RegexClaimValidator):
    field_name = "schedule_reference"
    patterns = {
        AreaOfLaw.LEGAL_HELP: CIVIL_SCHEDULE_REFERENCE_PATTERN,
        AreaOfLaw.CIVIL: CIVIL_SCHEDULE_REFERENCE_PATTERN,
    }


class DisbursementsClaimValidator(ClaimValidator):
    """The disbursements VAT amount may not exceed the area of law's maximum."""

    MAXIMUM_VAT_AMOUNTS: dict[AreaOfLaw, Decimal] = {
        AreaOfLaw.LEGAL_HELP: Decimal("99999.99"),
        AreaOfLaw.CIVIL: Decimal("99999.99"),
        AreaOfLaw.CRIME_LOWER: Decimal("999999.99"),
        AreaOfLaw.MEDIATION: Decimal("999999999.99"),
    }

    async def validate(
        self,
        claim: Claim,
        scope: ClaimValidationScope,
        context: SubmissionValidationContext,
    ) -> None:
        amount = claim.disbursements_vat_amount
        maximum = self.MAXIMUM_VAT_AMOUNTS.get(scope.area_of_law)
        if amount is not None and maximum is not None and amount > maximum:
            context.add_claim_error(
                claim.id, "Disbursements VAT Amount has exceeded the maximum accepted value"
            )


# Claim attributes that must be present, by area of law
CIVIL_MANDATORY_FIELDS: tuple[str, ...] = (
    "unique_file_number",
    "case_start_date",
    "case_concluded_date",
    "outcome_code",
    "travel_waiting_costs_amount",
    "client_forename",
    "client_surname",
    "client_date_of_birth",
    "unique_client_number",
    "client_postcode",
    "gender_code",
    "ethnicity_code",
    "disability_code",
    "advice_time",
    "travel_time",
    "waiting_time",
    "net_counsel_costs_amount",
    "case_id",
    "case_reference_number",
    "schedule_reference",
    "matter_type_code",
    "net_profit_costs_amount",
)

CRIME_LOWER_MANDATORY_FIELDS: tuple[str, ...] = (
    "case_concluded_date",
    "stage_reached_code",
    "net_profit_costs_amount",
    "disbursements_vat_amount",
)

MEDIATION_MANDATORY_FIELDS: tuple[str, ...] = (
    "outreach_location",
    "referral_source",
    "client_forename",
    "client_surname",
    "client_date_of_birth",
    "unique_client_number",
    "client_postcode",
    "gender_code",
    "ethnicity_code",
    "disability_code",
    "is_legally_aided",
    "case_id",
    "case_start_date",
    "case_reference_number",
    "schedule_reference",
    "matter_type_code",
    "unique_case_id",
)

MANDATORY_FIELDS: dict[AreaOfLaw, tuple[str, ...]] = {
    AreaOfLaw.LEGAL_HELP: CIVIL_MANDATORY_FIELDS,
    AreaOfLaw.CIVIL: CIVIL_MANDATORY_FIELDS,
    AreaOfLaw.CRIME_LOWER: CRIME_LOWER_MANDATORY_FIELDS,
    AreaOfLaw.MEDIATION: MEDIATION_MANDATORY_FIELDS,
}


class MandatoryFieldClaimValidator(ClaimValidator):
    """Every field the area of law requires must be present and not blank."""

    PRIORITY = SCHEMA_PRIORITY

    def __init__(self, mandatory_fields: Optional[dict[AreaOfLaw, tuple[str, ...]]] = None):
        self._mandatory_fields = MANDATORY_FIELDS if mandatory_fields is None else mandatory_fields
        for field_name in {name for names in self._mandatory_fields.values() for name in names}:
            if field_name not in Claim.model_fields:
                raise ValueError(f"Unknown claim field in mandatory fields: {field_name}")

    async def validate(
        self,
        claim: Claim,
        scope: ClaimValidationScope,
        context: SubmissionValidationContext,
    ) -> None:
        for field_name in self._mandatory_fields.get(scope.area_of_law, ()):
            value = getattr(claim, field_name)
            if value is None or (isinstance(value, str) and is_blank(value)):
                context.add_claim_error(
                    claim.id,
                    f"{field_name} is required for area of law: {scope.area_of_law.value}",
                )


class DisbursementClaimStartDateValidator(ClaimValidator):
    """
    Disbursement claims may only be submitted three calendar months after the case started.

    The claim fails when the case start date plus three months falls after the
    20th of the month following the submission period.
    """

    async def validate(
        self,
        claim: Claim,
        scope: ClaimValidationScope,
        context: SubmissionValidationContext,
    ) -> None:
        if scope.submission_period is None or is_blank(claim.case_start_date):
            return
        try:
            case_start = parse_iso_date(claim.case_start_date, "case_start_date")
        except InvalidDateError:
            # Reported by the case dates check
            return
        try:
            is_disbursement = await scope.fee_details.is_disbursement(claim.fee_code)
        except GatewayError:
            context.add_claim_error_once(claim.id, ClaimValidationError.TECHNICAL_ERROR_FEE_SCHEME_API)
            return
        if not is_disbursement:
            return

        if add_months(case_start, 3) > submission_period_cutoff_date(scope.submission_period):
            context.add_claim_error(
                claim.id,
                "Disbursement claims can only be submitted at least 3 calendar months after "
                f"the Case Start Date {format_display_date(case_start)}",
            )


# =============================================================================
# Collaborator Checks
# =============================================================================


class EffectiveCategoryOfLawClaimValidator(ClaimValidator):
    """The provider must be contracted, on the claim's effective date, for the fee code's category of law."""

    PRIORITY = LOOKUP_PRIORITY

    def __init__(self, schedule_cache: ProviderScheduleCache):
        self._schedule_cache = schedule_cache

    async def validate(
        self,
        claim: Claim,
        scope: ClaimValidationScope,
        context: SubmissionValidationContext,
    ) -> None:
        if is_blank(claim.fee_code):
            return

        effective_date = scope.effective_date(claim)
        if effective_date is None:
            logger.info(f"Skipping category of law check for claim {claim.id}: no effective date")
            return

        try:
            category_of_law = await scope.fee_details.category_of_law(claim.fee_code)
        except GatewayError:
            context.add_claim_error_once(claim.id, ClaimValidationError.TECHNICAL_ERROR_FEE_SCHEME_API)
            return
        if not category_of_law:
            context.add_claim_error(claim.id, ClaimValidationError.INVALID_CATEGORY_OF_LAW_AND_FEE_CODE)
            return

        try:
            schedules = await self._schedule_cache.get_schedules(
                scope.office_code, scope.area_of_law.value, effective_date
            )
        except GatewayError as e:
            logger.error(f"Provider schedules unavailable for claim {claim.id}: {e}")
            context.add_claim_error_once(
                claim.id, ClaimValidationError.TECHNICAL_ERROR_PROVIDER_DETAILS_API
            )
            return

        provider_categories = schedules.categories_of_law(effective_date) if schedules else []
        if category_of_law not in provider_categories:
            logger.debug(
                f"Claim {claim.id}: category {category_of_law} not in "
                f"{', '.join(provider_categories) or 'no categories'}"
            )
            context.add_claim_error(
                claim.id, ClaimValidationError.INVALID_CATEGORY_OF_LAW_NOT_AUTHORISED_FOR_PROVIDER
            )


class DuplicateClaimValidator(ClaimValidator):
    """Run the submission's duplicate strategy for the claim."""

    PRIORITY = DUPLICATE_PRIORITY

    async def validate(
        self,
        claim: Claim,
        scope: ClaimValidationScope,
        context: SubmissionValidationContext,
    ) -> None:
        try:
            await scope.duplicate_strategy.validate_duplicate_claims(
                claim, scope.claims, scope.office_code, context
            )
        except GatewayError as e:
            logger.error(f"Duplicate check failed for claim {claim.id}: {e}")
            error = (
                ClaimValidationError.TECHNICAL_ERROR_FEE_SCHEME_API
                if e.service == "FeeScheme"
                else ClaimValidationError.TECHNICAL_ERROR_CLAIMS_DATA_API
            )
            context.add_claim_error_once(claim.id, error)


class FeeCalculationClaimValidator(ClaimValidator):
    """
    Ask the Fee Scheme Platform to calculate the claim's fee.

    An empty 2xx body or a non-2xx answer leaves the claim for a later run;
    a calculation warning fails the claim.
    """

    PRIORITY = FEE_CALCULATION_PRIORITY

    def __init__(self, fee_scheme: FeeSchemeGateway):
        self._fee_scheme = fee_scheme

    async def validate(
        self,
        claim: Claim,
        scope: ClaimValidationScope,
        context: SubmissionValidationContext,
    ) -> None:
        if is_blank(claim.fee_code):
            return
        logger.debug(f"Validating fee calculation for claim {claim.id}")

        request = FeeCalculationRequest(
            fee_code=claim.fee_code,
            claim_id=claim.id,
            start_date=scope.effective_date(claim),
            unique_file_number=claim.unique_file_number,
            net_profit_costs=claim.net_profit_costs_amount,
            net_disbursement_amount=claim.net_disbursement_amount,
            disbursement_vat_amount=claim.disbursements_vat_amount,
            vat_indicator=claim.is_vat_applicable,
        )
        try:
            outcome = await self._fee_scheme.calculate_fee(request)
        except GatewayError as e:
            logger.error(f"Fee calculation failed for claim {claim.id}: {e}")
            context.add_claim_error_once(claim.id, ClaimValidationError.TECHNICAL_ERROR_FEE_SCHEME_API)
            return

        if not outcome.is_successful:
            logger.warning(
                f"Fee calculation for claim {claim.id} returned {outcome.status_code}; flagged for retry"
            )
            context.flag_for_retry(claim.id)
            return
        if outcome.response is None:
            logger.warning(f"Fee calculation for claim {claim.id} returned no body; flagged for retry")
            context.flag_for_retry(claim.id)
            return

        warning = outcome.response.warning
        if warning is not None and warning.warning_description:
            context.add_claim_error(claim.id, ClaimValidationError.INVALID_FEE_CALCULATION_VALIDATION_FAILED)
            context.add_claim_messages(
                claim.id,
                [
                    ValidationMessage.warning(
                        warning.warning_description,
                        technical_message=(
                            f"{warning.warning_code}: {warning.warning_description}"
                            if warning.warning_code
                            else None
                        ),
                        source=MessageSource.FEE_SCHEME_PLATFORM,
                    )
                ],
            )


def default_claim_validators(
    fee_scheme: FeeSchemeGateway,
    schedule_cache: ProviderScheduleCache,
    schema_validator: Optional[SchemaValidator] = None,
    today: Optional[Today] = None,
) -> list[ClaimValidator]:
    """Build the standard claim validator chain in registration order."""
    return [
        ClaimSchemaValidator(schema_validator),
        MandatoryFieldClaimValidator(),
        UniqueFileNumberClaimValidator(today),
        CaseDatesClaimValidator(today),
        StageReachedClaimValidator(),
        MatterTypeClaimValidator(),
        OutcomeCodeClaimValidator(),
        ScheduleReferenceClaimValidator(),
        DisbursementsClaimValidator(),
        DisbursementClaimStartDateValidator(),
        EffectiveCategoryOfLawClaimValidator(schedule_cache),
        DuplicateClaimValidator(),
        FeeCalculationClaimValidator(fee_scheme),
    ]
