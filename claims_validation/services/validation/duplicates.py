"""
Duplicate Claim Strategies.

One strategy per area of law. Every strategy checks the claim under test
against the other claims in its submission and against claims already
accepted in earlier submissions for the same office; they differ in the
fields that identify a claim and in how disbursement claims are treated.

Example:
    strategy = duplicate_strategy_for(AreaOfLaw.CIVIL, claims_data, fee_details)
    await strategy.validate_duplicate_claims(claim, submission_claims, "0P322F", context)
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Optional, Sequence

from claims_validation.core.enums import AreaOfLaw, ClaimStatus, SubmissionStatus
from claims_validation.gateways.claims_data_gateway import ClaimsDataGateway
from claims_validation.schemas.claim import Claim
from claims_validation.services.fee_details import FeeDetailsLookup
from claims_validation.services.validation.context import SubmissionValidationContext
from claims_validation.services.validation.messages import ClaimValidationError
from claims_validation.utils.dates import (
    MAXIMUM_MONTHS_DIFFERENCE,
    add_months,
    is_blank,
    months_between,
    parse_iso_date,
    submission_period_cutoff_date,
    try_parse_submission_period,
)
from claims_validation.utils.errors import InvalidDateError, UnknownAreaOfLawError
from claims_validation.utils.logging import get_logger

logger = get_logger(__name__)

# Claims that can still be duplicated, in history or within the submission
HISTORICAL_CLAIM_STATUSES = (ClaimStatus.READY_TO_PROCESS, ClaimStatus.VALID)
HISTORICAL_SUBMISSION_STATUSES = (
    SubmissionStatus.CREATED,
    SubmissionStatus.VALIDATION_IN_PROGRESS,
    SubmissionStatus.READY_FOR_VALIDATION,
    SubmissionStatus.VALIDATION_SUCCEEDED,
)

DuplicateKey = tuple[str, ...]


def _claim_ids(claims: Sequence[Claim]) -> str:
    return ", ".join(claim.id for claim in claims)


def _concluded_date(claim: Claim) -> Optional[date]:
    if is_blank(claim.case_concluded_date):
        return None
    try:
        return parse_iso_date(claim.case_concluded_date, "case_concluded_date")  # type: ignore[arg-type]
    except InvalidDateError:
        logger.debug(
            f"Could not parse case concluded date '{claim.case_concluded_date}' for claim {claim.id}"
        )
        return None


# =============================================================================
# Base Strategy
# =============================================================================


class DuplicateClaimStrategy(ABC):
    """Shared duplicate detection flow."""

    area_of_law: AreaOfLaw

    def __init__(self, claims_data: ClaimsDataGateway, fee_details: FeeDetailsLookup):
        self._claims_data = claims_data
        self._fee_details = fee_details

    @abstractmethod
    def duplicate_key(self, claim: Claim) -> Optional[DuplicateKey]:
        """Fields identifying a claim, or None when any of them is missing."""
        pass

    @abstractmethod
    def history_filters(self, claim: Claim) -> dict[str, Any]:
        """Claims Data search filters matching the claim's key."""
        pass

    async def validate_duplicate_claims(
        self,
        claim: Claim,
        submission_claims: Sequence[Claim],
        office_code: str,
        context: SubmissionValidationContext,
    ) -> None:
        """
        Record duplicate findings for one claim.

        Raises:
            GatewayError: if the Claims Data or Fee Scheme lookup fails
        """
        if self.duplicate_key(claim) is None:
            return

        in_submission = self.find_duplicates_in_submission(claim, submission_claims)
        if in_submission:
            logger.debug(f"Claim {claim.id} duplicates claims in its submission: {_claim_ids(in_submission)}")
            context.add_claim_error(
                claim.id, ClaimValidationError.INVALID_CLAIM_HAS_DUPLICATE_IN_EXISTING_SUBMISSION
            )

        previous = await self.find_duplicates_in_previous_submissions(
            claim, submission_claims, office_code
        )
        if previous:
            logger.debug(f"Claim {claim.id} duplicates previously submitted claims: {_claim_ids(previous)}")
            context.add_claim_error(
                claim.id, ClaimValidationError.INVALID_CLAIM_HAS_DUPLICATE_IN_ANOTHER_SUBMISSION
            )

    def comparable_claims(self, claim: Claim, submission_claims: Sequence[Claim]) -> list[Claim]:
        """Other claims in the submission that are ready to process or already valid."""
        return [
            other
            for other in submission_claims
            if other.id != claim.id and other.status in HISTORICAL_CLAIM_STATUSES
        ]

    def find_duplicates_in_submission(
        self, claim: Claim, submission_claims: Sequence[Claim]
    ) -> list[Claim]:
        key = self.duplicate_key(claim)
        return [
            other
            for other in self.comparable_claims(claim, submission_claims)
            if self.duplicate_key(other) == key
        ]

    async def find_duplicates_in_previous_submissions(
        self,
        claim: Claim,
        submission_claims: Sequence[Claim],
        office_code: str,
    ) -> list[Claim]:
        return await self.get_previous_submission_claims(claim, submission_claims, office_code)

    async def get_previous_submission_claims(
        self,
        claim: Claim,
        submission_claims: Sequence[Claim],
        office_code: str,
    ) -> list[Claim]:
        """Historical claims sharing the key, excluding this submission's claims."""
        found = await self._claims_data.get_claims(
            office_code,
            claim_statuses=HISTORICAL_CLAIM_STATUSES,
            submission_statuses=HISTORICAL_SUBMISSION_STATUSES,
            **self.history_filters(claim),
        )
        current_ids = {other.id for other in submission_claims}
        return [other for other in found if other.id not in current_ids]


# =============================================================================
# Area of Law Strategies
# =============================================================================


class CrimeLowerDuplicateStrategy(DuplicateClaimStrategy):
    """Crime lower claims are identified by fee code and unique file number."""

    area_of_law = AreaOfLaw.CRIME_LOWER

    def duplicate_key(self, claim: Claim) -> Optional[DuplicateKey]:
        if is_blank(claim.fee_code) or is_blank(claim.unique_file_number):
            return None
        return (claim.fee_code, claim.unique_file_number)  # type: ignore[return-value]

    def history_filters(self, claim: Claim) -> dict[str, Any]:
        return {"fee_code": claim.fee_code, "unique_file_number": claim.unique_file_number}

    async def validate_duplicate_claims(
        self,
        claim: Claim,
        submission_claims: Sequence[Claim],
        office_code: str,
        context: SubmissionValidationContext,
    ) -> None:
        if context.is_flagged_for_retry(claim.id):
            logger.debug(f"Skipping duplicate checks for claim {claim.id} flagged for retry")
            return
        await super().validate_duplicate_claims(claim, submission_claims, office_code, context)


class MediationDuplicateStrategy(DuplicateClaimStrategy):
    """Mediation claims are identified by fee code and unique case id."""

    area_of_law = AreaOfLaw.MEDIATION

    def duplicate_key(self, claim: Claim) -> Optional[DuplicateKey]:
        if is_blank(claim.fee_code) or is_blank(claim.unique_case_id):
            return None
        return (claim.fee_code, claim.unique_case_id)  # type: ignore[return-value]

    def history_filters(self, claim: Claim) -> dict[str, Any]:
        return {"fee_code": claim.fee_code, "unique_case_id": claim.unique_case_id}


class CivilDuplicateStrategy(DuplicateClaimStrategy):
    """
    Civil claims are identified by fee code, unique file number and unique client number.

    Historical matches for a disbursement claim only count when their
    submission period is less than three months before the claim's own.
    """

    area_of_law = AreaOfLaw.CIVIL

    def duplicate_key(self, claim: Claim) -> Optional[DuplicateKey]:
        if (
            is_blank(claim.fee_code)
            or is_blank(claim.unique_file_number)
            or is_blank(claim.unique_client_number)
        ):
            return None
        key = (claim.fee_code, claim.unique_file_number, claim.unique_client_number)
        return key  # type: ignore[return-value]

    def history_filters(self, claim: Claim) -> dict[str, Any]:
        return {
            "fee_code": claim.fee_code,
            "unique_file_number": claim.unique_file_number,
            "unique_client_number": claim.unique_client_number,
        }

    async def find_duplicates_in_previous_submissions(
        self,
        claim: Claim,
        submission_claims: Sequence[Claim],
        office_code: str,
    ) -> list[Claim]:
        if not await self._fee_details.is_disbursement(claim.fee_code):
            return await self.get_previous_submission_claims(claim, submission_claims, office_code)
        return await self.find_disbursement_duplicates(claim, submission_claims, office_code)

    async def find_disbursement_duplicates(
        self,
        claim: Claim,
        submission_claims: Sequence[Claim],
        office_code: str,
    ) -> list[Claim]:
        current_period = try_parse_submission_period(claim.submission_period)
        if current_period is None:
            return []
        previous = await self.get_previous_submission_claims(claim, submission_claims, office_code)
        recent = []
        for other in previous:
            period = try_parse_submission_period(other.submission_period)
            if period is not None and months_between(period, current_period) < MAXIMUM_MONTHS_DIFFERENCE:
                recent.append(other)
        return recent


class LegalHelpDuplicateStrategy(CivilDuplicateStrategy):
    """
    Legal help claims share the civil key.

    A disbursement claim is compared with the single historical match whose
    case concluded date is closest to its own (ties go to the later
    submission period). The later of the two submission periods, less three
    months, gives a cutoff on the 20th of the following month; the claim is a
    duplicate when the earlier of the two concluded dates falls after it.
    """

    area_of_law = AreaOfLaw.LEGAL_HELP

    async def find_disbursement_duplicates(
        self,
        claim: Claim,
        submission_claims: Sequence[Claim],
        office_code: str,
    ) -> list[Claim]:
        concluded = _concluded_date(claim)
        if concluded is None:
            return []

        previous = await self.get_previous_submission_claims(claim, submission_claims, office_code)
        candidates = [other for other in previous if _concluded_date(other) is not None]
        if not candidates:
            return []

        anchor = self.select_anchor(candidates, concluded)
        return [anchor] if self.is_duplicate(claim, anchor) else []

    @staticmethod
    def select_anchor(candidates: Sequence[Claim], concluded: date) -> Claim:
        """Closest concluded date first, then the later submission period."""

        def sort_key(candidate: Claim) -> tuple[int, int]:
            distance = abs((_concluded_date(candidate) - concluded).days)  # type: ignore[operator]
            period = try_parse_submission_period(candidate.submission_period)
            later_first = -period.toordinal() if period else 0
            return (distance, later_first)

        return min(candidates, key=sort_key)

    @staticmethod
    def is_duplicate(claim: Claim, anchor: Claim) -> bool:
        claim_period = try_parse_submission_period(claim.submission_period)
        anchor_period = try_parse_submission_period(anchor.submission_period)
        claim_concluded = _concluded_date(claim)
        anchor_concluded = _concluded_date(anchor)
        if None in (claim_period, anchor_period, claim_concluded, anchor_concluded):
            return False

        later_period = max(claim_period, anchor_period)  # type: ignore[type-var]
        cutoff = submission_period_cutoff_date(add_months(later_period, -MAXIMUM_MONTHS_DIFFERENCE))
        return min(claim_concluded, anchor_concluded) > cutoff  # type: ignore[type-var]


_STRATEGIES: dict[AreaOfLaw, type[DuplicateClaimStrategy]] = {
    AreaOfLaw.CRIME_LOWER: CrimeLowerDuplicateStrategy,
    AreaOfLaw.CIVIL: CivilDuplicateStrategy,
    AreaOfLaw.LEGAL_HELP: LegalHelpDuplicateStrategy,
    AreaOfLaw.MEDIATION: MediationDuplicateStrategy,
}


def duplicate_strategy_for(
    area_of_law: AreaOfLaw,
    claims_data: ClaimsDataGateway,
    fee_details: FeeDetailsLookup,
) -> DuplicateClaimStrategy:
    """
    Select the duplicate strategy for a submission's area of law.

    Raises:
        UnknownAreaOfLawError: if no strategy handles the area of law
    """
    strategy = _STRATEGIES.get(area_of_law)
    if strategy is None:
        raise UnknownAreaOfLawError(f"No duplicate claim strategy for area of law: {area_of_law}")
    return strategy(claims_data, fee_details)
