"""
Submission Validation Service.

Drives one validation run: load the submission, gate on its status, run the
submission-level chain, validate each ready claim, then write claim and
submission statuses back to the Claims Data service.

Example:
    service = get_submission_validation_service()
    result = await service.validate_submission("0f8fad5b-d9cb-469f-a165-70867728950e")
    print(result.final_status)
"""

import asyncio
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional, Sequence

from claims_validation.core.enums import AreaOfLaw, ClaimStatus, SubmissionStatus
from claims_validation.gateways.base import GatewayError
from claims_validation.gateways.claims_data_gateway import (
    ClaimsDataGateway,
    get_claims_data_gateway,
)
from claims_validation.gateways.fee_scheme_gateway import FeeSchemeGateway, get_fee_scheme_gateway
from claims_validation.schemas.claim import Claim, ClaimPatch
from claims_validation.schemas.submission import Submission, SubmissionPatch
from claims_validation.services.fee_details import FeeDetailsLookup
from claims_validation.services.provider_schedule_cache import (
    ProviderScheduleCache,
    get_provider_schedule_cache,
)
from claims_validation.services.validation.claim_validators import (
    ClaimValidationScope,
    ClaimValidator,
    Today,
    default_claim_validators,
)
from claims_validation.services.validation.context import SubmissionValidationContext
from claims_validation.services.validation.duplicates import duplicate_strategy_for
from claims_validation.services.validation.effective_date import try_get_effective_date
from claims_validation.services.validation.submission_validators import (
    SubmissionValidator,
    default_submission_validators,
)
from claims_validation.utils.dates import is_blank, try_parse_submission_period
from claims_validation.utils.errors import ClaimRetrievalError, SubmissionRetrievalError
from claims_validation.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class SubmissionValidationResult:
    """Outcome of one validation run."""

    submission_id: str
    final_status: Optional[SubmissionStatus]
    context: SubmissionValidationContext
    claims_updated: int = 0
    claims_skipped: int = 0

    @property
    def is_valid(self) -> bool:
        return self.final_status == SubmissionStatus.VALIDATION_SUCCEEDED

    def to_dict(self) -> dict[str, Any]:
        """Summary suitable for an API response."""
        return {
            "submission_id": self.submission_id,
            "final_status": self.final_status.value if self.final_status else None,
            "submission_errors": [
                message.display_message
                for message in self.context.submission_messages
                if message.is_error
            ],
            "claim_errors": {
                report.claim_id: report.errors
                for report in self.context.claim_reports
                if report.has_errors
            },
            "claims_updated": self.claims_updated,
            "claims_skipped": self.claims_skipped,
        }


class SubmissionValidationService:
    """Validate submissions and their claims against the validator chains."""

    def __init__(
        self,
        claims_data: Optional[ClaimsDataGateway] = None,
        fee_scheme: Optional[FeeSchemeGateway] = None,
        schedule_cache: Optional[ProviderScheduleCache] = None,
        submission_validators: Optional[Sequence[SubmissionValidator]] = None,
        claim_validators: Optional[Sequence[ClaimValidator]] = None,
        today: Optional[Today] = None,
    ):
        self.claims_data = claims_data or get_claims_data_gateway()
        self.fee_scheme = fee_scheme or get_fee_scheme_gateway()
        self.schedule_cache = schedule_cache or get_provider_schedule_cache()

        if submission_validators is None:
            submission_validators = default_submission_validators(
                self.claims_data, self.schedule_cache, today=today
            )
        if claim_validators is None:
            claim_validators = default_claim_validators(
                self.fee_scheme, self.schedule_cache, today=today
            )
        # sorted() is stable, so equal priorities keep registration order
        self.submission_validators = sorted(submission_validators, key=lambda v: v.priority())
        self.claim_validators = sorted(claim_validators, key=lambda v: v.priority())

    async def validate_submission(self, submission_id: str) -> SubmissionValidationResult:
        """
        Run every validator against a submission and persist the outcome.

        Args:
            submission_id: Submission to validate

        Returns:
            SubmissionValidationResult; final_status is None when the status
            gate stopped the run

        Raises:
            SubmissionRetrievalError: if the submission cannot be loaded
            ClaimRetrievalError: if a ready claim cannot be loaded
        """
        submission_id = str(submission_id)
        logger.info(f"Validating submission {submission_id}")
        context = SubmissionValidationContext()
        submission = await self._load_submission(submission_id)

        for validator in self.submission_validators:
            errors_before = len(context.submission_messages)
            await validator.validate(submission, context)
            if validator.halts_on_error and len(context.submission_messages) > errors_before:
                logger.warning(f"Validation of submission {submission_id} stopped by {validator.name}")
                return SubmissionValidationResult(submission_id, None, context)

        claims = await self._load_ready_claims(submission)
        context.add_claim_reports(claim.id for claim in claims)
        if claims:
            await self._validate_claims(submission, claims, context)

        updated, skipped = await self._update_claims(submission_id, claims, context)
        final_status = (
            SubmissionStatus.VALIDATION_FAILED
            if context.has_errors()
            else SubmissionStatus.VALIDATION_SUCCEEDED
        )
        await self.claims_data.update_submission(
            submission_id,
            SubmissionPatch(
                submission_id=submission.submission_id,
                status=final_status,
                validation_messages=[message.to_patch() for message in context.submission_messages],
            ),
        )
        logger.info(
            f"Submission {submission_id} validated: {final_status.value} "
            f"(claims updated: {updated}, skipped for retry: {skipped})"
        )
        return SubmissionValidationResult(submission_id, final_status, context, updated, skipped)

    # =========================================================================
    # Loading
    # =========================================================================

    async def _load_submission(self, submission_id: str) -> Submission:
        try:
            return await self.claims_data.get_submission(submission_id)
        except GatewayError as e:
            logger.error(f"Failed to retrieve submission {submission_id}: {e}")
            raise SubmissionRetrievalError(submission_id, e) from e

    async def _load_ready_claims(self, submission: Submission) -> list[Claim]:
        submission_id = str(submission.submission_id)
        ready_ids = [
            ref.claim_id for ref in submission.claims if ref.status == ClaimStatus.READY_TO_PROCESS
        ]

        async def load(claim_id: str) -> Claim:
            try:
                claim = await self.claims_data.get_claim(submission_id, claim_id)
            except GatewayError as e:
                logger.error(f"Failed to retrieve claim {claim_id}: {e}")
                raise ClaimRetrievalError(submission_id, claim_id, e) from e
            if is_blank(claim.submission_period):
                claim = claim.model_copy(update={"submission_period": submission.submission_period})
            return claim

        claims = await asyncio.gather(*(load(claim_id) for claim_id in ready_ids))
        logger.debug(f"Loaded {len(claims)} ready claims for submission {submission_id}")
        return list(claims)

    # =========================================================================
    # Claim Validation
    # =========================================================================

    async def _validate_claims(
        self,
        submission: Submission,
        claims: list[Claim],
        context: SubmissionValidationContext,
    ) -> None:
        try:
            area_of_law = AreaOfLaw.from_value(submission.area_of_law or "")
        except ValueError:
            logger.warning(
                f"Skipping claim validation for submission {submission.submission_id}: "
                f"unknown area of law {submission.area_of_law!r}"
            )
            for claim in claims:
                context.flag_for_retry(claim.id)
            return

        fee_details = FeeDetailsLookup(self.fee_scheme)
        await fee_details.prefetch(claim.fee_code for claim in claims)

        scope = ClaimValidationScope(
            submission=submission,
            area_of_law=area_of_law,
            office_code=submission.office_account_number or "",
            submission_period=try_parse_submission_period(submission.submission_period),
            claims=claims,
            fee_details=fee_details,
            duplicate_strategy=duplicate_strategy_for(area_of_law, self.claims_data, fee_details),
            effective_dates=self._resolve_effective_dates(claims),
        )

        for claim in claims:
            logger.debug(f"Validating claim {claim.id}")
            for validator in self.claim_validators:
                await validator.validate(claim, scope, context)

    @staticmethod
    def _resolve_effective_dates(claims: Sequence[Claim]) -> dict[str, Optional[date]]:
        effective_dates = {}
        for claim in claims:
            effective_dates[claim.id] = try_get_effective_date(claim)
            if effective_dates[claim.id] is None:
                logger.debug(f"No effective date for claim {claim.id}")
        return effective_dates

    # =========================================================================
    # Write-back
    # =========================================================================

    async def _update_claims(
        self,
        submission_id: str,
        claims: Sequence[Claim],
        context: SubmissionValidationContext,
    ) -> tuple[int, int]:
        updated = skipped = 0
        for claim in claims:
            if context.is_flagged_for_retry(claim.id):
                logger.debug(f"Claim {claim.id} flagged for retry; not updated")
                skipped += 1
                continue
            status = ClaimStatus.INVALID if context.has_claim_errors(claim.id) else ClaimStatus.VALID
            await self.claims_data.update_claim(
                submission_id,
                claim.id,
                ClaimPatch(
                    id=claim.id,
                    status=status,
                    validation_messages=[
                        message.to_patch() for message in context.claim_messages(claim.id)
                    ],
                ),
            )
            logger.debug(f"Claim {claim.id} status updated to {status.value}")
            updated += 1
        return updated, skipped


# Singleton instance
_submission_validation_service: Optional[SubmissionValidationService] = None


def get_submission_validation_service() -> SubmissionValidationService:
    """Get or create the submission validation service singleton."""
    global _submission_validation_service
    if _submission_validation_service is None:
        _submission_validation_service = SubmissionValidationService()
    return _submission_validation_service
