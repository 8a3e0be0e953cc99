"""
Unit tests for per-area duplicate claim strategies.
"""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import OFFICE_CODE, make_claim

from claims_validation.core.enums import AreaOfLaw, ClaimStatus
from claims_validation.gateways.base import ServiceUnavailableError
from claims_validation.services.validation.context import SubmissionValidationContext
from claims_validation.services.validation.duplicates import (
    HISTORICAL_CLAIM_STATUSES,
    CivilDuplicateStrategy,
    CrimeLowerDuplicateStrategy,
    LegalHelpDuplicateStrategy,
    MediationDuplicateStrategy,
    duplicate_strategy_for,
)
from claims_validation.services.validation.messages import ClaimValidationError
from claims_validation.utils.errors import UnknownAreaOfLawError

IN_SUBMISSION = ClaimValidationError.INVALID_CLAIM_HAS_DUPLICATE_IN_EXISTING_SUBMISSION.value
IN_ANOTHER = ClaimValidationError.INVALID_CLAIM_HAS_DUPLICATE_IN_ANOTHER_SUBMISSION.value


async def check_all(strategy, claims):
    context = SubmissionValidationContext()
    for claim in claims:
        await strategy.validate_duplicate_claims(claim, claims, OFFICE_CODE, context)
    return context


class TestCivilDuplicates:
    """Tests for the civil key and in-submission matching."""

    @pytest.mark.asyncio
    async def test_different_file_numbers(self, claims_data, fee_details):
        """Test claims differing only by file number are not duplicates."""
        claims = [
            make_claim("A", unique_file_number="070722/001"),
            make_claim("B", unique_file_number="070722/002"),
        ]

        context = await check_all(CivilDuplicateStrategy(claims_data, fee_details), claims)

        assert not context.has_errors()

    @pytest.mark.asyncio
    async def test_identical_claims_both_flagged(self, claims_data, fee_details):
        """Test both members of a duplicate pair are flagged."""
        claims = [make_claim("A"), make_claim("C")]

        context = await check_all(CivilDuplicateStrategy(claims_data, fee_details), claims)

        assert context.claim_errors("A") == [IN_SUBMISSION]
        assert context.claim_errors("C") == [IN_SUBMISSION]

    @pytest.mark.asyncio
    async def test_invalid_claims_ignored(self, claims_data, fee_details):
        """Test a claim already marked invalid is not a duplicate target."""
        claims = [make_claim("A"), make_claim("C", status=ClaimStatus.INVALID)]
        context = SubmissionValidationContext()

        await CivilDuplicateStrategy(claims_data, fee_details).validate_duplicate_claims(
            claims[0], claims, OFFICE_CODE, context
        )

        assert not context.has_errors()


    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [ClaimStatus.NOT_VALIDATED, None])
    async def test_only_ready_or_valid_claims_compared(self, claims_data, fee_details, status):
        """Test claims not ready to process or valid are not duplicate targets."""
        claims = [make_claim("A"), make_claim("C", status=status)]
        context = SubmissionValidationContext()

        await CivilDuplicateStrategy(claims_data, fee_details).validate_duplicate_claims(
            claims[0], claims, OFFICE_CODE, context
        )

        assert not context.has_errors()

    @pytest.mark.asyncio
    async def test_valid_claim_compared(self, claims_data, fee_details):
        """Test a claim already marked valid is still a duplicate target."""
        claims = [make_claim("A"), make_claim("C", status=ClaimStatus.VALID)]
        context = SubmissionValidationContext()

        await CivilDuplicateStrategy(claims_data, fee_details).validate_duplicate_claims(
            claims[0], claims, OFFICE_CODE, context
        )

        assert context.claim_errors("A") == [IN_SUBMISSION]
    @pytest.mark.asyncio
    async def test_missing_key_field_skips(self, claims_data, fee_details):
        """Test claims without a client number are not checked."""
        claims = [
            make_claim("A", unique_client_number=None),
            make_claim("C", unique_client_number=None),
        ]

        context = await check_all(CivilDuplicateStrategy(claims_data, fee_details), claims)

        assert not context.has_errors()
        assert claims_data.history_queries == []

    @pytest.mark.asyncio
    async def test_previous_submission_match(self, claims_data, fee_details):
        """Test a matching historical claim is reported."""
        claims_data.history = [make_claim("old-1", submission_period="JAN-2024")]
        claims = [make_claim("A")]

        context = await check_all(CivilDuplicateStrategy(claims_data, fee_details), claims)

        assert context.claim_errors("A") == [IN_ANOTHER]
        query = claims_data.history_queries[0]
        assert query["office_code"] == OFFICE_CODE
        assert query["claim_statuses"] == HISTORICAL_CLAIM_STATUSES
        assert query["unique_client_number"] == "CLI001"

    @pytest.mark.asyncio
    async def test_history_excludes_current_submission(self, claims_data, fee_details):
        """Test claims of the current submission returned by the search are ignored."""
        claims_data.history = [make_claim("A")]
        claims = [make_claim("A")]

        context = await check_all(CivilDuplicateStrategy(claims_data, fee_details), claims)

        assert not context.has_errors()


class TestCivilDisbursementWindow:
    """Tests for civil disbursement history matching."""

    @pytest.mark.asyncio
    async def test_recent_period_is_duplicate(self, claims_data, fee_details):
        """Test a match two months earlier is a duplicate."""
        claims_data.history = [make_claim("old-1", fee_code="DIS1", submission_period="FEB-2025")]

        context = await check_all(
            CivilDuplicateStrategy(claims_data, fee_details), [make_claim("A", fee_code="DIS1")]
        )

        assert context.claim_errors("A") == [IN_ANOTHER]

    @pytest.mark.asyncio
    async def test_three_months_earlier_is_not_duplicate(self, claims_data, fee_details):
        """Test a match three months earlier is outside the window."""
        claims_data.history = [make_claim("old-1", fee_code="DIS1", submission_period="JAN-2025")]

        context = await check_all(
            CivilDuplicateStrategy(claims_data, fee_details), [make_claim("A", fee_code="DIS1")]
        )

        assert not context.has_errors()


class TestLegalHelpDisbursements:
    """Tests for legal help disbursement matching against the closest concluded claim."""

    @pytest.mark.asyncio
    async def test_concluded_before_cutoff_not_duplicate(self, claims_data, fee_details):
        """Test an anchor concluded before the cutoff does not make a duplicate."""
        claims_data.history = [
            make_claim(
                "old-1",
                fee_code="DIS1",
                submission_period="MAR-2025",
                case_concluded_date="2025-02-01",
            )
        ]
        claim = make_claim("A", fee_code="DIS1", case_concluded_date="2025-03-10")

        context = await check_all(LegalHelpDuplicateStrategy(claims_data, fee_details), [claim])

        assert not context.has_errors()

    @pytest.mark.asyncio
    async def test_concluded_after_cutoff_is_duplicate(self, claims_data, fee_details):
        """Test both concluded dates after the cutoff make a duplicate."""
        claims_data.history = [
            make_claim(
                "old-1",
                fee_code="DIS1",
                submission_period="MAR-2025",
                case_concluded_date="2025-03-01",
            )
        ]
        claim = make_claim("A", fee_code="DIS1", case_concluded_date="2025-03-10")

        context = await check_all(LegalHelpDuplicateStrategy(claims_data, fee_details), [claim])

        assert context.claim_errors("A") == [IN_ANOTHER]

    @pytest.mark.asyncio
    async def test_no_concluded_date(self, claims_data, fee_details):
        """Test a disbursement claim without a concluded date is not matched."""
        claims_data.history = [
            make_claim("old-1", fee_code="DIS1", case_concluded_date="2025-03-01")
        ]

        context = await check_all(
            LegalHelpDuplicateStrategy(claims_data, fee_details), [make_claim("A", fee_code="DIS1")]
        )

        assert not context.has_errors()

    def test_anchor_tie_prefers_later_period(self):
        """Test equally close candidates resolve to the later submission period."""
        earlier = make_claim("old-1", submission_period="FEB-2025", case_concluded_date="2025-03-05")
        later = make_claim("old-2", submission_period="MAR-2025", case_concluded_date="2025-03-15")

        anchor = LegalHelpDuplicateStrategy.select_anchor([earlier, later], date(2025, 3, 10))

        assert anchor.id == "old-2"

    def test_anchor_closest_concluded_date(self):
        """Test the closest concluded date wins over a later period."""
        closest = make_claim("old-1", submission_period="JAN-2025", case_concluded_date="2025-03-09")
        further = make_claim("old-2", submission_period="MAR-2025", case_concluded_date="2025-01-01")

        anchor = LegalHelpDuplicateStrategy.select_anchor([further, closest], date(2025, 3, 10))

        assert anchor.id == "old-1"


class TestOtherAreas:
    """Tests for crime lower and mediation keys."""

    @pytest.mark.asyncio
    async def test_crime_lower_ignores_client_number(self, claims_data, fee_details):
        """Test crime lower matches on fee code and file number only."""
        claims = [
            make_claim("A", unique_client_number="CLI001"),
            make_claim("C", unique_client_number="CLI999"),
        ]

        context = await check_all(CrimeLowerDuplicateStrategy(claims_data, fee_details), claims)

        assert context.claim_errors("A") == [IN_SUBMISSION]

    @pytest.mark.asyncio
    async def test_crime_lower_skips_flagged_claims(self, claims_data, fee_details):
        """Test claims flagged for retry are not checked."""
        claims = [make_claim("A"), make_claim("C")]
        context = SubmissionValidationContext()
        context.flag_for_retry("A")

        await CrimeLowerDuplicateStrategy(claims_data, fee_details).validate_duplicate_claims(
            claims[0], claims, OFFICE_CODE, context
        )

        assert context.claim_errors("A") == []
        assert claims_data.history_queries == []

    @pytest.mark.asyncio
    async def test_mediation_uses_case_id(self, claims_data, fee_details):
        """Test mediation matches on unique case id."""
        claims = [
            make_claim("A", unique_case_id="CASE1", unique_file_number="070722/001"),
            make_claim("C", unique_case_id="CASE1", unique_file_number="080722/001"),
            make_claim("D", unique_case_id="CASE2"),
        ]

        context = await check_all(MediationDuplicateStrategy(claims_data, fee_details), claims)

        assert context.claim_errors("A") == [IN_SUBMISSION]
        assert context.claim_errors("C") == [IN_SUBMISSION]
        assert context.claim_errors("D") == []

    @pytest.mark.asyncio
    async def test_history_failure_propagates(self, fee_details):
        """Test Claims Data failures are raised to the caller."""
        claims_data = MagicMock()
        claims_data.get_claims = AsyncMock(side_effect=ServiceUnavailableError("down", "ClaimsData"))

        with pytest.raises(ServiceUnavailableError):
            await MediationDuplicateStrategy(claims_data, fee_details).validate_duplicate_claims(
                make_claim("A", unique_case_id="CASE1"), [], OFFICE_CODE, SubmissionValidationContext()
            )


class TestStrategySelection:
    """Tests for strategy lookup by area of law."""

    @pytest.mark.parametrize(
        "area,expected",
        [
            (AreaOfLaw.CIVIL, CivilDuplicateStrategy),
            (AreaOfLaw.LEGAL_HELP, LegalHelpDuplicateStrategy),
            (AreaOfLaw.CRIME_LOWER, CrimeLowerDuplicateStrategy),
            (AreaOfLaw.MEDIATION, MediationDuplicateStrategy),
        ],
    )
    def test_known_areas(self, claims_data, fee_details, area, expected):
        """Test each area of law has its own strategy."""
        assert type(duplicate_strategy_for(area, claims_data, fee_details)) is expected

    def test_unknown_area(self, claims_data, fee_details):
        """Test an unknown area of law raises."""
        with pytest.raises(UnknownAreaOfLawError):
            duplicate_strategy_for("FAMILY", claims_data, fee_details)
