"""
Pytest Configuration and Fixtures.
Shared test fixtures and in-memory collaborators for all test modules.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID, uuid4

import pytest

from claims_validation.core.config import reset_validation_settings
from claims_validation.core.enums import ClaimStatus, SubmissionStatus
from claims_validation.gateways.base import ResourceNotFoundError
from claims_validation.schemas.claim import Claim, ClaimPatch
from claims_validation.schemas.fee_scheme import (
    FeeCalculationOutcome,
    FeeCalculationRequest,
    FeeCalculationResponse,
    FeeDetails,
)
from claims_validation.schemas.provider import (
    FirmOfficeSummary,
    ProviderSchedules,
    Schedule,
    ScheduleLine,
)
from claims_validation.schemas.submission import (
    Submission,
    SubmissionClaimRef,
    SubmissionPatch,
    SubmissionsPage,
    SubmissionSummary,
)
from claims_validation.services.fee_details import FeeDetailsLookup
from claims_validation.services.provider_schedule_cache import ProviderScheduleCache

OFFICE_CODE = "0P322F"
TODAY = date(2025, 5, 15)


# =============================================================================
# In-memory Collaborators
# =============================================================================


class FakeClaimsData:
    """Claims Data service held in memory; patches are recorded, not applied."""

    def __init__(self) -> None:
        self.submissions: dict[str, Submission] = {}
        self.claims: dict[str, Claim] = {}
        self.history: list[Claim] = []
        self.existing_submissions: list[SubmissionSummary] = []
        self.submission_patches: list[tuple[str, SubmissionPatch]] = []
        self.claim_patches: list[tuple[str, str, ClaimPatch]] = []
        self.history_queries: list[dict[str, Any]] = []

    def add_submission(self, submission: Submission, claims: list[Claim]) -> None:
        self.submissions[str(submission.submission_id)] = submission
        for claim in claims:
            self.claims[claim.id] = claim

    async def get_submission(self, submission_id: str) -> Submission:
        if submission_id not in self.submissions:
            raise ResourceNotFoundError(f"Submission {submission_id} not found", "ClaimsData", 404)
        return self.submissions[submission_id]

    async def update_submission(self, submission_id: str, patch: SubmissionPatch) -> None:
        self.submission_patches.append((submission_id, patch))

    async def get_submissions(self, offices, area_of_law=None, submission_period=None,
                              statuses=None, page=0, size=None) -> SubmissionsPage:
        return SubmissionsPage(
            content=self.existing_submissions,
            number=page,
            size=len(self.existing_submissions),
            total_pages=1,
            total_elements=len(self.existing_submissions),
        )

    async def get_claim(self, submission_id: str, claim_id: str) -> Claim:
        if claim_id not in self.claims:
            raise ResourceNotFoundError(f"Claim {claim_id} not found", "ClaimsData", 404)
        return self.claims[claim_id]

    async def update_claim(self, submission_id: str, claim_id: str, patch: ClaimPatch) -> None:
        self.claim_patches.append((submission_id, claim_id, patch))

    async def get_claims(self, office_code: str, **filters: Any) -> list[Claim]:
        self.history_queries.append(dict(filters, office_code=office_code))
        keys = ("fee_code", "unique_file_number", "unique_client_number", "unique_case_id")
        return [
            claim
            for claim in self.history
            if all(
                filters.get(key) is None or getattr(claim, key) == filters[key] for key in keys
            )
        ]

    def patched_claim_statuses(self) -> dict[str, ClaimStatus]:
        return {claim_id: patch.status for _, claim_id, patch in self.claim_patches}


class FakeFeeScheme:
    """Fee Scheme Platform with configurable fee details and calculation outcomes."""

    def __init__(self) -> None:
        self.details: dict[str, FeeDetails] = {}
        self.outcomes: dict[str, FeeCalculationOutcome] = {}
        self.detail_calls: list[str] = []
        self.calculation_requests: list[FeeCalculationRequest] = []

    async def get_fee_details(self, fee_code: str) -> FeeDetails:
        self.detail_calls.append(fee_code)
        if fee_code not in self.details:
            raise ResourceNotFoundError(f"Fee code {fee_code} not found", "FeeScheme", 404)
        return self.details[fee_code]

    async def calculate_fee(self, request: FeeCalculationRequest) -> FeeCalculationOutcome:
        self.calculation_requests.append(request)
        if request.fee_code in self.outcomes:
            return self.outcomes[request.fee_code]
        return FeeCalculationOutcome(
            status_code=200,
            response=FeeCalculationResponse(
                fee_code=request.fee_code,
                claim_id=request.claim_id,
                fee_calculation={"totalAmount": 150.0},
            ),
        )


class FakeProviderDetails:
    """Provider Details service returning one fixed answer."""

    def __init__(self, schedules: Optional[ProviderSchedules] = None) -> None:
        self.schedules = schedules
        self.calls: list[tuple[str, Optional[str], Optional[date]]] = []

    async def get_schedules(self, office_code, area_of_law=None, effective_date=None):
        self.calls.append((office_code, area_of_law, effective_date))
        return self.schedules


class MutableClock:
    """Clock for cache expiry tests."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2025, 5, 15, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


# =============================================================================
# Builders
# =============================================================================


def make_schedules(
    start: Optional[date] = date(2024, 1, 1),
    end: Optional[date] = date(2026, 3, 31),
    categories: tuple[str, ...] = ("MAT",),
    office_code: str = OFFICE_CODE,
) -> ProviderSchedules:
    return ProviderSchedules(
        office=FirmOfficeSummary(firm_office_code=office_code),
        schedules=[
            Schedule(
                schedule_number=f"{office_code}/{start}",
                schedule_start_date=start,
                schedule_end_date=end,
                schedule_lines=[ScheduleLine(category_of_law=category) for category in categories],
            )
        ],
    )


def make_claim(claim_id: str = "claim-1", **overrides: Any) -> Claim:
    data: dict[str, Any] = {
        "id": claim_id,
        "submission_period": "APR-2025",
        "status": ClaimStatus.READY_TO_PROCESS,
        "fee_code": "ABC1",
        "unique_file_number": "070722/001",
        "unique_client_number": "CLI001",
        "case_start_date": "2024-06-01",
        "stage_reached_code": "A1",
        "matter_type_code": "FAMA:FPET",
    }
    data.update(overrides)
    return Claim(**data)


# Remaining fields the legal help mandatory-field check requires
LEGAL_HELP_CLAIM_FIELDS: dict[str, Any] = {
    "case_concluded_date": "2025-04-10",
    "outcome_code": "IA",
    "schedule_reference": "0P322F/2024/01",
    "case_id": "001",
    "case_reference_number": "REF001",
    "client_forename": "Jane",
    "client_surname": "Doe",
    "client_date_of_birth": "1980-01-01",
    "client_postcode": "SW1A 1AA",
    "gender_code": "F",
    "ethnicity_code": "01",
    "disability_code": "NCD",
    "advice_time": 60,
    "travel_time": 0,
    "waiting_time": 0,
    "net_profit_costs_amount": Decimal("100.00"),
    "net_counsel_costs_amount": Decimal("0.00"),
    "travel_waiting_costs_amount": Decimal("0.00"),
}


def make_legal_help_claim(claim_id: str = "claim-1", **overrides: Any) -> Claim:
    return make_claim(claim_id, **{**LEGAL_HELP_CLAIM_FIELDS, **overrides})


def make_submission(
    claims: Optional[list[Claim]] = None,
    submission_id: Optional[UUID] = None,
    **overrides: Any,
) -> Submission:
    data: dict[str, Any] = {
        "submission_id": submission_id or uuid4(),
        "office_account_number": OFFICE_CODE,
        "area_of_law": "LEGAL HELP",
        "submission_period": "APR-2025",
        "status": SubmissionStatus.READY_FOR_VALIDATION,
        "is_nil_submission": False,
        "claims": [
            SubmissionClaimRef(claim_id=claim.id, status=claim.status) for claim in claims or []
        ],
    }
    data.update(overrides)
    return Submission(**data)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Isolate tests from VALIDATION_* environment variables."""
    monkeypatch.delenv("VALIDATION_MINIMUM_SUBMISSION_PERIOD", raising=False)
    reset_validation_settings()
    yield
    reset_validation_settings()


@pytest.fixture
def today():
    """Fixed 'today' used by period and date checks."""
    return lambda: TODAY


@pytest.fixture
def claims_data():
    return FakeClaimsData()


@pytest.fixture
def fee_scheme():
    scheme = FakeFeeScheme()
    scheme.details["ABC1"] = FeeDetails(fee_code="ABC1", fee_type="FIXED", category_of_law_code="MAT")
    scheme.details["DIS1"] = FeeDetails(fee_code="DIS1", fee_type="DISB_ONLY", category_of_law_code="MAT")
    return scheme


@pytest.fixture
def provider_details():
    return FakeProviderDetails(make_schedules())


@pytest.fixture
def schedule_cache(provider_details):
    return ProviderScheduleCache(
        gateway=provider_details,
        ttl_seconds=3600,
        retry_attempts=3,
        retry_delay_seconds=0,
        retry_backoff_factor=1.0,
    )


@pytest.fixture
def fee_details(fee_scheme):
    return FeeDetailsLookup(fee_scheme)


# Configure pytest markers
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "api: mark test as an API test")
    config.addinivalue_line("markers", "slow: mark test as slow running")
