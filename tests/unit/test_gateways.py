"""
Unit tests for collaborator gateways using httpx mock transports.
"""

import json
from datetime import date
from uuid import uuid4

import httpx
import pytest

from claims_validation.core.enums import ClaimStatus, SubmissionStatus
from claims_validation.gateways.base import (
    BadRequestError,
    GatewayConfig,
    ResourceNotFoundError,
    ServiceTimeoutError,
    ServiceUnavailableError,
    with_retry,
)
from claims_validation.gateways.claims_data_gateway import ClaimsDataGateway
from claims_validation.gateways.fee_scheme_gateway import FeeSchemeGateway
from claims_validation.gateways.provider_details_gateway import ProviderDetailsGateway
from claims_validation.schemas.claim import ClaimPatch
from claims_validation.schemas.fee_scheme import FeeCalculationRequest

CONFIG = GatewayConfig(base_url="http://collaborator.test/api", access_token="token-123")


def gateway_with(gateway_class, handler):
    return gateway_class(CONFIG, transport=httpx.MockTransport(handler))


class TestStatusMapping:
    """Tests for HTTP status to gateway error mapping."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status_code,expected",
        [
            (404, ResourceNotFoundError),
            (400, BadRequestError),
            (409, ServiceUnavailableError),
            (429, ServiceUnavailableError),
            (503, ServiceUnavailableError),
        ],
    )
    async def test_error_statuses(self, status_code, expected):
        """Test non-2xx statuses raise the matching error."""
        gateway = gateway_with(ClaimsDataGateway, lambda request: httpx.Response(status_code))

        with pytest.raises(expected) as exc_info:
            await gateway.get_submission("abc")

        assert exc_info.value.status_code == status_code
        assert exc_info.value.service == "ClaimsData"
        await gateway.close()

    @pytest.mark.asyncio
    async def test_connect_error(self):
        """Test transport failures become ServiceUnavailableError."""

        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        gateway = gateway_with(ClaimsDataGateway, handler)

        with pytest.raises(ServiceUnavailableError):
            await gateway.get_submission("abc")
        await gateway.close()

    @pytest.mark.asyncio
    async def test_timeout(self):
        """Test timeouts become ServiceTimeoutError."""

        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        gateway = gateway_with(ClaimsDataGateway, handler)

        with pytest.raises(ServiceTimeoutError):
            await gateway.get_submission("abc")
        await gateway.close()


class TestClaimsDataGateway:
    """Tests for the Claims Data gateway."""

    @pytest.mark.asyncio
    async def test_get_submission(self):
        """Test a submission is parsed and the bearer token is sent."""
        submission_id = uuid4()
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("Authorization")
            seen["path"] = request.url.path
            return httpx.Response(
                200,
                json={
                    "submission_id": str(submission_id),
                    "office_account_number": "0P322F",
                    "area_of_law": "CIVIL",
                    "status": "READY_FOR_VALIDATION",
                    "claims": [{"claim_id": "c1", "status": "READY_TO_PROCESS"}],
                },
            )

        async with gateway_with(ClaimsDataGateway, handler) as gateway:
            submission = await gateway.get_submission(str(submission_id))

        assert submission.submission_id == submission_id
        assert submission.status == SubmissionStatus.READY_FOR_VALIDATION
        assert submission.claims[0].status == ClaimStatus.READY_TO_PROCESS
        assert seen["auth"] == "Bearer token-123"
        assert seen["path"] == f"/api/submissions/{submission_id}"

    @pytest.mark.asyncio
    async def test_update_claim_sends_patch(self):
        """Test claim patches are sent as JSON."""
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["body"] = json.loads(request.content)
            return httpx.Response(204)

        async with gateway_with(ClaimsDataGateway, handler) as gateway:
            await gateway.update_claim("s1", "c1", ClaimPatch(id="c1", status=ClaimStatus.VALID))

        assert seen["method"] == "PATCH"
        assert seen["body"] == {"id": "c1", "status": "VALID", "validation_messages": []}

    @pytest.mark.asyncio
    async def test_get_claims_reads_every_page(self):
        """Test claim searches follow pagination."""
        pages = []

        def handler(request):
            page = int(request.url.params["page"])
            pages.append(page)
            assert request.url.params.get_list("claim_statuses") == ["VALID"]
            return httpx.Response(
                200,
                json={"content": [{"id": f"c{page}"}], "number": page, "total_pages": 2},
            )

        async with gateway_with(ClaimsDataGateway, handler) as gateway:
            claims = await gateway.get_claims(
                "0P322F", fee_code="ABC1", claim_statuses=[ClaimStatus.VALID]
            )

        assert [claim.id for claim in claims] == ["c0", "c1"]
        assert pages == [0, 1]


class TestProviderDetailsGateway:
    """Tests for the Provider Details gateway."""

    @pytest.mark.asyncio
    async def test_schedules_parsed(self):
        """Test camelCase schedules are parsed and the effective date is formatted."""
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(
                200,
                json={
                    "office": {"firmOfficeCode": "0P322F"},
                    "schedules": [
                        {
                            "scheduleStartDate": "2024-04-01",
                            "scheduleEndDate": "2025-03-31",
                            "scheduleLines": [{"categoryOfLaw": "MAT"}],
                        }
                    ],
                },
            )

        async with gateway_with(ProviderDetailsGateway, handler) as gateway:
            schedules = await gateway.get_schedules("0P322F", "LEGAL HELP", date(2024, 6, 1))

        assert schedules.categories_of_law() == ["MAT"]
        assert schedules.schedules[0].schedule_end_date == date(2025, 3, 31)
        assert seen["params"] == {"areaOfLaw": "LEGAL HELP", "effectiveDate": "01-06-2024"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [204, 404])
    async def test_no_schedules(self, status_code):
        """Test 204 and 404 mean the office has no schedules."""
        async with gateway_with(
            ProviderDetailsGateway, lambda request: httpx.Response(status_code)
        ) as gateway:
            assert await gateway.get_schedules("0P322F") is None


class TestFeeSchemeGateway:
    """Tests for the Fee Scheme gateway."""

    @pytest.mark.asyncio
    async def test_fee_details(self):
        """Test fee details are parsed from camelCase."""
        payload = {"feeCode": "DIS1", "feeType": "DISB_ONLY", "categoryOfLawCode": "MAT"}

        async with gateway_with(
            FeeSchemeGateway, lambda request: httpx.Response(200, json=payload)
        ) as gateway:
            details = await gateway.get_fee_details("DIS1")

        assert details.category_of_law_code == "MAT"
        assert details.is_disbursement_only

    @pytest.mark.asyncio
    async def test_fee_details_not_found(self):
        """Test an unknown fee code raises ResourceNotFoundError."""
        async with gateway_with(FeeSchemeGateway, lambda request: httpx.Response(404)) as gateway:
            with pytest.raises(ResourceNotFoundError):
                await gateway.get_fee_details("ZZZ9")

    @pytest.mark.asyncio
    async def test_calculation_error_status_returned(self):
        """Test a failing calculation is returned, not raised."""
        async with gateway_with(FeeSchemeGateway, lambda request: httpx.Response(500)) as gateway:
            outcome = await gateway.calculate_fee(FeeCalculationRequest(fee_code="ABC1", claim_id="c1"))

        assert outcome.status_code == 500
        assert not outcome.is_successful
        assert outcome.response is None

    @pytest.mark.asyncio
    async def test_calculation_request_and_warning(self):
        """Test the request is sent in camelCase and warnings are parsed."""
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "feeCode": "ABC1",
                    "claimId": "c1",
                    "warning": {"warningCode": "W1", "warningDescription": "Too high"},
                },
            )

        request = FeeCalculationRequest(fee_code="ABC1", claim_id="c1", start_date=date(2024, 6, 1))
        async with gateway_with(FeeSchemeGateway, handler) as gateway:
            outcome = await gateway.calculate_fee(request)

        assert seen["body"] == {"feeCode": "ABC1", "claimId": "c1", "startDate": "2024-06-01"}
        assert outcome.response.warning.warning_description == "Too high"


class TestWithRetry:
    """Tests for the retry decorator."""

    @pytest.mark.asyncio
    async def test_retries_until_success(self):
        """Test a transient failure is retried."""
        calls = []

        @with_retry(max_attempts=3, delay=0, exceptions=(ServiceUnavailableError,))
        async def flaky():
            calls.append(1)
            if len(calls) < 2:
                raise ServiceUnavailableError("down")
            return "ok"

        assert await flaky() == "ok"
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_other_errors_not_retried(self):
        """Test errors outside the retry list are raised immediately."""
        calls = []

        @with_retry(max_attempts=3, delay=0, exceptions=(ServiceUnavailableError,))
        async def rejected():
            calls.append(1)
            raise BadRequestError("bad")

        with pytest.raises(BadRequestError):
            await rejected()
        assert len(calls) == 1
