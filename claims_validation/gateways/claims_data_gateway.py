"""
Claims Data Gateway.

Async client for the Claims Data service, which owns submissions, claims
and their statuses.
"""

from typing import Any, Optional, Sequence

from claims_validation.core.config import get_validation_settings
from claims_validation.core.enums import ClaimStatus, SubmissionStatus
from claims_validation.gateways.base import BaseGateway, GatewayConfig
from claims_validation.schemas.claim import Claim, ClaimPatch, ClaimsPage
from claims_validation.schemas.submission import Submission, SubmissionPatch, SubmissionsPage
from claims_validation.utils.logging import get_logger

logger = get_logger(__name__)


def _enum_values(values: Optional[Sequence[Any]]) -> Optional[list[str]]:
    if not values:
        return None
    return [getattr(value, "value", value) for value in values]


def _clean_params(params: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in params.items() if value is not None}


class ClaimsDataGateway(BaseGateway):
    """Gateway for submission and claim CRUD on the Claims Data service."""

    @property
    def gateway_name(self) -> str:
        return "ClaimsData"

    # =========================================================================
    # Submissions
    # =========================================================================

    async def get_submission(self, submission_id: str) -> Submission:
        response = await self._request("GET", f"/submissions/{submission_id}")
        return Submission.model_validate(response.json())

    async def update_submission(self, submission_id: str, patch: SubmissionPatch) -> None:
        await self._request(
            "PATCH",
            f"/submissions/{submission_id}",
            json=patch.model_dump(mode="json"),
        )
        logger.debug(f"Submission {submission_id} patched to {patch.status.value}")

    async def get_submissions(
        self,
        offices: Sequence[str],
        area_of_law: Optional[str] = None,
        submission_period: Optional[str] = None,
        statuses: Optional[Sequence[SubmissionStatus]] = None,
        page: int = 0,
        size: Optional[int] = None,
    ) -> SubmissionsPage:
        """Search submissions by office, area of law, period and status."""
        params = _clean_params(
            {
                "offices": list(offices),
                "area_of_law": area_of_law,
                "submission_period": submission_period,
                "submission_statuses": _enum_values(statuses),
                "page": page,
                "size": size or get_validation_settings().SUBMISSION_PAGE_SIZE,
            }
        )
        response = await self._request("GET", "/submissions", params=params)
        return SubmissionsPage.model_validate(response.json())

    # =========================================================================
    # Claims
    # =========================================================================

    async def get_claim(self, submission_id: str, claim_id: str) -> Claim:
        response = await self._request(
            "GET", f"/submissions/{submission_id}/claims/{claim_id}"
        )
        return Claim.model_validate(response.json())

    async def update_claim(self, submission_id: str, claim_id: str, patch: ClaimPatch) -> None:
        await self._request(
            "PATCH",
            f"/submissions/{submission_id}/claims/{claim_id}",
            json=patch.model_dump(mode="json"),
        )

    async def get_claims_page(
        self,
        office_code: str,
        fee_code: Optional[str] = None,
        unique_file_number: Optional[str] = None,
        unique_client_number: Optional[str] = None,
        unique_case_id: Optional[str] = None,
        claim_statuses: Optional[Sequence[ClaimStatus]] = None,
        submission_statuses: Optional[Sequence[SubmissionStatus]] = None,
        page: int = 0,
        size: Optional[int] = None,
    ) -> ClaimsPage:
        params = _clean_params(
            {
                "office_code": office_code,
                "fee_code": fee_code,
                "unique_file_number": unique_file_number,
                "unique_client_number": unique_client_number,
                "unique_case_id": unique_case_id,
                "claim_statuses": _enum_values(claim_statuses),
                "submission_statuses": _enum_values(submission_statuses),
                "page": page,
                "size": size or get_validation_settings().SUBMISSION_PAGE_SIZE,
            }
        )
        response = await self._request("GET", "/claims", params=params)
        return ClaimsPage.model_validate(response.json())

    async def get_claims(
        self,
        office_code: str,
        fee_code: Optional[str] = None,
        unique_file_number: Optional[str] = None,
        unique_client_number: Optional[str] = None,
        unique_case_id: Optional[str] = None,
        claim_statuses: Optional[Sequence[ClaimStatus]] = None,
        submission_statuses: Optional[Sequence[SubmissionStatus]] = None,
    ) -> list[Claim]:
        """Fetch every page of claims matching the search."""
        claims: list[Claim] = []
        page = 0
        while True:
            result = await self.get_claims_page(
                office_code,
                fee_code=fee_code,
                unique_file_number=unique_file_number,
                unique_client_number=unique_client_number,
                unique_case_id=unique_case_id,
                claim_statuses=claim_statuses,
                submission_statuses=submission_statuses,
                page=page,
            )
            claims.extend(result.content)
            page += 1
            if page >= result.total_pages or not result.content:
                return claims


# Singleton instance
_claims_data_gateway: Optional[ClaimsDataGateway] = None


def get_claims_data_gateway() -> ClaimsDataGateway:
    """Get or create the Claims Data gateway singleton."""
    global _claims_data_gateway
    if _claims_data_gateway is None:
        settings = get_validation_settings()
        _claims_data_gateway = ClaimsDataGateway(
            GatewayConfig(
                base_url=settings.CLAIMS_DATA_BASE_URL,
                timeout_seconds=settings.HTTP_TIMEOUT_SECONDS,
                access_token=settings.API_ACCESS_TOKEN,
            )
        )
    return _claims_data_gateway
