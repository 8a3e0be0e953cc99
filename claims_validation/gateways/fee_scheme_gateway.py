"""
Fee Scheme Gateway.

Fee type / category of law lookup and fee calculation on the Fee Scheme
Platform.
"""

from typing import Optional

from claims_validation.core.config import get_validation_settings
from claims_validation.gateways.base import BaseGateway, GatewayConfig
from claims_validation.schemas.fee_scheme import (
    FeeCalculationOutcome,
    FeeCalculationRequest,
    FeeCalculationResponse,
    FeeDetails,
)
from claims_validation.utils.logging import get_logger

logger = get_logger(__name__)


class FeeSchemeGateway(BaseGateway):
    """Gateway for the Fee Scheme Platform."""

    @property
    def gateway_name(self) -> str:
        return "FeeScheme"

    async def get_fee_details(self, fee_code: str) -> FeeDetails:
        """Get fee type and category of law for a fee code (404 raises ResourceNotFoundError)."""
        response = await self._request("GET", f"/fee-details/{fee_code}")
        return FeeDetails.model_validate(response.json())

    async def calculate_fee(self, request: FeeCalculationRequest) -> FeeCalculationOutcome:
        """
        Calculate the fee for a claim.

        Unlike the other calls, HTTP error statuses are returned rather than
        raised so the caller can decide whether the claim should be retried.
        Transport failures still raise.
        """
        response = await self._send(
            "POST",
            "/fee-calculation",
            json=request.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
        outcome = FeeCalculationOutcome(status_code=response.status_code)
        if outcome.is_successful and response.content:
            body = response.json()
            if body:
                outcome.response = FeeCalculationResponse.model_validate(body)
        elif not outcome.is_successful:
            logger.debug(
                f"Fee calculation for claim {request.claim_id} returned {response.status_code}"
            )
        return outcome


# Singleton instance
_fee_scheme_gateway: Optional[FeeSchemeGateway] = None


def get_fee_scheme_gateway() -> FeeSchemeGateway:
    """Get or create the Fee Scheme gateway singleton."""
    global _fee_scheme_gateway
    if _fee_scheme_gateway is None:
        settings = get_validation_settings()
        _fee_scheme_gateway = FeeSchemeGateway(
            GatewayConfig(
                base_url=settings.FEE_SCHEME_BASE_URL,
                timeout_seconds=settings.HTTP_TIMEOUT_SECONDS,
                access_token=settings.API_ACCESS_TOKEN,
            )
        )
    return _fee_scheme_gateway
