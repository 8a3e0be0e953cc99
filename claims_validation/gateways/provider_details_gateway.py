"""
Provider Details Gateway.

Looks up the contract schedules of a provider office. A 204 (or an empty
body) means the office has no schedules for the requested criteria.
"""

from datetime import date
from typing import Optional

from claims_validation.core.config import get_validation_settings
from claims_validation.gateways.base import BaseGateway, GatewayConfig, ResourceNotFoundError
from claims_validation.schemas.provider import ProviderSchedules
from claims_validation.utils.logging import get_logger

logger = get_logger(__name__)

EFFECTIVE_DATE_FORMAT = "%d-%m-%Y"


class ProviderDetailsGateway(BaseGateway):
    """Gateway for the Provider Details office schedules endpoint."""

    @property
    def gateway_name(self) -> str:
        return "ProviderDetails"

    async def get_schedules(
        self,
        office_code: str,
        area_of_law: Optional[str] = None,
        effective_date: Optional[date] = None,
    ) -> Optional[ProviderSchedules]:
        """
        Get the contract schedules for an office.

        Returns:
            The schedules, or None when the office has none
        """
        params = {}
        if area_of_law:
            params["areaOfLaw"] = area_of_law
        if effective_date:
            params["effectiveDate"] = effective_date.strftime(EFFECTIVE_DATE_FORMAT)

        try:
            response = await self._request(
                "GET", f"/provider-offices/{office_code}/schedules", params=params
            )
        except ResourceNotFoundError:
            logger.debug(f"No provider office found for {office_code}")
            return None

        if response.status_code == 204 or not response.content:
            logger.debug(
                f"No schedules for office {office_code} (areaOfLaw={area_of_law}, "
                f"effectiveDate={effective_date})"
            )
            return None
        return ProviderSchedules.model_validate(response.json())


# Singleton instance
_provider_details_gateway: Optional[ProviderDetailsGateway] = None


def get_provider_details_gateway() -> ProviderDetailsGateway:
    """Get or create the Provider Details gateway singleton."""
    global _provider_details_gateway
    if _provider_details_gateway is None:
        settings = get_validation_settings()
        _provider_details_gateway = ProviderDetailsGateway(
            GatewayConfig(
                base_url=settings.PROVIDER_DETAILS_BASE_URL,
                timeout_seconds=settings.HTTP_TIMEOUT_SECONDS,
                access_token=settings.API_ACCESS_TOKEN,
                retry_attempts=settings.PROVIDER_DETAILS_RETRY_ATTEMPTS,
                retry_delay_seconds=settings.PROVIDER_DETAILS_RETRY_DELAY_SECONDS,
                retry_backoff_factor=settings.PROVIDER_DETAILS_RETRY_BACKOFF,
            )
        )
    return _provider_details_gateway
