"""
Gateways to the collaborator REST services.
"""

from claims_validation.gateways.base import (
    BadRequestError,
    BaseGateway,
    GatewayConfig,
    GatewayError,
    ResourceNotFoundError,
    ServiceTimeoutError,
    ServiceUnavailableError,
    TRANSIENT_ERRORS,
    with_retry,
)
from claims_validation.gateways.claims_data_gateway import (
    ClaimsDataGateway,
    get_claims_data_gateway,
)
from claims_validation.gateways.fee_scheme_gateway import (
    FeeSchemeGateway,
    get_fee_scheme_gateway,
)
from claims_validation.gateways.provider_details_gateway import (
    ProviderDetailsGateway,
    get_provider_details_gateway,
)

__all__ = [
    "BadRequestError",
    "BaseGateway",
    "ClaimsDataGateway",
    "FeeSchemeGateway",
    "GatewayConfig",
    "GatewayError",
    "ProviderDetailsGateway",
    "ResourceNotFoundError",
    "ServiceTimeoutError",
    "ServiceUnavailableError",
    "TRANSIENT_ERRORS",
    "get_claims_data_gateway",
    "get_fee_scheme_gateway",
    "get_provider_details_gateway",
    "with_retry",
]
