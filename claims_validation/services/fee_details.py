"""
Fee Details Lookup.

Per-run memo over the Fee Scheme fee details endpoint, so that each distinct
fee code in a submission is fetched at most once. A 404 is remembered as
"no details"; other failures are remembered and re-raised on every lookup
for that fee code.
"""

import asyncio
from typing import Iterable, Optional

from claims_validation.gateways.base import GatewayError, ResourceNotFoundError
from claims_validation.gateways.fee_scheme_gateway import FeeSchemeGateway
from claims_validation.schemas.fee_scheme import FeeDetails
from claims_validation.utils.dates import is_blank
from claims_validation.utils.logging import get_logger

logger = get_logger(__name__)


class FeeDetailsLookup:
    """Fee details by fee code, fetched lazily and cached for one validation run."""

    def __init__(self, gateway: FeeSchemeGateway):
        self._gateway = gateway
        self._details: dict[str, Optional[FeeDetails]] = {}
        self._failures: dict[str, GatewayError] = {}

    async def prefetch(self, fee_codes: Iterable[Optional[str]]) -> None:
        """Fetch every distinct, non-blank fee code concurrently."""
        distinct = sorted({code for code in fee_codes if not is_blank(code)})  # type: ignore[misc]
        await asyncio.gather(*(self._load(code) for code in distinct))

    async def get(self, fee_code: Optional[str]) -> Optional[FeeDetails]:
        """
        Fee details for a fee code.

        Returns:
            The details, or None when the fee code is blank or unknown

        Raises:
            GatewayError: if the Fee Scheme service could not be queried
        """
        if is_blank(fee_code):
            return None
        await self._load(fee_code)  # type: ignore[arg-type]
        if fee_code in self._failures:
            raise self._failures[fee_code]
        return self._details.get(fee_code)  # type: ignore[arg-type]

    async def category_of_law(self, fee_code: Optional[str]) -> Optional[str]:
        details = await self.get(fee_code)
        return details.category_of_law_code if details else None

    async def is_disbursement(self, fee_code: Optional[str]) -> bool:
        details = await self.get(fee_code)
        return details is not None and details.is_disbursement_only

    async def _load(self, fee_code: str) -> None:
        if fee_code in self._details or fee_code in self._failures:
            return
        try:
            self._details[fee_code] = await self._gateway.get_fee_details(fee_code)
        except ResourceNotFoundError:
            logger.debug(f"No fee details for fee code {fee_code}")
            self._details[fee_code] = None
        except GatewayError as e:
            logger.error(f"Fee details lookup failed for fee code {fee_code}: {e}")
            self._failures[fee_code] = e
