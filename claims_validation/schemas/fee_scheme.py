"""
Pydantic Schemas for the Fee Scheme Platform.
Source: Fee Scheme Platform /fee-details and /fee-calculation endpoints
Verified: 2025-12-18
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# Fee type of claims that only carry disbursements
DISBURSEMENT_ONLY_FEE_TYPE = "DISB_ONLY"


class FeeSchemeModel(BaseModel):
    """Base model for the camelCase Fee Scheme payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class FeeDetails(FeeSchemeModel):
    """Fee type and category of law for a fee code."""

    fee_code: Optional[str] = None
    fee_type: Optional[str] = None
    category_of_law_code: Optional[str] = None
    description: Optional[str] = None

    @property
    def is_disbursement_only(self) -> bool:
        """Check if the fee code only covers disbursements."""
        return self.fee_type == DISBURSEMENT_ONLY_FEE_TYPE


class FeeCalculationRequest(FeeSchemeModel):
    """Inputs for a fee calculation."""

    fee_code: str
    claim_id: str
    start_date: Optional[date] = None
    unique_file_number: Optional[str] = None
    net_profit_costs: Optional[Decimal] = None
    net_disbursement_amount: Optional[Decimal] = None
    disbursement_vat_amount: Optional[Decimal] = None
    vat_indicator: Optional[bool] = None


class FeeCalculationWarning(FeeSchemeModel):
    """Validation warning raised by the fee calculation."""

    warning_code: Optional[str] = None
    warning_description: Optional[str] = None


class FeeCalculationResponse(FeeSchemeModel):
    """Result of a fee calculation."""

    fee_code: Optional[str] = None
    claim_id: Optional[str] = None
    fee_calculation: Optional[dict[str, Any]] = None
    warning: Optional[FeeCalculationWarning] = None


@dataclass
class FeeCalculationOutcome:
    """HTTP status and optional body of a fee calculation call."""

    status_code: int
    response: Optional[FeeCalculationResponse] = None

    @property
    def is_successful(self) -> bool:
        """Check for a 2xx status."""
        return 200 <= self.status_code < 300
