"""
Pydantic Schemas for Claims Data Claims.
Source: Claims Data service claim endpoints
Verified: 2025-12-18
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from claims_validation.core.enums import ClaimStatus
from claims_validation.schemas.submission import ValidationMessagePatch


class Claim(BaseModel):
    """
    A claim as held by the Claims Data service.

    Dates are carried as the raw yyyy-MM-dd strings that were submitted;
    parsing happens in the validators so bad values become findings.
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    submission_id: Optional[str] = None
    submission_period: Optional[str] = None
    status: Optional[ClaimStatus] = None

    # Identity
    fee_code: Optional[str] = None
    unique_file_number: Optional[str] = None
    unique_client_number: Optional[str] = None
    unique_case_id: Optional[str] = None
    stage_reached_code: Optional[str] = None
    matter_type_code: Optional[str] = None
    outcome_code: Optional[str] = None
    schedule_reference: Optional[str] = None
    case_id: Optional[str] = None
    case_reference_number: Optional[str] = None

    # Client
    client_forename: Optional[str] = None
    client_surname: Optional[str] = None
    client_postcode: Optional[str] = None
    gender_code: Optional[str] = None
    ethnicity_code: Optional[str] = None
    disability_code: Optional[str] = None
    is_legally_aided: Optional[bool] = None

    # Mediation
    outreach_location: Optional[str] = None
    referral_source: Optional[str] = None

    # Time recorded, in minutes
    advice_time: Optional[int] = None
    travel_time: Optional[int] = None
    waiting_time: Optional[int] = None

    # Case dates
    case_start_date: Optional[str] = None
    case_concluded_date: Optional[str] = None
    transfer_date: Optional[str] = None
    representation_order_date: Optional[str] = None
    client_date_of_birth: Optional[str] = None
    client_2_date_of_birth: Optional[str] = None

    # Amounts
    net_profit_costs_amount: Optional[Decimal] = None
    net_disbursement_amount: Optional[Decimal] = None
    net_counsel_costs_amount: Optional[Decimal] = None
    travel_waiting_costs_amount: Optional[Decimal] = None
    disbursements_vat_amount: Optional[Decimal] = None
    is_vat_applicable: Optional[bool] = None


class ClaimsPage(BaseModel):
    """One page of claim search results."""

    model_config = ConfigDict(extra="ignore")

    content: list[Claim] = Field(default_factory=list)
    number: int = 0
    size: int = 0
    total_pages: int = 0
    total_elements: int = 0


class ClaimPatch(BaseModel):
    """Status and validation messages written back for one claim."""

    id: str
    status: ClaimStatus
    validation_messages: list[ValidationMessagePatch] = Field(default_factory=list)
