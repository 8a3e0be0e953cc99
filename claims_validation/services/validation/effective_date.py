"""
Claim Effective Date Resolution.

The effective date is the single date a claim is judged against (contract
coverage, disbursement windows). It is derived from the first present,
non-blank candidate field; a present field that does not parse is an error
rather than a reason to try the next candidate.
"""

from datetime import date
from typing import Callable, Optional

from claims_validation.schemas.claim import Claim
from claims_validation.utils.dates import is_blank, parse_iso_date, parse_unique_file_number
from claims_validation.utils.errors import InvalidDateError

# Fee code of "preparation of defence" claims, dated by their conclusion
PREPARATION_OF_DEFENCE_FEE_CODE = "PROD"

_Candidate = tuple[str, Callable[[Claim], Optional[str]], Callable[[str, str], date]]


def _iso(value: str, label: str) -> date:
    return parse_iso_date(value, label)


def _ufn(value: str, label: str) -> date:
    return parse_unique_file_number(value)


PREPARATION_OF_DEFENCE_CANDIDATES: tuple[_Candidate, ...] = (
    ("case concluded date", lambda claim: claim.case_concluded_date, _iso),
    ("case start date", lambda claim: claim.case_start_date, _iso),
)

STANDARD_CANDIDATES: tuple[_Candidate, ...] = (
    ("case start date", lambda claim: claim.case_start_date, _iso),
    ("representation order date", lambda claim: claim.representation_order_date, _iso),
    ("unique file number", lambda claim: claim.unique_file_number, _ufn),
)


def get_effective_date(claim: Claim) -> date:
    """
    Resolve the effective date of a claim.

    Raises:
        InvalidDateError: if no candidate is present, or the first present
            candidate cannot be parsed
    """
    if claim.fee_code == PREPARATION_OF_DEFENCE_FEE_CODE:
        candidates = PREPARATION_OF_DEFENCE_CANDIDATES
    else:
        candidates = STANDARD_CANDIDATES

    for label, getter, parser in candidates:
        value = getter(claim)
        if is_blank(value):
            continue
        return parser(value.strip(), label)  # type: ignore[union-attr]

    raise InvalidDateError("No fields available to determine effective date")


def try_get_effective_date(claim: Claim) -> Optional[date]:
    """Resolve the effective date, returning None instead of raising."""
    try:
        return get_effective_date(claim)
    except InvalidDateError:
        return None
