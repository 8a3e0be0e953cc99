"""
Date Utilities
Submission period, unique file number and display formatting helpers.

Submission periods are represented as the first day of the month they name.
"""

import calendar
import re
from datetime import date, datetime
from typing import Optional

from claims_validation.utils.errors import InvalidDateError

ISO_DATE_FORMAT = "%Y-%m-%d"
DISPLAY_DATE_FORMAT = "%d/%m/%Y"

# Fixed English names so parsing and messages do not depend on the process locale
MONTH_ABBREVIATIONS = (
    "JAN", "FEB", "MAR", "APR", "MAY", "JUN",
    "JUL", "AUG", "SEP", "OCT", "NOV", "DEC",
)
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

SUBMISSION_PERIOD_PATTERN = re.compile(r"^([A-Za-z]{3})-(\d{4})$")
UNIQUE_FILE_NUMBER_PATTERN = re.compile(r"^(\d{2})(\d{2})(\d{2})/\d{3}$")

# Two-digit UFN years at or above this value belong to the 1900s
UFN_CENTURY_PIVOT = 50

# Disbursement claims look back / forward this many calendar months
MAXIMUM_MONTHS_DIFFERENCE = 3
CUTOFF_DAY_OF_MONTH = 20


# =============================================================================
# Parsing
# =============================================================================


def is_blank(value: Optional[str]) -> bool:
    """True for None, empty or whitespace-only strings."""
    return value is None or not value.strip()


def parse_iso_date(value: str, field: Optional[str] = None) -> date:
    """Parse a yyyy-MM-dd string, raising InvalidDateError on failure."""
    try:
        return datetime.strptime(value.strip(), ISO_DATE_FORMAT).date()
    except (ValueError, AttributeError) as e:
        label = field or "date"
        raise InvalidDateError(f"Invalid date format for {label}: {value}", field) from e


def parse_submission_period(value: str) -> date:
    """
    Parse a case-insensitive MMM-yyyy period (e.g. "MAY-2025").

    Returns:
        First day of the named month

    Raises:
        InvalidDateError: if the value is not a valid period
    """
    match = SUBMISSION_PERIOD_PATTERN.match(value.strip()) if value else None
    if not match:
        raise InvalidDateError(f"Invalid submission period: {value}", "submission_period")
    abbreviation, year = match.groups()
    try:
        month = MONTH_ABBREVIATIONS.index(abbreviation.upper()) + 1
    except ValueError as e:
        raise InvalidDateError(
            f"Invalid submission period: {value}", "submission_period"
        ) from e
    return date(int(year), month, 1)


def try_parse_submission_period(value: Optional[str]) -> Optional[date]:
    """Parse a submission period, returning None when absent or malformed."""
    if is_blank(value):
        return None
    try:
        return parse_submission_period(value)  # type: ignore[arg-type]
    except InvalidDateError:
        return None


def parse_unique_file_number(unique_file_number: str) -> date:
    """
    Derive a date from a unique file number in DDMMYY/NNN format.

    Two-digit years of 50 and above map to the 1900s, others to the 2000s.

    Example:
        >>> parse_unique_file_number("251215/654")
        datetime.date(2015, 12, 25)
    """
    match = UNIQUE_FILE_NUMBER_PATTERN.match(unique_file_number.strip())
    if not match:
        raise InvalidDateError(
            f"Invalid format for unique file number: {unique_file_number}. "
            "Expected format: DDMMYY/NNN",
            "unique_file_number",
        )
    day, month, year = (int(part) for part in match.groups())
    century = 1900 if year >= UFN_CENTURY_PIVOT else 2000
    try:
        return date(century + year, month, day)
    except ValueError as e:
        raise InvalidDateError(
            f"Invalid date in unique file number: {unique_file_number}",
            "unique_file_number",
        ) from e


# =============================================================================
# Month Arithmetic
# =============================================================================


def first_of_month(value: date) -> date:
    """Truncate a date to the first day of its month."""
    return value.replace(day=1)


def add_months(value: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length."""
    month_index = value.year * 12 + (value.month - 1) + months
    year, month = divmod(month_index, 12)
    last_day = calendar.monthrange(year, month + 1)[1]
    return date(year, month + 1, min(value.day, last_day))


def months_between(earlier: date, later: date) -> int:
    """Whole calendar months from earlier's month to later's month."""
    return (later.year - earlier.year) * 12 + (later.month - earlier.month)


def submission_period_cutoff_date(period: date) -> date:
    """The 20th day of the month following the given period."""
    return add_months(first_of_month(period), 1).replace(day=CUTOFF_DAY_OF_MONTH)


# =============================================================================
# Formatting
# =============================================================================


def format_month(value: date) -> str:
    """Render a month as MMMM yyyy (e.g. "May 2025")."""
    return f"{MONTH_NAMES[value.month - 1]} {value.year}"


def format_display_date(value: date) -> str:
    """Render a date as dd/MM/yyyy."""
    return value.strftime(DISPLAY_DATE_FORMAT)


def format_submission_period(value: date) -> str:
    """Render a month as MMM-yyyy (e.g. "MAY-2025")."""
    return f"{MONTH_ABBREVIATIONS[value.month - 1]}-{value.year}"
