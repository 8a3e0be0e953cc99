"""
Unit tests for claim effective date resolution.
"""

from datetime import date

import pytest

from conftest import make_claim

from claims_validation.services.validation.effective_date import (
    get_effective_date,
    try_get_effective_date,
)
from claims_validation.utils.errors import InvalidDateError


class TestPreparationOfDefence:
    """Tests for PROD fee code claims."""

    def test_concluded_date_wins(self):
        """Test the case concluded date is preferred over the case start date."""
        claim = make_claim(
            fee_code="PROD", case_concluded_date="2025-03-10", case_start_date="2025-01-01"
        )
        assert get_effective_date(claim) == date(2025, 3, 10)

    def test_falls_back_to_start_date(self):
        """Test a blank concluded date falls through to the case start date."""
        claim = make_claim(fee_code="PROD", case_concluded_date="  ", case_start_date="2025-01-01")
        assert get_effective_date(claim) == date(2025, 1, 1)

    def test_does_not_use_unique_file_number(self):
        """Test PROD claims never derive a date from the unique file number."""
        claim = make_claim(fee_code="PROD", case_start_date=None, unique_file_number="010101/123")
        with pytest.raises(InvalidDateError):
            get_effective_date(claim)


class TestStandardClaims:
    """Tests for all other fee codes."""

    def test_case_start_date_first(self):
        """Test the case start date is preferred."""
        claim = make_claim(case_start_date="2024-06-01", representation_order_date="2024-01-01")
        assert get_effective_date(claim) == date(2024, 6, 1)

    def test_representation_order_date_second(self):
        """Test the representation order date is used when no start date is present."""
        claim = make_claim(case_start_date=None, representation_order_date="2024-01-01")
        assert get_effective_date(claim) == date(2024, 1, 1)

    def test_unique_file_number_last(self):
        """Test the unique file number date is the final fallback."""
        claim = make_claim(case_start_date="", unique_file_number="010101/123")
        assert get_effective_date(claim) == date(2001, 1, 1)

    def test_unique_file_number_nineteen_hundreds(self):
        """Test two-digit years of 50 and above map to the 1900s."""
        claim = make_claim(case_start_date=None, unique_file_number="010151/123")
        assert get_effective_date(claim) == date(1951, 1, 1)

    def test_malformed_present_field_is_an_error(self):
        """Test a malformed start date raises instead of trying the next candidate."""
        claim = make_claim(case_start_date="01/06/2024", representation_order_date="2024-01-01")
        with pytest.raises(InvalidDateError):
            get_effective_date(claim)

    def test_no_candidates(self):
        """Test a claim without any candidate field raises."""
        claim = make_claim(case_start_date=None, unique_file_number=None)
        with pytest.raises(InvalidDateError, match="No fields available"):
            get_effective_date(claim)

    def test_try_get_returns_none(self):
        """Test the lenient resolver returns None on failure."""
        claim = make_claim(case_start_date="not-a-date")
        assert try_get_effective_date(claim) is None
