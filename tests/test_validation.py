from datetime import date
from decimal import Decimal

import pytest

from emi_calc.exceptions import LoanValidationError
from emi_calc.validation import parse_loan_parameters, parse_start_date, validate_loan_fields


class TestValidateLoanFields:
    def test_valid_fields(self, canonical_fields):
        assert validate_loan_fields(canonical_fields, require_borrower=True) == {}

    def test_missing_fields(self):
        errors = validate_loan_fields({}, require_borrower=True)
        assert errors == {
            "borrower_name": "Borrower name is required",
            "principal": "Loan amount is required",
            "start_date": "Start date is required",
            "monthly_rate_percent": "Interest rate is required",
            "term_months": "Number of months is required",
        }

    def test_borrower_only_checked_when_required(self, canonical_fields):
        canonical_fields["borrower_name"] = ""
        assert validate_loan_fields(canonical_fields) == {}

    def test_short_borrower_name(self, canonical_fields):
        canonical_fields["borrower_name"] = " A "
        errors = validate_loan_fields(canonical_fields, require_borrower=True)
        assert errors == {"borrower_name": "Name must be at least 2 characters"}

    @pytest.mark.parametrize("principal", ["0", "-5", "abc", "0.001", "NaN", "Infinity"])
    def test_bad_principal(self, canonical_fields, principal):
        canonical_fields["principal"] = principal
        errors = validate_loan_fields(canonical_fields)
        assert errors == {"principal": "Loan amount must be greater than 0"}

    @pytest.mark.parametrize("rate", ["-0.5", "nan", "inf", "x"])
    def test_bad_rate(self, canonical_fields, rate):
        canonical_fields["monthly_rate_percent"] = rate
        errors = validate_loan_fields(canonical_fields)
        assert errors == {"monthly_rate_percent": "Interest rate must be 0 or greater"}

    def test_zero_rate_is_allowed(self, canonical_fields):
        canonical_fields["monthly_rate_percent"] = "0"
        assert validate_loan_fields(canonical_fields) == {}

    @pytest.mark.parametrize(
        "term, message",
        [
            ("0", "Months must be at least 1"),
            ("-3", "Months must be at least 1"),
            ("twelve", "Months must be at least 1"),
            ("1.5", "Months must be a whole number"),
        ],
    )
    def test_bad_term(self, canonical_fields, term, message):
        canonical_fields["term_months"] = term
        assert validate_loan_fields(canonical_fields) == {"term_months": message}

    @pytest.mark.parametrize("start", ["2024-02-30", "31/02/2024", "tomorrow"])
    def test_bad_start_date(self, canonical_fields, start):
        canonical_fields["start_date"] = start
        errors = validate_loan_fields(canonical_fields)
        assert errors == {"start_date": "Start date must be a valid date"}

    @pytest.mark.parametrize("principal", ["1e27", "1000000000000000", "1e15"])
    def test_principal_too_large(self, canonical_fields, principal):
        canonical_fields["principal"] = principal
        errors = validate_loan_fields(canonical_fields)
        assert errors == {"principal": "Loan amount is too large"}

    def test_largest_principal_is_accepted(self, canonical_fields):
        canonical_fields["principal"] = "999999999999999.99"
        assert validate_loan_fields(canonical_fields) == {}

    def test_rate_above_limit(self, canonical_fields):
        canonical_fields["monthly_rate_percent"] = "1e30"
        errors = validate_loan_fields(canonical_fields)
        assert errors == {"monthly_rate_percent": "Interest rate must be 100 or less"}

    @pytest.mark.parametrize(
        "start, term",
        [("9999-12-01", "1"), ("9999-01-31", "12"), ("2024-01-01", "1e30")],
    )
    def test_schedule_past_last_date(self, canonical_fields, start, term):
        canonical_fields.update(start_date=start, term_months=term)
        errors = validate_loan_fields(canonical_fields)
        assert errors == {"term_months": "Last payment would fall after the year 9999"}

    def test_schedule_ending_in_last_month(self, canonical_fields):
        canonical_fields.update(start_date="31/01/9999", term_months="11")
        assert validate_loan_fields(canonical_fields) == {}


class TestParseLoanParameters:
    def test_builds_parameters(self, canonical_fields):
        params = parse_loan_parameters(canonical_fields)
        assert params.principal == Decimal("120000.00")
        assert params.start_date == date(2024, 1, 1)
        assert params.monthly_rate_percent == Decimal("1")
        assert params.term_months == 12
        assert params.borrower_name == "Asha Rao"

    def test_accepts_grouped_amount_and_display_date(self, canonical_fields):
        canonical_fields.update(principal="1,20,000.555", start_date="29/02/2024", term_months="12.0")
        params = parse_loan_parameters(canonical_fields)
        assert params.principal == Decimal("120000.56")
        assert params.start_date == date(2024, 2, 29)
        assert params.term_months == 12

    def test_raises_with_field_errors(self, canonical_fields):
        canonical_fields["principal"] = "0"
        canonical_fields["term_months"] = ""
        with pytest.raises(LoanValidationError) as excinfo:
            parse_loan_parameters(canonical_fields)
        assert set(excinfo.value.errors) == {"principal", "term_months"}
        assert isinstance(excinfo.value, ValueError)
        assert "principal" in str(excinfo.value)

    def test_negative_zero_rate_is_normalised(self, canonical_fields):
        canonical_fields["monthly_rate_percent"] = "-0"
        params = parse_loan_parameters(canonical_fields)
        assert params.monthly_rate_percent == 0
        assert not params.monthly_rate_percent.is_signed()


def test_parse_start_date_passes_dates_through():
    assert parse_start_date(date(2024, 5, 1)) == date(2024, 5, 1)
    assert parse_start_date("2024-05-01") == date(2024, 5, 1)
    assert parse_start_date("01/05/2024") == date(2024, 5, 1)
    assert parse_start_date("") is None
