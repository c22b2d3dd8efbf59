"""Caller-side validation of raw loan inputs.

The engine trusts its ``LoanParameters``; this module is where raw form or
command-line strings are checked and converted. Each failing field gets one
user-facing message, mirroring what a form would show next to the field.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Dict, Mapping, Optional

from .data_models import LoanParameters
from .exceptions import LoanValidationError
from .utils import decimal_from_str, from_iso_date, parse_display_date, round2

logger = logging.getLogger(__name__)

# keeps every cent figure within the 28-digit decimal context
MAX_PRINCIPAL = Decimal("1e15")
MAX_MONTHLY_RATE = Decimal(100)
# month index (year * 12 + month - 1) of the last calendar month a date can hold
_LAST_MONTH_INDEX = date.max.year * 12 + date.max.month - 1


def _text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _number(value: str) -> Optional[Decimal]:
    try:
        number = decimal_from_str(value)
    except ValueError:
        return None
    return number if number.is_finite() else None


def parse_start_date(value: object) -> Optional[date]:
    """Accept ``YYYY-MM-DD`` or ``DD/MM/YYYY``; ``None`` if neither."""
    if isinstance(value, date):
        return value
    text = _text(value)
    if "/" in text:
        iso = parse_display_date(text)
        if iso is None:
            return None
        text = iso
    try:
        return from_iso_date(text)
    except ValueError:
        return None


def _check_borrower(value: str) -> str:
    if not value:
        return "Borrower name is required"
    if len(value) < 2:
        return "Name must be at least 2 characters"
    return ""


def _check_principal(value: str) -> str:
    if not value:
        return "Loan amount is required"
    amount = _number(value)
    if amount is None:
        return "Loan amount must be greater than 0"
    if amount >= MAX_PRINCIPAL:
        return "Loan amount is too large"
    if round2(amount) <= 0:
        return "Loan amount must be greater than 0"
    return ""


def _check_start_date(value: object) -> str:
    if not _text(value):
        return "Start date is required"
    if parse_start_date(value) is None:
        return "Start date must be a valid date"
    return ""


def _check_rate(value: str) -> str:
    if value == "":
        return "Interest rate is required"
    rate = _number(value)
    if rate is None or rate < 0:
        return "Interest rate must be 0 or greater"
    if rate > MAX_MONTHLY_RATE:
        return "Interest rate must be 100 or less"
    return ""


def _check_term(value: str) -> str:
    if not value:
        return "Number of months is required"
    months = _number(value)
    if months is None or months < 1:
        return "Months must be at least 1"
    if months != months.to_integral_value():
        return "Months must be a whole number"
    return ""


def _check_schedule_end(start_value: object, term_value: str) -> str:
    start = parse_start_date(start_value)
    months = int(decimal_from_str(term_value))
    if start.year * 12 + start.month - 1 + months > _LAST_MONTH_INDEX:
        return "Last payment would fall after the year 9999"
    return ""


def validate_loan_fields(
    fields: Mapping[str, object], require_borrower: bool = False
) -> Dict[str, str]:
    """Return ``{field: message}`` for every field that fails its checks.

    An empty dictionary means the fields can be passed to
    ``parse_loan_parameters``.
    """
    errors = {
        "principal": _check_principal(_text(fields.get("principal"))),
        "start_date": _check_start_date(fields.get("start_date")),
        "monthly_rate_percent": _check_rate(_text(fields.get("monthly_rate_percent"))),
        "term_months": _check_term(_text(fields.get("term_months"))),
    }
    if not errors["start_date"] and not errors["term_months"]:
        errors["term_months"] = _check_schedule_end(
            fields.get("start_date"), _text(fields.get("term_months"))
        )
    if require_borrower:
        errors["borrower_name"] = _check_borrower(_text(fields.get("borrower_name")))
    return {name: message for name, message in errors.items() if message}


def parse_loan_parameters(
    fields: Mapping[str, object], require_borrower: bool = False
) -> LoanParameters:
    """Validate raw fields and build ``LoanParameters``.

    Raises
    ------
    LoanValidationError
        If any field fails validation; ``errors`` holds the messages.
    """
    errors = validate_loan_fields(fields, require_borrower=require_borrower)
    if errors:
        logger.warning("Rejected loan parameters: %s", errors)
        raise LoanValidationError(errors)
    return LoanParameters(
        principal=round2(decimal_from_str(_text(fields["principal"]))),
        start_date=parse_start_date(fields["start_date"]),
        # copy_abs turns a "-0" rate into 0
        monthly_rate_percent=decimal_from_str(_text(fields["monthly_rate_percent"])).copy_abs(),
        term_months=int(decimal_from_str(_text(fields["term_months"]))),
        borrower_name=_text(fields.get("borrower_name")),
    )
