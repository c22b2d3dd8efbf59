"""Data models for the EMI calculator.

This module defines dataclasses representing the entities used by the
calculator: the loan parameters collected from the user, individual schedule
rows and the overall schedule result. All of them are frozen; a schedule is
computed once from its parameters and never edited afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple


@dataclass(frozen=True)
class LoanParameters:
    """Validated input to the schedule engine.

    Attributes
    ----------
    principal: Decimal
        The disbursed amount, positive and already rounded to cents.
    start_date: date
        Disbursement date. Payment ``i`` falls ``i`` calendar months later.
    monthly_rate_percent: Decimal
        Interest per month in percent, e.g. ``Decimal("1")`` for 1 % a month.
    term_months: int
        Number of monthly installments, at least one.
    borrower_name: str
        Carried through for reports only.
    """

    principal: Decimal
    start_date: date
    monthly_rate_percent: Decimal
    term_months: int
    borrower_name: str = ""


@dataclass(frozen=True)
class ScheduleRow:
    """One row of the repayment schedule.

    Row 0 is the disbursement row: both principal columns equal the loan
    amount and every payment column is zero.
    """

    sequence_number: int
    date: date
    opening_principal: Decimal
    closing_principal: Decimal
    principal_portion: Decimal
    interest_portion: Decimal
    total_payment: Decimal
    is_disbursement_row: bool = False


@dataclass(frozen=True)
class ScheduleResult:
    """The full schedule plus the aggregates shown next to it."""

    params: LoanParameters
    rows: Tuple[ScheduleRow, ...]
    flat_principal_installment: Decimal
    total_interest: Decimal
    total_payment: Decimal

    @property
    def payment_rows(self) -> Tuple[ScheduleRow, ...]:
        return self.rows[1:]

    @property
    def total_principal(self) -> Decimal:
        return sum((row.principal_portion for row in self.payment_rows), Decimal("0"))

    @property
    def end_date(self) -> date:
        return self.rows[-1].date

    @property
    def max_payment(self) -> Optional[Decimal]:
        # For equal-principal loans this is normally the first installment
        payments = [row.total_payment for row in self.payment_rows]
        return max(payments) if payments else None
