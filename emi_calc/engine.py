"""Core calculation engine for the EMI calculator.

This module implements the equal-principal (flat EMI) repayment schedule:
the principal component of every installment is constant and interest is
charged on the declining balance, so the total installment shrinks over
time. Every monetary value is rounded to cents at the moment it is
computed, and later rows are derived from the rounded figures, so each row
can be audited on its own. Results are returned as a ``ScheduleResult``.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, List

from .data_models import LoanParameters, ScheduleResult, ScheduleRow
from .utils import add_months, format_display_date, iso_to_display, round2

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def _disbursement_row(params: LoanParameters) -> ScheduleRow:
    principal = round2(params.principal)
    return ScheduleRow(
        sequence_number=0,
        date=params.start_date,
        opening_principal=principal,
        closing_principal=principal,
        principal_portion=ZERO,
        interest_portion=ZERO,
        total_payment=ZERO,
        is_disbursement_row=True,
    )


def build_schedule(params: LoanParameters) -> ScheduleResult:
    """Compute the repayment schedule for a loan.

    Parameters
    ----------
    params: LoanParameters
        Validated loan parameters. The engine does not re-check them; see
        ``emi_calc.validation`` for the checks callers must run first.

    Returns
    -------
    ScheduleResult
        Row 0 (disbursement) followed by ``term_months`` payment rows and
        the summary aggregates. The last row's principal portion is its
        opening balance, which absorbs any rounding drift and leaves a
        closing balance of exactly zero.
    """
    term = params.term_months
    rate = params.monthly_rate_percent / Decimal(100)
    if rate.is_zero():
        # a "-0" rate would otherwise sign every interest figure
        rate = ZERO
    flat_installment = round2(params.principal / Decimal(term))

    rows: List[ScheduleRow] = [_disbursement_row(params)]
    remaining = rows[0].closing_principal

    for period in range(1, term + 1):
        opening = round2(remaining)
        interest = round2(opening * rate)
        if period == term:
            principal_portion = opening
        else:
            principal_portion = flat_installment
        closing = round2(opening - principal_portion)
        rows.append(
            ScheduleRow(
                sequence_number=period,
                date=add_months(params.start_date, period),
                opening_principal=opening,
                closing_principal=closing,
                principal_portion=principal_portion,
                interest_portion=interest,
                total_payment=round2(principal_portion + interest),
            )
        )
        remaining = closing

    total_interest = round2(sum((row.interest_portion for row in rows), ZERO))
    total_payment = round2(sum((row.total_payment for row in rows), ZERO))

    logger.debug(
        "Built schedule: principal=%s rate=%s%% term=%d flat=%s interest=%s",
        params.principal,
        params.monthly_rate_percent,
        term,
        flat_installment,
        total_interest,
    )

    return ScheduleResult(
        params=params,
        rows=tuple(rows),
        flat_principal_installment=flat_installment,
        total_interest=total_interest,
        total_payment=total_payment,
    )


def summarize(result: ScheduleResult) -> Dict[str, object]:
    """Return the summary metrics of a schedule as a JSON-ready dictionary.

    Money values are two-decimal strings so that consumers never see binary
    floating point artefacts.
    """
    params = result.params
    max_payment = result.max_payment
    return {
        "borrower_name": params.borrower_name,
        "principal": f"{round2(params.principal):.2f}",
        "monthly_rate_percent": f"{params.monthly_rate_percent:.2f}",
        "term_months": params.term_months,
        "flat_principal_installment": f"{result.flat_principal_installment:.2f}",
        "total_interest": f"{result.total_interest:.2f}",
        "total_payment": f"{result.total_payment:.2f}",
        "start_date": params.start_date.isoformat(),
        "start_date_display": iso_to_display(params.start_date.isoformat()),
        "start_date_label": format_display_date(params.start_date),
        "end_date": result.end_date.isoformat(),
        "end_date_label": format_display_date(result.end_date),
        "max_payment": f"{max_payment:.2f}" if max_payment is not None else None,
    }
