"""Output helpers for the EMI calculator.

This module provides simple functions to render repayment schedules and
summaries in a tabular text format, plus the money formatting they use.
Amounts are shown in rupees with Indian digit grouping (``1,00,000.00``).
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, List, Optional, Union

from .data_models import ScheduleRow
from .utils import format_display_date, round2


def _group_indian(int_part: str) -> str:
    # last three digits, then groups of two
    if len(int_part) <= 3:
        return int_part
    head, tail = int_part[:-3], int_part[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_inr(amount: Union[Decimal, int, str, None], show_symbol: bool = True) -> str:
    """Format an amount as rupees, e.g. ``₹1,00,000.00``.

    ``None`` and unparseable values render as zero.
    """
    symbol = "₹" if show_symbol else ""
    try:
        value = round2(Decimal(str(amount)))
    except (InvalidOperation, ValueError):
        value = Decimal("0.00")
    if not value.is_finite():
        value = Decimal("0.00")
    int_part, dec_part = f"{abs(value):.2f}".split(".")
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{_group_indian(int_part)}.{dec_part}"


def format_percent(value: Union[Decimal, int, str, None]) -> str:
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return "0%"
    if not number.is_finite():
        return "0%"
    return f"{round2(number):.2f}%"


def serialize_row(row: ScheduleRow) -> Dict[str, object]:
    """Convert a schedule row into a JSON-serialisable dictionary.

    Money is kept as two-decimal strings.
    """
    return {
        "sequence_number": row.sequence_number,
        "date": row.date.isoformat(),
        "date_label": format_display_date(row.date),
        "opening_principal": f"{row.opening_principal:.2f}",
        "closing_principal": f"{row.closing_principal:.2f}",
        "principal_portion": f"{row.principal_portion:.2f}",
        "interest_portion": f"{row.interest_portion:.2f}",
        "total_payment": f"{row.total_payment:.2f}",
        "is_disbursement_row": row.is_disbursement_row,
    }


def serialize_schedule(rows: Iterable[ScheduleRow]) -> List[Dict[str, object]]:
    return [serialize_row(row) for row in rows]


def print_summary(summary: Dict[str, object]) -> None:
    """Print a summary of loan metrics in a human-readable format."""
    months = summary["term_months"]
    print("Loan Summary")
    print("-" * 72)
    if summary.get("borrower_name"):
        print(f"Borrower           : {summary['borrower_name']}")
    print(f"Loan amount        : {format_inr(summary['principal'])}")
    print(f"Interest rate      : {format_percent(summary['monthly_rate_percent'])} per month")
    print(f"Tenure             : {months} month{'s' if months != 1 else ''}")
    print(f"Monthly principal  : {format_inr(summary['flat_principal_installment'])}")
    print(f"Total interest     : {format_inr(summary['total_interest'])}")
    print(f"Total payment      : {format_inr(summary['total_payment'])}")
    print(f"Disbursed on       : {summary['start_date_label']}")
    print(f"Last payment       : {summary['end_date_label']}")
    if summary.get("max_payment"):
        print(f"Highest payment    : {format_inr(summary['max_payment'])}")
    print("-" * 72)


def print_schedule(rows: Iterable[ScheduleRow], limit: Optional[int] = None) -> None:
    """Print the repayment schedule as a simple tab-separated table.

    Parameters
    ----------
    rows: Iterable[ScheduleRow]
        The schedule rows to print, disbursement row included.
    limit: Optional[int]
        Print at most this many rows, followed by a note with the number of
        rows left out.
    """
    rows = list(rows)
    shown = rows if limit is None else rows[:limit]
    headers = ["#", "Date", "Loan Capital", "EMI", "Interest", "Total"]
    print("\t".join(headers))
    for row in shown:
        if row.is_disbursement_row:
            payment_cols = ["-", "-", "-"]
        else:
            payment_cols = [
                format_inr(row.principal_portion, show_symbol=False),
                format_inr(row.interest_portion, show_symbol=False),
                format_inr(row.total_payment, show_symbol=False),
            ]
        print(
            "\t".join(
                [
                    str(row.sequence_number),
                    format_display_date(row.date),
                    format_inr(row.closing_principal, show_symbol=False),
                ]
                + payment_cols
            )
        )
    if len(shown) < len(rows):
        print(f"... {len(rows) - len(shown)} more rows not shown")
