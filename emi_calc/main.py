"""Command-line interface for the EMI calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute full equal-principal repayment schedules, view
summaries, or replay keystrokes through the masked date field. Schedules can
be printed to the terminal or exported to JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
import logging
from pathlib import Path
from typing import Optional, Tuple

import click

from .data_models import LoanParameters, ScheduleResult
from .date_mask import MAX_DIGITS, is_ascii_digits, iso_to_digits, replay_keys
from .engine import build_schedule, summarize
from .exceptions import LoanValidationError
from .formatter import print_schedule, print_summary, serialize_schedule
from .utils import decimal_from_str, to_iso_date
from .validation import parse_loan_parameters

logger = logging.getLogger(__name__)

MAX_PRINTED_ROWS = 120

_SUFFIXES = (
    ("crore", 10_000_000),
    ("cr", 10_000_000),
    ("lakh", 100_000),
    ("l", 100_000),
    ("k", 1_000),
)

_OPTION_NAMES = {
    "principal": "--principal",
    "start_date": "--start-date",
    "monthly_rate_percent": "--rate",
    "term_months": "--term",
    "borrower_name": "--borrower",
}


def parse_amount(value: str) -> str:
    """Expand shorthand amounts into plain numeric strings.

    Accepts plain numbers ("500000", "5,00,000") and Indian shorthand with
    ``k``, ``l``/``lakh`` and ``cr``/``crore`` suffixes (e.g. "5l" meaning
    500000). The result is a string so that it can go through the same
    validation as form input; anything unrecognised is returned unchanged.
    """
    text = value.strip().lower().replace(",", "")
    for suffix, factor in _SUFFIXES:
        if text.endswith(suffix):
            try:
                return str(decimal_from_str(text[: -len(suffix)]) * factor)
            except ValueError:
                raise click.BadParameter(f"Invalid amount: {value}", param_hint="--principal")
    return text


def build_params_from_options(
    principal: str,
    rate: str,
    term: str,
    start_date: str,
    borrower: Optional[str] = None,
) -> LoanParameters:
    """Validate CLI option values and build ``LoanParameters``.

    Validation failures are reported as ``click.BadParameter`` naming the
    first offending option.
    """
    fields = {
        "principal": parse_amount(principal),
        "monthly_rate_percent": rate.strip().rstrip("%"),
        "term_months": term,
        "start_date": start_date,
        "borrower_name": borrower or "",
    }
    try:
        return parse_loan_parameters(fields)
    except LoanValidationError as exc:
        messages = "; ".join(f"{_OPTION_NAMES[k]}: {v}" for k, v in exc.errors.items())
        first = next(iter(exc.errors))
        raise click.BadParameter(messages, param_hint=_OPTION_NAMES[first])


def export_to_json(path: Path, result: ScheduleResult) -> None:
    """Export schedule and summary to a JSON file."""
    data = {"summary": summarize(result), "schedule": serialize_schedule(result.rows)}
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, result: ScheduleResult) -> None:
    """Export the schedule rows to a CSV file."""
    with path.open("w", newline="", encoding="utf-8") as f:
        write_csv(f, result)


def write_csv(stream, result: ScheduleResult) -> None:
    header = [
        "Sequence",
        "Date",
        "Opening_Principal",
        "Principal",
        "Interest",
        "Total",
        "Closing_Principal",
        "Disbursement",
    ]
    writer = csv.writer(stream)
    writer.writerow(header)
    for row in serialize_schedule(result.rows):
        writer.writerow(
            [
                row["sequence_number"],
                row["date"],
                row["opening_principal"],
                row["principal_portion"],
                row["interest_portion"],
                row["total_payment"],
                row["closing_principal"],
                row["is_disbursement_row"],
            ]
        )


def loan_options(func):
    """Attach the loan input options shared by ``schedule`` and ``summary``."""
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Loan amount, e.g. 120000, 5l or 1.2cr"),
        click.option("--rate", "-r", "rate", required=True, help="Monthly interest rate in percent (1 for 1%)"),
        click.option("--term", "-t", "term", required=True, help="Number of monthly installments"),
        click.option("--start-date", "-s", "start_date", required=True, help="Disbursement date (YYYY-MM-DD or DD/MM/YYYY)"),
        click.option("--borrower", "-b", "borrower", default=None, help="Borrower name shown in the summary"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity",
)
def cli(log_level: str) -> None:
    """An equal-principal (flat EMI) loan schedule calculator."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@loan_options
@click.option("--all", "show_all", is_flag=True, help=f"Print every row instead of the first {MAX_PRINTED_ROWS}")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def schedule(
    principal: str,
    rate: str,
    term: str,
    start_date: str,
    borrower: Optional[str],
    show_all: bool,
    output: Optional[str],
) -> None:
    """Compute and print the full repayment schedule."""
    params = build_params_from_options(principal, rate, term, start_date, borrower)
    result = build_schedule(params)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, result)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, result)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv", param_hint="--output")
        logger.info("Exported %d rows to %s", len(result.rows), path)
        click.echo(f"Schedule exported to {path}")
        return
    print_summary(summarize(result))
    if not show_all and len(result.rows) > MAX_PRINTED_ROWS:
        click.echo(f"Schedule has {len(result.rows)} rows; showing first {MAX_PRINTED_ROWS} rows.")
        print_schedule(result.rows, limit=MAX_PRINTED_ROWS)
    else:
        print_schedule(result.rows)


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(
    principal: str,
    rate: str,
    term: str,
    start_date: str,
    borrower: Optional[str],
    output: Optional[str],
) -> None:
    """Compute and print only the summary metrics for a loan."""
    params = build_params_from_options(principal, rate, term, start_date, borrower)
    summary_data = summarize(build_schedule(params))
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension", param_hint="--output")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"summary": summary_data}, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(summary_data)


@cli.command("date-input")
@click.option("--initial", "initial", default="", help="Digits already in the field (DDMMYYYY)")
@click.option("--iso", "iso", default=None, help="Prefill the field from a YYYY-MM-DD date")
@click.option("--caret", "caret", type=click.IntRange(0, 10), default=None, help="Starting caret position")
@click.argument("keys", nargs=-1)
def date_input(initial: str, iso: Optional[str], caret: Optional[int], keys: Tuple[str, ...]) -> None:
    """Replay keystrokes through the masked dd/mm/yyyy field.

    KEYS are typed in order: single digits, or Backspace, Delete, ArrowLeft,
    ArrowRight, Home, End. For example:

        emi-calc date-input 2 9 0 2 2 0 2 4
    """
    if iso is not None:
        if initial:
            raise click.BadParameter("Use either --iso or --initial, not both", param_hint="--iso")
        iso_date = to_iso_date(iso)
        if not iso_date:
            raise click.BadParameter(f"Invalid date: {iso}", param_hint="--iso")
        initial = iso_to_digits(iso_date)
    if (initial and not is_ascii_digits(initial)) or len(initial) > MAX_DIGITS:
        raise click.BadParameter("Initial digits must be up to 8 decimal digits", param_hint="--initial")
    # allow "290220" as one argument as well as separate digits
    expanded = []
    for key in keys:
        expanded.extend(key if is_ascii_digits(key) else [key])
    digits, state = replay_keys(expanded, digits=initial, caret=caret)
    click.echo(f"Display : {state.display}")
    click.echo(f"Caret   : {state.caret}")
    click.echo(f"Digits  : {digits}")
    click.echo(f"Status  : {state.status.value}")
    if state.message:
        click.echo(f"Message : {state.message}")
    click.echo(f"ISO     : {state.iso or '-'}")


if __name__ == "__main__":
    cli()
