import io
import logging
import os

from flask import Flask, Response, jsonify, request

from emi_calc.date_mask import END_POS, clean_digits, digit_index_to_display_pos, iso_to_digits, replay_keys
from emi_calc.engine import build_schedule, summarize
from emi_calc.exceptions import LoanValidationError
from emi_calc.formatter import serialize_schedule
from emi_calc.main import write_csv
from emi_calc.utils import to_iso_date
from emi_calc.validation import parse_loan_parameters

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["PREVIEW_ROWS"] = int(os.environ.get("EMI_CALC_PREVIEW_ROWS", "120"))
app.config["REQUIRE_BORROWER"] = os.environ.get("EMI_CALC_REQUIRE_BORROWER", "1") == "1"

logging.basicConfig(
    level=os.environ.get("EMI_CALC_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

LOAN_FIELDS = ("borrower_name", "principal", "start_date", "monthly_rate_percent", "term_months")


def _request_fields() -> dict:
    payload = request.get_json(silent=True)
    source = payload if isinstance(payload, dict) else request.form
    return {name: source.get(name, "") for name in LOAN_FIELDS}


def _wants_full_schedule() -> bool:
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return str(payload.get("show_full_schedule", "")) in {"1", "true", "True"}
    return request.form.get("show_full_schedule") == "1"


def _run_analysis(fields: dict):
    params = parse_loan_parameters(fields, require_borrower=app.config["REQUIRE_BORROWER"])
    return build_schedule(params)


def _schedule_for_view(rows: list, show_full_schedule: bool):
    """Return the rows to send and how many were held back."""
    if show_full_schedule:
        return rows, 0
    limit = app.config["PREVIEW_ROWS"]
    preview = rows[:limit]
    return preview, len(rows) - len(preview)


def _clean_caret(value, digits: str) -> int:
    if value is None or value == "":
        return digit_index_to_display_pos(len(digits))
    try:
        caret = int(value)
    except (TypeError, ValueError):
        return digit_index_to_display_pos(len(digits))
    return max(0, min(END_POS, caret))


@app.errorhandler(LoanValidationError)
def handle_validation_error(exc: LoanValidationError):
    return jsonify({"errors": exc.errors}), 400


@app.get("/healthz")
def healthz():
    return jsonify({"status": "ok"})


@app.post("/api/schedule")
def schedule():
    result = _run_analysis(_request_fields())
    rows, truncated = _schedule_for_view(serialize_schedule(result.rows), _wants_full_schedule())
    return jsonify({"summary": summarize(result), "schedule": rows, "truncated": truncated})


@app.post("/api/schedule.csv")
def schedule_csv():
    result = _run_analysis(_request_fields())
    buffer = io.StringIO()
    write_csv(buffer, result)
    return Response(
        buffer.getvalue(),
        mimetype="text/csv",
        headers={"Content-Disposition": "attachment; filename=repayment_schedule.csv"},
    )


@app.post("/api/date-input")
def date_input():
    """Apply keystrokes to a masked date field.

    The client sends the whole field state with each request, so the server
    keeps nothing between calls. ``key`` is a single keystroke; ``keys`` a
    list applied in order. ``iso`` prefills the field from a stored
    ``YYYY-MM-DD`` value in place of ``digits``.
    """
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = {}
    if payload.get("iso"):
        iso = to_iso_date(str(payload["iso"]))
        if not iso:
            return jsonify({"errors": {"iso": "iso must be a YYYY-MM-DD date"}}), 400
        digits = iso_to_digits(iso)
    else:
        digits = clean_digits(payload.get("digits"))
    caret = _clean_caret(payload.get("caret"), digits)
    keys = payload.get("keys")
    if keys is None:
        keys = [payload["key"]] if payload.get("key") else []
    if not isinstance(keys, list):
        return jsonify({"errors": {"keys": "keys must be a list"}}), 400

    digits, state = replay_keys([str(key) for key in keys], digits=digits, caret=caret)
    return jsonify(
        {
            "digits": digits,
            "display": state.display,
            "caret": state.caret,
            "status": state.status.value,
            "message": state.message,
            "iso": state.iso,
        }
    )


if __name__ == "__main__":
    print("Starting EMI Calculator web app...")
    app.run(host="0.0.0.0", port=8710, debug=True)
