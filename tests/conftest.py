"""Shared fixtures.

Canonical loan: 1,20,000 disbursed on 1 Jan 2024 at 1 % a month over
12 months, giving a flat principal installment of 10,000.
"""

from datetime import date
from decimal import Decimal

import pytest

from emi_calc.data_models import LoanParameters
from emi_calc_web.app import app as flask_app


@pytest.fixture
def canonical_params() -> LoanParameters:
    return LoanParameters(
        principal=Decimal("120000.00"),
        start_date=date(2024, 1, 1),
        monthly_rate_percent=Decimal("1"),
        term_months=12,
        borrower_name="Asha Rao",
    )


@pytest.fixture
def canonical_fields() -> dict:
    return {
        "borrower_name": "Asha Rao",
        "principal": "120000",
        "start_date": "2024-01-01",
        "monthly_rate_percent": "1",
        "term_months": "12",
    }


@pytest.fixture
def app():
    original = dict(flask_app.config)
    flask_app.config.update(TESTING=True, PREVIEW_ROWS=120, REQUIRE_BORROWER=True)
    yield flask_app
    flask_app.config.clear()
    flask_app.config.update(original)


@pytest.fixture
def client(app):
    return app.test_client()
