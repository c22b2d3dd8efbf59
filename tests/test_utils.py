from datetime import date, datetime
from decimal import Decimal

import pytest

from emi_calc.utils import (
    add_months,
    decimal_from_str,
    format_display_date,
    from_iso_date,
    iso_to_display,
    is_real_date,
    parse_display_date,
    round2,
    to_iso_date,
)


class TestAddMonths:
    def test_clamps_to_leap_february(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_clamps_to_common_february(self):
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)

    def test_clamps_to_thirty_day_month(self):
        assert add_months(date(2024, 3, 31), 1) == date(2024, 4, 30)

    def test_keeps_day_when_it_exists(self):
        assert add_months(date(2024, 1, 15), 5) == date(2024, 6, 15)

    def test_rolls_over_year(self):
        assert add_months(date(2023, 12, 15), 1) == date(2024, 1, 15)
        assert add_months(date(2024, 1, 1), 13) == date(2025, 2, 1)

    def test_negative_months(self):
        assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)
        assert add_months(date(2024, 1, 10), -1) == date(2023, 12, 10)

    def test_zero_months(self):
        assert add_months(date(2024, 5, 31), 0) == date(2024, 5, 31)


class TestIsoDates:
    def test_round_trip(self):
        d = date(2024, 2, 29)
        assert from_iso_date(to_iso_date(d)) == d

    def test_to_iso_accepts_datetime_and_string(self):
        assert to_iso_date(datetime(2024, 3, 5, 10, 30)) == "2024-03-05"
        assert to_iso_date("2024-03-05") == "2024-03-05"

    def test_to_iso_returns_empty_marker_for_invalid(self):
        assert to_iso_date("2024-02-30") == ""
        assert to_iso_date("not a date") == ""
        assert to_iso_date(None) == ""

    @pytest.mark.parametrize("text", ["2024-13-01", "2023-02-29", "2024-1-5", "", "05/01/2024"])
    def test_from_iso_rejects_malformed(self, text):
        with pytest.raises(ValueError):
            from_iso_date(text)


class TestDisplayDates:
    def test_short_label(self):
        assert format_display_date(date(2024, 1, 5)) == "05 Jan 2024"
        assert format_display_date(date(2025, 12, 31)) == "31 Dec 2025"

    def test_iso_to_display(self):
        assert iso_to_display("2024-02-29") == "29/02/2024"
        assert iso_to_display("") == ""

    def test_parse_display_date(self):
        assert parse_display_date("29/02/2024") == "2024-02-29"

    @pytest.mark.parametrize("text", ["29/02/2023", "31/04/2024", "00/01/2024", "01/13/2024", "1/2/2024", ""])
    def test_parse_display_date_rejects(self, text):
        assert parse_display_date(text) is None


class TestMoney:
    def test_round_half_away_from_zero(self):
        assert round2(Decimal("1.005")) == Decimal("1.01")
        assert round2(Decimal("2.675")) == Decimal("2.68")
        assert round2(Decimal("-2.675")) == Decimal("-2.68")
        assert round2(Decimal("2.674")) == Decimal("2.67")

    def test_decimal_from_str_strips_grouping(self):
        assert decimal_from_str("1,20,000.50") == Decimal("120000.50")
        assert decimal_from_str("₹500") == Decimal("500")

    def test_decimal_from_str_rejects_garbage(self):
        with pytest.raises(ValueError):
            decimal_from_str("twelve")


def test_is_real_date():
    assert is_real_date(2024, 2, 29)
    assert not is_real_date(2023, 2, 29)
    assert not is_real_date(0, 1, 1)
    assert not is_real_date(2024, 0, 1)
