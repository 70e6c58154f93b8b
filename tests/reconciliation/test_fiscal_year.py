"""
Tests for the July-June fiscal year calendar.
"""

from datetime import date, datetime

import pytest

from trade_ledger.reconciliation.fiscal_year import (
    fiscal_year_bounds,
    fiscal_year_label,
    fiscal_year_of,
    parse_fiscal_year_label,
)


def test_february_belongs_to_previous_start_year():
    assert fiscal_year_of(datetime(2026, 2, 15)) == 2025


def test_july_first_starts_a_new_year():
    assert fiscal_year_of(date(2025, 7, 1)) == 2025
    assert fiscal_year_of(datetime(2025, 6, 30, 23, 59, 59)) == 2024


def test_bounds_are_half_open():
    start, end = fiscal_year_bounds(2025)
    assert start == datetime(2025, 7, 1)
    assert end == datetime(2026, 7, 1)
    assert fiscal_year_of(start) == 2025
    assert fiscal_year_of(end) == 2026


def test_label_round_trip():
    assert fiscal_year_label(2025) == "2025-26"
    assert fiscal_year_label(1999) == "1999-00"
    assert parse_fiscal_year_label("2025-26") == 2025


@pytest.mark.parametrize("label", ["2025", "2025-27", "25-26", "abcd-ef", "2025-2026"])
def test_malformed_labels_rejected(label):
    with pytest.raises(ValueError):
        parse_fiscal_year_label(label)
