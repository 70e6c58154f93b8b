"""
Fiscal year calendar.

Fiscal years begin on July 1 and are labeled by the calendar year
they start in: February 2026 belongs to fiscal year 2025 ("2025-26").
Callers pass dates in explicitly; nothing here reads the clock.
"""

from datetime import date, datetime

from trade_ledger.config import FISCAL_YEAR_START_MONTH


def fiscal_year_of(moment: date | datetime) -> int:
    """Return the fiscal year a date or timestamp falls in."""
    if moment.month >= FISCAL_YEAR_START_MONTH:
        return moment.year
    return moment.year - 1


def fiscal_year_bounds(fiscal_year: int) -> tuple[datetime, datetime]:
    """Return the half-open interval [start, end) covered by a fiscal year."""
    start = datetime(fiscal_year, FISCAL_YEAR_START_MONTH, 1)
    end = datetime(fiscal_year + 1, FISCAL_YEAR_START_MONTH, 1)
    return start, end


def fiscal_year_label(fiscal_year: int) -> str:
    """2025 -> "2025-26"."""
    return f"{fiscal_year}-{str(fiscal_year + 1)[-2:]}"


def parse_fiscal_year_label(label: str) -> int:
    """
    "2025-26" -> 2025.

    Raises ValueError when the label is malformed or the two years
    are not consecutive.
    """
    parts = label.split("-")
    if len(parts) != 2 or len(parts[0]) != 4 or len(parts[1]) != 2:
        raise ValueError(f"Invalid fiscal year label '{label}'")
    if not (parts[0].isdigit() and parts[1].isdigit()):
        raise ValueError(f"Invalid fiscal year label '{label}'")
    start = int(parts[0])
    if fiscal_year_label(start) != label:
        raise ValueError(f"Invalid fiscal year label '{label}'")
    return start
