"""
Pydantic schemas for financial reporting.

Every figure is a mapping of currency code to amount. There is no
grand total field.
"""

from decimal import Decimal

from pydantic import BaseModel


class FinancialSummaryResponse(BaseModel):
    fiscal_year: int
    fiscal_year_label: str
    revenue_by_currency: dict[str, Decimal]
    paid_by_currency: dict[str, Decimal]
    outstanding_by_currency: dict[str, Decimal]
    advance_by_currency: dict[str, Decimal]
    pipeline_by_currency: dict[str, Decimal]
