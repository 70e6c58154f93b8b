"""
Finance reporting endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from trade_ledger.exceptions import InvalidLedgerState
from trade_ledger.models.base import get_db
from trade_ledger.reconciliation.fiscal_year import (
    fiscal_year_label,
    parse_fiscal_year_label,
)
from trade_ledger.services.finance_service import FinanceService
from trade_ledger.schemas.finance import FinancialSummaryResponse

router = APIRouter(prefix="/finance", tags=["Finance"])


@router.get("/summary", response_model=FinancialSummaryResponse)
def get_financial_summary(
    fiscal_year: str | None = None,
    db: Session = Depends(get_db),
):
    """
    Per-currency revenue, paid, outstanding, advance and pipeline figures.

    fiscal_year accepts a start year ("2025") or a label ("2025-26")
    and defaults to the current fiscal year.
    """
    year = None
    if fiscal_year is not None:
        try:
            year = int(fiscal_year) if fiscal_year.isdigit() else parse_fiscal_year_label(fiscal_year)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    service = FinanceService(db)
    try:
        summary = service.get_financial_summary(fiscal_year=year)
    except InvalidLedgerState as e:
        raise HTTPException(status_code=409, detail=e.message)

    return FinancialSummaryResponse(
        fiscal_year_label=fiscal_year_label(summary.fiscal_year),
        **summary.as_dict(),
    )
