"""
Trade Ledger — FastAPI Application.

This is the entry point for the application.
All routers are registered here.
"""

import logging

from fastapi import FastAPI

from trade_ledger.config import get_settings
from trade_ledger.api.health import router as health_router
from trade_ledger.api.banks import router as banks_router
from trade_ledger.api.bank_transactions import router as bank_transactions_router
from trade_ledger.api.invoices import router as invoices_router
from trade_ledger.api.payments import router as payments_router
from trade_ledger.api.transfers import router as transfers_router
from trade_ledger.api.finance import router as finance_router

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Bank ledger, invoice reconciliation and multi-currency reporting",
    debug=settings.DEBUG,
)

# Register routers
app.include_router(health_router)
app.include_router(banks_router)
app.include_router(bank_transactions_router)
app.include_router(invoices_router)
app.include_router(payments_router)
app.include_router(transfers_router)
app.include_router(finance_router)
