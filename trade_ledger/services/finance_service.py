"""
Per-currency financial summary service.
"""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from trade_ledger.config import SUPPORTED_CURRENCIES
from trade_ledger.models.invoice import Invoice
from trade_ledger.models.order import Order
from trade_ledger.models.payment import Payment
from trade_ledger.reconciliation.aggregation import FinancialSummary, aggregate
from trade_ledger.reconciliation.fiscal_year import fiscal_year_of
from trade_ledger.reconciliation.records import InvoiceRecord, OrderRecord
from trade_ledger.services.invoice_service import payment_record

logger = logging.getLogger(__name__)


class FinanceService:

    def __init__(self, db: Session):
        self.db = db

    def get_financial_summary(
        self,
        fiscal_year: int | None = None,
        now: datetime | None = None,
    ) -> FinancialSummary:
        """
        Revenue, paid, outstanding, advance and pipeline figures by currency.

        Defaults to the fiscal year containing `now`, which itself
        defaults to the current time.
        """
        if fiscal_year is None:
            fiscal_year = fiscal_year_of(now or datetime.utcnow())

        orders = self.db.execute(select(Order)).scalars().all()
        invoices = self.db.execute(select(Invoice)).scalars().all()
        payments = self.db.execute(
            select(Payment).options(selectinload(Payment.bank_account))
        ).scalars().all()

        summary = aggregate(
            fiscal_year,
            [OrderRecord.from_model(order) for order in orders],
            [InvoiceRecord.from_model(invoice) for invoice in invoices],
            [payment_record(payment) for payment in payments],
            SUPPORTED_CURRENCIES,
        )
        logger.debug(
            "Financial summary for FY %s built from %d orders, %d invoices, %d payments",
            fiscal_year,
            len(orders),
            len(invoices),
            len(payments),
        )
        return summary
