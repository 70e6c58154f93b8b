"""
Reconciliation core.

Pure functions over snapshot records: balance reconstruction, invoice
reconciliation, multi-currency aggregation and transfer thresholds.
Nothing in this package reads the database or the clock.
"""

from trade_ledger.reconciliation.money import CurrencyAmount, CurrencyTotals
from trade_ledger.reconciliation.records import (
    Direct,
    Converted,
    Pricing,
    pricing_from_fields,
    TransactionRecord,
    OrderRecord,
    InvoiceRecord,
    PaymentRecord,
    TransferRecord,
    parse_order_status,
)
from trade_ledger.reconciliation.balance import (
    BalanceAnomaly,
    BalanceReconstruction,
    reconstruct_balance,
)
from trade_ledger.reconciliation.invoices import (
    InvoiceReconciliation,
    invoice_status,
    outstanding_recognized,
    reconcile,
)
from trade_ledger.reconciliation.aggregation import FinancialSummary, aggregate
from trade_ledger.reconciliation.transfers import (
    TransferProgress,
    transfer_progress,
    is_eligible_for_transfer,
)
from trade_ledger.reconciliation.fiscal_year import (
    fiscal_year_of,
    fiscal_year_bounds,
    fiscal_year_label,
)

__all__ = [
    "CurrencyAmount",
    "CurrencyTotals",
    "Direct",
    "Converted",
    "Pricing",
    "pricing_from_fields",
    "TransactionRecord",
    "OrderRecord",
    "InvoiceRecord",
    "PaymentRecord",
    "TransferRecord",
    "parse_order_status",
    "BalanceAnomaly",
    "BalanceReconstruction",
    "reconstruct_balance",
    "InvoiceReconciliation",
    "invoice_status",
    "outstanding_recognized",
    "reconcile",
    "FinancialSummary",
    "aggregate",
    "TransferProgress",
    "transfer_progress",
    "is_eligible_for_transfer",
    "fiscal_year_of",
    "fiscal_year_bounds",
    "fiscal_year_label",
]
