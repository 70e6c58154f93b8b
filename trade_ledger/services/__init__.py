"""Business logic services."""

from trade_ledger.services.audit_service import AuditService, emit_event
from trade_ledger.services.bank_account_service import BankAccountService
from trade_ledger.services.bank_transaction_service import BankTransactionService
from trade_ledger.services.invoice_service import InvoiceService
from trade_ledger.services.payment_service import PaymentService
from trade_ledger.services.finance_service import FinanceService
from trade_ledger.services.transfer_service import TransferService

__all__ = [
    "AuditService",
    "emit_event",
    "BankAccountService",
    "BankTransactionService",
    "InvoiceService",
    "PaymentService",
    "FinanceService",
    "TransferService",
]
