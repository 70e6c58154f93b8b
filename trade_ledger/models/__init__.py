"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from trade_ledger.models.base import Base
from trade_ledger.models.enums import (
    OrderStatus,
    ClientType,
    RecordStatus,
    BankAccountType,
    BankTransactionType,
    BankTransactionStatus,
    PaymentType,
    PaymentMethod,
    InvoiceStatus,
    TransferStatus,
    AuditAction,
)
from trade_ledger.models.audit_log import AuditLog
from trade_ledger.models.client import Client
from trade_ledger.models.order import Order
from trade_ledger.models.bank_account import BankAccount
from trade_ledger.models.bank_transaction import BankTransaction
from trade_ledger.models.invoice import Invoice
from trade_ledger.models.payment import Payment
from trade_ledger.models.inter_bank_transfer import InterBankTransfer

__all__ = [
    "Base",
    "OrderStatus",
    "ClientType",
    "RecordStatus",
    "BankAccountType",
    "BankTransactionType",
    "BankTransactionStatus",
    "PaymentType",
    "PaymentMethod",
    "InvoiceStatus",
    "TransferStatus",
    "AuditAction",
    "AuditLog",
    "Client",
    "Order",
    "BankAccount",
    "BankTransaction",
    "Invoice",
    "Payment",
    "InterBankTransfer",
]
