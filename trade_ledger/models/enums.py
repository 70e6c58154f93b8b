"""
Shared enumerations for database models.

Using Python enums mapped to database enums ensures that
only valid values can be stored. Order status is the exception:
it is owned by the order workflow and stored as plain text, so
the reconciliation code must cope with values it does not know.
"""

import enum


class OrderStatus(str, enum.Enum):
    """Order lifecycle: pending -> in_production -> shipped -> delivered."""
    PENDING = "pending"
    IN_PRODUCTION = "in_production"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class ClientType(str, enum.Enum):
    LOCAL = "local"
    INTERNATIONAL = "international"


class RecordStatus(str, enum.Enum):
    """Active/inactive flag used by clients and bank accounts."""
    ACTIVE = "active"
    INACTIVE = "inactive"


class BankAccountType(str, enum.Enum):
    CHECKING = "checking"
    SAVINGS = "savings"
    BUSINESS = "business"


class BankTransactionType(str, enum.Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    TRANSFER_IN = "transfer_in"
    TRANSFER_OUT = "transfer_out"
    PAYMENT_RECEIVED = "payment_received"
    FEE = "fee"
    INTEREST = "interest"
    ADJUSTMENT = "adjustment"


# Transaction types that move money out of the account.
# Their amounts are stored as negative numbers.
OUTFLOW_TRANSACTION_TYPES = frozenset({
    BankTransactionType.WITHDRAWAL,
    BankTransactionType.TRANSFER_OUT,
    BankTransactionType.FEE,
})


class BankTransactionStatus(str, enum.Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"


class PaymentType(str, enum.Enum):
    """Advances are collected before shipment; everything else is an invoice payment."""
    ADVANCE = "advance"
    INVOICE = "invoice"


class PaymentMethod(str, enum.Enum):
    BANK_TRANSFER = "bank_transfer"
    CHECK = "check"
    CASH = "cash"
    CREDIT_CARD = "credit_card"
    OTHER = "other"


class InvoiceStatus(str, enum.Enum):
    UNPAID = "unpaid"
    PARTIALLY_PAID = "partially_paid"
    PAID = "paid"


class TransferStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class AuditAction(str, enum.Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    RECONCILIATION_FAILED = "reconciliation_failed"
