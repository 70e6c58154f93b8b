"""
Snapshot records consumed by the reconciliation functions.

The reconciliation layer never reads the database. Services load the
rows they need and hand over these frozen copies, which makes every
computation a plain function of its inputs.

Where money crossed a currency boundary, the record carries a
Converted pricing instead of a Direct one, so callers branch on the
type rather than probing for optional fields.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from trade_ledger.exceptions import InvalidLedgerState
from trade_ledger.models.enums import (
    BankTransactionStatus,
    OrderStatus,
    PaymentType,
    TransferStatus,
)
from trade_ledger.reconciliation.fiscal_year import fiscal_year_of
from trade_ledger.reconciliation.money import CurrencyAmount, to_decimal


# --- Pricing ---

@dataclass(frozen=True)
class Direct:
    """Money that never changed currency."""

    amount: Decimal
    currency: str

    @property
    def settled(self) -> CurrencyAmount:
        return CurrencyAmount(self.currency, self.amount)

    @property
    def native(self) -> CurrencyAmount:
        return CurrencyAmount(self.currency, self.amount)


@dataclass(frozen=True)
class Converted:
    """
    Money converted at a frozen rate.

    original_* is the figure at the point of origin, amount/currency
    the figure after conversion. Both carry the same sign.
    """

    original_amount: Decimal
    original_currency: str
    amount: Decimal
    currency: str
    exchange_rate: Decimal

    @property
    def settled(self) -> CurrencyAmount:
        return CurrencyAmount(self.currency, self.amount)

    @property
    def native(self) -> CurrencyAmount:
        return CurrencyAmount(self.original_currency, self.original_amount)


Pricing = Direct | Converted


def pricing_from_fields(
    amount,
    currency: str,
    original_amount=None,
    original_currency: str | None = None,
    exchange_rate=None,
) -> Pricing:
    """
    Build a pricing from stored columns.

    The conversion triple must be entirely present or entirely absent.
    """
    triple = (original_amount, original_currency, exchange_rate)
    if all(field is None for field in triple):
        return Direct(to_decimal(amount), currency)
    if any(field is None for field in triple):
        raise InvalidLedgerState(
            "Conversion metadata is incomplete: original_amount, "
            "original_currency and exchange_rate must be set together",
            {
                "original_amount": None if original_amount is None else str(original_amount),
                "original_currency": original_currency,
                "exchange_rate": None if exchange_rate is None else str(exchange_rate),
            },
        )
    return Converted(
        original_amount=to_decimal(original_amount),
        original_currency=original_currency,
        amount=to_decimal(amount),
        currency=currency,
        exchange_rate=to_decimal(exchange_rate),
    )


# --- Ledger records ---

@dataclass(frozen=True)
class TransactionRecord:
    id: int | None
    pricing: Pricing
    cancelled: bool = False
    is_reversed: bool = False
    reversed_at: datetime | None = None
    reversal_reason: str | None = None

    @property
    def is_active(self) -> bool:
        return not (self.cancelled or self.is_reversed)

    def check_invariants(self) -> None:
        """Raise InvalidLedgerState if the record is internally inconsistent."""
        if self.cancelled and self.is_reversed:
            raise InvalidLedgerState(
                f"Transaction {self.id} is both cancelled and reversed",
                {"transaction_id": self.id},
            )
        if (self.reversed_at is None) != (self.reversal_reason is None):
            raise InvalidLedgerState(
                f"Transaction {self.id} has a reversal date without a "
                f"reason or a reason without a date",
                {"transaction_id": self.id},
            )

    @classmethod
    def from_model(cls, txn) -> "TransactionRecord":
        return cls(
            id=txn.id,
            pricing=pricing_from_fields(
                txn.amount,
                txn.currency,
                txn.original_amount,
                txn.original_currency,
                txn.exchange_rate,
            ),
            cancelled=txn.status == BankTransactionStatus.CANCELLED,
            is_reversed=bool(txn.is_reversed),
            reversed_at=txn.reversed_at,
            reversal_reason=txn.reversal_reason,
        )


@dataclass(frozen=True)
class OrderRecord:
    id: int
    status: str
    fiscal_year: int
    currency: str
    total_amount: Decimal

    @property
    def parsed_status(self) -> OrderStatus | None:
        return parse_order_status(self.status)

    @classmethod
    def from_model(cls, order) -> "OrderRecord":
        return cls(
            id=order.id,
            status=order.status,
            fiscal_year=order.fiscal_year,
            currency=order.currency,
            total_amount=to_decimal(order.total_amount),
        )


@dataclass(frozen=True)
class InvoiceRecord:
    id: int
    amount: Decimal
    currency: str
    order_id: int | None = None
    is_standalone: bool = False
    # Fiscal year of the issue date; used only for standalone invoices
    fiscal_year: int | None = None

    @property
    def value(self) -> CurrencyAmount:
        return CurrencyAmount(self.currency, self.amount)

    @classmethod
    def from_model(cls, invoice) -> "InvoiceRecord":
        return cls(
            id=invoice.id,
            amount=to_decimal(invoice.amount),
            currency=invoice.currency,
            order_id=invoice.order_id,
            is_standalone=bool(invoice.is_standalone),
            fiscal_year=fiscal_year_of(invoice.issue_date) if invoice.issue_date else None,
        )


@dataclass(frozen=True)
class PaymentRecord:
    id: int | None
    invoice_id: int
    payment_type: PaymentType
    pricing: Pricing
    is_reversed: bool = False

    @property
    def is_advance(self) -> bool:
        return self.payment_type == PaymentType.ADVANCE

    @property
    def native(self) -> CurrencyAmount:
        """The payment in its own (invoice) currency."""
        return self.pricing.native

    def bucket(self) -> CurrencyAmount:
        """
        Where the payment lands in per-currency views.

        A payment converted into its bank account's currency is
        reported in that currency, at the converted amount.
        """
        return self.pricing.settled

    @classmethod
    def from_model(cls, payment, bank_currency: str | None = None) -> "PaymentRecord":
        converted = (
            bank_currency is not None
            and bank_currency != payment.currency
            and payment.converted_amount is not None
            and payment.exchange_rate is not None
        )
        if converted:
            pricing: Pricing = Converted(
                original_amount=to_decimal(payment.amount),
                original_currency=payment.currency,
                amount=to_decimal(payment.converted_amount),
                currency=bank_currency,
                exchange_rate=to_decimal(payment.exchange_rate),
            )
        else:
            pricing = Direct(to_decimal(payment.amount), payment.currency)
        return cls(
            id=payment.id,
            invoice_id=payment.invoice_id,
            payment_type=payment.payment_type,
            pricing=pricing,
            is_reversed=bool(payment.is_reversed),
        )


@dataclass(frozen=True)
class TransferRecord:
    id: int | None
    amount: Decimal
    status: TransferStatus
    destination_country: str | None
    original_amount: Decimal | None = None

    @property
    def settlement_amount(self) -> Decimal:
        """Pre-conversion amount when known, so it matches the invoice currency."""
        if self.original_amount is not None:
            return self.original_amount
        return self.amount

    @classmethod
    def from_model(cls, transfer) -> "TransferRecord":
        destination = transfer.to_bank_account
        return cls(
            id=transfer.id,
            amount=to_decimal(transfer.amount),
            status=transfer.status,
            destination_country=destination.country if destination else None,
            original_amount=(
                to_decimal(transfer.original_amount)
                if transfer.original_amount is not None
                else None
            ),
        )


def parse_order_status(raw: str | OrderStatus | None) -> OrderStatus | None:
    """Map a stored status to the known enum, or None if it is unrecognized."""
    if isinstance(raw, OrderStatus):
        return raw
    try:
        return OrderStatus(raw)
    except ValueError:
        return None
