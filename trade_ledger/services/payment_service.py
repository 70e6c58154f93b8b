"""
Payments: money received against invoices.

Recording a payment is one logical operation:
1. Validate the invoice, currency and remaining balance
2. Freeze the conversion into the bank account currency, if any
3. Work out any tax withheld at source
4. Create the payment
5. Credit the bank account with the net cash as payment_received
6. Refresh the invoice caches

Withholding never changes what the invoice is credited with: the
payer settled the gross amount, part of it by paying tax on our
behalf.

The caller commits once at the end, so either all of it lands or
none of it does.
"""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from trade_ledger.config import get_settings
from trade_ledger.exceptions import NotFound
from trade_ledger.models.client import Client
from trade_ledger.models.enums import AuditAction, ClientType
from trade_ledger.models.payment import Payment
from trade_ledger.reconciliation.money import AMOUNT_QUANTUM, HUNDRED, ZERO
from trade_ledger.schemas.payment import PaymentCreate
from trade_ledger.services.audit_service import emit_event
from trade_ledger.services.bank_account_service import BankAccountService
from trade_ledger.services.bank_transaction_service import BankTransactionService
from trade_ledger.services.invoice_service import InvoiceService

logger = logging.getLogger(__name__)


class PaymentService:

    def __init__(self, db: Session, settlement_country: str | None = None):
        self.db = db
        self.settlement_country = (
            settlement_country or get_settings().SETTLEMENT_COUNTRY
        )
        self.invoice_service = InvoiceService(db)
        self.account_service = BankAccountService(db)
        self.transaction_service = BankTransactionService(db)

    def record_payment(self, request: PaymentCreate) -> Payment:
        invoice = self.invoice_service.get_invoice(request.invoice_id)
        currency = request.currency.upper()
        if currency != invoice.currency:
            raise ValueError(
                f"Payment currency {currency} must match invoice currency "
                f"{invoice.currency}"
            )

        current = self.invoice_service.reconcile_invoice(invoice.id)
        remaining = invoice.amount - current.total_paid
        if request.amount > remaining:
            raise ValueError(
                f"Payment of {request.amount} {currency} exceeds the remaining "
                f"invoice balance of {max(remaining, ZERO)} {currency}"
            )

        account = None
        exchange_rate = None
        converted_amount = None
        if request.bank_account_id is not None:
            account = self.account_service.get_account(request.bank_account_id)
            if not account.is_active:
                raise ValueError(f"Bank account {account.id} is not active")
            if account.currency != currency:
                if request.exchange_rate is None:
                    raise ValueError(
                        f"Exchange rate is required to deposit a {currency} "
                        f"payment into a {account.currency} account"
                    )
                exchange_rate = request.exchange_rate
                converted_amount = (request.amount * exchange_rate).quantize(
                    AMOUNT_QUANTUM
                )

        withheld_tax_rate = None
        withheld_tax_amount = None
        cash_received = None
        if request.withheld_tax_rate:
            self._check_withholding_applies(invoice.client_id, account)
            # Withheld from what actually lands, after any conversion
            gross_cash = converted_amount if converted_amount is not None else request.amount
            withheld_tax_rate = request.withheld_tax_rate
            withheld_tax_amount = (gross_cash * withheld_tax_rate / HUNDRED).quantize(
                AMOUNT_QUANTUM
            )
            cash_received = gross_cash - withheld_tax_amount

        payment = Payment(
            payment_type=request.payment_type,
            invoice_id=invoice.id,
            client_id=invoice.client_id,
            amount=request.amount,
            currency=currency,
            method=request.method,
            reference=request.reference,
            payment_date=request.payment_date or datetime.utcnow(),
            bank_account_id=account.id if account else None,
            exchange_rate=exchange_rate,
            converted_amount=converted_amount,
            withheld_tax_rate=withheld_tax_rate,
            withheld_tax_amount=withheld_tax_amount,
            cash_received=cash_received,
            is_reversed=False,
            notes=request.notes,
        )
        self.db.add(payment)
        self.db.flush()

        if account is not None:
            self.transaction_service.post_payment_receipt(payment, account)
        self.invoice_service.refresh_invoice(invoice.id)

        if converted_amount is not None:
            message = (
                f"{payment.payment_type.value} payment of {payment.amount} {currency} "
                f"({converted_amount} {account.currency} at {exchange_rate}) "
                f"against invoice {invoice.invoice_number or invoice.id}"
            )
        else:
            message = (
                f"{payment.payment_type.value} payment of {payment.amount} {currency} "
                f"against invoice {invoice.invoice_number or invoice.id}"
            )
        if withheld_tax_amount is not None:
            message += f", {withheld_tax_amount} withheld at {withheld_tax_rate}%"
        logger.info(message)
        emit_event(self.db, "payments", payment.id, AuditAction.CREATE, message)
        return payment

    def _check_withholding_applies(self, client_id: int, account) -> None:
        """
        Tax is withheld from local clients, and from international
        clients paying into an account in the settlement country.
        """
        client = self.db.get(Client, client_id)
        if client is not None and client.client_type == ClientType.LOCAL:
            return
        if account is not None and account.country == self.settlement_country:
            return
        raise ValueError(
            "Withholding tax only applies to local clients or to payments "
            f"received into a bank account in {self.settlement_country}"
        )

    def get_payment(self, payment_id: int) -> Payment:
        """Get a payment by ID."""
        payment = self.db.get(Payment, payment_id)
        if not payment:
            raise NotFound("Payment", payment_id)
        return payment

    def list_payments(
        self,
        invoice_id: int | None = None,
        include_reversed: bool = True,
    ) -> list[Payment]:
        query = select(Payment).order_by(Payment.payment_date, Payment.id)
        if invoice_id is not None:
            self.invoice_service.get_invoice(invoice_id)
            query = query.where(Payment.invoice_id == invoice_id)
        if not include_reversed:
            query = query.where(Payment.is_reversed.is_(False))
        return list(self.db.execute(query).scalars().all())

    def reverse_payment(self, payment_id: int, reason: str) -> Payment:
        """
        Reverse a payment and the bank transaction it created.

        Both rows are kept and flagged. The invoice and bank balance
        caches are refreshed.
        """
        payment = self.get_payment(payment_id)
        if payment.is_reversed:
            raise ValueError(f"Payment {payment_id} already reversed")

        payment.is_reversed = True
        payment.reversed_at = datetime.utcnow()
        payment.reversal_reason = reason
        self.db.flush()

        self.transaction_service.reverse_payment_transactions(payment.id, reason)
        self.invoice_service.refresh_invoice(payment.invoice_id)

        emit_event(
            self.db,
            "payments",
            payment.id,
            AuditAction.UPDATE,
            f"Payment reversed: {payment.amount} {payment.currency} - {reason}",
        )
        return payment
