"""
Invoice service.

Reads go through the invoice reconciler: payments are loaded,
snapshotted and folded on every call. refresh_invoice is the only
place the cached total_paid, outstanding_balance and status
columns are written.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from trade_ledger.config import DEFAULT_PAYMENT_TERMS_DAYS
from trade_ledger.exceptions import InvalidLedgerState, NotFound
from trade_ledger.models.client import Client
from trade_ledger.models.enums import AuditAction, InvoiceStatus
from trade_ledger.models.invoice import Invoice
from trade_ledger.models.order import Order
from trade_ledger.models.payment import Payment
from trade_ledger.reconciliation.invoices import (
    InvoiceReconciliation,
    invoice_status,
    reconcile,
)
from trade_ledger.reconciliation.money import ZERO
from trade_ledger.reconciliation.records import (
    InvoiceRecord,
    OrderRecord,
    PaymentRecord,
)
from trade_ledger.schemas.invoice import InvoiceCreate
from trade_ledger.services.audit_service import emit_event

logger = logging.getLogger(__name__)


def payment_record(payment: Payment) -> PaymentRecord:
    """Snapshot a payment, converted into its bank account currency if it has one."""
    bank_currency = payment.bank_account.currency if payment.bank_account else None
    return PaymentRecord.from_model(payment, bank_currency)


class InvoiceService:

    def __init__(self, db: Session):
        self.db = db

    def create_invoice(self, request: InvoiceCreate) -> Invoice:
        """
        Issue an invoice, either for an order or standalone.

        An order-linked invoice must belong to the order's client and
        be in the order's currency.
        """
        client = self.db.get(Client, request.client_id)
        if not client:
            raise NotFound("Client", request.client_id)

        currency = request.currency.upper()
        if request.order_id is not None:
            order = self.db.get(Order, request.order_id)
            if not order:
                raise NotFound("Order", request.order_id)
            if order.client_id != client.id:
                raise ValueError(
                    f"Order {order.id} does not belong to client {client.id}"
                )
            if order.currency != currency:
                raise ValueError(
                    f"Invoice currency {currency} does not match "
                    f"order currency {order.currency}"
                )

        if request.invoice_number:
            existing = self.db.execute(
                select(Invoice).where(Invoice.invoice_number == request.invoice_number)
            ).scalar_one_or_none()
            if existing:
                raise ValueError(
                    f"Invoice number '{request.invoice_number}' already exists"
                )

        issue_date = request.issue_date or datetime.utcnow()
        due_date = request.due_date or issue_date + timedelta(
            days=DEFAULT_PAYMENT_TERMS_DAYS
        )
        if due_date < issue_date:
            raise ValueError("Due date cannot be before the issue date")

        invoice = Invoice(
            invoice_number=request.invoice_number,
            order_id=request.order_id,
            client_id=client.id,
            amount=request.amount,
            currency=currency,
            issue_date=issue_date,
            due_date=due_date,
            status=InvoiceStatus.UNPAID,
            is_standalone=request.order_id is None,
            total_paid=ZERO,
            outstanding_balance=ZERO,
            notes=request.notes,
        )
        self.db.add(invoice)
        self.db.flush()
        self.refresh_invoice(invoice.id)

        emit_event(
            self.db,
            "invoices",
            invoice.id,
            AuditAction.CREATE,
            f"Invoice {invoice.invoice_number or invoice.id} issued for "
            f"{invoice.amount} {invoice.currency}",
        )
        return invoice

    def get_invoice(self, invoice_id: int) -> Invoice:
        """Get an invoice by ID."""
        invoice = self.db.get(Invoice, invoice_id)
        if not invoice:
            raise NotFound("Invoice", invoice_id)
        return invoice

    def list_invoices(self, client_id: int | None = None) -> list[Invoice]:
        query = select(Invoice).order_by(Invoice.issue_date.desc(), Invoice.id.desc())
        if client_id is not None:
            query = query.where(Invoice.client_id == client_id)
        return list(self.db.execute(query).scalars().all())

    def _reconcile(self, invoice: Invoice) -> InvoiceReconciliation:
        payments = self.db.execute(
            select(Payment).where(Payment.invoice_id == invoice.id)
        ).scalars().all()
        order = OrderRecord.from_model(invoice.order) if invoice.order else None
        try:
            return reconcile(
                InvoiceRecord.from_model(invoice),
                order,
                [payment_record(payment) for payment in payments],
            )
        except InvalidLedgerState as e:
            logger.error(
                "Reconciliation failed for invoice %s: %s", invoice.id, e.message
            )
            emit_event(
                self.db,
                "invoices",
                invoice.id,
                AuditAction.RECONCILIATION_FAILED,
                f"Reconciliation failed: {e.message}",
            )
            raise

    def reconcile_invoice(self, invoice_id: int) -> InvoiceReconciliation:
        """
        Paid and outstanding figures recomputed from the payment rows.

        Read-only: the cached columns on the invoice are not touched.
        """
        return self._reconcile(self.get_invoice(invoice_id))

    def refresh_invoice(self, invoice_id: int) -> Invoice:
        """Write the reconciled figures back into the invoice's cache columns."""
        invoice = self.get_invoice(invoice_id)
        result = self._reconcile(invoice)
        invoice.total_paid = result.total_paid
        invoice.outstanding_balance = result.outstanding_balance
        invoice.status = invoice_status(InvoiceRecord.from_model(invoice), result)
        self.db.flush()
        return invoice

    def list_receivables(self) -> list[InvoiceReconciliation]:
        """
        Invoices with a recognized balance still to collect.

        Grouped by currency, largest balance first within each.
        """
        invoices = self.db.execute(select(Invoice)).scalars().all()
        receivables = []
        for invoice in invoices:
            result = self._reconcile(invoice)
            if result.outstanding_balance > ZERO:
                receivables.append(result)
        receivables.sort(key=lambda r: (r.currency, -r.outstanding_balance, r.invoice_id))
        return receivables
