"""
Invoice reconciliation.

Derives an invoice's paid and outstanding figures from its payments
and the state of its order.

Money collected before an order ships is an advance, not a settled
receivable. Until the order is shipped or delivered the invoice
reports nothing outstanding, however much has been paid. Standalone
invoices have no order and are always receivable.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from trade_ledger.exceptions import InvalidLedgerState
from trade_ledger.models.enums import InvoiceStatus, OrderStatus
from trade_ledger.reconciliation.money import CurrencyAmount, ZERO
from trade_ledger.reconciliation.records import (
    InvoiceRecord,
    OrderRecord,
    PaymentRecord,
    parse_order_status,
)

logger = logging.getLogger(__name__)

RECEIVABLE_ORDER_STATUSES = frozenset({OrderStatus.SHIPPED, OrderStatus.DELIVERED})
PRE_SHIPMENT_ORDER_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.IN_PRODUCTION})


@dataclass(frozen=True)
class InvoiceReconciliation:
    invoice_id: int
    currency: str
    total_paid: Decimal
    advance_paid: Decimal
    invoice_paid: Decimal
    outstanding_balance: Decimal
    outstanding_recognized: bool


def invoice_status(invoice: InvoiceRecord, result: InvoiceReconciliation) -> InvoiceStatus:
    """
    Payment status for display and caching.

    Based on money received against the invoice amount only. An unshipped
    order with a partial advance is partially paid even though nothing
    is outstanding yet.
    """
    if result.total_paid <= ZERO:
        return InvoiceStatus.UNPAID
    if result.total_paid >= invoice.amount:
        return InvoiceStatus.PAID
    return InvoiceStatus.PARTIALLY_PAID


def outstanding_recognized(
    invoice: InvoiceRecord, order: OrderRecord | None
) -> bool:
    """
    Decide whether an invoice's unpaid remainder counts as receivable.

    - standalone invoice: always
    - order shipped or delivered: yes
    - order pending, in production or cancelled: no
    - order status not recognized: no, with a warning. Under-reporting
      receivables is the safer error in this domain.

    Raises InvalidLedgerState for an order-linked invoice whose order
    is missing or is a different order.
    """
    if invoice.is_standalone:
        return True
    if order is None:
        raise InvalidLedgerState(
            f"Invoice {invoice.id} is linked to order {invoice.order_id} "
            f"but no order was supplied",
            {"invoice_id": invoice.id, "order_id": invoice.order_id},
        )
    if invoice.order_id is not None and order.id != invoice.order_id:
        raise InvalidLedgerState(
            f"Invoice {invoice.id} belongs to order {invoice.order_id}, "
            f"not order {order.id}",
            {"invoice_id": invoice.id, "order_id": order.id},
        )

    status = parse_order_status(order.status)
    if status is None:
        logger.warning(
            "Order %s has unrecognized status %r; treating invoice %s "
            "as not yet shipped",
            order.id,
            order.status,
            invoice.id,
        )
        return False
    return status in RECEIVABLE_ORDER_STATUSES


def reconcile(
    invoice: InvoiceRecord,
    order: OrderRecord | None,
    payments: Iterable[PaymentRecord],
) -> InvoiceReconciliation:
    """
    Compute total/advance/invoice paid and the outstanding balance.

    Reversed payments are ignored. Every payment must belong to this
    invoice and be in the invoice currency; otherwise the whole
    computation fails with InvalidLedgerState.
    """
    advance = CurrencyAmount.zero(invoice.currency)
    regular = CurrencyAmount.zero(invoice.currency)

    for payment in payments:
        if payment.invoice_id != invoice.id:
            raise InvalidLedgerState(
                f"Payment {payment.id} belongs to invoice {payment.invoice_id}, "
                f"not invoice {invoice.id}",
                {"payment_id": payment.id, "invoice_id": invoice.id},
            )
        if payment.native.currency != invoice.currency:
            raise InvalidLedgerState(
                f"Payment {payment.id} is in {payment.native.currency} but "
                f"invoice {invoice.id} is in {invoice.currency}",
                {"payment_id": payment.id, "invoice_id": invoice.id},
            )
        if payment.is_reversed:
            continue
        if payment.is_advance:
            advance = advance + payment.native
        else:
            regular = regular + payment.native

    total = advance + regular
    recognized = outstanding_recognized(invoice, order)
    if recognized:
        outstanding = max(ZERO, invoice.amount - total.amount)
    else:
        outstanding = ZERO

    return InvoiceReconciliation(
        invoice_id=invoice.id,
        currency=invoice.currency,
        total_paid=total.amount,
        advance_paid=advance.amount,
        invoice_paid=regular.amount,
        outstanding_balance=outstanding,
        outstanding_recognized=recognized,
    )
