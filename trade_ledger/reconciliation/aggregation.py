"""
Multi-currency financial summary.

Rolls orders, invoices and payments up into per-currency figures for
one fiscal year. Currencies are never combined: every figure is a
set of independent buckets.

Scoping rules:
- revenue: orders in the fiscal year that are not cancelled, by order
  currency. Revenue is what was committed, not what was received.
- paid / advance: payments whose invoice falls in the fiscal year
  (through its order; a standalone invoice through its issue date),
  by the currency the money actually landed in.
- outstanding: invoices in the fiscal year with a recognized, positive
  outstanding balance, by invoice currency.
- pipeline: pending and in-production orders from every fiscal year.
  Pipeline is a rolling figure and is not scoped to the fiscal year.
"""

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass

from trade_ledger.config import SUPPORTED_CURRENCIES
from trade_ledger.exceptions import InvalidLedgerState
from trade_ledger.models.enums import OrderStatus
from trade_ledger.reconciliation.invoices import PRE_SHIPMENT_ORDER_STATUSES, reconcile
from trade_ledger.reconciliation.money import CurrencyAmount, CurrencyTotals, ZERO
from trade_ledger.reconciliation.records import (
    InvoiceRecord,
    OrderRecord,
    PaymentRecord,
)


@dataclass(frozen=True)
class FinancialSummary:
    fiscal_year: int
    revenue_by_currency: CurrencyTotals
    paid_by_currency: CurrencyTotals
    outstanding_by_currency: CurrencyTotals
    advance_by_currency: CurrencyTotals
    pipeline_by_currency: CurrencyTotals

    def as_dict(self) -> dict:
        return {
            "fiscal_year": self.fiscal_year,
            "revenue_by_currency": self.revenue_by_currency.as_dict(),
            "paid_by_currency": self.paid_by_currency.as_dict(),
            "outstanding_by_currency": self.outstanding_by_currency.as_dict(),
            "advance_by_currency": self.advance_by_currency.as_dict(),
            "pipeline_by_currency": self.pipeline_by_currency.as_dict(),
        }


def invoice_fiscal_year(
    invoice: InvoiceRecord, orders_by_id: dict[int, OrderRecord]
) -> int | None:
    """Fiscal year an invoice is reported in."""
    if invoice.order_id is None:
        return invoice.fiscal_year
    order = orders_by_id.get(invoice.order_id)
    if order is None:
        raise InvalidLedgerState(
            f"Invoice {invoice.id} references unknown order {invoice.order_id}",
            {"invoice_id": invoice.id, "order_id": invoice.order_id},
        )
    return order.fiscal_year


def aggregate(
    fiscal_year: int,
    orders: Iterable[OrderRecord],
    invoices: Iterable[InvoiceRecord],
    payments: Iterable[PaymentRecord],
    currencies: Iterable[str] = SUPPORTED_CURRENCIES,
) -> FinancialSummary:
    """
    Build the per-currency financial summary for a fiscal year.

    Every code in `currencies` is present in every figure, at zero when
    there was no activity. Raises InvalidLedgerState when a payment
    points at an invoice, or an invoice at an order, that is not in
    the supplied data.
    """
    currencies = tuple(currencies)
    orders = list(orders)
    invoices = list(invoices)
    orders_by_id = {order.id: order for order in orders}
    invoices_by_id = {invoice.id: invoice for invoice in invoices}

    revenue = CurrencyTotals(currencies)
    paid = CurrencyTotals(currencies)
    outstanding = CurrencyTotals(currencies)
    advance = CurrencyTotals(currencies)
    pipeline = CurrencyTotals(currencies)

    for order in orders:
        status = order.parsed_status
        value = CurrencyAmount(order.currency, order.total_amount)
        if status in PRE_SHIPMENT_ORDER_STATUSES:
            pipeline.add(value)
        if order.fiscal_year == fiscal_year and status != OrderStatus.CANCELLED:
            revenue.add(value)

    payments_by_invoice: dict[int, list[PaymentRecord]] = defaultdict(list)
    for payment in payments:
        if payment.invoice_id not in invoices_by_id:
            raise InvalidLedgerState(
                f"Payment {payment.id} references unknown invoice {payment.invoice_id}",
                {"payment_id": payment.id, "invoice_id": payment.invoice_id},
            )
        payments_by_invoice[payment.invoice_id].append(payment)

    for invoice in invoices:
        if invoice_fiscal_year(invoice, orders_by_id) != fiscal_year:
            continue
        invoice_payments = payments_by_invoice.get(invoice.id, [])

        for payment in invoice_payments:
            if payment.is_reversed:
                continue
            paid.add(payment.bucket())
            if payment.is_advance:
                advance.add(payment.bucket())

        order = orders_by_id.get(invoice.order_id) if invoice.order_id is not None else None
        result = reconcile(invoice, order, invoice_payments)
        if result.outstanding_balance > ZERO:
            outstanding.add(CurrencyAmount(invoice.currency, result.outstanding_balance))

    return FinancialSummary(
        fiscal_year=fiscal_year,
        revenue_by_currency=revenue,
        paid_by_currency=paid,
        outstanding_by_currency=outstanding,
        advance_by_currency=advance,
        pipeline_by_currency=pipeline,
    )
