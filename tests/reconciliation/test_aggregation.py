"""
Tests for the multi-currency financial summary.
"""

from datetime import datetime
from decimal import Decimal

import pytest
from hypothesis import given, strategies as st

from trade_ledger.config import SUPPORTED_CURRENCIES
from trade_ledger.exceptions import InvalidLedgerState
from trade_ledger.models.enums import OrderStatus, PaymentType
from trade_ledger.reconciliation.aggregation import aggregate
from trade_ledger.reconciliation.records import (
    Converted,
    Direct,
    InvoiceRecord,
    OrderRecord,
    PaymentRecord,
)

FY = 2025


def order(order_id, amount, currency="USD", status=OrderStatus.SHIPPED, fiscal_year=FY):
    return OrderRecord(
        id=order_id,
        status=status.value if isinstance(status, OrderStatus) else status,
        fiscal_year=fiscal_year,
        currency=currency,
        total_amount=Decimal(amount),
    )


def invoice_for(o, invoice_id=None):
    return InvoiceRecord(
        id=invoice_id or o.id,
        amount=o.total_amount,
        currency=o.currency,
        order_id=o.id,
    )


def payment(invoice, amount, payment_type=PaymentType.INVOICE, pricing=None, is_reversed=False):
    return PaymentRecord(
        id=None,
        invoice_id=invoice.id,
        payment_type=payment_type,
        pricing=pricing or Direct(Decimal(amount), invoice.currency),
        is_reversed=is_reversed,
    )


class TestShape:

    def test_every_currency_present_when_idle(self):
        summary = aggregate(FY, [], [], [])
        for figure in (
            summary.revenue_by_currency,
            summary.paid_by_currency,
            summary.outstanding_by_currency,
            summary.advance_by_currency,
            summary.pipeline_by_currency,
        ):
            assert set(figure) == set(SUPPORTED_CURRENCIES)
            assert all(value == Decimal("0") for value in figure.values())

    def test_as_dict_keeps_currencies_apart(self):
        orders = [order(1, "100", "USD"), order(2, "28000", "PKR")]
        summary = aggregate(FY, orders, [], []).as_dict()
        assert summary["revenue_by_currency"]["USD"] == Decimal("100")
        assert summary["revenue_by_currency"]["PKR"] == Decimal("28000")


class TestRevenueAndPipeline:

    def test_revenue_excludes_cancelled_and_other_years(self):
        orders = [
            order(1, "100"),
            order(2, "200", status=OrderStatus.CANCELLED),
            order(3, "400", fiscal_year=FY - 1),
            order(4, "800", status=OrderStatus.PENDING),
        ]
        summary = aggregate(FY, orders, [], [])
        assert summary.revenue_by_currency["USD"] == Decimal("900")

    def test_pipeline_is_rolling_across_years(self):
        orders = [
            order(1, "100", status=OrderStatus.PENDING, fiscal_year=FY - 2),
            order(2, "200", status=OrderStatus.IN_PRODUCTION),
            order(3, "400", status=OrderStatus.SHIPPED),
            order(4, "800", status=OrderStatus.CANCELLED),
        ]
        summary = aggregate(FY, orders, [], [])
        assert summary.pipeline_by_currency["USD"] == Decimal("300")


class TestPaidAndOutstanding:

    def test_paid_follows_invoice_fiscal_year(self):
        this_year = order(1, "1000")
        last_year = order(2, "1000", fiscal_year=FY - 1)
        inv1, inv2 = invoice_for(this_year), invoice_for(last_year)
        summary = aggregate(
            FY, [this_year, last_year], [inv1, inv2],
            [payment(inv1, "300"), payment(inv2, "500")],
        )
        assert summary.paid_by_currency["USD"] == Decimal("300")

    def test_converted_payment_buckets_under_bank_currency(self):
        o = order(1, "1000")
        inv = invoice_for(o)
        converted = payment(inv, "100", pricing=Converted(
            original_amount=Decimal("100"),
            original_currency="USD",
            amount=Decimal("28000"),
            currency="PKR",
            exchange_rate=Decimal("280"),
        ))
        summary = aggregate(FY, [o], [inv], [converted])

        assert summary.paid_by_currency["PKR"] == Decimal("28000")
        assert summary.paid_by_currency["USD"] == Decimal("0")
        # Outstanding stays in invoice currency
        assert summary.outstanding_by_currency["USD"] == Decimal("900")

    def test_advance_is_subset_of_paid(self):
        o = order(1, "1000", status=OrderStatus.PENDING)
        inv = invoice_for(o)
        summary = aggregate(FY, [o], [inv], [
            payment(inv, "400", PaymentType.ADVANCE),
            payment(inv, "100", PaymentType.ADVANCE, is_reversed=True),
        ])
        assert summary.advance_by_currency["USD"] == Decimal("400")
        assert summary.paid_by_currency["USD"] == Decimal("400")
        assert summary.outstanding_by_currency["USD"] == Decimal("0")

    def test_outstanding_only_for_shipped_orders(self):
        shipped = order(1, "1000", status=OrderStatus.SHIPPED)
        pending = order(2, "500", status=OrderStatus.PENDING)
        fully_paid = order(3, "250", status=OrderStatus.DELIVERED)
        invoices = [invoice_for(shipped), invoice_for(pending), invoice_for(fully_paid)]
        summary = aggregate(
            FY, [shipped, pending, fully_paid], invoices,
            [payment(invoices[2], "250")],
        )
        assert summary.outstanding_by_currency["USD"] == Decimal("1000")

    def test_standalone_invoice_uses_issue_date_year(self):
        standalone = InvoiceRecord(
            id=7, amount=Decimal("50"), currency="EUR",
            is_standalone=True, fiscal_year=FY,
        )
        old = InvoiceRecord(
            id=8, amount=Decimal("70"), currency="EUR",
            is_standalone=True, fiscal_year=FY - 1,
        )
        summary = aggregate(FY, [], [standalone, old], [])
        assert summary.outstanding_by_currency["EUR"] == Decimal("50")


class TestIntegrity:

    def test_payment_for_unknown_invoice_is_fatal(self):
        orphan = PaymentRecord(
            id=1, invoice_id=404, payment_type=PaymentType.INVOICE,
            pricing=Direct(Decimal("10"), "USD"),
        )
        with pytest.raises(InvalidLedgerState, match="unknown invoice"):
            aggregate(FY, [], [], [orphan])

    def test_invoice_for_unknown_order_is_fatal(self):
        inv = InvoiceRecord(id=1, amount=Decimal("10"), currency="USD", order_id=99)
        with pytest.raises(InvalidLedgerState, match="unknown order"):
            aggregate(FY, [], [inv], [])


@st.composite
def datasets(draw):
    """Orders with one invoice each and a few direct payments per invoice."""
    n = draw(st.integers(min_value=0, max_value=12))
    orders, invoices, payments = [], [], []
    for i in range(1, n + 1):
        o = order(
            i,
            str(draw(st.integers(min_value=1, max_value=10000))),
            currency=draw(st.sampled_from(SUPPORTED_CURRENCIES)),
            status=draw(st.sampled_from(list(OrderStatus))),
            fiscal_year=draw(st.sampled_from([FY - 1, FY])),
        )
        inv = invoice_for(o)
        orders.append(o)
        invoices.append(inv)
        for _ in range(draw(st.integers(min_value=0, max_value=3))):
            payments.append(payment(
                inv,
                str(draw(st.integers(min_value=1, max_value=3000))),
                payment_type=draw(st.sampled_from(list(PaymentType))),
                is_reversed=draw(st.booleans()),
            ))
    return orders, invoices, payments


@given(datasets())
def test_each_bucket_matches_direct_filter(data):
    orders, invoices, payments = data
    summary = aggregate(FY, orders, invoices, payments)
    by_id = {o.id: o for o in orders}
    received = {inv.id: Decimal("0") for inv in invoices}
    for p in payments:
        if not p.is_reversed:
            received[p.invoice_id] += p.pricing.amount

    for currency in SUPPORTED_CURRENCIES:
        revenue = sum(
            (o.total_amount for o in orders
             if o.currency == currency and o.fiscal_year == FY
             and o.status != OrderStatus.CANCELLED.value),
            Decimal("0"),
        )
        paid = sum(
            (p.pricing.amount for p in payments
             if not p.is_reversed and p.pricing.currency == currency
             and by_id[p.invoice_id].fiscal_year == FY),
            Decimal("0"),
        )
        outstanding = sum(
            (max(Decimal("0"), inv.amount - received[inv.id]) for inv in invoices
             if inv.currency == currency and by_id[inv.order_id].fiscal_year == FY
             and by_id[inv.order_id].status in ("shipped", "delivered")),
            Decimal("0"),
        )
        assert summary.revenue_by_currency[currency] == revenue
        assert summary.paid_by_currency[currency] == paid
        assert summary.outstanding_by_currency[currency] == outstanding
