"""
Tests for currency-tagged amounts and per-currency totals.
"""

from decimal import Decimal

import pytest

from trade_ledger.exceptions import CurrencyMismatchError, InvalidLedgerState
from trade_ledger.reconciliation.money import CurrencyAmount, CurrencyTotals, to_decimal


class TestCurrencyAmount:

    def test_same_currency_adds(self):
        total = CurrencyAmount("USD", Decimal("100.50")) + CurrencyAmount("USD", Decimal("0.50"))
        assert total == CurrencyAmount("USD", Decimal("101.00"))

    def test_different_currencies_refuse_to_add(self):
        with pytest.raises(CurrencyMismatchError) as exc:
            CurrencyAmount("USD", Decimal("1")) + CurrencyAmount("PKR", Decimal("1"))
        assert exc.value.left == "USD"
        assert exc.value.right == "PKR"

    def test_mismatch_is_an_invariant_violation(self):
        with pytest.raises(InvalidLedgerState):
            CurrencyAmount("EUR", Decimal("1")) + CurrencyAmount("AED", Decimal("1"))

    def test_amount_is_normalized_to_decimal(self):
        assert CurrencyAmount("USD", 0.1).amount == Decimal("0.1")
        assert CurrencyAmount("USD", "12.34").amount == Decimal("12.34")

    def test_negation_keeps_currency(self):
        assert -CurrencyAmount("EUR", Decimal("5")) == CurrencyAmount("EUR", Decimal("-5"))


class TestCurrencyTotals:

    def test_seeded_currencies_report_zero(self):
        totals = CurrencyTotals(["USD", "PKR"])
        assert totals["USD"] == Decimal("0")
        assert totals["PKR"] == Decimal("0")
        assert set(totals) == {"USD", "PKR"}

    def test_buckets_stay_independent(self):
        totals = CurrencyTotals(["USD", "PKR"])
        totals.add(CurrencyAmount("USD", Decimal("100")))
        totals.add(CurrencyAmount("PKR", Decimal("28000")))
        totals.add(CurrencyAmount("USD", Decimal("50")))

        assert totals.as_dict() == {"USD": Decimal("150"), "PKR": Decimal("28000")}

    def test_unseeded_currency_appears_on_first_use(self):
        totals = CurrencyTotals(["USD"])
        totals.add(CurrencyAmount("GBP", Decimal("10")))
        assert totals["GBP"] == Decimal("10")
        assert "JPY" not in totals

    def test_to_decimal_treats_none_as_zero(self):
        assert to_decimal(None) == Decimal("0")
