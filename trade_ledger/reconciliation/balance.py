"""
Balance reconstruction.

A bank account's balance is its opening balance plus every active
transaction, each counted in the account's own currency. Cancelled
and reversed transactions stay in the history but never count.

The fold is a sum, so the result does not depend on the order the
transactions are given in.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from trade_ledger.reconciliation.money import CurrencyAmount, to_decimal
from trade_ledger.reconciliation.records import Converted, TransactionRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalanceAnomaly:
    """A transaction whose currency could not be reconciled with the account's."""

    transaction_id: int | None
    account_currency: str
    transaction_currency: str
    amount_used: Decimal


@dataclass(frozen=True)
class BalanceReconstruction:
    balance: Decimal
    currency: str
    anomalies: tuple[BalanceAnomaly, ...] = ()

    @property
    def is_clean(self) -> bool:
        return not self.anomalies

    @property
    def value(self) -> CurrencyAmount:
        return CurrencyAmount(self.currency, self.balance)


def contribution(
    record: TransactionRecord, account_currency: str
) -> tuple[Decimal, BalanceAnomaly | None]:
    """
    The amount a single active transaction adds to an account balance.

    Preference order: the stored amount when it is already in the
    account currency, then the pre-conversion amount when that one is.
    Anything else is a data-integrity anomaly; the stored amount is
    used as a last resort and the anomaly is reported.
    """
    pricing = record.pricing
    if pricing.currency == account_currency:
        return pricing.amount, None
    if isinstance(pricing, Converted) and pricing.original_currency == account_currency:
        return pricing.original_amount, None

    anomaly = BalanceAnomaly(
        transaction_id=record.id,
        account_currency=account_currency,
        transaction_currency=pricing.currency,
        amount_used=pricing.amount,
    )
    return pricing.amount, anomaly


def reconstruct_balance(
    opening_balance,
    currency: str,
    transactions: Iterable[TransactionRecord],
) -> BalanceReconstruction:
    """
    Fold an opening balance and a transaction history into a balance.

    Raises InvalidLedgerState if any transaction is internally
    inconsistent (for example both cancelled and reversed); nothing
    is computed in that case.
    """
    records = list(transactions)
    for record in records:
        record.check_invariants()

    total = to_decimal(opening_balance)
    anomalies = []
    for record in records:
        if not record.is_active:
            continue
        amount, anomaly = contribution(record, currency)
        total += amount
        if anomaly is not None:
            anomalies.append(anomaly)
            logger.warning(
                "Transaction %s is in %s with no usable conversion into "
                "account currency %s; counting %s as-is",
                anomaly.transaction_id,
                anomaly.transaction_currency,
                currency,
                anomaly.amount_used,
            )

    return BalanceReconstruction(
        balance=total,
        currency=currency,
        anomalies=tuple(anomalies),
    )
