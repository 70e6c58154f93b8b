"""
Currency-tagged amounts.

An amount is never separated from its currency code. Amounts in the
same currency add; amounts in different currencies refuse to, because
there is no rate at this layer to make that meaningful.
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from decimal import Decimal

from trade_ledger.exceptions import CurrencyMismatchError

ZERO = Decimal("0")
# Scale of every stored money column
AMOUNT_QUANTUM = Decimal("0.0001")
HUNDRED = Decimal("100")


def to_decimal(value) -> Decimal:
    """Convert a stored number to Decimal without passing through float repr."""
    if isinstance(value, Decimal):
        return value
    if value is None:
        return ZERO
    return Decimal(str(value))


@dataclass(frozen=True)
class CurrencyAmount:
    """An immutable (currency, amount) pair."""

    currency: str
    amount: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))

    @classmethod
    def zero(cls, currency: str) -> "CurrencyAmount":
        return cls(currency, ZERO)

    def __add__(self, other: "CurrencyAmount") -> "CurrencyAmount":
        if not isinstance(other, CurrencyAmount):
            return NotImplemented
        if other.currency != self.currency:
            raise CurrencyMismatchError(self.currency, other.currency)
        return CurrencyAmount(self.currency, self.amount + other.amount)

    def __neg__(self) -> "CurrencyAmount":
        return CurrencyAmount(self.currency, -self.amount)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"


class CurrencyTotals(Mapping):
    """
    Running totals kept in independent per-currency buckets.

    Seeded currencies always appear, reporting zero until something
    is added to them. Any other currency appears on first use.
    There is no grand total.
    """

    def __init__(self, currencies: Iterable[str] = ()):
        self._buckets: dict[str, CurrencyAmount] = {
            code: CurrencyAmount.zero(code) for code in currencies
        }

    def add(self, value: CurrencyAmount) -> None:
        current = self._buckets.get(value.currency)
        if current is None:
            self._buckets[value.currency] = value
        else:
            self._buckets[value.currency] = current + value

    def __getitem__(self, currency: str) -> Decimal:
        return self._buckets[currency].amount

    def __iter__(self) -> Iterator[str]:
        return iter(self._buckets)

    def __len__(self) -> int:
        return len(self._buckets)

    def as_dict(self) -> dict[str, Decimal]:
        return {code: bucket.amount for code, bucket in self._buckets.items()}

    def __repr__(self) -> str:
        return f"CurrencyTotals({self.as_dict()!r})"
