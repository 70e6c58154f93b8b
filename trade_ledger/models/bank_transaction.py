"""
Bank transaction model.

The append-only history of an account. A transaction is never
deleted or rewritten: cancelling or reversing it is a state
transition that removes it from the balance while keeping it in
the audit trail.

When money crossed a currency boundary on its way into the
account, the figure at the point of origin is kept in the
conversion triple (original_amount, original_currency,
exchange_rate). The triple is either fully present or absent.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, DateTime, Numeric, ForeignKey, Boolean,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from trade_ledger.models.base import Base
from trade_ledger.models.enums import BankTransactionType, BankTransactionStatus


class BankTransaction(Base):
    __tablename__ = "bank_transactions"

    id: Mapped[int] = mapped_column(primary_key=True)
    bank_account_id: Mapped[int] = mapped_column(
        ForeignKey("bank_accounts.id"), nullable=False, index=True
    )
    transaction_type: Mapped[BankTransactionType] = mapped_column(
        SAEnum(
            BankTransactionType,
            name="bank_transaction_type_enum",
            create_constraint=True,
        ),
        nullable=False,
    )
    # Signed: outflows are negative
    amount: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    status: Mapped[BankTransactionStatus] = mapped_column(
        SAEnum(
            BankTransactionStatus,
            name="bank_transaction_status_enum",
            create_constraint=True,
        ),
        nullable=False,
        default=BankTransactionStatus.ACTIVE,
    )
    is_reversed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    reversed_at: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )
    reversal_reason: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )

    # Conversion triple
    original_amount: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 4), nullable=True
    )
    original_currency: Mapped[str | None] = mapped_column(
        String(3), nullable=True
    )
    exchange_rate: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 8), nullable=True
    )

    description: Mapped[str] = mapped_column(String(255), nullable=False)
    reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    payment_id: Mapped[int | None] = mapped_column(
        ForeignKey("payments.id"), nullable=True, index=True
    )
    related_bank_account_id: Mapped[int | None] = mapped_column(
        ForeignKey("bank_accounts.id"), nullable=True
    )
    transaction_date: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    bank_account: Mapped["BankAccount"] = relationship(
        back_populates="transactions",
        foreign_keys=[bank_account_id],
    )

    def __repr__(self) -> str:
        return (
            f"<BankTransaction {self.transaction_type.value} "
            f"{self.amount} {self.currency} ({self.status.value})>"
        )
