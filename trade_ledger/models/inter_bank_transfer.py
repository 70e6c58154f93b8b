"""
Inter-bank transfer model.

Moves invoice proceeds between the company's own bank accounts,
typically from a foreign collection account into an account in
the settlement country. A transfer only touches balances once it
is completed, at which point its two bank transaction legs are
posted.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, DateTime, Numeric, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from trade_ledger.models.base import Base
from trade_ledger.models.enums import TransferStatus


class InterBankTransfer(Base):
    __tablename__ = "inter_bank_transfers"

    id: Mapped[int] = mapped_column(primary_key=True)
    from_bank_account_id: Mapped[int] = mapped_column(
        ForeignKey("bank_accounts.id"), nullable=False, index=True
    )
    to_bank_account_id: Mapped[int] = mapped_column(
        ForeignKey("bank_accounts.id"), nullable=False, index=True
    )
    # Amount credited to the destination, in its currency
    amount: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    # Amount debited from the source, when the currencies differ
    original_amount: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 4), nullable=True
    )
    original_currency: Mapped[str | None] = mapped_column(
        String(3), nullable=True
    )
    exchange_rate: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 8), nullable=True
    )
    # Tax deducted on arrival; the destination is credited the net amount
    tax_deduction_rate: Mapped[Decimal | None] = mapped_column(
        Numeric(7, 4), nullable=True
    )
    tax_deduction_amount: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 4), nullable=True
    )
    tax_deduction_currency: Mapped[str | None] = mapped_column(
        String(3), nullable=True
    )
    net_amount_received: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 4), nullable=True
    )
    invoice_id: Mapped[int | None] = mapped_column(
        ForeignKey("invoices.id"), nullable=True, index=True
    )
    reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[TransferStatus] = mapped_column(
        SAEnum(TransferStatus, name="transfer_status_enum", create_constraint=True),
        nullable=False,
        default=TransferStatus.PENDING,
    )
    transfer_date: Mapped[datetime | None] = mapped_column(
        DateTime, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    from_bank_account: Mapped["BankAccount"] = relationship(
        foreign_keys=[from_bank_account_id]
    )
    to_bank_account: Mapped["BankAccount"] = relationship(
        foreign_keys=[to_bank_account_id]
    )

    def __repr__(self) -> str:
        return (
            f"<InterBankTransfer {self.amount} {self.currency} "
            f"({self.status.value})>"
        )
