"""
Bank account model.

Each account holds money in exactly one currency. The opening
balance is set when the account is created and changes only
through an explicit adjustment.

current_balance is a cache. The authoritative balance is always
the opening balance folded with the account's active transactions,
recomputed by the balance reconstructor on every read that needs it.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, DateTime, Numeric, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from trade_ledger.models.base import Base
from trade_ledger.models.enums import BankAccountType, RecordStatus


class BankAccount(Base):
    __tablename__ = "bank_accounts"

    id: Mapped[int] = mapped_column(primary_key=True)
    account_name: Mapped[str] = mapped_column(String(100), nullable=False)
    bank_name: Mapped[str] = mapped_column(String(100), nullable=False)
    account_number: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False
    )
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, index=True)
    account_type: Mapped[BankAccountType] = mapped_column(
        SAEnum(
            BankAccountType,
            name="bank_account_type_enum",
            create_constraint=True,
        ),
        nullable=False,
        default=BankAccountType.BUSINESS,
    )
    status: Mapped[RecordStatus] = mapped_column(
        SAEnum(
            RecordStatus,
            name="bank_account_status_enum",
            create_constraint=True,
        ),
        nullable=False,
        default=RecordStatus.ACTIVE,
    )
    opening_balance: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    current_balance: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False, default=Decimal("0")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    transactions: Mapped[list["BankTransaction"]] = relationship(
        back_populates="bank_account",
        foreign_keys="BankTransaction.bank_account_id",
    )

    @property
    def is_active(self) -> bool:
        return self.status == RecordStatus.ACTIVE

    def __repr__(self) -> str:
        return (
            f"<BankAccount {self.account_name} "
            f"{self.currency} ({self.status.value})>"
        )
