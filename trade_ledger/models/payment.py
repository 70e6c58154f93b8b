"""
Payment model.

A payment is always expressed in its own currency, which is the
invoice currency. When it lands in a bank account held in another
currency, the rate used and the converted figure are frozen into
the record at creation time and never re-derived.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    String, DateTime, Numeric, ForeignKey, Boolean,
    Enum as SAEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from trade_ledger.models.base import Base
from trade_ledger.models.enums import PaymentType, PaymentMethod


class Payment(Base):
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(primary_key=True)
    payment_type: Mapped[PaymentType] = mapped_column(
        SAEnum(PaymentType, name="payment_type_enum", create_constraint=True),
        nullable=False,
        default=PaymentType.INVOICE,
    )
    invoice_id: Mapped[int] = mapped_column(
        ForeignKey("invoices.id"), nullable=False, index=True
    )
    client_id: Mapped[int] = mapped_column(
        ForeignKey("clients.id"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(19, 4), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    method: Mapped[PaymentMethod] = mapped_column(
        SAEnum(PaymentMethod, name="payment_method_enum", create_constraint=True),
        nullable=False,
    )
    reference: Mapped[str] = mapped_column(String(100), nullable=False)
    payment_date: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    bank_account_id: Mapped[int | None] = mapped_column(
        ForeignKey("bank_accounts.id"), nullable=True, index=True
    )

    # Conversion into the bank account currency
    exchange_rate: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 8), nullable=True
    )
    converted_amount: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 4), nullable=True
    )

    # Tax withheld at source. Both amounts are in the currency the cash
    # landed in: the bank account currency when converted.
    withheld_tax_rate: Mapped[Decimal | None] = mapped_column(
        Numeric(7, 4), nullable=True
    )
    withheld_tax_amount: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 4), nullable=True
    )
    cash_received: Mapped[Decimal | None] = mapped_column(
        Numeric(19, 4), nullable=True
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

    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    invoice: Mapped["Invoice"] = relationship(back_populates="payments")
    bank_account: Mapped["BankAccount | None"] = relationship()

    def __repr__(self) -> str:
        return (
            f"<Payment {self.payment_type.value} "
            f"{self.amount} {self.currency}>"
        )
