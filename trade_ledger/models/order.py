"""
Order model.

Orders move through pending -> in_production -> shipped -> delivered,
or end in cancelled. The order workflow owns those transitions; the
ledger only branches on the current status, which is why it is kept
as plain text rather than a database enum.
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, Integer, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from trade_ledger.models.base import Base
from trade_ledger.models.enums import OrderStatus


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(primary_key=True)
    order_number: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False
    )
    client_id: Mapped[int] = mapped_column(
        ForeignKey("clients.id"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(
        String(30), nullable=False, default=OrderStatus.PENDING.value, index=True
    )
    # Precomputed from the creation date on the July-June calendar
    fiscal_year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(
        Numeric(19, 4), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    client: Mapped["Client"] = relationship(back_populates="orders")
    invoices: Mapped[list["Invoice"]] = relationship(back_populates="order")

    def __repr__(self) -> str:
        return f"<Order {self.order_number} {self.total_amount} {self.currency} ({self.status})>"
