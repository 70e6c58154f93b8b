"""
Client model.

Clients are managed by the CRM side of the application. The ledger
only reads them: the client type decides whether withholding and
currency conversion rules apply to a payment.
"""

from datetime import datetime

from sqlalchemy import String, DateTime, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from trade_ledger.models.base import Base
from trade_ledger.models.enums import ClientType, RecordStatus


class Client(Base):
    __tablename__ = "clients"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    client_type: Mapped[ClientType] = mapped_column(
        SAEnum(ClientType, name="client_type_enum", create_constraint=True),
        nullable=False,
    )
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[RecordStatus] = mapped_column(
        SAEnum(RecordStatus, name="client_status_enum", create_constraint=True),
        nullable=False,
        default=RecordStatus.ACTIVE,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    orders: Mapped[list["Order"]] = relationship(back_populates="client")

    def __repr__(self) -> str:
        return f"<Client {self.name} ({self.client_type.value})>"
