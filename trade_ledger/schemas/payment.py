"""
Pydantic schemas for payment operations.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from trade_ledger.models.enums import PaymentType, PaymentMethod


class PaymentCreate(BaseModel):
    """
    Record money received against an invoice.

    The payment is in the invoice currency. exchange_rate is required
    when the receiving bank account holds a different currency.

    withheld_tax_rate is a percentage the payer withheld at source.
    The invoice is credited with the gross amount; only the net cash
    reaches the bank account.
    """
    invoice_id: int
    payment_type: PaymentType = PaymentType.INVOICE
    amount: Decimal = Field(gt=0, decimal_places=4)
    currency: str = Field(min_length=3, max_length=3)
    method: PaymentMethod = PaymentMethod.BANK_TRANSFER
    reference: str = Field(min_length=1, max_length=100)
    payment_date: datetime | None = None
    bank_account_id: int | None = None
    exchange_rate: Decimal | None = Field(default=None, gt=0)
    withheld_tax_rate: Decimal | None = Field(default=None, ge=0, lt=100)
    notes: str | None = Field(default=None, max_length=500)


class PaymentReverse(BaseModel):
    reason: str = Field(min_length=1, max_length=255)


class PaymentResponse(BaseModel):
    id: int
    payment_type: PaymentType
    invoice_id: int
    client_id: int
    amount: Decimal
    currency: str
    method: PaymentMethod
    reference: str
    payment_date: datetime
    bank_account_id: int | None
    exchange_rate: Decimal | None
    converted_amount: Decimal | None
    withheld_tax_rate: Decimal | None
    withheld_tax_amount: Decimal | None
    cash_received: Decimal | None
    is_reversed: bool
    reversed_at: datetime | None
    reversal_reason: str | None
    notes: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
