"""
Pydantic schemas for inter-bank transfers.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from trade_ledger.models.enums import TransferStatus


class InterBankTransferCreate(BaseModel):
    from_bank_account_id: int
    to_bank_account_id: int
    amount: Decimal = Field(gt=0, decimal_places=4)
    currency: str = Field(min_length=3, max_length=3)
    original_amount: Decimal | None = Field(default=None, gt=0, decimal_places=4)
    original_currency: str | None = Field(default=None, min_length=3, max_length=3)
    exchange_rate: Decimal | None = Field(default=None, gt=0)
    # Tax withheld on arrival, in the destination currency
    tax_deduction_rate: Decimal | None = Field(default=None, ge=0, lt=100)
    tax_deduction_amount: Decimal | None = Field(default=None, ge=0, decimal_places=4)
    invoice_id: int | None = None
    reference: str | None = Field(default=None, max_length=100)


class TransferStatusChange(BaseModel):
    transfer_date: datetime | None = None


class InterBankTransferResponse(BaseModel):
    id: int
    from_bank_account_id: int
    to_bank_account_id: int
    amount: Decimal
    currency: str
    original_amount: Decimal | None
    original_currency: str | None
    exchange_rate: Decimal | None
    invoice_id: int | None
    tax_deduction_rate: Decimal | None
    tax_deduction_amount: Decimal | None
    tax_deduction_currency: str | None
    net_amount_received: Decimal | None
    reference: str | None
    status: TransferStatus
    transfer_date: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}


class InvoiceTransferStatusResponse(BaseModel):
    invoice_id: int
    invoice_amount: Decimal
    total_transferred: Decimal
    percent_transferred: Decimal
    threshold: Decimal
    has_met_threshold: bool
    is_eligible: bool
