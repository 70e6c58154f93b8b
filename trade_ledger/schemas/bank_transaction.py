"""
Pydantic schemas for bank transaction operations.

Amounts are signed: withdrawals, outgoing transfers and fees are
negative, everything else positive. The conversion fields are
given together or not at all.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from trade_ledger.models.enums import BankTransactionType, BankTransactionStatus


class BankTransactionCreate(BaseModel):
    bank_account_id: int
    transaction_type: BankTransactionType
    amount: Decimal = Field(decimal_places=4)
    currency: str = Field(min_length=3, max_length=3)
    description: str = Field(min_length=1, max_length=255)
    reference: str | None = Field(default=None, max_length=100)
    transaction_date: datetime | None = None
    original_amount: Decimal | None = Field(default=None, decimal_places=4)
    original_currency: str | None = Field(default=None, min_length=3, max_length=3)
    exchange_rate: Decimal | None = Field(default=None, gt=0)


class TransactionReverse(BaseModel):
    reason: str | None = Field(default=None, max_length=255)


class AccountTransferRequest(BaseModel):
    """
    Move money between two of the company's bank accounts.

    amount/currency is what arrives at the destination. For accounts
    in different currencies, original_amount/original_currency is
    what leaves the source and exchange_rate is the rate applied.

    net_amount, when given, is what the destination is actually
    credited after a tax deduction on arrival. The source is still
    debited in full.
    """
    from_bank_account_id: int
    to_bank_account_id: int
    amount: Decimal = Field(gt=0, decimal_places=4)
    currency: str = Field(min_length=3, max_length=3)
    description: str = Field(default="Transfer", max_length=255)
    reference: str | None = Field(default=None, max_length=100)
    transaction_date: datetime | None = None
    original_amount: Decimal | None = Field(default=None, decimal_places=4)
    original_currency: str | None = Field(default=None, min_length=3, max_length=3)
    exchange_rate: Decimal | None = None
    net_amount: Decimal | None = Field(default=None, gt=0, decimal_places=4)


class BankTransactionResponse(BaseModel):
    id: int
    bank_account_id: int
    transaction_type: BankTransactionType
    amount: Decimal
    currency: str
    status: BankTransactionStatus
    is_reversed: bool
    reversed_at: datetime | None
    reversal_reason: str | None
    original_amount: Decimal | None
    original_currency: str | None
    exchange_rate: Decimal | None
    description: str
    reference: str | None
    payment_id: int | None
    related_bank_account_id: int | None
    transaction_date: datetime
    created_at: datetime

    model_config = {"from_attributes": True}


class AccountTransferResponse(BaseModel):
    transfer_out: BankTransactionResponse
    transfer_in: BankTransactionResponse
