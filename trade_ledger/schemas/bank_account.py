"""
Pydantic schemas for bank account operations.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from trade_ledger.models.enums import BankAccountType, RecordStatus


class BankAccountCreate(BaseModel):
    """Request to open a bank account."""
    account_name: str = Field(min_length=1, max_length=100)
    bank_name: str = Field(min_length=1, max_length=100)
    account_number: str = Field(min_length=1, max_length=50)
    country: str | None = Field(default=None, max_length=100)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    account_type: BankAccountType = BankAccountType.BUSINESS
    opening_balance: Decimal = Field(default=Decimal("0"), decimal_places=4)


class BankAccountResponse(BaseModel):
    id: int
    account_name: str
    bank_name: str
    account_number: str
    country: str | None
    currency: str
    account_type: BankAccountType
    status: RecordStatus
    opening_balance: Decimal
    current_balance: Decimal
    created_at: datetime

    model_config = {"from_attributes": True}


class BankAccountStatusUpdate(BaseModel):
    new_status: RecordStatus


class OpeningBalanceAdjustment(BaseModel):
    opening_balance: Decimal = Field(decimal_places=4)
    reason: str = Field(min_length=1, max_length=255)


class BalanceAnomalyResponse(BaseModel):
    transaction_id: int | None
    account_currency: str
    transaction_currency: str
    amount_used: Decimal

    model_config = {"from_attributes": True}


class BankAccountBalanceResponse(BaseModel):
    account_id: int
    currency: str
    balance: Decimal
    is_clean: bool
    anomalies: list[BalanceAnomalyResponse] = []
