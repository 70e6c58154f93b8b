"""
Pydantic schemas for invoices and their reconciliation.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from trade_ledger.models.enums import InvoiceStatus


class InvoiceCreate(BaseModel):
    """
    Request to issue an invoice.

    Leave order_id empty for a standalone invoice. due_date defaults
    to the standard payment terms after issue_date.
    """
    client_id: int
    order_id: int | None = None
    invoice_number: str | None = Field(default=None, max_length=50)
    amount: Decimal = Field(gt=0, decimal_places=4)
    currency: str = Field(min_length=3, max_length=3)
    issue_date: datetime | None = None
    due_date: datetime | None = None
    notes: str | None = Field(default=None, max_length=500)


class InvoiceResponse(BaseModel):
    id: int
    invoice_number: str | None
    order_id: int | None
    client_id: int
    amount: Decimal
    currency: str
    issue_date: datetime
    due_date: datetime
    status: InvoiceStatus
    is_standalone: bool
    total_paid: Decimal
    outstanding_balance: Decimal
    notes: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class InvoiceReconciliationResponse(BaseModel):
    invoice_id: int
    currency: str
    total_paid: Decimal
    advance_paid: Decimal
    invoice_paid: Decimal
    outstanding_balance: Decimal
    outstanding_recognized: bool

    model_config = {"from_attributes": True}
