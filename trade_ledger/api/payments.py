"""
Payment API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from trade_ledger.exceptions import InvalidLedgerState, NotFound
from trade_ledger.models.base import get_db
from trade_ledger.services.payment_service import PaymentService
from trade_ledger.schemas.payment import (
    PaymentCreate,
    PaymentReverse,
    PaymentResponse,
)

router = APIRouter(prefix="/payments", tags=["Payments"])


@router.post("", response_model=PaymentResponse, status_code=201)
def record_payment(
    request: PaymentCreate,
    db: Session = Depends(get_db),
):
    """
    Record a payment against an invoice.

    Credits the receiving bank account and refreshes the invoice
    in the same transaction.
    """
    service = PaymentService(db)
    try:
        payment = service.record_payment(request)
        db.commit()
        return payment
    except NotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=e.message)
    except InvalidLedgerState as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=e.message)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.get("", response_model=list[PaymentResponse])
def list_payments(
    invoice_id: int | None = None,
    include_reversed: bool = True,
    db: Session = Depends(get_db),
):
    service = PaymentService(db)
    try:
        return service.list_payments(invoice_id, include_reversed)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.get("/{payment_id}", response_model=PaymentResponse)
def get_payment(
    payment_id: int,
    db: Session = Depends(get_db),
):
    service = PaymentService(db)
    try:
        return service.get_payment(payment_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.post("/{payment_id}/reverse", response_model=PaymentResponse)
def reverse_payment(
    payment_id: int,
    request: PaymentReverse,
    db: Session = Depends(get_db),
):
    """Reverse a payment together with its bank transaction."""
    service = PaymentService(db)
    try:
        payment = service.reverse_payment(payment_id, request.reason)
        db.commit()
        return payment
    except NotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=e.message)
    except InvalidLedgerState as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=e.message)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
