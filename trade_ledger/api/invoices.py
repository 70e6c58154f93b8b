"""
Invoice API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from trade_ledger.exceptions import InvalidLedgerState, NotFound
from trade_ledger.models.base import get_db
from trade_ledger.services.invoice_service import InvoiceService
from trade_ledger.schemas.invoice import (
    InvoiceCreate,
    InvoiceResponse,
    InvoiceReconciliationResponse,
)

router = APIRouter(prefix="/invoices", tags=["Invoices"])


@router.post("", response_model=InvoiceResponse, status_code=201)
def create_invoice(
    request: InvoiceCreate,
    db: Session = Depends(get_db),
):
    """Issue an order-linked or standalone invoice."""
    service = InvoiceService(db)
    try:
        invoice = service.create_invoice(request)
        db.commit()
        return invoice
    except NotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=e.message)
    except InvalidLedgerState as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=e.message)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.get("", response_model=list[InvoiceResponse])
def list_invoices(
    client_id: int | None = None,
    db: Session = Depends(get_db),
):
    return InvoiceService(db).list_invoices(client_id=client_id)


@router.get("/receivables", response_model=list[InvoiceReconciliationResponse])
def list_receivables(db: Session = Depends(get_db)):
    """Invoices with a recognized outstanding balance."""
    service = InvoiceService(db)
    try:
        return service.list_receivables()
    except InvalidLedgerState as e:
        # Keep the failure event; reads write nothing else
        db.commit()
        raise HTTPException(status_code=409, detail=e.message)


@router.get("/{invoice_id}", response_model=InvoiceResponse)
def get_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
):
    """Get invoice details, including the cached totals."""
    service = InvoiceService(db)
    try:
        return service.get_invoice(invoice_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.get(
    "/{invoice_id}/reconciliation",
    response_model=InvoiceReconciliationResponse,
)
def reconcile_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
):
    """Paid and outstanding figures recomputed from the payments."""
    service = InvoiceService(db)
    try:
        return service.reconcile_invoice(invoice_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=e.message)
    except InvalidLedgerState as e:
        db.commit()
        raise HTTPException(status_code=409, detail=e.message)


@router.post("/{invoice_id}/refresh", response_model=InvoiceResponse)
def refresh_invoice(
    invoice_id: int,
    db: Session = Depends(get_db),
):
    """Rewrite the cached totals and status from the payments."""
    service = InvoiceService(db)
    try:
        invoice = service.refresh_invoice(invoice_id)
        db.commit()
        return invoice
    except NotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=e.message)
    except InvalidLedgerState as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=e.message)
