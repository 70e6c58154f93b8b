"""
Inter-bank transfer API endpoints.
"""

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from trade_ledger.exceptions import InvalidLedgerState, NotFound
from trade_ledger.models.base import get_db
from trade_ledger.reconciliation.transfers import TransferProgress
from trade_ledger.services.transfer_service import TransferService
from trade_ledger.schemas.transfer import (
    InterBankTransferCreate,
    InterBankTransferResponse,
    TransferStatusChange,
    InvoiceTransferStatusResponse,
)

router = APIRouter(prefix="/transfers", tags=["Transfers"])


def _status_response(invoice_id: int, progress: TransferProgress) -> InvoiceTransferStatusResponse:
    return InvoiceTransferStatusResponse(
        invoice_id=invoice_id,
        invoice_amount=progress.invoice_amount,
        total_transferred=progress.total_transferred,
        percent_transferred=progress.percent_transferred,
        threshold=progress.threshold,
        has_met_threshold=progress.has_met_threshold,
        is_eligible=progress.is_eligible,
    )


@router.post("", response_model=InterBankTransferResponse, status_code=201)
def create_transfer(
    request: InterBankTransferCreate,
    db: Session = Depends(get_db),
):
    """Register a pending inter-bank transfer."""
    service = TransferService(db)
    try:
        transfer = service.create_transfer(request)
        db.commit()
        return transfer
    except NotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=e.message)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.get("", response_model=list[InterBankTransferResponse])
def list_transfers(
    invoice_id: int | None = None,
    bank_account_id: int | None = None,
    db: Session = Depends(get_db),
):
    return TransferService(db).list_transfers(invoice_id, bank_account_id)


@router.post("/batch-status", response_model=list[InvoiceTransferStatusResponse])
def get_batch_transfer_status(
    invoice_ids: list[int] = Body(...),
    db: Session = Depends(get_db),
):
    """Transfer progress for several invoices at once."""
    service = TransferService(db)
    try:
        statuses = service.get_batch_transfer_status(invoice_ids)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=e.message)
    return [
        _status_response(invoice_id, progress)
        for invoice_id, progress in statuses.items()
    ]


@router.get(
    "/invoices/{invoice_id}/status",
    response_model=InvoiceTransferStatusResponse,
)
def get_invoice_transfer_status(
    invoice_id: int,
    db: Session = Depends(get_db),
):
    """How much of an invoice has reached the settlement country."""
    service = TransferService(db)
    try:
        progress = service.get_invoice_transfer_status(invoice_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=e.message)
    return _status_response(invoice_id, progress)


@router.get("/{transfer_id}", response_model=InterBankTransferResponse)
def get_transfer(
    transfer_id: int,
    db: Session = Depends(get_db),
):
    service = TransferService(db)
    try:
        return service.get_transfer(transfer_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.post("/{transfer_id}/complete", response_model=InterBankTransferResponse)
def complete_transfer(
    transfer_id: int,
    request: TransferStatusChange,
    db: Session = Depends(get_db),
):
    """Complete a pending transfer and post it to both bank accounts."""
    service = TransferService(db)
    try:
        transfer = service.complete_transfer(transfer_id, request.transfer_date)
        db.commit()
        return transfer
    except NotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=e.message)
    except InvalidLedgerState as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=e.message)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/{transfer_id}/fail", response_model=InterBankTransferResponse)
def fail_transfer(
    transfer_id: int,
    request: TransferStatusChange,
    db: Session = Depends(get_db),
):
    service = TransferService(db)
    try:
        transfer = service.fail_transfer(transfer_id, request.transfer_date)
        db.commit()
        return transfer
    except NotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=e.message)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/{transfer_id}/cancel", response_model=InterBankTransferResponse)
def cancel_transfer(
    transfer_id: int,
    request: TransferStatusChange,
    db: Session = Depends(get_db),
):
    service = TransferService(db)
    try:
        transfer = service.cancel_transfer(transfer_id, request.transfer_date)
        db.commit()
        return transfer
    except NotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=e.message)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
