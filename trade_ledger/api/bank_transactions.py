"""
Bank transaction API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from trade_ledger.exceptions import InvalidLedgerState, NotFound
from trade_ledger.models.base import get_db
from trade_ledger.services.bank_transaction_service import BankTransactionService
from trade_ledger.schemas.bank_transaction import (
    BankTransactionCreate,
    BankTransactionResponse,
    TransactionReverse,
    AccountTransferRequest,
    AccountTransferResponse,
)

router = APIRouter(prefix="/bank-transactions", tags=["Bank Transactions"])


@router.post("", response_model=BankTransactionResponse, status_code=201)
def record_transaction(
    request: BankTransactionCreate,
    db: Session = Depends(get_db),
):
    """Record a deposit, withdrawal, fee or other bank movement."""
    service = BankTransactionService(db)
    try:
        txn = service.record_transaction(request)
        db.commit()
        return txn
    except NotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=e.message)
    except InvalidLedgerState as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=e.message)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/transfer", response_model=AccountTransferResponse, status_code=201)
def transfer_between_accounts(
    request: AccountTransferRequest,
    db: Session = Depends(get_db),
):
    """Move money between two bank accounts, converting if needed."""
    service = BankTransactionService(db)
    try:
        transfer_out, transfer_in = service.transfer_between_accounts(request)
        db.commit()
        return AccountTransferResponse(
            transfer_out=BankTransactionResponse.model_validate(transfer_out),
            transfer_in=BankTransactionResponse.model_validate(transfer_in),
        )
    except NotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=e.message)
    except InvalidLedgerState as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=e.message)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.get("", response_model=list[BankTransactionResponse])
def list_transactions(
    bank_account_id: int | None = None,
    include_inactive: bool = True,
    db: Session = Depends(get_db),
):
    """List transactions, newest first."""
    service = BankTransactionService(db)
    try:
        return service.list_transactions(bank_account_id, include_inactive)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.get("/{transaction_id}", response_model=BankTransactionResponse)
def get_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
):
    """Get transaction details."""
    service = BankTransactionService(db)
    try:
        return service.get_transaction(transaction_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.post("/{transaction_id}/cancel", response_model=BankTransactionResponse)
def cancel_transaction(
    transaction_id: int,
    db: Session = Depends(get_db),
):
    """Cancel a transaction. It stays in the history but stops counting."""
    service = BankTransactionService(db)
    try:
        txn = service.cancel_transaction(transaction_id)
        db.commit()
        return txn
    except NotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=e.message)
    except InvalidLedgerState as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=e.message)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/{transaction_id}/reverse", response_model=BankTransactionResponse)
def reverse_transaction(
    transaction_id: int,
    request: TransactionReverse,
    db: Session = Depends(get_db),
):
    """Reverse a transaction that was not created by a payment."""
    service = BankTransactionService(db)
    try:
        txn = service.reverse_transaction(transaction_id, request.reason)
        db.commit()
        return txn
    except NotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=e.message)
    except InvalidLedgerState as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=e.message)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
