"""
Bank account API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from trade_ledger.exceptions import InvalidLedgerState, NotFound
from trade_ledger.models.base import get_db
from trade_ledger.models.enums import RecordStatus
from trade_ledger.services.bank_account_service import BankAccountService
from trade_ledger.schemas.bank_account import (
    BankAccountCreate,
    BankAccountResponse,
    BankAccountStatusUpdate,
    OpeningBalanceAdjustment,
    BankAccountBalanceResponse,
    BalanceAnomalyResponse,
)

router = APIRouter(prefix="/banks", tags=["Bank Accounts"])


@router.post("", response_model=BankAccountResponse, status_code=201)
def create_bank_account(
    request: BankAccountCreate,
    db: Session = Depends(get_db),
):
    """Open a bank account."""
    service = BankAccountService(db)
    try:
        account = service.create_account(request)
        db.commit()
        return account
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))


@router.get("", response_model=list[BankAccountResponse])
def list_bank_accounts(
    status: RecordStatus | None = None,
    currency: str | None = None,
    db: Session = Depends(get_db),
):
    """List bank accounts, optionally filtered by status or currency."""
    return BankAccountService(db).list_accounts(status=status, currency=currency)


@router.get("/{account_id}", response_model=BankAccountResponse)
def get_bank_account(
    account_id: int,
    db: Session = Depends(get_db),
):
    """Get bank account details."""
    service = BankAccountService(db)
    try:
        return service.get_account(account_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=e.message)


@router.get("/{account_id}/balance", response_model=BankAccountBalanceResponse)
def get_bank_account_balance(
    account_id: int,
    db: Session = Depends(get_db),
):
    """
    Balance recomputed from the transaction history.

    Currency anomalies found along the way are listed; a clean
    balance has none.
    """
    service = BankAccountService(db)
    try:
        details = service.get_balance_details(account_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=e.message)
    except InvalidLedgerState as e:
        # Keep the failure event; reads write nothing else
        db.commit()
        raise HTTPException(status_code=409, detail=e.message)

    return BankAccountBalanceResponse(
        account_id=account_id,
        currency=details.currency,
        balance=details.balance,
        is_clean=details.is_clean,
        anomalies=[
            BalanceAnomalyResponse.model_validate(anomaly)
            for anomaly in details.anomalies
        ],
    )


@router.post("/{account_id}/refresh-balance", response_model=BankAccountResponse)
def refresh_bank_account_balance(
    account_id: int,
    db: Session = Depends(get_db),
):
    """Rewrite the cached current balance from the transaction history."""
    service = BankAccountService(db)
    try:
        account = service.refresh_balance(account_id)
        db.commit()
        return account
    except NotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=e.message)
    except InvalidLedgerState as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=e.message)


@router.patch("/{account_id}/opening-balance", response_model=BankAccountResponse)
def adjust_opening_balance(
    account_id: int,
    request: OpeningBalanceAdjustment,
    db: Session = Depends(get_db),
):
    """Correct an account's opening balance."""
    service = BankAccountService(db)
    try:
        account = service.adjust_opening_balance(account_id, request)
        db.commit()
        return account
    except NotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=e.message)
    except InvalidLedgerState as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=e.message)


@router.patch("/{account_id}/status", response_model=BankAccountResponse)
def change_bank_account_status(
    account_id: int,
    request: BankAccountStatusUpdate,
    db: Session = Depends(get_db),
):
    """Activate or deactivate a bank account."""
    service = BankAccountService(db)
    try:
        account = service.change_status(account_id, request)
        db.commit()
        return account
    except NotFound as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=e.message)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
