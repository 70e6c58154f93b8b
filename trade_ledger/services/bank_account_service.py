"""
Bank accounts and their balances.

The account row stores an opening balance and a cached
current_balance. Balance reads never trust the cache: they load
the transaction history and fold it through the balance
reconstructor. refresh_balance is the separate write-back step
that brings the cache in line.
"""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from trade_ledger.exceptions import InvalidLedgerState, NotFound
from trade_ledger.models.bank_account import BankAccount
from trade_ledger.models.bank_transaction import BankTransaction
from trade_ledger.models.enums import AuditAction, RecordStatus
from trade_ledger.reconciliation.balance import (
    BalanceReconstruction,
    reconstruct_balance,
)
from trade_ledger.reconciliation.records import TransactionRecord
from trade_ledger.schemas.bank_account import (
    BankAccountCreate,
    BankAccountStatusUpdate,
    OpeningBalanceAdjustment,
)
from trade_ledger.services.audit_service import emit_event

logger = logging.getLogger(__name__)


class BankAccountService:

    def __init__(self, db: Session):
        self.db = db

    def create_account(self, request: BankAccountCreate) -> BankAccount:
        """Open a bank account. Account numbers are unique."""
        existing = self.db.execute(
            select(BankAccount).where(
                BankAccount.account_number == request.account_number
            )
        ).scalar_one_or_none()
        if existing:
            raise ValueError(
                f"Bank account with number '{request.account_number}' already exists"
            )

        account = BankAccount(
            account_name=request.account_name,
            bank_name=request.bank_name,
            account_number=request.account_number,
            country=request.country,
            currency=request.currency.upper(),
            account_type=request.account_type,
            status=RecordStatus.ACTIVE,
            opening_balance=request.opening_balance,
            current_balance=request.opening_balance,
        )
        self.db.add(account)
        self.db.flush()

        logger.info("Opened bank account %s (%s)", account.id, account.currency)
        emit_event(
            self.db,
            "bank_accounts",
            account.id,
            AuditAction.CREATE,
            f"Bank account created: {account.account_name} at {account.bank_name} "
            f"({account.currency})",
        )
        return account

    def get_account(self, account_id: int) -> BankAccount:
        """Get a bank account by ID."""
        account = self.db.get(BankAccount, account_id)
        if not account:
            raise NotFound("Bank account", account_id)
        return account

    def list_accounts(
        self,
        status: RecordStatus | None = None,
        currency: str | None = None,
    ) -> list[BankAccount]:
        query = select(BankAccount).order_by(BankAccount.id)
        if status is not None:
            query = query.where(BankAccount.status == status)
        if currency is not None:
            query = query.where(BankAccount.currency == currency.upper())
        return list(self.db.execute(query).scalars().all())

    def _transaction_records(self, account_id: int) -> list[TransactionRecord]:
        transactions = self.db.execute(
            select(BankTransaction)
            .where(BankTransaction.bank_account_id == account_id)
            .order_by(BankTransaction.transaction_date, BankTransaction.id)
        ).scalars().all()
        return [TransactionRecord.from_model(txn) for txn in transactions]

    def get_balance_details(self, account_id: int) -> BalanceReconstruction:
        """
        Recompute the balance from the full transaction history.

        Read-only. The result carries any currency anomalies found
        along the way.
        """
        account = self.get_account(account_id)
        try:
            return reconstruct_balance(
                account.opening_balance,
                account.currency,
                self._transaction_records(account.id),
            )
        except InvalidLedgerState as e:
            logger.error(
                "Balance reconstruction failed for bank account %s: %s",
                account.id,
                e.message,
            )
            emit_event(
                self.db,
                "bank_accounts",
                account.id,
                AuditAction.RECONCILIATION_FAILED,
                f"Balance reconstruction failed: {e.message}",
            )
            raise

    def get_account_balance(self, account_id: int) -> Decimal:
        """Authoritative balance in the account's own currency."""
        return self.get_balance_details(account_id).balance

    def refresh_balance(self, account_id: int) -> BankAccount:
        """Write the recomputed balance back into the cached column."""
        account = self.get_account(account_id)
        details = self.get_balance_details(account_id)
        if account.current_balance != details.balance:
            logger.debug(
                "Bank account %s balance cache %s -> %s",
                account.id,
                account.current_balance,
                details.balance,
            )
        account.current_balance = details.balance
        self.db.flush()
        return account

    def adjust_opening_balance(
        self, account_id: int, request: OpeningBalanceAdjustment
    ) -> BankAccount:
        """Correct the opening balance; the current balance follows."""
        account = self.get_account(account_id)
        previous = account.opening_balance
        account.opening_balance = request.opening_balance
        self.db.flush()
        self.refresh_balance(account.id)

        emit_event(
            self.db,
            "bank_accounts",
            account.id,
            AuditAction.UPDATE,
            f"Opening balance adjusted from {previous} to "
            f"{request.opening_balance} {account.currency}: {request.reason}",
        )
        return account

    def change_status(
        self, account_id: int, request: BankAccountStatusUpdate
    ) -> BankAccount:
        """Activate or deactivate an account. Inactive accounts take no new transactions."""
        account = self.get_account(account_id)
        if account.status == request.new_status:
            raise ValueError(
                f"Bank account {account_id} is already {request.new_status.value}"
            )

        old_status = account.status
        account.status = request.new_status
        self.db.flush()

        emit_event(
            self.db,
            "bank_accounts",
            account.id,
            AuditAction.UPDATE,
            f"Status changed from {old_status.value} to {request.new_status.value}",
        )
        return account
