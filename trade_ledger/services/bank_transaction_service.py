"""
Bank transactions: recording, cancelling, reversing and moving
money between accounts.

Transactions are append-only. Cancelling or reversing one flips a
flag and keeps the row; the balance reconstructor skips it from
then on. Every mutation ends by refreshing the balance cache of
the accounts it touched. The caller controls the commit.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from trade_ledger.exceptions import NotFound
from trade_ledger.models.bank_account import BankAccount
from trade_ledger.models.bank_transaction import BankTransaction
from trade_ledger.models.enums import (
    AuditAction,
    BankTransactionStatus,
    BankTransactionType,
    OUTFLOW_TRANSACTION_TYPES,
)
from trade_ledger.models.payment import Payment
from trade_ledger.reconciliation.money import AMOUNT_QUANTUM, ZERO
from trade_ledger.schemas.bank_transaction import (
    AccountTransferRequest,
    BankTransactionCreate,
)
from trade_ledger.services.audit_service import emit_event
from trade_ledger.services.bank_account_service import BankAccountService

logger = logging.getLogger(__name__)

DEFAULT_REVERSAL_REASON = "Manual reversal"


class BankTransactionService:

    def __init__(self, db: Session):
        self.db = db
        self.account_service = BankAccountService(db)

    def _get_active_account(self, account_id: int) -> BankAccount:
        account = self.account_service.get_account(account_id)
        if not account.is_active:
            raise ValueError(f"Bank account {account_id} is not active")
        return account

    @staticmethod
    def _validate_sign(transaction_type: BankTransactionType, amount) -> None:
        if amount == ZERO:
            raise ValueError("Transaction amount cannot be zero")
        if transaction_type in OUTFLOW_TRANSACTION_TYPES and amount > ZERO:
            raise ValueError(
                "Withdrawal, transfer out, and fee amounts should be negative"
            )
        if transaction_type not in OUTFLOW_TRANSACTION_TYPES and amount < ZERO:
            raise ValueError(
                "Deposit, transfer in, payment received, interest, and "
                "adjustment amounts should be positive"
            )

    @staticmethod
    def _validate_conversion(request: BankTransactionCreate, account: BankAccount) -> None:
        """
        Money must be in the account currency, or carry a complete
        conversion whose one side is the account currency.
        """
        triple = (
            request.original_amount,
            request.original_currency,
            request.exchange_rate,
        )
        if all(field is None for field in triple):
            if request.currency.upper() != account.currency:
                raise ValueError(
                    f"Transaction currency {request.currency} does not match "
                    f"account currency {account.currency} and no conversion "
                    f"was given"
                )
            return

        if any(field is None for field in triple):
            raise ValueError(
                "Original amount, original currency, and exchange rate "
                "must be given together"
            )
        if request.original_currency.upper() == request.currency.upper():
            raise ValueError("Original currency must differ from transaction currency")
        if (request.original_amount > ZERO) != (request.amount > ZERO):
            raise ValueError("Original amount must have the same sign as amount")
        if account.currency not in (
            request.currency.upper(),
            request.original_currency.upper(),
        ):
            raise ValueError(
                f"Neither {request.currency} nor {request.original_currency} "
                f"matches account currency {account.currency}"
            )

    def record_transaction(self, request: BankTransactionCreate) -> BankTransaction:
        """
        Record a manual bank transaction.

        Checks:
        1. The account exists and is active
        2. The sign matches the transaction type
        3. The currency matches the account, or a full conversion is given
        """
        account = self._get_active_account(request.bank_account_id)
        self._validate_sign(request.transaction_type, request.amount)
        self._validate_conversion(request, account)

        txn = BankTransaction(
            bank_account_id=account.id,
            transaction_type=request.transaction_type,
            amount=request.amount,
            currency=request.currency.upper(),
            status=BankTransactionStatus.ACTIVE,
            is_reversed=False,
            original_amount=request.original_amount,
            original_currency=(
                request.original_currency.upper()
                if request.original_currency
                else None
            ),
            exchange_rate=request.exchange_rate,
            description=request.description,
            reference=request.reference,
            transaction_date=request.transaction_date or datetime.utcnow(),
        )
        self.db.add(txn)
        self.db.flush()
        self.account_service.refresh_balance(account.id)

        emit_event(
            self.db,
            "bank_transactions",
            txn.id,
            AuditAction.CREATE,
            f"{txn.transaction_type.value}: {txn.amount} {txn.currency} "
            f"on {account.account_name} - {txn.description}",
        )
        return txn

    def post_payment_receipt(
        self, payment: Payment, account: BankAccount
    ) -> BankTransaction:
        """
        Credit a bank account with a received payment.

        When the account holds another currency the frozen converted
        amount is posted, with the payment itself kept as the original.
        Tax withheld at source never reaches the bank, so only the
        cash received is posted.
        """
        withheld = payment.cash_received is not None
        if payment.converted_amount is not None and account.currency != payment.currency:
            amount = payment.cash_received if withheld else payment.converted_amount
            original_amount = (
                (amount / payment.exchange_rate).quantize(AMOUNT_QUANTUM)
                if withheld
                else payment.amount
            )
            txn = BankTransaction(
                bank_account_id=account.id,
                transaction_type=BankTransactionType.PAYMENT_RECEIVED,
                amount=amount,
                currency=account.currency,
                original_amount=original_amount,
                original_currency=payment.currency,
                exchange_rate=payment.exchange_rate,
            )
        else:
            txn = BankTransaction(
                bank_account_id=account.id,
                transaction_type=BankTransactionType.PAYMENT_RECEIVED,
                amount=payment.cash_received if withheld else payment.amount,
                currency=payment.currency,
            )
        txn.status = BankTransactionStatus.ACTIVE
        txn.is_reversed = False
        if withheld:
            txn.description = (
                f"Payment received: {payment.reference} (gross {payment.amount} "
                f"{payment.currency}, tax {payment.withheld_tax_amount} "
                f"{txn.currency}, net {txn.amount} {txn.currency})"
            )
        else:
            txn.description = f"Payment received: {payment.reference}"
        txn.reference = payment.reference
        txn.payment_id = payment.id
        txn.transaction_date = payment.payment_date or datetime.utcnow()

        self.db.add(txn)
        self.db.flush()
        self.account_service.refresh_balance(account.id)
        return txn

    def get_transaction(self, transaction_id: int) -> BankTransaction:
        """Get a transaction by ID."""
        txn = self.db.get(BankTransaction, transaction_id)
        if not txn:
            raise NotFound("Bank transaction", transaction_id)
        return txn

    def list_transactions(
        self,
        bank_account_id: int | None = None,
        include_inactive: bool = True,
    ) -> list[BankTransaction]:
        """Transactions newest first."""
        query = select(BankTransaction).order_by(
            BankTransaction.transaction_date.desc(), BankTransaction.id.desc()
        )
        if bank_account_id is not None:
            self.account_service.get_account(bank_account_id)
            query = query.where(BankTransaction.bank_account_id == bank_account_id)
        if not include_inactive:
            query = query.where(
                BankTransaction.status == BankTransactionStatus.ACTIVE,
                BankTransaction.is_reversed.is_(False),
            )
        return list(self.db.execute(query).scalars().all())

    def cancel_transaction(self, transaction_id: int) -> BankTransaction:
        """
        Cancel a transaction. The row stays for the audit trail.
        """
        txn = self.get_transaction(transaction_id)
        if txn.status == BankTransactionStatus.CANCELLED:
            raise ValueError(f"Transaction {transaction_id} is already cancelled")
        if txn.is_reversed:
            raise ValueError(
                f"Transaction {transaction_id} is reversed and cannot be cancelled"
            )
        if txn.payment_id is not None:
            raise ValueError(
                "Payment-linked transactions can only be undone by reversing the payment"
            )

        txn.status = BankTransactionStatus.CANCELLED
        self.db.flush()
        self.account_service.refresh_balance(txn.bank_account_id)

        emit_event(
            self.db,
            "bank_transactions",
            txn.id,
            AuditAction.DELETE,
            f"Transaction cancelled: {txn.description}",
        )
        return txn

    def _mark_reversed(self, txn: BankTransaction, reason: str) -> BankTransaction:
        if txn.is_reversed:
            raise ValueError(f"Transaction {txn.id} already reversed")
        if txn.status == BankTransactionStatus.CANCELLED:
            raise ValueError(
                f"Transaction {txn.id} is cancelled and cannot be reversed"
            )

        txn.is_reversed = True
        txn.reversed_at = datetime.utcnow()
        txn.reversal_reason = reason
        self.db.flush()
        self.account_service.refresh_balance(txn.bank_account_id)

        emit_event(
            self.db,
            "bank_transactions",
            txn.id,
            AuditAction.UPDATE,
            f"Transaction reversed: {txn.description} - {reason}",
        )
        return txn

    def reverse_transaction(
        self, transaction_id: int, reason: str | None = None
    ) -> BankTransaction:
        """
        Reverse a transaction in place.

        No offsetting entry is written; the reversed row simply stops
        counting. Transactions created by a payment are reversed
        through the payment instead.
        """
        txn = self.get_transaction(transaction_id)
        if txn.payment_id is not None:
            raise ValueError(
                "Payment-linked transactions can only be reversed by reversing the payment"
            )
        return self._mark_reversed(txn, reason or DEFAULT_REVERSAL_REASON)

    def reverse_payment_transactions(self, payment_id: int, reason: str) -> list[BankTransaction]:
        """Reverse every live transaction posted for a payment."""
        transactions = self.db.execute(
            select(BankTransaction).where(
                BankTransaction.payment_id == payment_id,
                BankTransaction.status == BankTransactionStatus.ACTIVE,
                BankTransaction.is_reversed.is_(False),
            )
        ).scalars().all()
        return [self._mark_reversed(txn, reason) for txn in transactions]

    def transfer_between_accounts(
        self, request: AccountTransferRequest
    ) -> tuple[BankTransaction, BankTransaction]:
        """
        Move money between two bank accounts as a transfer_out /
        transfer_in pair.

        Same-currency accounts: both legs carry request.amount.
        Cross-currency accounts: original_amount leaves the source,
        amount arrives at the destination, and both legs carry the
        conversion so each account is counted in its own currency.
        With net_amount the destination is credited only that much,
        the rest having been deducted as tax on arrival. The source is
        always debited in full.

        Returns (transfer_out, transfer_in).
        """
        if request.from_bank_account_id == request.to_bank_account_id:
            raise ValueError("Cannot transfer to the same account")
        if request.amount <= ZERO:
            raise ValueError("Transfer amount must be positive")

        source = self._get_active_account(request.from_bank_account_id)
        destination = self._get_active_account(request.to_bank_account_id)
        currency = request.currency.upper()

        needs_conversion = source.currency != destination.currency
        if needs_conversion:
            if (
                request.exchange_rate is None
                or request.original_amount is None
                or request.original_currency is None
            ):
                raise ValueError(
                    "Exchange rate, original amount, and original currency "
                    "are required for cross-currency transfers"
                )
            if request.exchange_rate <= ZERO:
                raise ValueError("Exchange rate must be greater than 0")
            if request.original_amount <= ZERO:
                raise ValueError("Original amount must be greater than 0")
            if request.original_currency.upper() != source.currency:
                raise ValueError(
                    f"Original currency ({request.original_currency}) must match "
                    f"source account currency ({source.currency})"
                )
            if currency != destination.currency:
                raise ValueError(
                    f"Target currency ({request.currency}) must match "
                    f"destination account currency ({destination.currency})"
                )
            required = request.original_amount
        else:
            if currency != source.currency:
                raise ValueError(
                    f"Transfer currency ({request.currency}) must match "
                    f"account currency ({source.currency})"
                )
            required = request.amount

        credited = request.amount
        if request.net_amount is not None:
            if request.net_amount > request.amount:
                raise ValueError(
                    f"Net amount received ({request.net_amount}) cannot exceed "
                    f"the transfer amount ({request.amount})"
                )
            credited = request.net_amount

        available = self.account_service.get_account_balance(source.id)
        if available < required:
            raise ValueError(
                f"Insufficient balance: available={available} {source.currency}, "
                f"requested={required} {source.currency}"
            )

        transaction_date = request.transaction_date or datetime.utcnow()
        deduction_note = ""
        if credited != request.amount:
            deduction_note = f" (tax deducted: {request.amount - credited} {currency})"
        conversion = {}
        if needs_conversion:
            conversion = {
                "original_currency": source.currency,
                "exchange_rate": request.exchange_rate,
            }

        transfer_out = BankTransaction(
            bank_account_id=source.id,
            transaction_type=BankTransactionType.TRANSFER_OUT,
            amount=-request.amount,
            currency=currency,
            status=BankTransactionStatus.ACTIVE,
            is_reversed=False,
            original_amount=-request.original_amount if needs_conversion else None,
            description=f"Transfer to {destination.account_name}: {request.description}",
            reference=request.reference,
            related_bank_account_id=destination.id,
            # Outgoing leg sorts first
            transaction_date=transaction_date - timedelta(seconds=1),
            **conversion,
        )
        transfer_in = BankTransaction(
            bank_account_id=destination.id,
            transaction_type=BankTransactionType.TRANSFER_IN,
            amount=credited,
            currency=currency,
            status=BankTransactionStatus.ACTIVE,
            is_reversed=False,
            original_amount=(
                (request.original_amount * credited / request.amount).quantize(AMOUNT_QUANTUM)
                if needs_conversion
                else None
            ),
            description=f"Transfer from {source.account_name}: {request.description}{deduction_note}",
            reference=request.reference,
            related_bank_account_id=source.id,
            transaction_date=transaction_date,
            **conversion,
        )
        self.db.add_all([transfer_out, transfer_in])
        self.db.flush()

        self.account_service.refresh_balance(source.id)
        self.account_service.refresh_balance(destination.id)

        if needs_conversion:
            message = (
                f"Transfer completed: {request.original_amount} {source.currency} -> "
                f"{request.amount} {currency} (rate {request.exchange_rate}) "
                f"from {source.account_name} to {destination.account_name}"
            )
        else:
            message = (
                f"Transfer completed: {request.amount} {currency} "
                f"from {source.account_name} to {destination.account_name}"
            )
        message += deduction_note
        logger.info(message)
        emit_event(
            self.db, "bank_transactions", transfer_out.id, AuditAction.CREATE, message
        )
        return transfer_out, transfer_in
