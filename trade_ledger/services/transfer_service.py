"""
Inter-bank transfer service.

A transfer is created pending and touches no balance until it is
completed. Completing it posts the transfer_out / transfer_in pair
through the bank transaction service. Failed and cancelled
transfers never post anything.

A tax deduction on arrival is fixed when the transfer is created.
The destination is then credited the net amount while the source is
debited in full. Threshold progress still counts the gross amount,
which is what left for the settlement country.

The invoice status queries answer one question: has enough of this
invoice reached the settlement country yet?
"""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from trade_ledger.config import get_settings
from trade_ledger.exceptions import NotFound
from trade_ledger.models.enums import AuditAction, TransferStatus
from trade_ledger.models.inter_bank_transfer import InterBankTransfer
from trade_ledger.reconciliation.money import AMOUNT_QUANTUM, HUNDRED
from trade_ledger.reconciliation.records import InvoiceRecord, TransferRecord
from trade_ledger.reconciliation.transfers import (
    TransferProgress,
    is_eligible_for_transfer,
    transfer_progress,
)
from trade_ledger.schemas.bank_transaction import AccountTransferRequest
from trade_ledger.schemas.transfer import InterBankTransferCreate
from trade_ledger.services.audit_service import emit_event
from trade_ledger.services.bank_account_service import BankAccountService
from trade_ledger.services.bank_transaction_service import BankTransactionService
from trade_ledger.services.invoice_service import InvoiceService

logger = logging.getLogger(__name__)


class TransferService:

    def __init__(self, db: Session, settlement_country: str | None = None):
        self.db = db
        self.settlement_country = (
            settlement_country or get_settings().SETTLEMENT_COUNTRY
        )
        self.account_service = BankAccountService(db)
        self.transaction_service = BankTransactionService(db)
        self.invoice_service = InvoiceService(db)

    def create_transfer(self, request: InterBankTransferCreate) -> InterBankTransfer:
        """Register a pending transfer."""
        if request.from_bank_account_id == request.to_bank_account_id:
            raise ValueError("Cannot transfer to the same account")

        source = self.account_service.get_account(request.from_bank_account_id)
        destination = self.account_service.get_account(request.to_bank_account_id)
        if request.invoice_id is not None:
            self.invoice_service.get_invoice(request.invoice_id)

        currency = request.currency.upper()
        if currency != destination.currency:
            raise ValueError(
                f"Transfer currency ({currency}) must match destination "
                f"account currency ({destination.currency})"
            )

        triple = (request.original_amount, request.original_currency, request.exchange_rate)
        if any(field is None for field in triple) and any(
            field is not None for field in triple
        ):
            raise ValueError(
                "Original amount, original currency, and exchange rate "
                "must be given together"
            )
        if source.currency != destination.currency and request.exchange_rate is None:
            raise ValueError(
                "Exchange rate, original amount, and original currency "
                "are required for cross-currency transfers"
            )

        tax_amount = request.tax_deduction_amount
        if tax_amount is None and request.tax_deduction_rate:
            tax_amount = (request.amount * request.tax_deduction_rate / HUNDRED).quantize(
                AMOUNT_QUANTUM
            )
        net_amount = None
        if tax_amount:
            if tax_amount >= request.amount:
                raise ValueError(
                    f"Tax deduction ({tax_amount} {currency}) must be less than "
                    f"the transfer amount ({request.amount} {currency})"
                )
            net_amount = request.amount - tax_amount

        transfer = InterBankTransfer(
            from_bank_account_id=source.id,
            to_bank_account_id=destination.id,
            amount=request.amount,
            currency=currency,
            original_amount=request.original_amount,
            original_currency=(
                request.original_currency.upper()
                if request.original_currency
                else None
            ),
            exchange_rate=request.exchange_rate,
            tax_deduction_rate=request.tax_deduction_rate if net_amount is not None else None,
            tax_deduction_amount=tax_amount if net_amount is not None else None,
            tax_deduction_currency=currency if net_amount is not None else None,
            net_amount_received=net_amount,
            invoice_id=request.invoice_id,
            reference=request.reference,
            status=TransferStatus.PENDING,
        )
        self.db.add(transfer)
        self.db.flush()

        emit_event(
            self.db,
            "inter_bank_transfers",
            transfer.id,
            AuditAction.CREATE,
            f"Transfer of {transfer.amount} {transfer.currency} from "
            f"{source.account_name} to {destination.account_name} created",
        )
        return transfer

    def get_transfer(self, transfer_id: int) -> InterBankTransfer:
        transfer = self.db.get(InterBankTransfer, transfer_id)
        if not transfer:
            raise NotFound("Transfer", transfer_id)
        return transfer

    def list_transfers(
        self,
        invoice_id: int | None = None,
        bank_account_id: int | None = None,
    ) -> list[InterBankTransfer]:
        query = select(InterBankTransfer).order_by(InterBankTransfer.id)
        if invoice_id is not None:
            query = query.where(InterBankTransfer.invoice_id == invoice_id)
        if bank_account_id is not None:
            query = query.where(
                (InterBankTransfer.from_bank_account_id == bank_account_id)
                | (InterBankTransfer.to_bank_account_id == bank_account_id)
            )
        return list(self.db.execute(query).scalars().all())

    def _require_pending(self, transfer: InterBankTransfer, action: str) -> None:
        if transfer.status != TransferStatus.PENDING:
            raise ValueError(
                f"Cannot {action} transfer {transfer.id} "
                f"(status: {transfer.status.value})"
            )

    def _set_status(
        self,
        transfer: InterBankTransfer,
        status: TransferStatus,
        transfer_date: datetime | None,
    ) -> InterBankTransfer:
        transfer.status = status
        transfer.transfer_date = transfer_date or datetime.utcnow()
        self.db.flush()
        emit_event(
            self.db,
            "inter_bank_transfers",
            transfer.id,
            AuditAction.UPDATE,
            f"Transfer {status.value}: {transfer.amount} {transfer.currency}",
        )
        return transfer

    def complete_transfer(
        self, transfer_id: int, transfer_date: datetime | None = None
    ) -> InterBankTransfer:
        """Mark a transfer completed and post both bank transaction legs."""
        transfer = self.get_transfer(transfer_id)
        self._require_pending(transfer, "complete")

        self.transaction_service.transfer_between_accounts(
            AccountTransferRequest(
                from_bank_account_id=transfer.from_bank_account_id,
                to_bank_account_id=transfer.to_bank_account_id,
                amount=transfer.amount,
                currency=transfer.currency,
                description=f"Inter-bank transfer {transfer.reference or transfer.id}",
                reference=transfer.reference,
                transaction_date=transfer_date,
                original_amount=transfer.original_amount,
                original_currency=transfer.original_currency,
                exchange_rate=transfer.exchange_rate,
                net_amount=transfer.net_amount_received,
            )
        )
        return self._set_status(transfer, TransferStatus.COMPLETED, transfer_date)

    def fail_transfer(
        self, transfer_id: int, transfer_date: datetime | None = None
    ) -> InterBankTransfer:
        transfer = self.get_transfer(transfer_id)
        self._require_pending(transfer, "fail")
        return self._set_status(transfer, TransferStatus.FAILED, transfer_date)

    def cancel_transfer(
        self, transfer_id: int, transfer_date: datetime | None = None
    ) -> InterBankTransfer:
        transfer = self.get_transfer(transfer_id)
        self._require_pending(transfer, "cancel")
        return self._set_status(transfer, TransferStatus.CANCELLED, transfer_date)

    def _invoice_transfers(self, invoice_id: int) -> list[TransferRecord]:
        return [
            TransferRecord.from_model(transfer)
            for transfer in self.list_transfers(invoice_id=invoice_id)
        ]

    def get_invoice_transfer_status(self, invoice_id: int) -> TransferProgress:
        """How much of an invoice has reached the settlement country."""
        invoice = self.invoice_service.get_invoice(invoice_id)
        return transfer_progress(
            invoice.amount,
            self._invoice_transfers(invoice.id),
            self.settlement_country,
        )

    def is_invoice_transfer_eligible(self, invoice_id: int) -> bool:
        """True while the invoice can still take transfers."""
        invoice = self.invoice_service.get_invoice(invoice_id)
        return is_eligible_for_transfer(
            InvoiceRecord.from_model(invoice),
            self._invoice_transfers(invoice.id),
            self.settlement_country,
        )

    def get_batch_transfer_status(
        self, invoice_ids: list[int]
    ) -> dict[int, TransferProgress]:
        return {
            invoice_id: self.get_invoice_transfer_status(invoice_id)
            for invoice_id in invoice_ids
        }
