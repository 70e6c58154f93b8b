"""
Transfer threshold evaluation.

Invoice proceeds are moved into the settlement country in one or more
inter-bank transfers. Once the completed transfers reach the
completion threshold of the invoice value, the invoice is closed for
further transfers.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from trade_ledger.config import TRANSFER_COMPLETION_THRESHOLD
from trade_ledger.models.enums import TransferStatus
from trade_ledger.reconciliation.money import HUNDRED, ZERO, to_decimal
from trade_ledger.reconciliation.records import InvoiceRecord, TransferRecord


@dataclass(frozen=True)
class TransferProgress:
    invoice_amount: Decimal
    total_transferred: Decimal
    percent_transferred: Decimal
    threshold: Decimal
    has_met_threshold: bool

    @property
    def is_eligible(self) -> bool:
        return not self.has_met_threshold


def transfer_progress(
    invoice_amount,
    transfers: Iterable[TransferRecord],
    settlement_country: str,
    threshold: Decimal = TRANSFER_COMPLETION_THRESHOLD,
) -> TransferProgress:
    """
    Measure how much of an invoice has reached the settlement country.

    Only completed transfers into an account in the settlement country
    count, each at its pre-conversion amount when one was recorded.
    The threshold comparison is done without division, so the boundary
    is exact: 700 of 1000 meets a 70% threshold.
    """
    amount = to_decimal(invoice_amount)
    total = ZERO
    for transfer in transfers:
        if transfer.status != TransferStatus.COMPLETED:
            continue
        if transfer.destination_country != settlement_country:
            continue
        total += transfer.settlement_amount

    if amount <= ZERO:
        # Nothing left to move
        return TransferProgress(
            invoice_amount=amount,
            total_transferred=total,
            percent_transferred=HUNDRED,
            threshold=threshold,
            has_met_threshold=True,
        )

    return TransferProgress(
        invoice_amount=amount,
        total_transferred=total,
        percent_transferred=total * HUNDRED / amount,
        threshold=threshold,
        has_met_threshold=total * HUNDRED >= threshold * amount,
    )


def is_eligible_for_transfer(
    invoice: InvoiceRecord,
    completed_transfers: Iterable[TransferRecord],
    settlement_country: str,
    threshold: Decimal = TRANSFER_COMPLETION_THRESHOLD,
) -> bool:
    """True while less than the threshold has been transferred."""
    progress = transfer_progress(
        invoice.amount, completed_transfers, settlement_country, threshold
    )
    return progress.is_eligible
