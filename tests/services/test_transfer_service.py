"""
Tests for the TransferService.
"""

from decimal import Decimal

import pytest

from trade_ledger.exceptions import NotFound
from trade_ledger.models.enums import TransferStatus
from trade_ledger.schemas.bank_account import BankAccountCreate
from trade_ledger.schemas.invoice import InvoiceCreate
from trade_ledger.schemas.transfer import InterBankTransferCreate
from trade_ledger.services.bank_account_service import BankAccountService
from trade_ledger.services.invoice_service import InvoiceService
from trade_ledger.services.transfer_service import TransferService

HOME = "Pakistan"


def open_account(db_session, number, currency, country, opening="0"):
    account = BankAccountService(db_session).create_account(BankAccountCreate(
        account_name=f"{country} {currency}",
        bank_name="Standard Chartered",
        account_number=number,
        country=country,
        currency=currency,
        opening_balance=Decimal(opening),
    ))
    db_session.commit()
    return account


@pytest.fixture
def accounts(db_session):
    abroad = open_account(db_session, "AE-USD", "USD", "UAE", opening="5000.00")
    home_usd = open_account(db_session, "PK-USD", "USD", HOME)
    home_pkr = open_account(db_session, "PK-PKR", "PKR", HOME)
    return abroad, home_usd, home_pkr


@pytest.fixture
def invoice(db_session, customer):
    row = InvoiceService(db_session).create_invoice(InvoiceCreate(
        client_id=customer.id, amount=Decimal("1000.00"), currency="USD",
    ))
    db_session.commit()
    return row


def create(db_session, source, destination, amount, invoice=None, **conversion):
    transfer = TransferService(db_session, HOME).create_transfer(InterBankTransferCreate(
        from_bank_account_id=source.id,
        to_bank_account_id=destination.id,
        amount=Decimal(amount),
        currency=destination.currency,
        invoice_id=invoice.id if invoice else None,
        **conversion,
    ))
    db_session.commit()
    return transfer


def complete(db_session, transfer):
    result = TransferService(db_session, HOME).complete_transfer(transfer.id)
    db_session.commit()
    return result


class TestLifecycle:

    def test_pending_transfer_moves_nothing(self, db_session, accounts):
        abroad, home_usd, _ = accounts
        transfer = create(db_session, abroad, home_usd, "700.00")

        assert transfer.status == TransferStatus.PENDING
        balances = BankAccountService(db_session)
        assert balances.get_account_balance(abroad.id) == Decimal("5000.00")
        assert balances.get_account_balance(home_usd.id) == Decimal("0")

    def test_completion_posts_both_legs(self, db_session, accounts):
        abroad, home_usd, _ = accounts
        transfer = complete(db_session, create(db_session, abroad, home_usd, "700.00"))

        assert transfer.status == TransferStatus.COMPLETED
        assert transfer.transfer_date is not None
        balances = BankAccountService(db_session)
        assert balances.get_account_balance(abroad.id) == Decimal("4300.00")
        assert balances.get_account_balance(home_usd.id) == Decimal("700.00")

    def test_cross_currency_completion(self, db_session, accounts):
        abroad, _, home_pkr = accounts
        transfer = create(
            db_session, abroad, home_pkr, "196000.00",
            original_amount=Decimal("700.00"),
            original_currency="USD",
            exchange_rate=Decimal("280"),
        )
        complete(db_session, transfer)

        balances = BankAccountService(db_session)
        assert balances.get_account_balance(abroad.id) == Decimal("4300.00")
        assert balances.get_account_balance(home_pkr.id) == Decimal("196000.00")

    def test_only_pending_transfers_change_state(self, db_session, accounts):
        abroad, home_usd, _ = accounts
        transfer = create(db_session, abroad, home_usd, "10.00")
        service = TransferService(db_session, HOME)
        service.cancel_transfer(transfer.id)
        db_session.commit()

        with pytest.raises(ValueError, match="status: cancelled"):
            service.complete_transfer(transfer.id)
        with pytest.raises(ValueError):
            service.fail_transfer(transfer.id)

    def test_currency_must_match_destination(self, db_session, accounts):
        abroad, _, home_pkr = accounts
        with pytest.raises(ValueError, match="destination"):
            TransferService(db_session, HOME).create_transfer(InterBankTransferCreate(
                from_bank_account_id=abroad.id,
                to_bank_account_id=home_pkr.id,
                amount=Decimal("10.00"),
                currency="USD",
            ))

    def test_unknown_transfer_not_found(self, db_session):
        with pytest.raises(NotFound):
            TransferService(db_session, HOME).complete_transfer(404)


class TestInvoiceEligibility:

    def test_seventy_percent_closes_invoice(self, db_session, accounts, invoice):
        abroad, home_usd, _ = accounts
        complete(db_session, create(db_session, abroad, home_usd, "700.00", invoice))
        assert not TransferService(db_session, HOME).is_invoice_transfer_eligible(invoice.id)

    def test_just_under_threshold_stays_open(self, db_session, accounts, invoice):
        abroad, home_usd, _ = accounts
        complete(db_session, create(db_session, abroad, home_usd, "699.99", invoice))
        assert TransferService(db_session, HOME).is_invoice_transfer_eligible(invoice.id)

    def test_pending_and_foreign_transfers_ignored(self, db_session, accounts, invoice):
        abroad, home_usd, _ = accounts
        create(db_session, abroad, home_usd, "1000.00", invoice)
        other_abroad = open_account(db_session, "AE-USD-2", "USD", "UAE")
        complete(db_session, create(db_session, abroad, other_abroad, "1000.00", invoice))

        status = TransferService(db_session, HOME).get_invoice_transfer_status(invoice.id)
        assert status.total_transferred == Decimal("0")
        assert status.is_eligible

    def test_converted_transfer_counts_original_amount(self, db_session, accounts, invoice):
        abroad, _, home_pkr = accounts
        complete(db_session, create(
            db_session, abroad, home_pkr, "196000.00", invoice,
            original_amount=Decimal("700.00"),
            original_currency="USD",
            exchange_rate=Decimal("280"),
        ))
        status = TransferService(db_session, HOME).get_invoice_transfer_status(invoice.id)
        assert status.total_transferred == Decimal("700.00")
        assert status.has_met_threshold

    def test_batch_status(self, db_session, accounts, invoice, customer):
        abroad, home_usd, _ = accounts
        other = InvoiceService(db_session).create_invoice(InvoiceCreate(
            client_id=customer.id, amount=Decimal("500.00"), currency="USD",
        ))
        db_session.commit()
        complete(db_session, create(db_session, abroad, home_usd, "250.00", invoice))

        statuses = TransferService(db_session, HOME).get_batch_transfer_status(
            [invoice.id, other.id]
        )
        assert statuses[invoice.id].percent_transferred == Decimal("25")
        assert statuses[other.id].total_transferred == Decimal("0")

    def test_unknown_invoice_not_found(self, db_session):
        with pytest.raises(NotFound):
            TransferService(db_session, HOME).is_invoice_transfer_eligible(404)


class TestTaxDeduction:

    def test_destination_credited_net(self, db_session, accounts):
        abroad, home_usd, _ = accounts
        transfer = create(
            db_session, abroad, home_usd, "1000.00",
            tax_deduction_rate=Decimal("10"),
        )
        assert transfer.tax_deduction_amount == Decimal("100.00")
        assert transfer.tax_deduction_currency == "USD"
        assert transfer.net_amount_received == Decimal("900.00")

        complete(db_session, transfer)
        balances = BankAccountService(db_session)
        assert balances.get_account_balance(abroad.id) == Decimal("4000.00")
        destination = balances.get_balance_details(home_usd.id)
        assert destination.balance == Decimal("900.00")
        assert destination.is_clean

    def test_cross_currency_fixed_deduction(self, db_session, accounts):
        abroad, _, home_pkr = accounts
        transfer = create(
            db_session, abroad, home_pkr, "196000.00",
            original_amount=Decimal("700.00"),
            original_currency="USD",
            exchange_rate=Decimal("280"),
            tax_deduction_amount=Decimal("9800.00"),
        )
        complete(db_session, transfer)

        balances = BankAccountService(db_session)
        assert balances.get_account_balance(abroad.id) == Decimal("4300.00")
        assert balances.get_balance_details(abroad.id).is_clean
        destination = balances.get_balance_details(home_pkr.id)
        assert destination.balance == Decimal("186200.00")
        assert destination.is_clean

    def test_threshold_counts_gross_amount(self, db_session, accounts, invoice):
        abroad, home_usd, _ = accounts
        transfer = create(
            db_session, abroad, home_usd, "700.00", invoice,
            tax_deduction_rate=Decimal("10"),
        )
        complete(db_session, transfer)

        status = TransferService(db_session, HOME).get_invoice_transfer_status(invoice.id)
        assert status.total_transferred == Decimal("700.00")
        assert not TransferService(db_session, HOME).is_invoice_transfer_eligible(invoice.id)

    def test_deduction_must_leave_something(self, db_session, accounts):
        abroad, home_usd, _ = accounts
        with pytest.raises(ValueError, match="must be less than"):
            create(
                db_session, abroad, home_usd, "100.00",
                tax_deduction_amount=Decimal("100.00"),
            )
