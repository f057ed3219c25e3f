"""Tests for transfers between bank accounts."""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from ledgerkit.domain.errors import (
    InsufficientFundsError,
    InvalidAmountError,
    InvalidTransferError,
    NotFoundError,
    ValidationError,
)

from conftest import OWNER, OTHER_OWNER


@pytest.fixture
def accounts(account_service):
    """Account A with 700.00 and account B with 200.00."""
    a = account_service.create_account(OWNER, name="A", initial_balance="700.00")
    b = account_service.create_account(OWNER, name="B", initial_balance="200.00")
    return a, b


def test_transfer_moves_balance(transfer_service, account_service, accounts):
    a, b = accounts

    transfer = transfer_service.create_transfer(OWNER, a, b, "500.00", date(2024, 2, 1), "Reserva")

    assert transfer.amount == Decimal("500.00")
    assert transfer.from_account_id == a
    assert transfer.to_account_id == b
    assert transfer.description == "Reserva"
    assert account_service.get_account(OWNER, a).balance == Decimal("200.00")
    assert account_service.get_account(OWNER, b).balance == Decimal("700.00")


def test_second_transfer_fails_insufficient_funds(transfer_service, account_service, accounts):
    a, b = accounts
    transfer_service.create_transfer(OWNER, a, b, "500.00", date(2024, 2, 1))

    with pytest.raises(InsufficientFundsError):
        transfer_service.create_transfer(OWNER, a, b, "500.00", date(2024, 2, 2))

    assert account_service.get_account(OWNER, a).balance == Decimal("200.00")
    assert account_service.get_account(OWNER, b).balance == Decimal("700.00")
    assert len(transfer_service.list_transfers(OWNER)) == 1


def test_transfer_of_whole_balance(transfer_service, account_service, accounts):
    a, b = accounts
    transfer_service.create_transfer(OWNER, a, b, "700.00", date(2024, 2, 1))
    assert account_service.get_account(OWNER, a).balance == Decimal("0.00")


def test_same_account(transfer_service, accounts):
    a, _ = accounts
    with pytest.raises(InvalidTransferError):
        transfer_service.create_transfer(OWNER, a, a, "10", date(2024, 2, 1))


def test_non_positive_amount(transfer_service, accounts):
    a, b = accounts
    with pytest.raises(InvalidAmountError):
        transfer_service.create_transfer(OWNER, a, b, "0", date(2024, 2, 1))


def test_future_transfer_date(transfer_service, account_service, accounts):
    a, b = accounts
    with pytest.raises(ValidationError, match="in the future"):
        transfer_service.create_transfer(OWNER, a, b, "10", date.today() + timedelta(days=1))
    assert account_service.get_account(OWNER, a).balance == Decimal("700.00")
    assert transfer_service.list_transfers(OWNER) == []

def test_unknown_account(transfer_service, accounts):
    a, _ = accounts
    with pytest.raises(NotFoundError):
        transfer_service.create_transfer(OWNER, a, 999, "10", date(2024, 2, 1))


def test_other_owner_accounts_are_invisible(transfer_service, account_service, accounts):
    a, b = accounts
    with pytest.raises(NotFoundError):
        transfer_service.create_transfer(OTHER_OWNER, a, b, "10", date(2024, 2, 1))

    foreign = account_service.create_account(OTHER_OWNER, name="C", initial_balance="100")
    with pytest.raises(NotFoundError):
        transfer_service.create_transfer(OWNER, a, foreign, "10", date(2024, 2, 1))


def test_conditional_debit_guards_stale_balance(temp_db, account_service, accounts):
    """The debit refuses to overdraw even when the balance check passed earlier."""
    a, _ = accounts
    assert temp_db.adjust_bank_balance(OWNER, a, Decimal("-700.00"), minimum_balance=Decimal("700.00"))
    assert not temp_db.adjust_bank_balance(OWNER, a, Decimal("-1.00"), minimum_balance=Decimal("1.00"))
    assert account_service.get_account(OWNER, a).balance == Decimal("0.00")


def test_list_transfers_by_account(transfer_service, account_service, accounts):
    a, b = accounts
    c = account_service.create_account(OWNER, name="C")
    transfer_service.create_transfer(OWNER, a, b, "10", date(2024, 2, 1))
    transfer_service.create_transfer(OWNER, b, c, "5", date(2024, 2, 2))

    assert len(transfer_service.list_transfers(OWNER, account_id=a)) == 1
    assert len(transfer_service.list_transfers(OWNER, account_id=b)) == 2
    assert len(transfer_service.list_transfers(OWNER)) == 2
