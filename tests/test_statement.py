"""Tests for bank statement reconstruction."""

import pytest
from datetime import date
from decimal import Decimal

from ledgerkit.domain.entities import EntryType, ObligationKind
from ledgerkit.domain.errors import NotFoundError, ValidationError

from conftest import OWNER, OTHER_OWNER


def _settle(obligation_service, settlement_service, kind, amount, on, account_id, description):
    obligation_id = obligation_service.create_obligation(
        OWNER, kind, description=description, total_amount=amount, due_date=on
    )
    settlement_service.settle(OWNER, kind, obligation_id, amount, on, "pix", bank_account_id=account_id)
    return obligation_id


def test_january_statement(statement_service, obligation_service, settlement_service, sample_account):
    """A credit of 200 and a debit of 50 on a 1000.00 account run 1200 then 1150."""
    _settle(obligation_service, settlement_service, ObligationKind.RECEIVABLE, "200", date(2024, 1, 10), sample_account.id, "Venda")
    _settle(obligation_service, settlement_service, ObligationKind.PAYABLE, "50", date(2024, 1, 20), sample_account.id, "Luz")

    statement = statement_service.build_bank_statement(
        OWNER, sample_account.id, start_date=date(2024, 1, 1), end_date=date(2024, 1, 31)
    )

    assert statement.opening_balance == Decimal("1000.00")
    assert [(e.entry_type, e.amount, e.balance) for e in statement.entries] == [
        (EntryType.CREDIT, Decimal("200.00"), Decimal("1200.00")),
        (EntryType.DEBIT, Decimal("50.00"), Decimal("1150.00")),
    ]
    assert [e.description for e in statement.entries] == ["Venda", "Luz"]
    assert statement.total_credits == Decimal("200.00")
    assert statement.total_debits == Decimal("50.00")
    assert statement.final_balance == Decimal("1150.00")


def test_final_balance_matches_account(
    statement_service, obligation_service, settlement_service, transfer_service, account_service, sample_account
):
    other = account_service.create_account(OWNER, name="Poupanca", initial_balance="10")
    _settle(obligation_service, settlement_service, ObligationKind.PAYABLE, "120.50", date(2024, 1, 5), sample_account.id, "Internet")
    _settle(obligation_service, settlement_service, ObligationKind.RECEIVABLE, "80", date(2024, 1, 6), sample_account.id, "Aula")
    transfer_service.create_transfer(OWNER, sample_account.id, other, "300", date(2024, 1, 7))
    transfer_service.create_transfer(OWNER, other, sample_account.id, "25", date(2024, 1, 8))

    statement = statement_service.build_bank_statement(OWNER, sample_account.id, end_date=date.today())

    assert statement.final_balance == account_service.get_account(OWNER, sample_account.id).balance
    assert statement.final_balance == Decimal("684.50")
    other_statement = statement_service.build_bank_statement(OWNER, other)
    assert other_statement.final_balance == account_service.get_account(OWNER, other).balance


def test_transfer_descriptions(statement_service, transfer_service, account_service, sample_account):
    other = account_service.create_account(OWNER, name="Caixa")
    transfer_service.create_transfer(OWNER, sample_account.id, other, "100", date(2024, 1, 7))
    transfer_service.create_transfer(OWNER, other, sample_account.id, "40", date(2024, 1, 8), "Devolucao")

    entries = statement_service.build_bank_statement(OWNER, sample_account.id).entries

    assert [(e.entry_type, e.description, e.source) for e in entries] == [
        (EntryType.DEBIT, "Transfer to Caixa", "transfer"),
        (EntryType.CREDIT, "Devolucao", "transfer"),
    ]


def test_movements_before_window_fold_into_opening(
    statement_service, obligation_service, settlement_service, sample_account
):
    _settle(obligation_service, settlement_service, ObligationKind.PAYABLE, "100", date(2023, 12, 20), sample_account.id, "Dezembro")
    _settle(obligation_service, settlement_service, ObligationKind.PAYABLE, "30", date(2024, 1, 15), sample_account.id, "Janeiro")
    _settle(obligation_service, settlement_service, ObligationKind.PAYABLE, "5", date(2024, 2, 1), sample_account.id, "Fevereiro")

    statement = statement_service.build_bank_statement(
        OWNER, sample_account.id, start_date=date(2024, 1, 1), end_date=date(2024, 1, 31)
    )

    assert statement.opening_balance == Decimal("900.00")
    assert [e.description for e in statement.entries] == ["Janeiro"]
    assert statement.final_balance == Decimal("870.00")
    assert statement.total_debits == Decimal("30.00")


def test_same_day_movements_keep_creation_order(
    statement_service, obligation_service, settlement_service, sample_account
):
    for description in ("primeiro", "segundo", "terceiro"):
        _settle(obligation_service, settlement_service, ObligationKind.RECEIVABLE, "1", date(2024, 1, 1), sample_account.id, description)

    entries = statement_service.build_bank_statement(OWNER, sample_account.id).entries
    assert [e.description for e in entries] == ["primeiro", "segundo", "terceiro"]
    assert [e.balance for e in entries] == [Decimal("1001.00"), Decimal("1002.00"), Decimal("1003.00")]


def test_same_day_payments_and_transfers_interleave(
    statement_service, obligation_service, settlement_service, transfer_service, account_service, sample_account
):
    savings = account_service.create_account(OWNER, name="Poupanca")
    on = date(2024, 1, 1)

    _settle(obligation_service, settlement_service, ObligationKind.RECEIVABLE, "50", on, sample_account.id, "entrada")
    transfer_service.create_transfer(OWNER, sample_account.id, savings, "30", on, "reserva")
    _settle(obligation_service, settlement_service, ObligationKind.PAYABLE, "20", on, sample_account.id, "saida")

    entries = statement_service.build_bank_statement(OWNER, sample_account.id).entries
    assert [e.description for e in entries] == ["entrada", "reserva", "saida"]
    assert [e.balance for e in entries] == [Decimal("1050.00"), Decimal("1020.00"), Decimal("1000.00")]

def test_empty_statement(statement_service, sample_account):
    statement = statement_service.build_bank_statement(OWNER, sample_account.id)
    assert statement.entries == ()
    assert statement.final_balance == Decimal("1000.00")


def test_invalid_window(statement_service, sample_account):
    with pytest.raises(ValidationError):
        statement_service.build_bank_statement(
            OWNER, sample_account.id, start_date=date(2024, 2, 1), end_date=date(2024, 1, 1)
        )


def test_unknown_or_foreign_account(statement_service, sample_account):
    with pytest.raises(NotFoundError):
        statement_service.build_bank_statement(OWNER, 999)
    with pytest.raises(NotFoundError):
        statement_service.build_bank_statement(OTHER_OWNER, sample_account.id)
