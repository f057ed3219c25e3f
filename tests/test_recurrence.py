"""Tests for the recurrence engine."""

import pytest
from datetime import date
from decimal import Decimal

from ledgerkit.domain.entities import ObligationKind, ObligationStatus, RecurrenceStatus, RecurrenceType
from ledgerkit.domain.errors import InvalidStateError, ValidationError
from ledgerkit.domain.recurrence import (
    RecurrenceService,
    first_recurrence_date,
    next_recurrence_date,
    preview_occurrences,
)

from conftest import OWNER, OTHER_OWNER


class TestNextRecurrenceDate:
    """Tests for period arithmetic."""

    def test_monthly(self):
        assert next_recurrence_date(date(2024, 1, 6), "mensal") == date(2024, 2, 6)

    def test_quarterly(self):
        assert next_recurrence_date(date(2024, 11, 15), RecurrenceType.TRIMESTRAL) == date(2025, 2, 15)

    def test_yearly(self):
        assert next_recurrence_date(date(2024, 3, 1), RecurrenceType.ANUAL) == date(2025, 3, 1)

    def test_month_end_is_clamped(self):
        assert next_recurrence_date(date(2024, 1, 31), "mensal") == date(2024, 2, 29)
        assert next_recurrence_date(date(2023, 1, 31), "mensal") == date(2023, 2, 28)
        assert next_recurrence_date(date(2024, 2, 29), "anual") == date(2025, 2, 28)

    def test_unica_has_no_next_date(self):
        assert next_recurrence_date(date(2024, 1, 1), RecurrenceType.UNICA) is None

    def test_unknown_type(self):
        with pytest.raises(ValidationError, match="Invalid recurrence type"):
            next_recurrence_date(date(2024, 1, 1), "semanal")


def test_first_recurrence_date_keeps_issue_to_due_offset():
    assert first_recurrence_date(date(2024, 1, 1), date(2024, 1, 6), date(2024, 3, 1)) == date(2024, 3, 6)


def test_preview_occurrences():
    assert preview_occurrences(date(2024, 1, 31), "mensal", count=3) == [
        date(2024, 1, 31),
        date(2024, 2, 29),
        date(2024, 3, 29),
    ]
    assert preview_occurrences(date(2024, 1, 10), "trimestral", end_date=date(2024, 8, 1)) == [
        date(2024, 1, 10),
        date(2024, 4, 10),
        date(2024, 7, 10),
    ]


@pytest.fixture
def monthly_payable(obligation_service):
    """Monthly payable of 100.00 issued 2024-01-01, due five days later."""
    obligation_id = obligation_service.create_obligation(
        OWNER,
        ObligationKind.PAYABLE,
        description="Aluguel",
        total_amount="100.00",
        issue_date=date(2024, 1, 1),
        due_date=date(2024, 1, 6),
        recurrence_type=RecurrenceType.MENSAL,
        recurrence_start_date=date(2024, 1, 1),
    )
    return obligation_service.get_obligation(OWNER, ObligationKind.PAYABLE, obligation_id)


def test_created_series_is_active(monthly_payable):
    assert monthly_payable.recurrence_status == RecurrenceStatus.ATIVA
    assert monthly_payable.recurrence_next_date == date(2024, 1, 6)
    assert monthly_payable.is_recurring_parent


def test_three_monthly_sweeps(recurrence_service, monthly_payable):
    """Three sweeps one month apart generate 01-06, 02-06 and 03-06."""
    for today in (date(2024, 1, 6), date(2024, 2, 6), date(2024, 3, 6)):
        result = recurrence_service.process_recurrences(OWNER, today=today)
        assert result.payables_generated == 1
        assert result.receivables_generated == 0

    children = recurrence_service.list_occurrences(OWNER, ObligationKind.PAYABLE, monthly_payable.id)
    assert [c.due_date for c in children] == [date(2024, 1, 6), date(2024, 2, 6), date(2024, 3, 6)]
    assert [c.issue_date for c in children] == [date(2024, 1, 1), date(2024, 2, 1), date(2024, 3, 1)]
    for child in children:
        assert child.total_amount == Decimal("100.00")
        assert child.amount_settled == Decimal("0.00")
        assert child.status == ObligationStatus.PENDENTE
        assert child.recurrence_type == RecurrenceType.UNICA
        assert child.recurrence_parent_id == monthly_payable.id
        assert child.description == "Aluguel"

    parent = recurrence_service.db.get_obligation(OWNER, ObligationKind.PAYABLE, monthly_payable.id)
    assert parent.recurrence_next_date == date(2024, 4, 6)


def test_sweep_before_next_date_generates_nothing(recurrence_service, monthly_payable):
    result = recurrence_service.process_recurrences(OWNER, today=date(2024, 1, 5))
    assert result.total == 0


def test_one_occurrence_per_sweep(recurrence_service, monthly_payable):
    """A series that fell behind catches up one period per sweep."""
    assert recurrence_service.process_recurrences(OWNER, today=date(2024, 6, 30)).total == 1
    assert recurrence_service.process_recurrences(OWNER, today=date(2024, 6, 30)).total == 1

    children = recurrence_service.list_occurrences(OWNER, ObligationKind.PAYABLE, monthly_payable.id)
    assert [c.due_date for c in children] == [date(2024, 1, 6), date(2024, 2, 6)]


def test_immediate_repeat_sweep_is_idempotent(recurrence_service, monthly_payable):
    recurrence_service.process_recurrences(OWNER, today=date(2024, 1, 10))
    assert recurrence_service.process_recurrences(OWNER, today=date(2024, 1, 10)).total == 0
    assert len(recurrence_service.list_occurrences(OWNER, ObligationKind.PAYABLE, monthly_payable.id)) == 1


def test_sweep_moves_past_existing_occurrence(obligation_service, recurrence_service, monthly_payable):
    """A next date pointing at an already generated occurrence does not stall the series."""
    recurrence_service.process_recurrences(OWNER, today=date(2024, 1, 6))
    obligation_service.update_obligation(
        OWNER, ObligationKind.PAYABLE, monthly_payable.id, recurrence_next_date=date(2024, 1, 6)
    )

    generated = [recurrence_service.process_recurrences(OWNER, today=date(2024, 3, 10)).total for _ in range(3)]

    assert generated == [0, 1, 1]
    children = recurrence_service.list_occurrences(OWNER, ObligationKind.PAYABLE, monthly_payable.id)
    assert [c.due_date for c in children] == [date(2024, 1, 6), date(2024, 2, 6), date(2024, 3, 6)]
    parent = obligation_service.get_obligation(OWNER, ObligationKind.PAYABLE, monthly_payable.id)
    assert parent.recurrence_next_date == date(2024, 4, 6)

def test_concurrent_sweeps_generate_once(temp_db, second_db, monthly_payable):
    """Two sweeps that read the same parent produce a single occurrence."""
    first = RecurrenceService(temp_db)
    second = RecurrenceService(second_db)

    stale_parent = second_db.get_obligation(OWNER, ObligationKind.PAYABLE, monthly_payable.id)
    assert first.generate_next(monthly_payable) is not None
    assert second.generate_next(stale_parent) is None

    children = first.list_occurrences(OWNER, ObligationKind.PAYABLE, monthly_payable.id)
    assert len(children) == 1


def test_end_date_concludes_series(obligation_service, recurrence_service):
    obligation_id = obligation_service.create_obligation(
        OWNER,
        ObligationKind.RECEIVABLE,
        description="Mensalidade",
        total_amount="50",
        issue_date=date(2024, 1, 1),
        due_date=date(2024, 1, 10),
        recurrence_type="mensal",
        recurrence_end_date=date(2024, 2, 15),
    )

    assert recurrence_service.process_recurrences(OWNER, today=date(2024, 1, 10)).receivables_generated == 1
    # 02-10 is the last occurrence inside the end date; the series concludes with it
    assert recurrence_service.process_recurrences(OWNER, today=date(2024, 2, 10)).receivables_generated == 1
    assert recurrence_service.process_recurrences(OWNER, today=date(2024, 3, 10)).total == 0

    parent = obligation_service.get_obligation(OWNER, ObligationKind.RECEIVABLE, obligation_id)
    assert parent.recurrence_status == RecurrenceStatus.CONCLUIDA
    children = recurrence_service.list_occurrences(OWNER, ObligationKind.RECEIVABLE, obligation_id)
    assert [c.due_date for c in children] == [date(2024, 1, 10), date(2024, 2, 10)]


def test_due_date_past_end_date_concludes_without_child(obligation_service, recurrence_service, temp_db):
    obligation_id = obligation_service.create_obligation(
        OWNER,
        ObligationKind.PAYABLE,
        description="Seguro",
        total_amount="80",
        due_date=date(2024, 1, 10),
        recurrence_type="mensal",
        recurrence_end_date=date(2024, 3, 1),
    )
    # Next date already beyond the end date
    temp_db.update_obligation(OWNER, ObligationKind.PAYABLE, obligation_id, recurrence_next_date=date(2024, 3, 10))

    assert recurrence_service.process_recurrences(OWNER, today=date(2024, 3, 10)).total == 0
    parent = obligation_service.get_obligation(OWNER, ObligationKind.PAYABLE, obligation_id)
    assert parent.recurrence_status == RecurrenceStatus.CONCLUIDA
    assert recurrence_service.list_occurrences(OWNER, ObligationKind.PAYABLE, obligation_id) == []


def test_pause_and_resume(recurrence_service, monthly_payable):
    recurrence_service.set_recurrence_status(OWNER, ObligationKind.PAYABLE, monthly_payable.id, "pausada")
    assert recurrence_service.process_recurrences(OWNER, today=date(2024, 1, 10)).total == 0

    parent = recurrence_service.set_recurrence_status(
        OWNER, ObligationKind.PAYABLE, monthly_payable.id, RecurrenceStatus.ATIVA
    )
    assert parent.recurrence_status == RecurrenceStatus.ATIVA
    assert recurrence_service.process_recurrences(OWNER, today=date(2024, 1, 10)).total == 1


def test_concluded_series_cannot_resume(recurrence_service, monthly_payable):
    recurrence_service.set_recurrence_status(OWNER, ObligationKind.PAYABLE, monthly_payable.id, "concluida")
    with pytest.raises(InvalidStateError, match="already concluded"):
        recurrence_service.set_recurrence_status(OWNER, ObligationKind.PAYABLE, monthly_payable.id, "ativa")


def test_status_change_requires_recurring_parent(recurrence_service, sample_payable):
    with pytest.raises(InvalidStateError, match="not a recurring series"):
        recurrence_service.set_recurrence_status(OWNER, ObligationKind.PAYABLE, sample_payable.id, "pausada")


def test_sweep_is_owner_scoped(recurrence_service, monthly_payable):
    assert recurrence_service.process_recurrences(OTHER_OWNER, today=date(2024, 12, 31)).total == 0
    assert recurrence_service.list_occurrences(OWNER, ObligationKind.PAYABLE, monthly_payable.id) == []
