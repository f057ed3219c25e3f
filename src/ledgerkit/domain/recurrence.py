"""Recurrence engine for recurring payables/receivables.

A series is keyed by its parent obligation. Each sweep generates at most
one child occurrence per active series whose ``recurrence_next_date`` has
arrived and moves the parent's next date one period forward.
"""

import logging
from datetime import date
from typing import TYPE_CHECKING, Optional, Union

from dateutil.relativedelta import relativedelta

from ledgerkit.domain.entities import (
    Obligation,
    ObligationKind,
    ObligationStatus,
    RecurrenceResult,
    RecurrenceStatus,
    RecurrenceType,
)
from ledgerkit.domain.errors import (
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
    obligation_not_found,
)
from ledgerkit.domain.money import ZERO

if TYPE_CHECKING:
    from ledgerkit.database.base import Database

logger = logging.getLogger(__name__)

_MONTHS_PER_PERIOD = {
    RecurrenceType.MENSAL: 1,
    RecurrenceType.TRIMESTRAL: 3,
    RecurrenceType.ANUAL: 12,
}


def parse_recurrence_type(value: Union[RecurrenceType, str]) -> RecurrenceType:
    """Parse a recurrence type.

    Raises:
        ValidationError: If the value is not a known recurrence type
    """
    try:
        return RecurrenceType(value)
    except ValueError:
        valid = ", ".join(t.value for t in RecurrenceType)
        raise ValidationError(f"Invalid recurrence type '{value}'. Expected one of: {valid}")


def parse_recurrence_status(value: Union[RecurrenceStatus, str]) -> RecurrenceStatus:
    """Parse a recurrence status.

    Raises:
        ValidationError: If the value is not a known recurrence status
    """
    try:
        return RecurrenceStatus(value)
    except ValueError:
        valid = ", ".join(s.value for s in RecurrenceStatus)
        raise ValidationError(f"Invalid recurrence status '{value}'. Expected one of: {valid}")


def next_recurrence_date(current: date, recurrence_type: Union[RecurrenceType, str]) -> Optional[date]:
    """Return the date one period after ``current``.

    Months are calendar months; a day that does not exist in the target
    month is clamped to its last day (Jan 31 -> Feb 29 in a leap year).
    Returns None for one-off obligations.
    """
    recurrence_type = parse_recurrence_type(recurrence_type)
    if recurrence_type == RecurrenceType.UNICA:
        return None
    return current + relativedelta(months=_MONTHS_PER_PERIOD[recurrence_type])


def first_recurrence_date(issue_date: date, due_date: date, start_date: date) -> date:
    """Return the first due date of a series starting (issued) on ``start_date``."""
    return start_date + (due_date - issue_date)


def preview_occurrences(
    first_due_date: date,
    recurrence_type: Union[RecurrenceType, str],
    count: int = 12,
    end_date: Optional[date] = None,
) -> list[date]:
    """List the next ``count`` due dates of a series without persisting anything."""
    dates: list[date] = []
    current: Optional[date] = first_due_date
    while current is not None and len(dates) < count:
        if end_date is not None and current > end_date:
            break
        dates.append(current)
        current = next_recurrence_date(current, recurrence_type)
    return dates


class RecurrenceService:
    """Service that generates occurrences of recurring payables/receivables."""

    def __init__(self, db: "Database"):
        """Initialize recurrence service.

        Args:
            db: Database instance
        """
        self.db = db

    def process_recurrences(self, owner: str, today: Optional[date] = None) -> RecurrenceResult:
        """Generate every occurrence that is due for ``owner``.

        Args:
            owner: Owning user
            today: Reference date (defaults to the current date)

        Returns:
            Number of payables and receivables generated
        """
        if today is None:
            today = date.today()

        generated = {}
        for kind in ObligationKind:
            count = 0
            for parent in self.db.list_due_recurrences(owner, kind, today):
                if self.generate_next(parent) is not None:
                    count += 1
            generated[kind] = count

        result = RecurrenceResult(
            payables_generated=generated[ObligationKind.PAYABLE],
            receivables_generated=generated[ObligationKind.RECEIVABLE],
        )
        if result.total:
            logger.info(
                "Generated %d payable(s) and %d receivable(s) for owner %s",
                result.payables_generated,
                result.receivables_generated,
                owner,
            )
        return result

    def generate_next(self, parent: Obligation) -> Optional[int]:
        """Generate the occurrence due at ``parent.recurrence_next_date``.

        The parent is advanced with a compare-and-swap on its next date in
        the same unit of work as the insert, so a parallel sweep that read
        the same parent generates nothing.

        Returns:
            ID of the created occurrence, or None if nothing was generated
        """
        if parent.recurrence_type == RecurrenceType.UNICA or parent.recurrence_next_date is None:
            return None

        due_date = parent.recurrence_next_date
        end_date = parent.recurrence_end_date

        if end_date is not None and due_date > end_date:
            with self.db.transaction():
                self.db.advance_recurrence(
                    parent.owner,
                    parent.kind,
                    parent.id,
                    expected_next_date=due_date,
                    next_date=due_date,
                    status=RecurrenceStatus.CONCLUIDA,
                )
            logger.info("Recurrence of %s %s concluded", parent.kind.value, parent.id)
            return None

        issue_date = due_date - (parent.due_date - parent.issue_date)
        next_date = next_recurrence_date(due_date, parent.recurrence_type)
        status = RecurrenceStatus.ATIVA
        if end_date is not None and next_date > end_date:
            status = RecurrenceStatus.CONCLUIDA

        try:
            with self.db.transaction():
                advanced = self.db.advance_recurrence(
                    parent.owner,
                    parent.kind,
                    parent.id,
                    expected_next_date=due_date,
                    next_date=next_date,
                    status=status,
                )
                if not advanced:
                    logger.warning(
                        "Recurrence of %s %s already advanced past %s; skipping",
                        parent.kind.value,
                        parent.id,
                        due_date,
                    )
                    return None
                child_id = self.db.create_obligation(
                    parent.owner,
                    parent.kind,
                    description=parent.description,
                    counterparty_id=parent.counterparty_id,
                    counterparty_name=parent.counterparty_name,
                    total_amount=parent.total_amount,
                    amount_settled=ZERO,
                    status=ObligationStatus.PENDENTE,
                    due_date=due_date,
                    issue_date=issue_date,
                    cost_center_id=parent.cost_center_id,
                    bank_account_id=parent.bank_account_id,
                    document_number=parent.document_number,
                    notes=parent.notes,
                    recurrence_type=RecurrenceType.UNICA,
                    recurrence_parent_id=parent.id,
                )
        except ConflictError:
            # Occurrence for this due date already exists; move the series past it
            with self.db.transaction():
                advanced = self.db.advance_recurrence(
                    parent.owner,
                    parent.kind,
                    parent.id,
                    expected_next_date=due_date,
                    next_date=next_date,
                    status=status,
                )
            if advanced:
                logger.warning(
                    "Occurrence of %s %s due %s already exists; advanced to %s",
                    parent.kind.value,
                    parent.id,
                    due_date,
                    next_date,
                )
            else:
                logger.warning(
                    "Occurrence of %s %s due %s already exists; skipping", parent.kind.value, parent.id, due_date
                )
            return None

        logger.info(
            "Generated %s %s from series %s (due %s)", parent.kind.value, child_id, parent.id, due_date
        )
        if status == RecurrenceStatus.CONCLUIDA:
            logger.info("Recurrence of %s %s concluded", parent.kind.value, parent.id)
        return child_id

    def set_recurrence_status(
        self,
        owner: str,
        kind: ObligationKind,
        obligation_id: int,
        status: Union[RecurrenceStatus, str],
    ) -> Obligation:
        """Pause, resume or conclude a recurring series.

        Raises:
            NotFoundError: If the obligation does not exist
            InvalidStateError: If it is not a recurring parent or the series
                is already concluded
        """
        status = parse_recurrence_status(status)
        obligation = self.db.get_obligation(owner, kind, obligation_id)
        if obligation is None:
            raise NotFoundError(obligation_not_found(ObligationKind(kind).value, obligation_id))
        if not obligation.is_recurring_parent:
            raise InvalidStateError(f"{obligation.kind.value.capitalize()} {obligation_id} is not a recurring series")
        if obligation.recurrence_status == RecurrenceStatus.CONCLUIDA and status != RecurrenceStatus.CONCLUIDA:
            raise InvalidStateError(f"Recurrence of {obligation.kind.value} {obligation_id} is already concluded")

        self.db.update_obligation(owner, kind, obligation_id, recurrence_status=status)
        return self.db.get_obligation(owner, kind, obligation_id)

    def list_occurrences(self, owner: str, kind: ObligationKind, parent_id: int) -> list[Obligation]:
        """List occurrences generated from a series."""
        return self.db.list_obligations(owner, kind, recurrence_parent_id=parent_id)
