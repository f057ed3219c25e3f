"""Payable/receivable lifecycle service."""

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Optional, Union

from ledgerkit.domain.allocation import recalculate_allocations
from ledgerkit.domain.entities import (
    Obligation,
    ObligationKind,
    ObligationStatus,
    RecurrenceStatus,
    RecurrenceType,
)
from ledgerkit.domain.errors import (
    ConcurrencyError,
    HasDependentsError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
    bank_account_not_found,
    cost_center_not_found,
    delete_blocked,
    obligation_locked,
    obligation_not_found,
)
from ledgerkit.domain.money import AmountLike, ZERO, require_positive
from ledgerkit.domain.recurrence import (
    RecurrenceService,
    first_recurrence_date,
    parse_recurrence_type,
)

if TYPE_CHECKING:
    from ledgerkit.database.base import Database

logger = logging.getLogger(__name__)

# Only these may change once an obligation is paid
METADATA_FIELDS = frozenset({"description", "counterparty_name", "document_number", "notes"})

# Only reachable through settlement, cancellation or the overdue sweep
MANAGED_FIELDS = frozenset({"amount_settled", "status"})

UPDATABLE_FIELDS = METADATA_FIELDS | frozenset(
    {
        "counterparty_id",
        "total_amount",
        "due_date",
        "issue_date",
        "cost_center_id",
        "bank_account_id",
        "recurrence_type",
        "recurrence_start_date",
        "recurrence_end_date",
        "recurrence_next_date",
    }
)

CANCELLABLE_STATUSES = (ObligationStatus.PENDENTE, ObligationStatus.VENCIDO, ObligationStatus.PARCIAL)


class ObligationService:
    """Service for managing payables and receivables."""

    def __init__(self, db: "Database"):
        """Initialize obligation service.

        Args:
            db: Database instance
        """
        self.db = db
        self.recurrence_service = RecurrenceService(db)

    def _require(self, owner: str, kind: ObligationKind, obligation_id: int) -> Obligation:
        obligation = self.db.get_obligation(owner, kind, obligation_id)
        if obligation is None:
            raise NotFoundError(obligation_not_found(ObligationKind(kind).value, obligation_id))
        return obligation

    def _check_references(
        self, owner: str, cost_center_id: Optional[int], bank_account_id: Optional[int]
    ) -> None:
        if cost_center_id is not None and self.db.get_cost_center(owner, cost_center_id) is None:
            raise NotFoundError(cost_center_not_found(cost_center_id))
        if bank_account_id is not None and self.db.get_bank_account(owner, bank_account_id) is None:
            raise NotFoundError(bank_account_not_found(bank_account_id))

    def create_obligation(
        self,
        owner: str,
        kind: Union[ObligationKind, str],
        description: str,
        total_amount: AmountLike,
        due_date: date,
        issue_date: Optional[date] = None,
        counterparty_id: Optional[int] = None,
        counterparty_name: Optional[str] = None,
        cost_center_id: Optional[int] = None,
        bank_account_id: Optional[int] = None,
        document_number: Optional[str] = None,
        notes: Optional[str] = None,
        recurrence_type: Union[RecurrenceType, str] = RecurrenceType.UNICA,
        recurrence_start_date: Optional[date] = None,
        recurrence_end_date: Optional[date] = None,
    ) -> int:
        """Create a payable or receivable.

        A recurring obligation becomes the parent of its series: it is
        created with an active recurrence whose next date is the due date
        of the series' first occurrence.

        Args:
            owner: Owning user
            kind: Payable or receivable
            description: Obligation description
            total_amount: Amount owed (must be positive)
            due_date: Due date
            issue_date: Issue date (defaults to the due date)
            counterparty_id: Optional supplier/customer ID
            counterparty_name: Optional free-text counterparty
            cost_center_id: Optional cost center
            bank_account_id: Optional default bank account
            document_number: Optional document number
            notes: Optional notes
            recurrence_type: unica, mensal, trimestral or anual
            recurrence_start_date: First issue date of the series (defaults to issue date)
            recurrence_end_date: Optional last due date of the series

        Returns:
            Obligation ID

        Raises:
            ValidationError: If a field is missing or inconsistent
            InvalidAmountError: If the total is not positive
            NotFoundError: If the cost center or bank account does not exist
        """
        kind = ObligationKind(kind)
        if not description or not description.strip():
            raise ValidationError("Description is required")
        total_amount = require_positive(total_amount)
        if issue_date is None:
            issue_date = due_date
        if due_date < issue_date:
            raise ValidationError("Due date must be on or after the issue date")
        recurrence_type = parse_recurrence_type(recurrence_type)
        self._check_references(owner, cost_center_id, bank_account_id)

        recurrence: dict[str, Any] = {"recurrence_type": recurrence_type}
        if recurrence_type != RecurrenceType.UNICA:
            start = recurrence_start_date or issue_date
            if recurrence_end_date is not None and recurrence_end_date < start:
                raise ValidationError("Recurrence end date must be on or after its start date")
            recurrence.update(
                recurrence_status=RecurrenceStatus.ATIVA,
                recurrence_start_date=start,
                recurrence_end_date=recurrence_end_date,
                recurrence_next_date=first_recurrence_date(issue_date, due_date, start),
            )

        obligation_id = self.db.create_obligation(
            owner,
            kind,
            description=description,
            counterparty_id=counterparty_id,
            counterparty_name=counterparty_name,
            total_amount=total_amount,
            amount_settled=ZERO,
            status=ObligationStatus.PENDENTE,
            due_date=due_date,
            issue_date=issue_date,
            cost_center_id=cost_center_id,
            bank_account_id=bank_account_id,
            document_number=document_number,
            notes=notes,
            **recurrence,
        )
        logger.info("Created %s %s (%s, due %s)", kind.value, obligation_id, total_amount, due_date)
        return obligation_id

    def get_obligation(self, owner: str, kind: ObligationKind, obligation_id: int) -> Optional[Obligation]:
        """Get payable/receivable by ID."""
        return self.db.get_obligation(owner, kind, obligation_id)

    def list_obligations(
        self,
        owner: str,
        kind: ObligationKind,
        status: Optional[Union[ObligationStatus, str]] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        today: Optional[date] = None,
    ) -> list[Obligation]:
        """List payables/receivables after generating any due occurrences.

        Args:
            owner: Owning user
            kind: Payable or receivable
            status: Optional status filter
            start_date: Optional first due date (inclusive)
            end_date: Optional last due date (inclusive)
            today: Reference date for the recurrence sweep

        Returns:
            Obligations ordered by due date
        """
        if status is not None:
            try:
                status = ObligationStatus(status)
            except ValueError:
                valid = ", ".join(s.value for s in ObligationStatus)
                raise ValidationError(f"Invalid status '{status}'. Expected one of: {valid}")

        self.recurrence_service.process_recurrences(owner, today=today)
        return self.db.list_obligations(
            owner, kind, status=status, start_date=start_date, end_date=end_date
        )

    def update_obligation(
        self, owner: str, kind: ObligationKind, obligation_id: int, **changes: Any
    ) -> Obligation:
        """Update fields of a payable/receivable.

        Settled amount and status are never accepted here. Once the
        obligation is paid, only descriptive metadata may change.

        Returns:
            The updated obligation

        Raises:
            NotFoundError: If the obligation or a referenced entity does not exist
            InvalidStateError: If a protected field is changed
            ValidationError: If a field is unknown or the values are inconsistent
        """
        obligation = self._require(owner, kind, obligation_id)

        managed = MANAGED_FIELDS.intersection(changes)
        if managed:
            raise InvalidStateError(
                f"Field(s) {', '.join(sorted(managed))} change only through settlement or cancellation"
            )
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Unknown field(s): {', '.join(sorted(unknown))}")

        if obligation.status == ObligationStatus.PAGO and set(changes) - METADATA_FIELDS:
            raise InvalidStateError(obligation_locked(obligation.kind.value, obligation_id, obligation.status.value))

        if "description" in changes and not (changes["description"] or "").strip():
            raise ValidationError("Description is required")
        if "total_amount" in changes:
            changes["total_amount"] = require_positive(changes["total_amount"])
            if changes["total_amount"] < obligation.amount_settled:
                raise ValidationError("Total amount cannot be lower than the amount already settled")
        if "recurrence_type" in changes:
            changes["recurrence_type"] = parse_recurrence_type(changes["recurrence_type"])

        due_date = changes.get("due_date", obligation.due_date)
        issue_date = changes.get("issue_date", obligation.issue_date)
        if due_date < issue_date:
            raise ValidationError("Due date must be on or after the issue date")

        self._check_references(owner, changes.get("cost_center_id"), changes.get("bank_account_id"))

        with self.db.transaction():
            self.db.update_obligation(owner, kind, obligation_id, **changes)
            if "total_amount" in changes:
                self._reprice_allocations(owner, kind, obligation_id, changes["total_amount"])
        return self.db.get_obligation(owner, kind, obligation_id)

    def _reprice_allocations(self, owner: str, kind: ObligationKind, obligation_id: int, total: Decimal) -> None:
        existing = self.db.list_allocations(owner, kind, obligation_id)
        if not existing:
            return
        self.db.delete_allocations(owner, kind, obligation_id)
        for row in recalculate_allocations(existing, total):
            self.db.create_allocation(
                owner=owner,
                transaction_type=kind,
                transaction_id=obligation_id,
                cost_center_id=row.cost_center_id,
                percentage=row.percentage,
                amount=row.amount,
            )

    def cancel_obligation(self, owner: str, kind: ObligationKind, obligation_id: int) -> Obligation:
        """Cancel a payable/receivable that is not yet paid.

        Raises:
            NotFoundError: If the obligation does not exist
            InvalidStateError: If it is already paid or cancelled
            ConcurrencyError: If a settlement changed it meanwhile
        """
        obligation = self._require(owner, kind, obligation_id)
        if obligation.status not in CANCELLABLE_STATUSES:
            raise InvalidStateError(obligation_locked(obligation.kind.value, obligation_id, obligation.status.value))

        cancelled = self.db.cancel_obligation(
            owner,
            kind,
            obligation_id,
            expected_settled=obligation.amount_settled,
            expected_status=obligation.status,
            conclude_series=obligation.is_recurring_parent,
        )
        if not cancelled:
            raise ConcurrencyError(
                f"{obligation.kind.value.capitalize()} {obligation_id} was changed concurrently; retry the operation"
            )
        logger.info("Cancelled %s %s", obligation.kind.value, obligation_id)
        return self.db.get_obligation(owner, kind, obligation_id)

    def mark_overdue(self, owner: str, today: Optional[date] = None) -> int:
        """Flag pending payables/receivables due before ``today`` as overdue.

        Returns:
            Number of obligations flagged
        """
        if today is None:
            today = date.today()
        with self.db.transaction():
            count = sum(self.db.mark_overdue(owner, kind, today) for kind in ObligationKind)
        if count:
            logger.info("Marked %d obligation(s) overdue for owner %s", count, owner)
        return count

    def delete_obligation(self, owner: str, kind: ObligationKind, obligation_id: int) -> None:
        """Delete a payable/receivable together with its cost allocations.

        Raises:
            NotFoundError: If the obligation does not exist
            InvalidStateError: If it is paid
            HasDependentsError: If settlements or generated occurrences reference it
        """
        obligation = self._require(owner, kind, obligation_id)
        if obligation.status == ObligationStatus.PAGO:
            raise InvalidStateError(obligation_locked(obligation.kind.value, obligation_id, obligation.status.value))

        counts = {
            "payment": len(self.db.list_payments(owner, transaction_type=kind, transaction_id=obligation_id)),
            "occurrence": len(self.db.list_obligations(owner, kind, recurrence_parent_id=obligation_id)),
        }
        if any(counts.values()):
            raise HasDependentsError(delete_blocked(obligation.kind.value, obligation_id, counts), counts)

        with self.db.transaction():
            self.db.delete_allocations(owner, kind, obligation_id)
            self.db.delete_obligation(owner, kind, obligation_id)
        logger.info("Deleted %s %s", obligation.kind.value, obligation_id)
