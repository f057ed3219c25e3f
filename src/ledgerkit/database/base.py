"""Abstract database interface.

Every operation is scoped to an ``owner``: rows belonging to another owner
behave exactly like missing rows.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional, Any
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from ledgerkit.domain.entities import (
    BankAccount,
    BankTransfer,
    CostAllocation,
    CostCenter,
    Obligation,
    ObligationKind,
    ObligationStatus,
    Payment,
    RecurrenceStatus,
)


class Database(ABC):
    """Abstract database interface for ledgerkit."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """Open a unit of work.

        All writes made inside the block are committed together when the
        outermost block exits normally and rolled back together if any
        exception escapes. Blocks may be nested; only the outermost one
        commits.
        """
        pass

    # Bank account operations
    @abstractmethod
    def create_bank_account(
        self,
        owner: str,
        name: str,
        bank_name: Optional[str] = None,
        initial_balance: Decimal = Decimal("0.00"),
        initial_balance_date: Optional[date] = None,
    ) -> int:
        """Create a bank account whose balance starts at ``initial_balance``. Returns ID."""
        pass

    @abstractmethod
    def get_bank_account(self, owner: str, account_id: int) -> Optional[BankAccount]:
        """Get bank account by ID."""
        pass

    @abstractmethod
    def get_bank_account_by_name(self, owner: str, name: str) -> Optional[BankAccount]:
        """Get bank account by name."""
        pass

    @abstractmethod
    def list_bank_accounts(self, owner: str) -> list[BankAccount]:
        """List bank accounts ordered by name."""
        pass

    @abstractmethod
    def update_bank_account(
        self,
        owner: str,
        account_id: int,
        name: Optional[str] = None,
        bank_name: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> None:
        """Update non-financial bank account fields."""
        pass

    @abstractmethod
    def adjust_bank_balance(
        self, owner: str, account_id: int, delta: Decimal, minimum_balance: Optional[Decimal] = None
    ) -> bool:
        """Atomically add ``delta`` to the account balance.

        When ``minimum_balance`` is given the update only applies if the
        current balance is at least that value. Returns False when no row
        was updated (missing account or guard failed).
        """
        pass

    @abstractmethod
    def delete_bank_account(self, owner: str, account_id: int) -> None:
        """Delete a bank account."""
        pass

    @abstractmethod
    def get_bank_account_dependent_counts(self, owner: str, account_id: int) -> dict[str, int]:
        """Count payments, transfers and obligations referencing an account."""
        pass

    # Cost center operations
    @abstractmethod
    def create_cost_center(
        self,
        owner: str,
        code: str,
        name: str,
        parent_id: Optional[int] = None,
        level: int = 1,
        description: Optional[str] = None,
    ) -> int:
        """Create a cost center. Returns cost center ID."""
        pass

    @abstractmethod
    def get_cost_center(self, owner: str, cost_center_id: int) -> Optional[CostCenter]:
        """Get cost center by ID."""
        pass

    @abstractmethod
    def get_cost_center_by_code(self, owner: str, code: str) -> Optional[CostCenter]:
        """Get cost center by code."""
        pass

    @abstractmethod
    def list_cost_centers(self, owner: str) -> list[CostCenter]:
        """List all cost centers ordered by code."""
        pass

    @abstractmethod
    def update_cost_center(
        self,
        owner: str,
        cost_center_id: int,
        name: Optional[str] = None,
        parent_id: Optional[int] = None,
        level: Optional[int] = None,
        update_parent: bool = False,
    ) -> None:
        """Update cost center fields.

        Args:
            update_parent: If True, set parent_id even if it is None (to make it a root)
        """
        pass

    @abstractmethod
    def delete_cost_center(self, owner: str, cost_center_id: int) -> None:
        """Delete a cost center."""
        pass

    @abstractmethod
    def get_cost_center_dependent_counts(self, owner: str, cost_center_id: int) -> dict[str, int]:
        """Count child cost centers, allocations and obligations referencing a cost center."""
        pass

    # Obligation operations
    @abstractmethod
    def create_obligation(self, owner: str, kind: ObligationKind, **fields: Any) -> int:
        """Create a payable/receivable from domain field values. Returns ID."""
        pass

    @abstractmethod
    def get_obligation(self, owner: str, kind: ObligationKind, obligation_id: int) -> Optional[Obligation]:
        """Get payable/receivable by ID."""
        pass

    @abstractmethod
    def list_obligations(
        self,
        owner: str,
        kind: ObligationKind,
        status: Optional[ObligationStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        recurrence_parent_id: Optional[int] = None,
    ) -> list[Obligation]:
        """List payables/receivables ordered by due date, with optional filters."""
        pass

    @abstractmethod
    def list_due_recurrences(self, owner: str, kind: ObligationKind, today: date) -> list[Obligation]:
        """List active recurring parents whose next date is on or before ``today``."""
        pass

    @abstractmethod
    def update_obligation(self, owner: str, kind: ObligationKind, obligation_id: int, **changes: Any) -> None:
        """Write the given domain field values to a payable/receivable."""
        pass

    @abstractmethod
    def apply_settlement(
        self,
        owner: str,
        kind: ObligationKind,
        obligation_id: int,
        expected_settled: Decimal,
        expected_status: ObligationStatus,
        new_settled: Decimal,
        status: ObligationStatus,
    ) -> bool:
        """Compare-and-swap the settled amount and status.

        Returns False if the stored settled amount or status is no longer
        ``expected_settled`` or ``expected_status``.
        """
        pass

    @abstractmethod
    def advance_recurrence(
        self,
        owner: str,
        kind: ObligationKind,
        obligation_id: int,
        expected_next_date: date,
        next_date: Optional[date],
        status: RecurrenceStatus,
    ) -> bool:
        """Compare-and-swap the next recurrence date of an active series.

        Returns False if the series is no longer active at
        ``expected_next_date``.
        """
        pass

    @abstractmethod
    def cancel_obligation(
        self,
        owner: str,
        kind: ObligationKind,
        obligation_id: int,
        expected_settled: Decimal,
        expected_status: ObligationStatus,
        conclude_series: bool = False,
    ) -> bool:
        """Compare-and-swap the status to cancelado.

        Returns False if the stored settled amount or status is no longer
        ``expected_settled`` or ``expected_status``.
        """
        pass

    @abstractmethod
    def mark_overdue(self, owner: str, kind: ObligationKind, today: date) -> int:
        """Flag pending obligations due before ``today`` as overdue. Returns count."""
        pass

    @abstractmethod
    def delete_obligation(self, owner: str, kind: ObligationKind, obligation_id: int) -> None:
        """Delete a payable/receivable."""
        pass

    # Payment operations
    @abstractmethod
    def create_payment(
        self,
        owner: str,
        transaction_type: ObligationKind,
        transaction_id: int,
        payment_method: str,
        amount: Decimal,
        payment_date: date,
        bank_account_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> int:
        """Record a settlement. Returns payment ID."""
        pass

    @abstractmethod
    def get_payment(self, owner: str, payment_id: int) -> Optional[Payment]:
        """Get payment by ID."""
        pass

    @abstractmethod
    def list_payments(
        self,
        owner: str,
        transaction_type: Optional[ObligationKind] = None,
        transaction_id: Optional[int] = None,
        bank_account_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[Payment]:
        """List payments in (date, creation) order with optional filters."""
        pass

    # Bank transfer operations
    @abstractmethod
    def create_bank_transfer(
        self,
        owner: str,
        from_account_id: int,
        to_account_id: int,
        amount: Decimal,
        transfer_date: date,
        description: Optional[str] = None,
    ) -> int:
        """Record a transfer. Returns transfer ID."""
        pass

    @abstractmethod
    def get_bank_transfer(self, owner: str, transfer_id: int) -> Optional[BankTransfer]:
        """Get transfer by ID."""
        pass

    @abstractmethod
    def list_bank_transfers(
        self,
        owner: str,
        account_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[BankTransfer]:
        """List transfers in (date, creation) order.

        Args:
            account_id: Only transfers where the account is source or destination
        """
        pass

    # Cost allocation operations
    @abstractmethod
    def create_allocation(
        self,
        owner: str,
        transaction_type: ObligationKind,
        transaction_id: int,
        cost_center_id: int,
        percentage: Decimal,
        amount: Decimal,
    ) -> int:
        """Create one allocation row. Returns allocation ID."""
        pass

    @abstractmethod
    def list_allocations(
        self,
        owner: str,
        transaction_type: Optional[ObligationKind] = None,
        transaction_id: Optional[int] = None,
    ) -> list[CostAllocation]:
        """List allocations in creation order."""
        pass

    @abstractmethod
    def delete_allocations(self, owner: str, transaction_type: ObligationKind, transaction_id: int) -> int:
        """Delete every allocation of a transaction. Returns number deleted."""
        pass
