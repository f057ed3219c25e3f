"""Bank account domain service."""

from datetime import date
from typing import TYPE_CHECKING, Optional

from ledgerkit.domain.entities import BankAccount
from ledgerkit.domain.errors import (
    ConflictError,
    HasDependentsError,
    NotFoundError,
    ValidationError,
    bank_account_not_found,
    delete_blocked,
)
from ledgerkit.domain.money import AmountLike, ZERO, to_money

if TYPE_CHECKING:
    from ledgerkit.database.base import Database


class BankAccountService:
    """Service for managing bank accounts.

    Balances are never written here; they only change through settlements
    and transfers.
    """

    def __init__(self, db: "Database"):
        """Initialize bank account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        owner: str,
        name: str,
        bank_name: Optional[str] = None,
        initial_balance: AmountLike = ZERO,
        initial_balance_date: Optional[date] = None,
    ) -> int:
        """Create a new bank account.

        Args:
            owner: Owning user
            name: Account name
            bank_name: Optional bank name
            initial_balance: Opening balance (the statement baseline)
            initial_balance_date: Optional date of the opening balance

        Returns:
            Bank account ID

        Raises:
            ValidationError: If the name is empty
            ConflictError: If an account with the same name already exists
        """
        if not name or not name.strip():
            raise ValidationError("Account name is required")
        if self.db.get_bank_account_by_name(owner, name) is not None:
            raise ConflictError(f"Bank account with name '{name}' already exists")

        return self.db.create_bank_account(
            owner=owner,
            name=name,
            bank_name=bank_name,
            initial_balance=to_money(initial_balance),
            initial_balance_date=initial_balance_date,
        )

    def get_account(self, owner: str, account_id: int) -> Optional[BankAccount]:
        """Get bank account by ID.

        Returns:
            Bank account entity or None if not found
        """
        return self.db.get_bank_account(owner, account_id)

    def list_accounts(self, owner: str) -> list[BankAccount]:
        """List all bank accounts of an owner."""
        return self.db.list_bank_accounts(owner)

    def update_account(
        self,
        owner: str,
        account_id: int,
        name: Optional[str] = None,
        bank_name: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> None:
        """Update non-financial account fields.

        Raises:
            NotFoundError: If the account does not exist
            ConflictError: If the new name is taken by another account
        """
        account = self.db.get_bank_account(owner, account_id)
        if account is None:
            raise NotFoundError(bank_account_not_found(account_id))

        if name is not None:
            existing = self.db.get_bank_account_by_name(owner, name)
            if existing is not None and existing.id != account_id:
                raise ConflictError(f"Bank account with name '{name}' already exists")

        self.db.update_bank_account(owner, account_id, name=name, bank_name=bank_name, is_active=is_active)

    def delete_account(self, owner: str, account_id: int) -> None:
        """Delete a bank account.

        Raises:
            NotFoundError: If the account does not exist
            HasDependentsError: If payments, transfers or obligations reference it
        """
        account = self.db.get_bank_account(owner, account_id)
        if account is None:
            raise NotFoundError(bank_account_not_found(account_id))

        counts = self.db.get_bank_account_dependent_counts(owner, account_id)
        if any(counts.values()):
            raise HasDependentsError(delete_blocked("bank account", account_id, counts), counts)

        self.db.delete_bank_account(owner, account_id)
