"""Utility for resolving bank account names to IDs."""

from ledgerkit.domain.bank_account import BankAccountService
from ledgerkit.domain.errors import NotFoundError, bank_account_not_found


def resolve_account(account_service: BankAccountService, owner: str, account: str | int) -> int:
    """Resolve bank account name or ID to account ID.

    Args:
        account_service: BankAccountService instance
        owner: Owning user
        account: Account name (str) or ID (int or string representation of int)

    Returns:
        Account ID

    Raises:
        NotFoundError: If account is not found
    """
    try:
        account_id = int(account)
    except (ValueError, TypeError):
        account_id = None

    if account_id is not None:
        if account_service.get_account(owner, account_id) is None:
            raise NotFoundError(bank_account_not_found(account_id))
        return account_id

    for acc in account_service.list_accounts(owner):
        if acc.name == account:
            return acc.id

    raise NotFoundError(f"Bank account '{account}' not found")
