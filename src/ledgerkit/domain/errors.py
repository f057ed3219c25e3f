"""Shared domain error messages and error types."""

from typing import Mapping


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist or is not owned by the caller."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class ConcurrencyError(ConflictError):
    """A concurrent writer changed the row between read and write."""


class InvalidAmountError(ValidationError):
    """Non-positive or malformed monetary amount."""


class InvalidStateError(DomainError):
    """Operation attempted on a paid, cancelled or otherwise terminal entity."""


class InvalidAllocationError(ValidationError):
    """Cost-center allocation percentages are invalid."""


class InvalidTransferError(ValidationError):
    """Transfer between the same account or otherwise malformed."""


class InsufficientFundsError(DomainError):
    """Transfer exceeds the source account balance."""


class CyclicReferenceError(DomainError):
    """Cost-center parent change would create a cycle."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class HasDependentsError(DependencyError):
    """Delete blocked by referencing rows.

    ``counts`` maps the kind of blocking record to how many exist.
    """

    def __init__(self, message: str, counts: Mapping[str, int]):
        super().__init__(message)
        self.counts = dict(counts)


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'s' if count != 1 else ''}"


def bank_account_not_found(account_id: int) -> str:
    """Return message for missing bank account."""
    return f"Bank account {account_id} not found"


def obligation_not_found(kind: str, obligation_id: int) -> str:
    """Return message for missing payable/receivable."""
    return f"{kind.capitalize()} {obligation_id} not found"


def cost_center_not_found(cost_center_id: int) -> str:
    """Return message for missing cost center."""
    return f"Cost center {cost_center_id} not found"


def non_positive_amount(amount) -> str:
    """Return message for an amount that must be positive."""
    return f"Amount must be greater than zero (got {amount})"


def obligation_locked(kind: str, obligation_id: int, status: str) -> str:
    """Return message for a payable/receivable that no longer accepts changes."""
    return f"{kind.capitalize()} {obligation_id} is '{status}' and cannot be changed"


def future_date(event: str, value) -> str:
    """Return message for a movement dated after today."""
    return f"{event} date {value} is in the future"


def insufficient_funds(account_id: int, balance, amount) -> str:
    """Return message when the source account cannot cover a transfer."""
    return f"Insufficient funds in bank account {account_id}: balance {balance}, requested {amount}"


def cost_center_cycle(cost_center_id: int, parent_id: int) -> str:
    """Return message when a parent change would create a cycle."""
    return (
        f"Cannot set cost center {parent_id} as parent of {cost_center_id}: "
        "it would create a cycle"
    )


def delete_blocked(entity: str, entity_id: int, counts: Mapping[str, int]) -> str:
    """Return message when an entity has dependent rows.

    Args:
        entity: Human readable entity kind (e.g. "bank account")
        entity_id: Entity ID
        counts: Mapping of dependent kind (singular noun) to count
    """
    parts = [_plural(count, noun) for noun, count in counts.items() if count > 0]
    return (
        f"Cannot delete {entity} {entity_id}: it has {', '.join(parts)}. "
        "Please reassign or delete them first."
    )
