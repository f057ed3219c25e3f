"""Cost-center allocation ("rateio") validation and persistence.

``validate_allocations`` and ``compute_allocation_amounts`` are pure; the
service persists a validated set as delete-then-insert inside a single
unit of work.
"""

import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Iterable, Optional, Sequence

from ledgerkit.domain.entities import (
    AllocationAmount,
    AllocationInput,
    CostAllocation,
    ObligationKind,
)
from ledgerkit.domain.errors import (
    InvalidAllocationError,
    InvalidAmountError,
    NotFoundError,
    cost_center_not_found,
    obligation_not_found,
)
from ledgerkit.domain.money import HUNDRED, round2, to_decimal

if TYPE_CHECKING:
    from ledgerkit.database.base import Database

logger = logging.getLogger(__name__)

PERCENTAGE_TOLERANCE = Decimal("0.01")


def _percentage(value) -> Optional[Decimal]:
    try:
        return to_decimal(value)
    except InvalidAmountError:
        return None


def validate_allocations(inputs: Sequence[AllocationInput]) -> None:
    """Validate a set of cost-center allocations.

    Every violated constraint is reported in a single error.

    Args:
        inputs: Requested allocations

    Raises:
        InvalidAllocationError: If the set is empty, a cost center is missing
            or repeated, a percentage is outside (0, 100], or the percentages
            do not sum to 100 (within 0.01)
    """
    if not inputs:
        raise InvalidAllocationError("At least one cost center is required")

    errors = []
    total = Decimal("0")
    for index, allocation in enumerate(inputs, start=1):
        percentage = _percentage(allocation.percentage)
        if percentage is None or percentage <= 0 or percentage > HUNDRED:
            errors.append(f"Allocation {index}: percentage must be between 0.01 and 100")
        else:
            total += percentage
        if allocation.cost_center_id is None or allocation.cost_center_id == "":
            errors.append(f"Allocation {index}: cost center is required")

    cost_center_ids = [a.cost_center_id for a in inputs if a.cost_center_id is not None]
    if len(set(cost_center_ids)) != len(cost_center_ids):
        errors.append("Duplicate cost centers are not allowed")

    if errors:
        raise InvalidAllocationError("; ".join(errors))

    if abs(total - HUNDRED) > PERCENTAGE_TOLERANCE:
        raise InvalidAllocationError(f"Percentages must sum to 100%. Current: {total:.2f}%")


def compute_allocation_amounts(
    inputs: Iterable[AllocationInput], total_amount: Decimal
) -> list[AllocationAmount]:
    """Annotate each allocation with ``round2(total × percentage / 100)``.

    Rounding is half-up per row and the last row is not adjusted, so the
    amounts may differ from ``total_amount`` by a few cents.
    """
    total = to_decimal(total_amount)
    return [
        AllocationAmount(
            cost_center_id=allocation.cost_center_id,
            percentage=round2(allocation.percentage),
            amount=round2(total * to_decimal(allocation.percentage) / HUNDRED),
        )
        for allocation in inputs
    ]


def create_equal_distribution(cost_center_ids: Sequence[int]) -> list[AllocationInput]:
    """Split 100% evenly across cost centers.

    Each share is rounded to two places and the last one absorbs the
    remainder, so the percentages sum to exactly 100.
    """
    if not cost_center_ids:
        return []

    share = round2(HUNDRED / len(cost_center_ids))
    allocations = [AllocationInput(cost_center_id=cc_id, percentage=share) for cc_id in cost_center_ids]
    remainder = HUNDRED - share * len(cost_center_ids)
    if remainder:
        last = allocations[-1]
        allocations[-1] = AllocationInput(cost_center_id=last.cost_center_id, percentage=share + remainder)
    return allocations


def recalculate_allocations(
    existing: Iterable[CostAllocation], new_total_amount: Decimal
) -> list[AllocationAmount]:
    """Recompute stored allocations against a new total."""
    inputs = [AllocationInput(cost_center_id=a.cost_center_id, percentage=a.percentage) for a in existing]
    return compute_allocation_amounts(inputs, new_total_amount)


class AllocationService:
    """Service for managing cost-center allocations of payables/receivables."""

    def __init__(self, db: "Database"):
        """Initialize allocation service.

        Args:
            db: Database instance
        """
        self.db = db

    def replace_allocations(
        self,
        owner: str,
        kind: ObligationKind,
        transaction_id: int,
        inputs: Sequence[AllocationInput],
    ) -> list[CostAllocation]:
        """Replace every allocation of a payable/receivable.

        An empty ``inputs`` clears the allocations (the obligation becomes
        unallocated).

        Returns:
            The stored allocations

        Raises:
            NotFoundError: If the obligation or a cost center does not exist
            InvalidAllocationError: If the allocation set is invalid
        """
        obligation = self.db.get_obligation(owner, kind, transaction_id)
        if obligation is None:
            raise NotFoundError(obligation_not_found(ObligationKind(kind).value, transaction_id))

        rows: list[AllocationAmount] = []
        if inputs:
            validate_allocations(inputs)
            for allocation in inputs:
                if self.db.get_cost_center(owner, allocation.cost_center_id) is None:
                    raise NotFoundError(cost_center_not_found(allocation.cost_center_id))
            rows = compute_allocation_amounts(inputs, obligation.total_amount)

        with self.db.transaction():
            self.db.delete_allocations(owner, kind, transaction_id)
            for row in rows:
                self.db.create_allocation(
                    owner=owner,
                    transaction_type=kind,
                    transaction_id=transaction_id,
                    cost_center_id=row.cost_center_id,
                    percentage=row.percentage,
                    amount=row.amount,
                )

        logger.info(
            "Stored %d allocation(s) for %s %s", len(rows), ObligationKind(kind).value, transaction_id
        )
        return self.db.list_allocations(owner, kind, transaction_id)

    def get_allocations(self, owner: str, kind: ObligationKind, transaction_id: int) -> list[CostAllocation]:
        """Get allocations of a payable/receivable."""
        return self.db.list_allocations(owner, kind, transaction_id)

    def delete_allocations(self, owner: str, kind: ObligationKind, transaction_id: int) -> int:
        """Remove all allocations of a payable/receivable. Returns number removed."""
        return self.db.delete_allocations(owner, kind, transaction_id)
