"""Cost center domain service."""

from typing import TYPE_CHECKING, Optional

from ledgerkit.domain.entities import CostCenter
from ledgerkit.domain.errors import (
    ConflictError,
    CyclicReferenceError,
    HasDependentsError,
    NotFoundError,
    ValidationError,
    cost_center_cycle,
    cost_center_not_found,
    delete_blocked,
)

if TYPE_CHECKING:
    from ledgerkit.database.base import Database


class CostCenterService:
    """Service for managing the cost center tree."""

    def __init__(self, db: "Database"):
        """Initialize cost center service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_cost_center(
        self,
        owner: str,
        code: str,
        name: str,
        parent_id: Optional[int] = None,
        description: Optional[str] = None,
    ) -> int:
        """Create a cost center.

        The level is derived from the parent (roots are level 1).

        Returns:
            Cost center ID

        Raises:
            ValidationError: If code or name is empty
            ConflictError: If the code is already used
            NotFoundError: If the parent does not exist
        """
        if not code or not code.strip():
            raise ValidationError("Cost center code is required")
        if not name or not name.strip():
            raise ValidationError("Cost center name is required")
        if self.db.get_cost_center_by_code(owner, code) is not None:
            raise ConflictError(f"Cost center with code '{code}' already exists")

        level = 1
        if parent_id is not None:
            parent = self.db.get_cost_center(owner, parent_id)
            if parent is None:
                raise NotFoundError(cost_center_not_found(parent_id))
            level = parent.level + 1

        return self.db.create_cost_center(
            owner=owner, code=code, name=name, parent_id=parent_id, level=level, description=description
        )

    def get_cost_center(self, owner: str, cost_center_id: int) -> Optional[CostCenter]:
        """Get cost center by ID."""
        return self.db.get_cost_center(owner, cost_center_id)

    def list_cost_centers(self, owner: str) -> list[CostCenter]:
        """List cost centers ordered by code."""
        return self.db.list_cost_centers(owner)

    def get_ancestor_ids(self, owner: str, cost_center_id: int) -> list[int]:
        """Return IDs from the cost center's parent up to its root."""
        ancestors = []
        seen = {cost_center_id}
        center = self.db.get_cost_center(owner, cost_center_id)
        while center is not None and center.parent_id is not None:
            if center.parent_id in seen:
                # Stored data already cyclic; stop walking
                break
            ancestors.append(center.parent_id)
            seen.add(center.parent_id)
            center = self.db.get_cost_center(owner, center.parent_id)
        return ancestors

    def move_cost_center(self, owner: str, cost_center_id: int, parent_id: Optional[int]) -> None:
        """Change the parent of a cost center.

        Levels of the moved subtree are recomputed.

        Raises:
            NotFoundError: If the cost center or new parent does not exist
            CyclicReferenceError: If the new parent is the cost center itself
                or one of its descendants
        """
        center = self.db.get_cost_center(owner, cost_center_id)
        if center is None:
            raise NotFoundError(cost_center_not_found(cost_center_id))

        level = 1
        if parent_id is not None:
            parent = self.db.get_cost_center(owner, parent_id)
            if parent is None:
                raise NotFoundError(cost_center_not_found(parent_id))
            if parent_id == cost_center_id or cost_center_id in self.get_ancestor_ids(owner, parent_id):
                raise CyclicReferenceError(cost_center_cycle(cost_center_id, parent_id))
            level = parent.level + 1

        with self.db.transaction():
            self.db.update_cost_center(owner, cost_center_id, parent_id=parent_id, level=level, update_parent=True)
            self._relevel_children(owner, cost_center_id, level)

    def _relevel_children(self, owner: str, parent_id: int, parent_level: int) -> None:
        children = [c for c in self.db.list_cost_centers(owner) if c.parent_id == parent_id]
        for child in children:
            self.db.update_cost_center(owner, child.id, level=parent_level + 1)
            self._relevel_children(owner, child.id, parent_level + 1)

    def rename_cost_center(self, owner: str, cost_center_id: int, name: str) -> None:
        """Rename a cost center."""
        if self.db.get_cost_center(owner, cost_center_id) is None:
            raise NotFoundError(cost_center_not_found(cost_center_id))
        if not name or not name.strip():
            raise ValidationError("Cost center name is required")
        self.db.update_cost_center(owner, cost_center_id, name=name)

    def delete_cost_center(self, owner: str, cost_center_id: int) -> None:
        """Delete a cost center.

        Raises:
            NotFoundError: If the cost center does not exist
            HasDependentsError: If children, allocations or obligations reference it
        """
        if self.db.get_cost_center(owner, cost_center_id) is None:
            raise NotFoundError(cost_center_not_found(cost_center_id))

        counts = self.db.get_cost_center_dependent_counts(owner, cost_center_id)
        if any(counts.values()):
            raise HasDependentsError(delete_blocked("cost center", cost_center_id, counts), counts)

        self.db.delete_cost_center(owner, cost_center_id)
