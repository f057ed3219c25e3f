"""Tests for the cost center tree."""

import pytest
from datetime import date
from decimal import Decimal

from ledgerkit.domain.entities import AllocationInput, ObligationKind
from ledgerkit.domain.errors import (
    ConflictError,
    CyclicReferenceError,
    HasDependentsError,
    NotFoundError,
    ValidationError,
)

from conftest import OWNER, OTHER_OWNER


@pytest.fixture
def tree(cost_center_service):
    """ADM > TI > INFRA plus a separate root OPS."""
    adm = cost_center_service.create_cost_center(OWNER, code="ADM", name="Administrativo")
    ti = cost_center_service.create_cost_center(OWNER, code="TI", name="Tecnologia", parent_id=adm)
    infra = cost_center_service.create_cost_center(OWNER, code="INFRA", name="Infraestrutura", parent_id=ti)
    ops = cost_center_service.create_cost_center(OWNER, code="OPS", name="Operacoes")
    return {"ADM": adm, "TI": ti, "INFRA": infra, "OPS": ops}


def test_levels_follow_parent(cost_center_service, tree):
    levels = {c.code: c.level for c in cost_center_service.list_cost_centers(OWNER)}
    assert levels == {"ADM": 1, "TI": 2, "INFRA": 3, "OPS": 1}


def test_duplicate_code(cost_center_service, tree):
    with pytest.raises(ConflictError):
        cost_center_service.create_cost_center(OWNER, code="ADM", name="Outro")
    # Codes are per owner
    cost_center_service.create_cost_center(OTHER_OWNER, code="ADM", name="Outro")


def test_unknown_parent(cost_center_service):
    with pytest.raises(NotFoundError):
        cost_center_service.create_cost_center(OWNER, code="X", name="X", parent_id=999)


def test_ancestors(cost_center_service, tree):
    assert cost_center_service.get_ancestor_ids(OWNER, tree["INFRA"]) == [tree["TI"], tree["ADM"]]
    assert cost_center_service.get_ancestor_ids(OWNER, tree["ADM"]) == []


def test_move_relevels_subtree(cost_center_service, tree):
    cost_center_service.move_cost_center(OWNER, tree["TI"], tree["OPS"])
    cost_center_service.move_cost_center(OWNER, tree["OPS"], tree["ADM"])

    centers = {c.code: c for c in cost_center_service.list_cost_centers(OWNER)}
    assert centers["OPS"].parent_id == tree["ADM"]
    assert [centers[code].level for code in ("ADM", "OPS", "TI", "INFRA")] == [1, 2, 3, 4]


def test_move_to_root(cost_center_service, tree):
    cost_center_service.move_cost_center(OWNER, tree["INFRA"], None)
    infra = cost_center_service.get_cost_center(OWNER, tree["INFRA"])
    assert infra.parent_id is None
    assert infra.level == 1


@pytest.mark.parametrize("child, new_parent", [("ADM", "ADM"), ("ADM", "TI"), ("ADM", "INFRA"), ("TI", "INFRA")])
def test_cycles_are_rejected(cost_center_service, tree, child, new_parent):
    with pytest.raises(CyclicReferenceError):
        cost_center_service.move_cost_center(OWNER, tree[child], tree[new_parent])

    assert cost_center_service.get_cost_center(OWNER, tree["ADM"]).parent_id is None


def test_rename(cost_center_service, tree):
    cost_center_service.rename_cost_center(OWNER, tree["OPS"], "Operations")
    assert cost_center_service.get_cost_center(OWNER, tree["OPS"]).name == "Operations"

    with pytest.raises(ValidationError):
        cost_center_service.rename_cost_center(OWNER, tree["OPS"], "  ")

def test_delete_leaf(cost_center_service, tree):
    cost_center_service.delete_cost_center(OWNER, tree["INFRA"])
    assert cost_center_service.get_cost_center(OWNER, tree["INFRA"]) is None


def test_delete_blocked_by_children(cost_center_service, tree):
    with pytest.raises(HasDependentsError) as excinfo:
        cost_center_service.delete_cost_center(OWNER, tree["ADM"])
    assert excinfo.value.counts["child cost center"] == 1
    assert "1 child cost center" in str(excinfo.value)


def test_delete_blocked_by_allocations(cost_center_service, allocation_service, sample_payable, tree):
    allocation_service.replace_allocations(
        OWNER, ObligationKind.PAYABLE, sample_payable.id, [AllocationInput(tree["OPS"], Decimal("100"))]
    )
    with pytest.raises(HasDependentsError) as excinfo:
        cost_center_service.delete_cost_center(OWNER, tree["OPS"])
    assert excinfo.value.counts["allocation"] == 1


def test_delete_blocked_by_obligation(cost_center_service, obligation_service, tree):
    obligation_service.create_obligation(
        OWNER,
        ObligationKind.RECEIVABLE,
        description="Servico",
        total_amount="10",
        due_date=date(2024, 1, 1),
        cost_center_id=tree["OPS"],
    )
    with pytest.raises(HasDependentsError):
        cost_center_service.delete_cost_center(OWNER, tree["OPS"])


def test_other_owner_cannot_see_tree(cost_center_service, tree):
    assert cost_center_service.list_cost_centers(OTHER_OWNER) == []
    with pytest.raises(NotFoundError):
        cost_center_service.move_cost_center(OTHER_OWNER, tree["TI"], None)
