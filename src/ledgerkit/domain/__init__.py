"""Domain layer for ledgerkit application."""

from ledgerkit.domain.allocation import (
    AllocationService,
    compute_allocation_amounts,
    validate_allocations,
)
from ledgerkit.domain.bank_account import BankAccountService
from ledgerkit.domain.cost_center import CostCenterService
from ledgerkit.domain.obligation import ObligationService
from ledgerkit.domain.recurrence import RecurrenceService, next_recurrence_date
from ledgerkit.domain.settlement import SettlementService
from ledgerkit.domain.statement import StatementService
from ledgerkit.domain.transfer import TransferService

__all__ = [
    "AllocationService",
    "BankAccountService",
    "CostCenterService",
    "ObligationService",
    "RecurrenceService",
    "SettlementService",
    "StatementService",
    "TransferService",
    "compute_allocation_amounts",
    "next_recurrence_date",
    "validate_allocations",
]
