"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic: storage keeps integer cents and
plain strings, the domain sees ``Decimal`` amounts and enums.
"""

from typing import Optional

from ledgerkit.domain import entities as domain
from ledgerkit.domain.money import from_cents
from ledgerkit.database.models import (
    BankAccount as ORMBankAccount,
    CostCenter as ORMCostCenter,
    Obligation as ORMObligation,
    Payment as ORMPayment,
    BankTransfer as ORMBankTransfer,
    CostAllocation as ORMCostAllocation,
)


def _optional_enum(enum_cls, value: Optional[str]):
    return enum_cls(value) if value is not None else None


def bank_account_to_domain(orm_account: ORMBankAccount) -> domain.BankAccount:
    """Convert SQLAlchemy BankAccount model to domain BankAccount entity."""
    return domain.BankAccount(
        id=orm_account.id,
        owner=orm_account.owner,
        name=orm_account.name,
        bank_name=orm_account.bank_name,
        balance=from_cents(orm_account.balance_cents),
        initial_balance=from_cents(orm_account.initial_balance_cents),
        initial_balance_date=orm_account.initial_balance_date,
        is_active=orm_account.is_active,
        created_at=orm_account.created_at,
    )


def cost_center_to_domain(orm_center: ORMCostCenter) -> domain.CostCenter:
    """Convert SQLAlchemy CostCenter model to domain CostCenter entity."""
    return domain.CostCenter(
        id=orm_center.id,
        owner=orm_center.owner,
        code=orm_center.code,
        name=orm_center.name,
        parent_id=orm_center.parent_id,
        level=orm_center.level,
        is_active=orm_center.is_active,
        description=orm_center.description,
        created_at=orm_center.created_at,
    )


def obligation_to_domain(orm_obligation: ORMObligation) -> domain.Obligation:
    """Convert SQLAlchemy Obligation model to domain Obligation entity."""
    return domain.Obligation(
        id=orm_obligation.id,
        owner=orm_obligation.owner,
        kind=domain.ObligationKind(orm_obligation.kind),
        description=orm_obligation.description,
        counterparty_id=orm_obligation.counterparty_id,
        counterparty_name=orm_obligation.counterparty_name,
        total_amount=from_cents(orm_obligation.total_cents),
        amount_settled=from_cents(orm_obligation.settled_cents),
        status=domain.ObligationStatus(orm_obligation.status),
        due_date=orm_obligation.due_date,
        issue_date=orm_obligation.issue_date,
        cost_center_id=orm_obligation.cost_center_id,
        bank_account_id=orm_obligation.bank_account_id,
        document_number=orm_obligation.document_number,
        notes=orm_obligation.notes,
        recurrence_type=domain.RecurrenceType(orm_obligation.recurrence_type),
        recurrence_status=_optional_enum(domain.RecurrenceStatus, orm_obligation.recurrence_status),
        recurrence_start_date=orm_obligation.recurrence_start_date,
        recurrence_end_date=orm_obligation.recurrence_end_date,
        recurrence_next_date=orm_obligation.recurrence_next_date,
        recurrence_parent_id=orm_obligation.recurrence_parent_id,
        created_at=orm_obligation.created_at,
    )


def payment_to_domain(orm_payment: ORMPayment) -> domain.Payment:
    """Convert SQLAlchemy Payment model to domain Payment entity."""
    return domain.Payment(
        id=orm_payment.id,
        owner=orm_payment.owner,
        transaction_type=domain.ObligationKind(orm_payment.transaction_type),
        transaction_id=orm_payment.transaction_id,
        payment_method=domain.PaymentMethod(orm_payment.payment_method),
        bank_account_id=orm_payment.bank_account_id,
        amount=from_cents(orm_payment.amount_cents),
        payment_date=orm_payment.payment_date,
        notes=orm_payment.notes,
        created_at=orm_payment.created_at,
        sequence=orm_payment.sequence or 0,
    )


def bank_transfer_to_domain(orm_transfer: ORMBankTransfer) -> domain.BankTransfer:
    """Convert SQLAlchemy BankTransfer model to domain BankTransfer entity."""
    return domain.BankTransfer(
        id=orm_transfer.id,
        owner=orm_transfer.owner,
        from_account_id=orm_transfer.from_account_id,
        to_account_id=orm_transfer.to_account_id,
        amount=from_cents(orm_transfer.amount_cents),
        transfer_date=orm_transfer.transfer_date,
        description=orm_transfer.description,
        created_at=orm_transfer.created_at,
        sequence=orm_transfer.sequence or 0,
    )


def cost_allocation_to_domain(orm_allocation: ORMCostAllocation) -> domain.CostAllocation:
    """Convert SQLAlchemy CostAllocation model to domain CostAllocation entity."""
    return domain.CostAllocation(
        id=orm_allocation.id,
        owner=orm_allocation.owner,
        transaction_type=domain.ObligationKind(orm_allocation.transaction_type),
        transaction_id=orm_allocation.transaction_id,
        cost_center_id=orm_allocation.cost_center_id,
        percentage=from_cents(orm_allocation.percentage_hundredths),
        amount=from_cents(orm_allocation.amount_cents),
        created_at=orm_allocation.created_at,
    )
