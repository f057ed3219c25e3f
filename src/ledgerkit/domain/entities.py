"""Domain model entities for ledgerkit.

These are pure data classes representing business concepts, independent of
database schema. Amounts are two-place ``Decimal`` values; the storage
layer keeps integer cents and converts in the mappers.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


class ObligationKind(str, Enum):
    """Which side of the ledger an obligation sits on."""

    PAYABLE = "payable"
    RECEIVABLE = "receivable"


class ObligationStatus(str, Enum):
    PENDENTE = "pendente"
    PARCIAL = "parcial"
    PAGO = "pago"
    VENCIDO = "vencido"
    CANCELADO = "cancelado"


class RecurrenceType(str, Enum):
    UNICA = "unica"
    MENSAL = "mensal"
    TRIMESTRAL = "trimestral"
    ANUAL = "anual"


class RecurrenceStatus(str, Enum):
    ATIVA = "ativa"
    PAUSADA = "pausada"
    CONCLUIDA = "concluida"


class PaymentMethod(str, Enum):
    DINHEIRO = "dinheiro"
    PIX = "pix"
    CARTAO_CREDITO = "cartao_credito"
    CARTAO_DEBITO = "cartao_debito"
    BOLETO = "boleto"
    TRANSFERENCIA = "transferencia"
    CHEQUE = "cheque"
    OUTROS = "outros"


class EntryType(str, Enum):
    """Statement entry direction."""

    CREDIT = "C"
    DEBIT = "D"


# Sign convention: the only place that decides which way money moves.
SETTLEMENT_ENTRY_TYPE = {
    ObligationKind.PAYABLE: EntryType.DEBIT,
    ObligationKind.RECEIVABLE: EntryType.CREDIT,
}
TRANSFER_ENTRY_TYPE = {
    "from": EntryType.DEBIT,
    "to": EntryType.CREDIT,
}
ENTRY_SIGN = {
    EntryType.CREDIT: 1,
    EntryType.DEBIT: -1,
}


def signed_amount(entry_type: EntryType, amount: Decimal) -> Decimal:
    """Return amount with the sign it has on a bank balance."""
    return amount * ENTRY_SIGN[entry_type]


def settlement_balance_delta(kind: ObligationKind, amount: Decimal) -> Decimal:
    """Return the balance change caused by settling an obligation of ``kind``."""
    return signed_amount(SETTLEMENT_ENTRY_TYPE[kind], amount)


@dataclass(frozen=True)
class BankAccount:
    """Bank account domain entity."""

    id: int
    owner: str
    name: str
    bank_name: Optional[str]
    balance: Decimal
    initial_balance: Decimal
    initial_balance_date: Optional[date]
    is_active: bool
    created_at: datetime


@dataclass(frozen=True)
class CostCenter:
    """Cost center domain entity with hierarchical structure."""

    id: int
    owner: str
    code: str
    name: str
    parent_id: Optional[int]
    level: int
    is_active: bool
    description: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class Obligation:
    """Payable or receivable domain entity.

    ``amount_settled`` is the paid amount of a payable or the received
    amount of a receivable.
    """

    id: int
    owner: str
    kind: ObligationKind
    description: str
    counterparty_id: Optional[int]
    counterparty_name: Optional[str]
    total_amount: Decimal
    amount_settled: Decimal
    status: ObligationStatus
    due_date: date
    issue_date: date
    cost_center_id: Optional[int]
    bank_account_id: Optional[int]
    document_number: Optional[str]
    notes: Optional[str]
    recurrence_type: RecurrenceType
    recurrence_status: Optional[RecurrenceStatus]
    recurrence_start_date: Optional[date]
    recurrence_end_date: Optional[date]
    recurrence_next_date: Optional[date]
    recurrence_parent_id: Optional[int]
    created_at: datetime

    @property
    def outstanding_amount(self) -> Decimal:
        return max(self.total_amount - self.amount_settled, Decimal("0.00"))

    @property
    def is_recurring_parent(self) -> bool:
        return self.recurrence_type != RecurrenceType.UNICA and self.recurrence_parent_id is None


@dataclass(frozen=True)
class Payment:
    """Settlement event ("baixa") domain entity."""

    id: int
    owner: str
    transaction_type: ObligationKind
    transaction_id: int
    payment_method: PaymentMethod
    bank_account_id: Optional[int]
    amount: Decimal
    payment_date: date
    notes: Optional[str]
    created_at: datetime
    sequence: int = 0


@dataclass(frozen=True)
class BankTransfer:
    """Transfer between two bank accounts of the same owner."""

    id: int
    owner: str
    from_account_id: int
    to_account_id: int
    amount: Decimal
    transfer_date: date
    description: Optional[str]
    created_at: datetime
    sequence: int = 0


@dataclass(frozen=True)
class CostAllocation:
    """Stored share of an obligation assigned to a cost center."""

    id: int
    owner: str
    transaction_type: ObligationKind
    transaction_id: int
    cost_center_id: int
    percentage: Decimal
    amount: Decimal
    created_at: datetime


@dataclass(frozen=True)
class AllocationInput:
    """Requested share of an obligation for one cost center."""

    cost_center_id: Optional[int]
    percentage: Decimal


@dataclass(frozen=True)
class AllocationAmount:
    """Allocation input annotated with its computed amount."""

    cost_center_id: int
    percentage: Decimal
    amount: Decimal


@dataclass(frozen=True)
class SettlementResult:
    payment: Payment
    obligation: Obligation


@dataclass(frozen=True)
class RecurrenceResult:
    payables_generated: int = 0
    receivables_generated: int = 0

    @property
    def total(self) -> int:
        return self.payables_generated + self.receivables_generated


@dataclass(frozen=True)
class StatementEntry:
    """One movement on a bank statement, stamped with the running balance."""

    date: date
    entry_type: EntryType
    amount: Decimal
    description: str
    source: str
    source_id: int
    balance: Decimal


@dataclass(frozen=True)
class Statement:
    """Chronological running-balance view of one bank account."""

    account_id: int
    start_date: Optional[date]
    end_date: Optional[date]
    opening_balance: Decimal
    entries: tuple[StatementEntry, ...] = field(default_factory=tuple)
    total_credits: Decimal = Decimal("0.00")
    total_debits: Decimal = Decimal("0.00")
    final_balance: Decimal = Decimal("0.00")
