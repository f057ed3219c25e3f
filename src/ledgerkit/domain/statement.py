"""Bank statement reconstruction.

The running balance is always recomputed from the account's initial
balance and its settlement/transfer history; the live ``balance`` column is
never read for it.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from ledgerkit.domain.entities import (
    EntryType,
    ObligationKind,
    SETTLEMENT_ENTRY_TYPE,
    Statement,
    StatementEntry,
    TRANSFER_ENTRY_TYPE,
    signed_amount,
)
from ledgerkit.domain.errors import NotFoundError, ValidationError, bank_account_not_found
from ledgerkit.domain.money import ZERO

if TYPE_CHECKING:
    from ledgerkit.database.base import Database

logger = logging.getLogger(__name__)

_DEFAULT_SETTLEMENT_DESCRIPTION = {
    ObligationKind.PAYABLE: "Payment",
    ObligationKind.RECEIVABLE: "Receipt",
}


class StatementService:
    """Service that builds running-balance statements for bank accounts."""

    def __init__(self, db: "Database"):
        """Initialize statement service.

        Args:
            db: Database instance
        """
        self.db = db

    def _collect_movements(self, owner: str, account_id: int, end_date: Optional[date]) -> list[dict]:
        """Gather payments and transfers touching the account up to ``end_date``."""
        movements = []
        descriptions: dict[tuple[ObligationKind, int], str] = {}

        for payment in self.db.list_payments(owner, bank_account_id=account_id, end_date=end_date):
            key = (payment.transaction_type, payment.transaction_id)
            if key not in descriptions:
                obligation = self.db.get_obligation(owner, payment.transaction_type, payment.transaction_id)
                descriptions[key] = (
                    obligation.description
                    if obligation is not None
                    else _DEFAULT_SETTLEMENT_DESCRIPTION[payment.transaction_type]
                )
            movements.append(
                {
                    "date": payment.payment_date,
                    "sequence": payment.sequence,
                    "entry_type": SETTLEMENT_ENTRY_TYPE[payment.transaction_type],
                    "amount": payment.amount,
                    "description": descriptions[key],
                    "source": "payment",
                    "source_id": payment.id,
                }
            )

        account_names: dict[int, str] = {}
        for transfer in self.db.list_bank_transfers(owner, account_id=account_id, end_date=end_date):
            side = "from" if transfer.from_account_id == account_id else "to"
            other_id = transfer.to_account_id if side == "from" else transfer.from_account_id
            if other_id not in account_names:
                other = self.db.get_bank_account(owner, other_id)
                account_names[other_id] = other.name if other is not None else f"#{other_id}"
            description = transfer.description or (
                f"Transfer to {account_names[other_id]}"
                if side == "from"
                else f"Transfer from {account_names[other_id]}"
            )
            movements.append(
                {
                    "date": transfer.transfer_date,
                    "sequence": transfer.sequence,
                    "entry_type": TRANSFER_ENTRY_TYPE[side],
                    "amount": transfer.amount,
                    "description": description,
                    "source": "transfer",
                    "source_id": transfer.id,
                }
            )

        # Same-date movements keep insertion order
        movements.sort(key=lambda m: (m["date"], m["sequence"]))
        return movements

    def build_bank_statement(
        self,
        owner: str,
        bank_account_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Statement:
        """Build the statement of a bank account for ``[start_date, end_date]``.

        Movements dated before ``start_date`` are folded into the opening
        balance, so running balances are true balances even for a window
        that starts after the first movement.

        Args:
            owner: Owning user
            bank_account_id: Bank account ID
            start_date: Optional first day (inclusive)
            end_date: Optional last day (inclusive)

        Returns:
            Statement with ordered entries and totals

        Raises:
            NotFoundError: If the account does not exist
            ValidationError: If start_date is after end_date
        """
        account = self.db.get_bank_account(owner, bank_account_id)
        if account is None:
            raise NotFoundError(bank_account_not_found(bank_account_id))
        if start_date is not None and end_date is not None and start_date > end_date:
            raise ValidationError("Start date must be on or before end date")

        opening = account.initial_balance
        running = opening
        total_credits = ZERO
        total_debits = ZERO
        entries = []

        for movement in self._collect_movements(owner, bank_account_id, end_date):
            entry_type: EntryType = movement["entry_type"]
            amount: Decimal = movement["amount"]
            if start_date is not None and movement["date"] < start_date:
                opening += signed_amount(entry_type, amount)
                running = opening
                continue

            running += signed_amount(entry_type, amount)
            if entry_type == EntryType.CREDIT:
                total_credits += amount
            else:
                total_debits += amount
            entries.append(
                StatementEntry(
                    date=movement["date"],
                    entry_type=entry_type,
                    amount=amount,
                    description=movement["description"],
                    source=movement["source"],
                    source_id=movement["source_id"],
                    balance=running,
                )
            )

        logger.debug(
            "Built statement for bank account %s: %d entries, final balance %s",
            bank_account_id,
            len(entries),
            running,
        )
        return Statement(
            account_id=bank_account_id,
            start_date=start_date,
            end_date=end_date,
            opening_balance=opening,
            entries=tuple(entries),
            total_credits=total_credits,
            total_debits=total_debits,
            final_balance=running,
        )
