"""Transfers between bank accounts of the same owner."""

import logging
from datetime import date
from typing import TYPE_CHECKING, Optional

from ledgerkit.domain.entities import BankTransfer, TRANSFER_ENTRY_TYPE, signed_amount
from ledgerkit.domain.errors import (
    InsufficientFundsError,
    InvalidTransferError,
    NotFoundError,
    ValidationError,
    bank_account_not_found,
    future_date,
    insufficient_funds,
)
from ledgerkit.domain.money import AmountLike, require_positive

if TYPE_CHECKING:
    from ledgerkit.database.base import Database

logger = logging.getLogger(__name__)


class TransferService:
    """Service for moving money between bank accounts."""

    def __init__(self, db: "Database"):
        """Initialize transfer service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_transfer(
        self,
        owner: str,
        from_account_id: int,
        to_account_id: int,
        amount: AmountLike,
        transfer_date: date,
        description: Optional[str] = None,
    ) -> BankTransfer:
        """Move ``amount`` from one account to another.

        The debit, the credit and the transfer record are written in one
        unit of work. The debit is a conditional update on the source
        balance, so two concurrent transfers cannot overdraw the account.

        Returns:
            The created transfer

        Raises:
            InvalidTransferError: If source and destination are the same account
            InvalidAmountError: If the amount is not positive
            ValidationError: If the transfer date is in the future
            NotFoundError: If either account does not exist
            InsufficientFundsError: If the source balance is lower than the amount
        """
        if from_account_id == to_account_id:
            raise InvalidTransferError("Source and destination accounts must be different")

        amount = require_positive(amount)
        if transfer_date > date.today():
            raise ValidationError(future_date("Transfer", transfer_date))

        from_account = self.db.get_bank_account(owner, from_account_id)
        if from_account is None:
            raise NotFoundError(bank_account_not_found(from_account_id))
        to_account = self.db.get_bank_account(owner, to_account_id)
        if to_account is None:
            raise NotFoundError(bank_account_not_found(to_account_id))

        if from_account.balance < amount:
            raise InsufficientFundsError(insufficient_funds(from_account_id, from_account.balance, amount))

        debit = signed_amount(TRANSFER_ENTRY_TYPE["from"], amount)
        credit = signed_amount(TRANSFER_ENTRY_TYPE["to"], amount)

        with self.db.transaction():
            if not self.db.adjust_bank_balance(owner, from_account_id, debit, minimum_balance=amount):
                # Balance dropped below the amount after it was read
                current = self.db.get_bank_account(owner, from_account_id)
                raise InsufficientFundsError(
                    insufficient_funds(from_account_id, current.balance if current else None, amount)
                )
            if not self.db.adjust_bank_balance(owner, to_account_id, credit):
                raise NotFoundError(bank_account_not_found(to_account_id))
            transfer_id = self.db.create_bank_transfer(
                owner=owner,
                from_account_id=from_account_id,
                to_account_id=to_account_id,
                amount=amount,
                transfer_date=transfer_date,
                description=description,
            )

        logger.info(
            "Transferred %s from bank account %s to %s", amount, from_account_id, to_account_id
        )
        return self.db.get_bank_transfer(owner, transfer_id)

    def list_transfers(self, owner: str, account_id: Optional[int] = None) -> list[BankTransfer]:
        """List transfers, optionally only those touching ``account_id``."""
        return self.db.list_bank_transfers(owner, account_id=account_id)
