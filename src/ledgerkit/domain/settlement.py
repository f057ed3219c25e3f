"""Settlement ("baixa") processing for payables and receivables."""

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING, Optional, Union

from ledgerkit.domain.entities import (
    ObligationKind,
    ObligationStatus,
    Payment,
    PaymentMethod,
    SettlementResult,
    settlement_balance_delta,
)
from ledgerkit.domain.errors import (
    ConcurrencyError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
    bank_account_not_found,
    future_date,
    obligation_locked,
    obligation_not_found,
)
from ledgerkit.domain.money import AmountLike, ZERO, require_positive

if TYPE_CHECKING:
    from ledgerkit.database.base import Database

logger = logging.getLogger(__name__)

# Statuses that no longer accept settlements
CLOSED_STATUSES = (ObligationStatus.PAGO, ObligationStatus.CANCELADO)


def parse_payment_method(value: Union[PaymentMethod, str]) -> PaymentMethod:
    """Parse a payment method.

    Raises:
        ValidationError: If the value is not a known payment method
    """
    try:
        return PaymentMethod(value)
    except ValueError:
        valid = ", ".join(m.value for m in PaymentMethod)
        raise ValidationError(f"Invalid payment method '{value}'. Expected one of: {valid}")


def derive_status(current: ObligationStatus, settled: Decimal, total: Decimal) -> ObligationStatus:
    """Return the status after the settled amount becomes ``settled``.

    Never moves backwards: an amount that neither completes nor starts
    the settlement leaves the status unchanged.
    """
    if settled >= total:
        return ObligationStatus.PAGO
    if settled > ZERO:
        return ObligationStatus.PARCIAL
    return current


class SettlementService:
    """Service that applies payments and receipts to obligations."""

    def __init__(self, db: "Database"):
        """Initialize settlement service.

        Args:
            db: Database instance
        """
        self.db = db

    def settle_payable(
        self,
        owner: str,
        obligation_id: int,
        amount: AmountLike,
        payment_date: date,
        payment_method: Union[PaymentMethod, str],
        bank_account_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> SettlementResult:
        """Register a payment against a payable. See ``settle``."""
        return self.settle(
            owner, ObligationKind.PAYABLE, obligation_id, amount, payment_date, payment_method, bank_account_id, notes
        )

    def settle_receivable(
        self,
        owner: str,
        obligation_id: int,
        amount: AmountLike,
        payment_date: date,
        payment_method: Union[PaymentMethod, str],
        bank_account_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> SettlementResult:
        """Register a receipt against a receivable. See ``settle``."""
        return self.settle(
            owner,
            ObligationKind.RECEIVABLE,
            obligation_id,
            amount,
            payment_date,
            payment_method,
            bank_account_id,
            notes,
        )

    def settle(
        self,
        owner: str,
        kind: ObligationKind,
        obligation_id: int,
        amount: AmountLike,
        payment_date: date,
        payment_method: Union[PaymentMethod, str],
        bank_account_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> SettlementResult:
        """Apply a settlement to a payable/receivable.

        The payment row, the obligation's settled amount and status, and
        the bank balance change are written in one unit of work.

        Args:
            owner: Owning user
            kind: Payable or receivable
            obligation_id: Obligation ID
            amount: Amount settled (must be positive)
            payment_date: Settlement date
            payment_method: Payment method
            bank_account_id: Optional bank account the money moves through
            notes: Optional notes

        Returns:
            The created payment and the updated obligation

        Raises:
            NotFoundError: If the obligation or bank account does not exist
            InvalidAmountError: If the amount is not positive
            ValidationError: If the payment date is in the future
            InvalidStateError: If the obligation is paid or cancelled
            ConcurrencyError: If another settlement or a cancellation changed the obligation meanwhile
        """
        kind = ObligationKind(kind)
        obligation = self.db.get_obligation(owner, kind, obligation_id)
        if obligation is None:
            raise NotFoundError(obligation_not_found(kind.value, obligation_id))

        amount = require_positive(amount)
        method = parse_payment_method(payment_method)
        if payment_date > date.today():
            raise ValidationError(future_date("Payment", payment_date))

        if obligation.status in CLOSED_STATUSES:
            raise InvalidStateError(obligation_locked(kind.value, obligation_id, obligation.status.value))

        if bank_account_id is not None and self.db.get_bank_account(owner, bank_account_id) is None:
            raise NotFoundError(bank_account_not_found(bank_account_id))

        new_settled = obligation.amount_settled + amount
        new_status = derive_status(obligation.status, new_settled, obligation.total_amount)

        with self.db.transaction():
            payment_id = self.db.create_payment(
                owner=owner,
                transaction_type=kind,
                transaction_id=obligation_id,
                payment_method=method,
                amount=amount,
                payment_date=payment_date,
                bank_account_id=bank_account_id,
                notes=notes,
            )
            applied = self.db.apply_settlement(
                owner,
                kind,
                obligation_id,
                expected_settled=obligation.amount_settled,
                expected_status=obligation.status,
                new_settled=new_settled,
                status=new_status,
            )
            if not applied:
                raise ConcurrencyError(
                    f"{kind.value.capitalize()} {obligation_id} was changed concurrently; retry the operation"
                )
            if bank_account_id is not None:
                delta = settlement_balance_delta(kind, amount)
                if not self.db.adjust_bank_balance(owner, bank_account_id, delta):
                    raise NotFoundError(bank_account_not_found(bank_account_id))

        logger.info(
            "Settled %s %s: %s via %s (status %s)",
            kind.value,
            obligation_id,
            amount,
            method.value,
            new_status.value,
        )
        return SettlementResult(
            payment=self.db.get_payment(owner, payment_id),
            obligation=self.db.get_obligation(owner, kind, obligation_id),
        )

    def list_payments(self, owner: str, kind: ObligationKind, obligation_id: int) -> list[Payment]:
        """List the settlements of a payable/receivable in date order."""
        return self.db.list_payments(owner, transaction_type=kind, transaction_id=obligation_id)
