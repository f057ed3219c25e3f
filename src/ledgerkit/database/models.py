"""SQLAlchemy models for ledgerkit database.

Monetary columns hold integer cents (``*_cents``) and percentages hold
integer hundredths, so balance arithmetic done in SQL stays exact.
"""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Boolean,
    Index,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class BankAccount(Base):
    """Bank account model."""

    __tablename__ = "bank_accounts"

    id = Column(Integer, primary_key=True)
    owner = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    bank_name = Column(String, nullable=True)
    balance_cents = Column(Integer, default=0, nullable=False)
    initial_balance_cents = Column(Integer, default=0, nullable=False)
    initial_balance_date = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("owner", "name", name="uq_bank_account_owner_name"),)


class CostCenter(Base):
    """Cost center model with hierarchical structure."""

    __tablename__ = "cost_centers"

    id = Column(Integer, primary_key=True)
    owner = Column(String, nullable=False, index=True)
    code = Column(String, nullable=False)
    name = Column(String, nullable=False)
    parent_id = Column(Integer, ForeignKey("cost_centers.id"), nullable=True)
    level = Column(Integer, default=1, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    description = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("owner", "code", name="uq_cost_center_owner_code"),)

    # Relationships
    parent = relationship("CostCenter", remote_side=[id], backref="children")


class Obligation(Base):
    """Payable/receivable model (``kind`` tells them apart)."""

    __tablename__ = "obligations"

    id = Column(Integer, primary_key=True)
    owner = Column(String, nullable=False)
    kind = Column(String, nullable=False)
    description = Column(String, nullable=False)
    counterparty_id = Column(Integer, nullable=True)
    counterparty_name = Column(String, nullable=True)
    total_cents = Column(Integer, nullable=False)
    settled_cents = Column(Integer, default=0, nullable=False)
    status = Column(String, default="pendente", nullable=False)
    due_date = Column(Date, nullable=False)
    issue_date = Column(Date, nullable=False)
    cost_center_id = Column(Integer, ForeignKey("cost_centers.id"), nullable=True)
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=True)
    document_number = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    recurrence_type = Column(String, default="unica", nullable=False)
    recurrence_status = Column(String, nullable=True)
    recurrence_start_date = Column(Date, nullable=True)
    recurrence_end_date = Column(Date, nullable=True)
    recurrence_next_date = Column(Date, nullable=True)
    recurrence_parent_id = Column(Integer, ForeignKey("obligations.id"), nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # One generated occurrence per series and due date
    __table_args__ = (
        UniqueConstraint("recurrence_parent_id", "due_date", name="uq_recurrence_occurrence"),
        Index("idx_obligations_owner_kind", "owner", "kind"),
        Index("idx_obligations_recurrence_next", "recurrence_next_date"),
    )


class Payment(Base):
    """Settlement ("baixa") model."""

    __tablename__ = "payments"

    id = Column(Integer, primary_key=True)
    owner = Column(String, nullable=False, index=True)
    transaction_type = Column(String, nullable=False)
    transaction_id = Column(Integer, ForeignKey("obligations.id"), nullable=False)
    payment_method = Column(String, nullable=False)
    bank_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=True)
    amount_cents = Column(Integer, nullable=False)
    payment_date = Column(Date, nullable=False)
    notes = Column(String, nullable=True)
    # Shared with bank_transfers; orders same-day movements by insertion
    sequence = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        Index("idx_payments_transaction", "transaction_type", "transaction_id"),
        Index("idx_payments_bank_account", "bank_account_id", "payment_date"),
    )

    # Relationships
    obligation = relationship("Obligation")


class BankTransfer(Base):
    """Inter-account transfer model."""

    __tablename__ = "bank_transfers"

    id = Column(Integer, primary_key=True)
    owner = Column(String, nullable=False, index=True)
    from_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=False)
    to_account_id = Column(Integer, ForeignKey("bank_accounts.id"), nullable=False)
    amount_cents = Column(Integer, nullable=False)
    transfer_date = Column(Date, nullable=False)
    description = Column(String, nullable=True)
    sequence = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class CostAllocation(Base):
    """Cost-center allocation ("rateio") model."""

    __tablename__ = "cost_allocations"

    id = Column(Integer, primary_key=True)
    owner = Column(String, nullable=False, index=True)
    transaction_type = Column(String, nullable=False)
    transaction_id = Column(Integer, ForeignKey("obligations.id"), nullable=False)
    cost_center_id = Column(Integer, ForeignKey("cost_centers.id"), nullable=False)
    percentage_hundredths = Column(Integer, nullable=False)
    amount_cents = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (Index("idx_cost_allocations_transaction", "transaction_type", "transaction_id"),)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
