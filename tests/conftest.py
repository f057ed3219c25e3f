"""Shared pytest fixtures for ledgerkit tests."""

import tempfile
import os
from datetime import date
import pytest

from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.domain.allocation import AllocationService
from ledgerkit.domain.bank_account import BankAccountService
from ledgerkit.domain.cost_center import CostCenterService
from ledgerkit.domain.entities import ObligationKind
from ledgerkit.domain.obligation import ObligationService
from ledgerkit.domain.recurrence import RecurrenceService
from ledgerkit.domain.settlement import SettlementService
from ledgerkit.domain.statement import StatementService
from ledgerkit.domain.transfer import TransferService

OWNER = "alice"
OTHER_OWNER = "bob"


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def second_db(temp_db):
    """Open a second, independent connection to the same database file."""
    db = create_sqlite_database(database_path=temp_db.database_path)
    db.connect()
    yield db
    db.disconnect()


@pytest.fixture
def account_service(temp_db):
    return BankAccountService(temp_db)


@pytest.fixture
def cost_center_service(temp_db):
    return CostCenterService(temp_db)


@pytest.fixture
def obligation_service(temp_db):
    return ObligationService(temp_db)


@pytest.fixture
def allocation_service(temp_db):
    return AllocationService(temp_db)


@pytest.fixture
def recurrence_service(temp_db):
    return RecurrenceService(temp_db)


@pytest.fixture
def settlement_service(temp_db):
    return SettlementService(temp_db)


@pytest.fixture
def transfer_service(temp_db):
    return TransferService(temp_db)


@pytest.fixture
def statement_service(temp_db):
    return StatementService(temp_db)


@pytest.fixture
def sample_account(account_service):
    """Create a bank account with a balance of 1000.00."""
    account_id = account_service.create_account(OWNER, name="Corrente", bank_name="Itau", initial_balance="1000.00")
    return account_service.get_account(OWNER, account_id)


@pytest.fixture
def sample_payable(obligation_service):
    """Create a one-off payable of 1000.00 due on 2024-01-10."""
    obligation_id = obligation_service.create_obligation(
        OWNER,
        ObligationKind.PAYABLE,
        description="Fornecedor",
        total_amount="1000.00",
        due_date=date(2024, 1, 10),
        issue_date=date(2024, 1, 1),
    )
    return obligation_service.get_obligation(OWNER, ObligationKind.PAYABLE, obligation_id)


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
