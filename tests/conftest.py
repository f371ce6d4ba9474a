"""Shared pytest fixtures for tillbook tests."""

import tempfile
import os
import pytest

from tillbook.database.factories import create_sqlite_database
from tillbook.domain.chart import seed_defaults
from tillbook.domain.ledger import LedgerService
from tillbook.domain.reconciliation import ReconciliationService
from tillbook.domain.shift import ShiftService
from tillbook.domain.payroll import PayrollService
from tillbook.domain.staff import CreditPartnerService, StaffService


@pytest.fixture
def temp_db():
    """Create a temporary, empty database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def seeded_db(temp_db):
    """Temporary database holding the default chart and staff roster."""
    seed_defaults(temp_db)
    return temp_db


@pytest.fixture
def ledger(seeded_db):
    """Create a LedgerService over the seeded database."""
    return LedgerService(seeded_db)


@pytest.fixture
def reconciliation_service(seeded_db, ledger):
    """Create a ReconciliationService over the seeded database."""
    return ReconciliationService(seeded_db, ledger)


@pytest.fixture
def shift_service(seeded_db, ledger):
    """Create a ShiftService over the seeded database."""
    return ShiftService(seeded_db, ledger)


@pytest.fixture
def payroll_service(seeded_db, ledger):
    """Create a PayrollService with the default clamp policy."""
    return PayrollService(seeded_db, ledger)


@pytest.fixture
def staff_service(seeded_db):
    """Create a StaffService over the seeded database."""
    return StaffService(seeded_db)


@pytest.fixture
def partner_service(seeded_db):
    """Create a CreditPartnerService over the seeded database."""
    return CreditPartnerService(seeded_db)


@pytest.fixture
def balances(ledger):
    """Return a callable giving the current balance of every account."""

    def _balances():
        return {acc.id: acc.balance for acc in ledger.list_accounts()}

    return _balances


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
