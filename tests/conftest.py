"""Shared pytest fixtures for ledgerkit tests."""

import os
import tempfile
from decimal import Decimal

import pytest

from ledgerkit.config import LedgerConfig
from ledgerkit.database.factories import create_sqlite_database
from ledgerkit.domain.account import AccountService
from ledgerkit.domain.entities import JournalLineInput
from ledgerkit.domain.journal import JournalService
from ledgerkit.domain.posting import PostingEngine
from ledgerkit.domain.reports import ReportService


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
def config():
    """Default ledger configuration."""
    return LedgerConfig()


@pytest.fixture
def account_service(temp_db, config):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db, config)


@pytest.fixture
def journal_service(temp_db, config):
    """Create a JournalService with a temporary database."""
    return JournalService(temp_db, config)


@pytest.fixture
def posting_engine(temp_db, config):
    """Create a PostingEngine with a temporary database."""
    return PostingEngine(temp_db, config)


@pytest.fixture
def report_service(temp_db, config):
    """Create a ReportService with a temporary database."""
    return ReportService(temp_db, config)


@pytest.fixture
def chart(account_service):
    """Create one account per type, keyed by code."""
    specs = [
        ("1001", "Cash", "asset"),
        ("1002", "Receivables", "asset"),
        ("2001", "Loans Payable", "liability"),
        ("3001", "Owner Capital", "equity"),
        ("4001", "Sales", "income"),
        ("5001", "Rent", "expense"),
    ]
    return {
        code: account_service.create_account(code=code, name=name, account_type=account_type)
        for code, name, account_type in specs
    }


def dr(account, amount, description=None) -> JournalLineInput:
    """Debit line helper."""
    return JournalLineInput(
        account_id=account.id, debit_amount=Decimal(amount), description=description
    )


def cr(account, amount, description=None) -> JournalLineInput:
    """Credit line helper."""
    return JournalLineInput(
        account_id=account.id, credit_amount=Decimal(amount), description=description
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
