"""Pytest configuration and shared fixtures."""

import os
import sys
import tempfile
from datetime import date, datetime
from pathlib import Path

import pytest

# Add src to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

# Import after path setup
from spendwise.core.config import AppConfig, DatabaseConfig
from spendwise.core.database import DatabaseManager
from spendwise.core.models import Expense, ExpenseCategory
from spendwise.core.storage import ExpenseStore


@pytest.fixture(scope="function")
def temp_db_url():
    """Create a temporary SQLite database file."""
    db_fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(db_fd)

    yield f"sqlite:///{db_path}"

    os.unlink(db_path)


@pytest.fixture(scope="function")
def app_config(temp_db_url, tmp_path):
    """App configuration pointing at temporary locations."""
    return AppConfig(
        database=DatabaseConfig(url=temp_db_url, echo=False),
        data_dir=tmp_path / "data",
        export_dir=tmp_path / "exports",
    )


@pytest.fixture(scope="function")
def db_manager(app_config):
    """Database manager with tables created."""
    manager = DatabaseManager(app_config)
    manager.create_tables()

    yield manager

    manager.engine.dispose()


@pytest.fixture(scope="function")
def store(db_manager):
    """Empty expense store."""
    return ExpenseStore(db_manager)


@pytest.fixture
def make_expense():
    """Factory for stored expenses with sensible defaults."""
    counter = {"n": 0}

    def _make(
        amount: float = 10.0,
        category: ExpenseCategory = ExpenseCategory.FOOD,
        description: str = "Lunch",
        expense_date: date = date(2026, 10, 1),
    ) -> Expense:
        counter["n"] += 1
        created = datetime(2026, 10, 1, 12, 0, 0)
        return Expense(
            id=f"exp-{counter['n']}",
            date=expense_date,
            amount=amount,
            category=category,
            description=description,
            created_at=created,
            updated_at=created,
        )

    return _make
