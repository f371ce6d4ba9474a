"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from tillbook.database.sqlalchemy_db import SQLAlchemyDatabase

ENV_DB_PATH = "TILLBOOK_DB_PATH"
DEFAULT_DB_PATH = Path.home() / ".tillbook" / "tillbook.db"


def resolve_database_path(database_path: Optional[str] = None) -> Path:
    """Pick the ledger file: explicit path, then $TILLBOOK_DB_PATH, then ~/.tillbook/tillbook.db."""
    chosen = database_path or os.environ.get(ENV_DB_PATH)
    return Path(chosen).expanduser() if chosen else DEFAULT_DB_PATH


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite-backed ledger database.

    The parent directory is created if it does not exist yet.

    Args:
        database_path: Path to SQLite database file

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    path = resolve_database_path(database_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return SQLAlchemyDatabase(f"sqlite:///{path}")
