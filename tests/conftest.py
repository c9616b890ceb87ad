import os
from pathlib import Path

import pytest

from chameleon.adapters.sqlite.migrator import SQLiteMigrator
from chameleon.adapters.sqlite.store import SQLiteStore
from chameleon.rules.loader import load_rules
from chameleon.rules.models import Rules


@pytest.fixture
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def rules(project_root: Path) -> Rules:
    """Rules loaded from the real rules.yaml."""
    return load_rules(project_root / "rules.yaml")


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    """A migrated SQLite database in a temp directory."""
    path = os.path.join(tmp_path, "chameleon.db")
    SQLiteMigrator(path).run_migrations()
    return path


@pytest.fixture
def sqlite_store(db_path: str) -> SQLiteStore:
    return SQLiteStore(db_path)
