"""Database module for Camp Core.

This module provides the Core API for database operations.
Core encapsulates connection management and provides access to
record operations through properties:

    with get_core(database_path, atomic=True) as core:
        member = core.member.get_by_email("alice@example.com")
        core.member.set_active(member.id, False)
        # Commits on exit, rolls back on exception

ARCHITECTURE:
- Core owns its connection (no Flask g.db dependency)
- Connection closes on context exit (atomic=True)
- Each record type gets an encapsulated operations class
"""

import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .member import MemberOperations


SCHEMA_PATH = Path(__file__).parent.parent / "schema" / "schema.sql"


class Core:
    """
    Database Core with record operations.

    Maintains its own connection and transaction state.

    Connection Lifecycle:
    - atomic=True: Connection commits/rolls back and closes on __exit__
    - atomic=False: Caller is responsible for commit() and close()
    """

    def __init__(self, connection: sqlite3.Connection, atomic: bool = False):
        """Initialize Core with a database connection.

        Args:
            connection: SQLite connection with row_factory set to sqlite3.Row
            atomic: If True, Core MUST be used as context manager.
        """
        self._conn = connection
        self._atomic = atomic
        self._member_ops = None

    @property
    def member(self) -> "MemberOperations":
        """Member operations.

        Lazy-loaded to avoid circular import issues.
        """
        if self._member_ops is None:
            from .member import MemberOperations
            self._member_ops = MemberOperations(self._conn)
        return self._member_ops

    def commit(self) -> None:
        self._conn.commit()

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "Core":
        """Enter context manager for atomic transaction.

        Raises:
            RuntimeError: If Core was not created with atomic=True
        """
        if not self._atomic:
            raise RuntimeError(
                "Core must be created with atomic=True for context manager use. "
                "Use: with db.get_core(path, atomic=True) as core:"
            )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context manager, committing or rolling back transaction."""
        try:
            if exc_type is None:
                self._conn.commit()
            else:
                self._conn.rollback()
        finally:
            self._conn.close()


def _create_connection(database_path: str) -> sqlite3.Connection:
    """Create a fresh database connection.

    Returns:
        SQLite connection with row_factory set to sqlite3.Row
        and foreign keys enabled.
    """
    db_path = Path(database_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def get_core(database_path: str, atomic: bool = False) -> Core:
    """
    Get a database Core instance.

    Args:
        database_path: SQLite database file path
        atomic: If True, returns a Core that MUST be used as context manager.
                All operations inside the block commit together on exit.

    Returns:
        Core instance with member operations
    """
    conn = _create_connection(database_path)
    return Core(conn, atomic=atomic)


# ============================================================================
# DATABASE INITIALIZATION
# ============================================================================

def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply schema.sql to an open connection."""
    with open(SCHEMA_PATH, "r") as f:
        schema_sql = f.read()
    conn.executescript(schema_sql)
    conn.commit()


def init_db(database_path: str) -> None:
    """Initialize database by running schema.sql if not already initialized."""
    db_path = Path(database_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path))
    try:
        cursor = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name='_schema_metadata'"
        )
        if cursor.fetchone():
            # Database already initialized, skip
            return

        apply_schema(conn)
    finally:
        conn.close()
