import sqlite3
from datetime import datetime
from sqlite3 import Connection
from typing import Any, Dict, List, Mapping, Optional

from catalog.errors import CatalogConnectionError


def _adapt_params(params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    # Timestamps are stored as ISO strings
    if not params:
        return {}
    return {
        key: value.isoformat() if isinstance(value, datetime) else value
        for key, value in params.items()
    }


class SqliteClient:
    """SQLite catalog client for local development and tests.

    Statements use ``:name`` placeholders, which sqlite3 accepts natively.
    Writes are left uncommitted until ``commit`` is called.
    """

    Error = sqlite3.Error

    def __init__(self, connection_string: str, timeout: float = 5.0):
        self.connection_string = connection_string
        try:
            self._connection = sqlite3.connect(self.connection_string, timeout=timeout)
        except sqlite3.OperationalError as e:
            raise CatalogConnectionError(
                f"Could not open SQLite catalog: {e}", host="local", database=connection_string
            ) from e
        self._connection.row_factory = sqlite3.Row

    @property
    def connection(self) -> Connection:
        """Get the database connection."""
        return self._connection

    def execute_query(self, query: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """Execute a read statement and return all rows as dicts."""
        cursor = self._connection.cursor()
        try:
            cursor.execute(query, _adapt_params(params))
            return [dict(row) for row in cursor.fetchall()]
        finally:
            cursor.close()

    def execute_update(self, query: str, params: Optional[Mapping[str, Any]] = None) -> int:
        """Execute a write statement and return the affected row count."""
        cursor = self._connection.cursor()
        try:
            cursor.execute(query, _adapt_params(params))
            return cursor.rowcount
        finally:
            cursor.close()

    def commit(self) -> None:
        self._connection.commit()

    def rollback(self) -> None:
        self._connection.rollback()

    def close(self):
        """Close the database connection."""
        self._connection.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit with cleanup."""
        if exc_type is not None:
            self.rollback()
        self.close()
        return False
