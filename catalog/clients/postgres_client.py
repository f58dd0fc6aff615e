"""PostgreSQL catalog client built on psycopg2."""

import logging
import re
from typing import Any, Dict, List, Mapping, Optional

import psycopg2
from psycopg2.extras import RealDictCursor

from catalog.errors import CatalogConnectionError

logger = logging.getLogger(__name__)

# ":name" but not the "::" cast operator
_NAMED_PARAM = re.compile(r"(?<![:\w]):([A-Za-z_]\w*)")

SESSION_OPTIONS = "-c TimeZone=UTC"


def to_pyformat(query: str) -> str:
    """Rewrite ``:name`` placeholders into psycopg2's ``%(name)s`` style."""
    return _NAMED_PARAM.sub(r"%(\1)s", query)


class PostgresClient:
    """PostgreSQL client with connection management.

    Opens exactly one connection per instance. Supports the context manager
    pattern: an escaping exception rolls back, and the connection is always
    closed on exit.
    """

    Error = psycopg2.Error

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        dbname: str,
        tls_verify: bool = True,
        connect_timeout: int = 10,
    ):
        """Open the connection.

        Args:
            host: Database host name.
            port: Database port.
            user: Database user.
            password: Database password.
            dbname: Database name.
            tls_verify: Verify the server certificate. When False the session
                is still encrypted but the certificate is not checked.
            connect_timeout: Seconds to wait for the handshake.

        Raises:
            CatalogConnectionError: If the connection cannot be established.
        """
        self._host = host
        self._dbname = dbname
        sslmode = "verify-full" if tls_verify else "require"
        if not tls_verify:
            logger.warning(
                f"TLS certificate verification DISABLED for {host}:{port} "
                f"(DB_TLS_VERIFY=false). Use only with self-signed certificates."
            )

        try:
            self._connection = psycopg2.connect(
                host=host,
                port=port,
                user=user,
                password=password,
                dbname=dbname,
                connect_timeout=connect_timeout,
                sslmode=sslmode,
                # Naive timestamp columns are read as UTC, so write them as UTC too
                options=SESSION_OPTIONS,
                cursor_factory=RealDictCursor,
            )
        except psycopg2.OperationalError as e:
            raise CatalogConnectionError(
                f"Could not connect to PostgreSQL: {e}".strip(), host=host, database=dbname
            ) from e

        logger.debug(f"Opened PostgreSQL session to {host}:{port}/{dbname}")

    @property
    def connection(self):
        """Get the database connection."""
        return self._connection

    def execute_query(self, query: str, params: Optional[Mapping[str, Any]] = None) -> List[Dict[str, Any]]:
        """Execute a read statement and return all rows as dicts."""
        with self._connection.cursor() as cursor:
            cursor.execute(to_pyformat(query), dict(params or {}))
            return [dict(row) for row in cursor.fetchall()]

    def execute_update(self, query: str, params: Optional[Mapping[str, Any]] = None) -> int:
        """Execute a write statement and return the affected row count."""
        with self._connection.cursor() as cursor:
            cursor.execute(to_pyformat(query), dict(params or {}))
            return cursor.rowcount

    def commit(self) -> None:
        self._connection.commit()

    def rollback(self) -> None:
        self._connection.rollback()

    def close(self) -> None:
        """Close the database connection."""
        if not self._connection.closed:
            self._connection.close()
            logger.debug(f"Closed PostgreSQL session to {self._host}/{self._dbname}")

    def __enter__(self) -> "PostgresClient":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit with cleanup."""
        try:
            if exc_type is not None and not self._connection.closed:
                self._connection.rollback()
        finally:
            self.close()
        return False
