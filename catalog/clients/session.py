"""Scoped catalog sessions.

Each operation gets its own client, opened here and released on every exit
path. Nothing is cached at module level, so concurrent callers simply open
independent sessions.
"""

import logging
from contextlib import contextmanager
from typing import Generator, Union

from catalog.clients.postgres_client import PostgresClient
from catalog.clients.sqlite_client import SqliteClient
from catalog.config import DatabaseConfig
from catalog.errors import QueryError

logger = logging.getLogger(__name__)

CatalogClient = Union[PostgresClient, SqliteClient]

PING_SQL = "SELECT 1 AS ok"


def _create_client(config: DatabaseConfig) -> CatalogClient:
    """Create a catalog client for the configured backend."""
    if config.backend == "sqlite":
        return SqliteClient(config.sqlite_path, timeout=config.connect_timeout)
    if config.backend == "postgres":
        return PostgresClient(
            host=config.host,
            port=config.port,
            user=config.user,
            password=config.password,
            dbname=config.name,
            tls_verify=config.tls_verify,
            connect_timeout=config.connect_timeout,
        )
    raise ValueError(f"Unknown database backend: {config.backend}")


@contextmanager
def open_session(config: DatabaseConfig) -> Generator[CatalogClient, None, None]:
    """Context manager yielding one catalog session.

    Uncommitted work is rolled back if the block raises (including
    KeyboardInterrupt), and the connection is always closed.

    Raises:
        CatalogConnectionError: If the session cannot be established.
    """
    client = _create_client(config)
    logger.debug(f"Session opened ({config.backend})")
    with client:
        yield client
    logger.debug(f"Session closed ({config.backend})")


def check_connection(config: DatabaseConfig) -> bool:
    """Open a session and run a trivial statement against it.

    Raises:
        CatalogConnectionError: If the session cannot be established.
        QueryError: If the session opens but the statement fails.
    """
    with open_session(config) as client:
        try:
            client.execute_query(PING_SQL)
        except client.Error as e:
            raise QueryError("ping", None, e) from e
    return True
