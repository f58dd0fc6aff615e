"""Client modules for the catalog database."""

from catalog.clients.postgres_client import PostgresClient
from catalog.clients.sqlite_client import SqliteClient
from catalog.clients.session import CatalogClient, check_connection, open_session

__all__ = [
    "CatalogClient",
    "PostgresClient",
    "SqliteClient",
    "check_connection",
    "open_session",
]
