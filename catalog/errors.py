"""Error types raised by catalog operations."""

from typing import Any, Dict, Mapping, Optional

REDACTED = "***"

# Parameter names whose values never leave the process in error messages.
SENSITIVE_PARAMS = ("value", "password", "secret", "token")


def redact_params(params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Return a copy of params with sensitive values masked."""
    if not params:
        return {}
    return {
        key: REDACTED if any(word in key.lower() for word in SENSITIVE_PARAMS) else value
        for key, value in params.items()
    }


class CatalogError(Exception):
    """Base class for catalog tool errors."""
    pass


class CatalogConnectionError(CatalogError, ConnectionError):
    """Raised when a database session cannot be established."""

    def __init__(self, message: str, host: str, database: str):
        super().__init__(f"{message} (host={host}, database={database})")
        self.host = host
        self.database = database


class QueryError(CatalogError):
    """Raised when a statement fails to execute."""

    def __init__(self, statement_id: str, params: Optional[Mapping[str, Any]], cause: Exception):
        self.statement_id = statement_id
        self.params = redact_params(params)
        self.cause = cause
        super().__init__(f"Statement '{statement_id}' failed with params {self.params}: {cause}")


class NotFoundError(CatalogError):
    """Raised when an id-scoped operation matches no row."""

    def __init__(self, operation: str, target: Any):
        self.operation = operation
        self.target = target
        super().__init__(f"{operation}: no product matches {target}")


class IntegrityFaultError(CatalogError):
    """Raised when storage holds duplicate ids or rows that cannot be read."""
    pass


class AmbiguousUpdateError(IntegrityFaultError):
    """Raised when an update by id affects more than one row."""

    def __init__(self, product_id: int, rowcount: int):
        self.product_id = product_id
        self.rowcount = rowcount
        super().__init__(
            f"Update of product {product_id} affected {rowcount} rows; "
            f"expected exactly one. Changes were rolled back."
        )
