"""Service modules."""

from catalog.services.catalog_query_service import CatalogQueryService, StatementId

__all__ = ["CatalogQueryService", "StatementId"]
