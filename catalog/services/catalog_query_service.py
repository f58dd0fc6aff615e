"""Catalog query service.

Runs the fixed set of catalog statements against one open session:
- Lookups by id, by type (ranked by popularity) and by id range
- Active product counts per type
- Translation completeness per language
- Auditing product image URLs
- Patching a single localized field or the image URL of one product

Every value is passed as a bound parameter. The only identifiers that vary
are the updated column names: localized columns come from a whitelist built
from the configured languages, and the image column is fixed.
"""

import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional
from urllib.parse import urlparse

from ..errors import AmbiguousUpdateError, IntegrityFaultError, NotFoundError, QueryError
from ..models import LOCALIZED_FIELDS, ImageAudit, Product, ProductType, TranslationStatus, parse_timestamp

logger = logging.getLogger(__name__)


class StatementId(str, Enum):
    """Identifiers of the statements the service can run."""

    FETCH_BY_ID = "fetch-by-id"
    FETCH_BY_TYPE = "fetch-by-type"
    FETCH_RANGE = "fetch-range"
    COUNT_BY_TYPE = "count-by-type"
    COUNT_ALL_TYPES = "count-all-types"
    TRANSLATION_STATUS = "translation-status"
    IMAGE_AUDIT = "image-audit"
    UPDATE_LOCALIZED_FIELD = "update-localized-field"
    UPDATE_IMAGE_URL = "update-image-url"


# SQL statements
FETCH_BY_ID_SQL = "SELECT * FROM products WHERE id = :id"

FETCH_BY_TYPE_SQL = """
SELECT * FROM products
WHERE is_active = TRUE AND product_type = :product_type
ORDER BY COALESCE(stars_numeric, 0) DESC, id ASC
"""

FETCH_BY_TYPE_LIMIT_SQL = FETCH_BY_TYPE_SQL + "LIMIT :limit\n"

FETCH_RANGE_SQL = """
SELECT * FROM products
WHERE id BETWEEN :start_id AND :end_id
ORDER BY id ASC
"""

COUNT_BY_TYPE_SQL = """
SELECT count(*) AS count FROM products
WHERE is_active = TRUE AND product_type = :product_type
"""

COUNT_ALL_TYPES_SQL = """
SELECT product_type, count(*) AS count FROM products
WHERE is_active = TRUE
GROUP BY product_type
"""

SELECT_UPDATED_AT_SQL = "SELECT id, updated_at FROM products WHERE id = :id"

UPDATE_COLUMN_SQL = "UPDATE products SET {column} = :value, updated_at = :updated_at WHERE id = :id"

TRANSLATION_STATUS_SQL = """
SELECT
    count(*) AS total,
    SUM(CASE WHEN {placeholder} THEN 1 ELSE 0 END) AS placeholder,
    SUM(CASE WHEN {placeholder} THEN 0
             WHEN {column} IS NULL OR {column} = '' OR {column} = description THEN 1
             ELSE 0 END) AS fallback
FROM products
WHERE is_active = TRUE
"""

# Hotlinked logos that were never deployed
BROKEN_IMAGE_PATTERN = "%/assets/client-logos/%"

_IMAGE_AUDIT_WHERE = "image_url IS NULL OR image_url = '' OR LOWER(image_url) LIKE LOWER(:pattern)"

IMAGE_AUDIT_SQL = f"""
SELECT * FROM products
WHERE {_IMAGE_AUDIT_WHERE}
ORDER BY id ASC
"""

IMAGE_AUDIT_COUNTS_SQL = """
SELECT
    SUM(CASE WHEN image_url IS NULL THEN 1 ELSE 0 END) AS missing,
    SUM(CASE WHEN image_url = '' THEN 1 ELSE 0 END) AS empty,
    SUM(CASE WHEN LOWER(image_url) LIKE LOWER(:pattern) THEN 1 ELSE 0 END) AS broken_asset
FROM products
"""


class CatalogQueryService:
    """Runs catalog statements over a single open session."""

    def __init__(
        self,
        client,
        languages: Iterable[str] = ("en", "pt"),
        placeholder_patterns: Iterable[str] = (),
    ):
        """Initialize the service.

        Args:
            client: An open catalog client (see ``catalog.clients``).
            languages: Language codes that have localized columns.
            placeholder_patterns: SQL LIKE patterns marking machine-filled
                placeholder translations.
        """
        self._client = client
        self._languages = tuple(languages)
        self._placeholder_patterns = tuple(placeholder_patterns)
        self._localized_columns = {
            (field, lang): f"{field}_{lang}" for field in LOCALIZED_FIELDS for lang in self._languages
        }

    @property
    def languages(self):
        return self._languages

    def _query(self, statement_id: StatementId, sql: str, params: Mapping[str, Any]) -> List[Dict[str, Any]]:
        try:
            return self._client.execute_query(sql, params)
        except self._client.Error as e:
            raise QueryError(statement_id.value, params, e) from e

    def _to_product(self, row: Mapping[str, Any]) -> Product:
        try:
            return Product.from_row(row, self._languages)
        except ValueError as e:
            logger.critical(f"Unreadable product row id={row.get('id')!r}: {e}")
            raise IntegrityFaultError(f"Product row id={row.get('id')!r} is malformed: {e}") from e

    def _check_language(self, lang: str) -> None:
        if lang not in self._languages:
            raise ValueError(
                f"Unsupported language '{lang}'. Configured languages: {', '.join(self._languages)}"
            )

    def fetch_by_id(self, product_id: int) -> Product:
        """Fetch one product by id.

        Raises:
            NotFoundError: If no product has this id.
            IntegrityFaultError: If storage holds more than one row for it.
        """
        params = {"id": product_id}
        rows = self._query(StatementId.FETCH_BY_ID, FETCH_BY_ID_SQL, params)

        if not rows:
            raise NotFoundError(StatementId.FETCH_BY_ID.value, f"id={product_id}")
        if len(rows) > 1:
            logger.critical(f"Product id {product_id} is not unique: {len(rows)} rows")
            raise IntegrityFaultError(f"Product id {product_id} matches {len(rows)} rows")

        return self._to_product(rows[0])

    def fetch_by_type(self, product_type, limit: Optional[int] = None) -> List[Product]:
        """Fetch active products of one type, most popular first.

        Ties on ``stars_numeric`` are broken by ascending id. ``limit=None``
        returns every matching product.
        """
        product_type = ProductType.parse(product_type)
        params: Dict[str, Any] = {"product_type": product_type.value}

        if limit is None:
            sql = FETCH_BY_TYPE_SQL
        else:
            if limit < 1:
                raise ValueError(f"limit must be a positive integer, got {limit}")
            sql = FETCH_BY_TYPE_LIMIT_SQL
            params["limit"] = limit

        rows = self._query(StatementId.FETCH_BY_TYPE, sql, params)
        return [self._to_product(row) for row in rows]

    def fetch_range(self, start_id: int, end_id: int) -> List[Product]:
        """Fetch products with ids in [start_id, end_id], active or not."""
        if start_id > end_id:
            raise ValueError(f"start_id ({start_id}) must not exceed end_id ({end_id})")

        rows = self._query(
            StatementId.FETCH_RANGE, FETCH_RANGE_SQL, {"start_id": start_id, "end_id": end_id}
        )
        return [self._to_product(row) for row in rows]

    def count_by_type(self, product_type) -> int:
        """Count active products of one type. Returns 0 when there are none."""
        product_type = ProductType.parse(product_type)
        rows = self._query(
            StatementId.COUNT_BY_TYPE, COUNT_BY_TYPE_SQL, {"product_type": product_type.value}
        )
        return int(rows[0]["count"]) if rows else 0

    def count_all_types(self) -> Dict[ProductType, int]:
        """Count active products for every known type, zero-filled."""
        counts = {product_type: 0 for product_type in ProductType}
        rows = self._query(StatementId.COUNT_ALL_TYPES, COUNT_ALL_TYPES_SQL, {})

        for row in rows:
            try:
                counts[ProductType(row["product_type"])] = int(row["count"])
            except ValueError:
                logger.warning(f"Ignoring unknown product type in storage: {row['product_type']!r}")

        return counts

    def translation_status(self, lang: str) -> TranslationStatus:
        """Summarize how many active products have a real translation.

        A product counts as a placeholder when its localized description
        matches a configured placeholder pattern, as a fallback when the
        localized description is missing or identical to the canonical one,
        and as translated otherwise. Placeholder patterns match regardless of
        case on every backend.
        """
        self._check_language(lang)
        column = self._localized_columns[("description", lang)]

        params = {f"pattern_{i}": pattern for i, pattern in enumerate(self._placeholder_patterns)}
        if params:
            placeholder = " OR ".join(f"LOWER({column}) LIKE LOWER(:{key})" for key in params)
            placeholder = f"({placeholder})"
        else:
            placeholder = "1 = 0"

        sql = TRANSLATION_STATUS_SQL.format(column=column, placeholder=placeholder)
        rows = self._query(StatementId.TRANSLATION_STATUS, sql, params)

        row = rows[0] if rows else {}
        total = int(row.get("total") or 0)
        placeholder_count = int(row.get("placeholder") or 0)
        fallback = int(row.get("fallback") or 0)

        return TranslationStatus(
            language=lang,
            total=total,
            translated=total - placeholder_count - fallback,
            fallback=fallback,
            placeholder=placeholder_count,
        )

    def image_audit(self, pattern: str = BROKEN_IMAGE_PATTERN) -> ImageAudit:
        """List products whose image URL is missing, empty or a broken local asset.

        Inactive products are included. ``pattern`` is a LIKE pattern
        matched case-insensitively against ``image_url``.
        """
        params = {"pattern": pattern}
        rows = self._query(StatementId.IMAGE_AUDIT, IMAGE_AUDIT_SQL, params)
        counts = self._query(StatementId.IMAGE_AUDIT, IMAGE_AUDIT_COUNTS_SQL, params)

        row = counts[0] if counts else {}
        return ImageAudit(
            products=[self._to_product(r) for r in rows],
            missing=int(row.get("missing") or 0),
            empty=int(row.get("empty") or 0),
            broken_asset=int(row.get("broken_asset") or 0),
        )

    def _update_single_row(self, statement_id: StatementId, product_id: int, column: str, value) -> Product:
        """Set one column of one product and advance ``updated_at``.

        Runs as a single transaction, committed only when exactly one row was
        affected. ``column`` must come from a whitelist.
        """
        target = f"id={product_id}"

        try:
            rows = self._client.execute_query(SELECT_UPDATED_AT_SQL, {"id": product_id})
            if not rows:
                self._client.rollback()
                raise NotFoundError(statement_id.value, target)

            previous = max(parse_timestamp(row["updated_at"]) for row in rows)
            updated_at = max(datetime.now(timezone.utc), previous + timedelta(microseconds=1))

            params = {"value": value, "updated_at": updated_at, "id": product_id}
            rowcount = self._client.execute_update(UPDATE_COLUMN_SQL.format(column=column), params)

            if rowcount == 0:
                self._client.rollback()
                raise NotFoundError(statement_id.value, target)
            if rowcount > 1:
                self._client.rollback()
                logger.critical(
                    f"Integrity fault: update of {column} for product {product_id} "
                    f"matched {rowcount} rows; rolled back"
                )
                raise AmbiguousUpdateError(product_id, rowcount)

            self._client.commit()
        except self._client.Error as e:
            self._client.rollback()
            raise QueryError(statement_id.value, {"id": product_id, "column": column, "value": value}, e) from e

        logger.info(f"Updated {column} of product {product_id}")
        return self.fetch_by_id(product_id)

    def update_localized_field(
        self,
        product_id: int,
        field: str,
        lang: str,
        value: Optional[str],
    ) -> Product:
        """Set one localized field of one product and advance ``updated_at``.

        ``value=None`` clears the localization so display falls back to the
        canonical field.

        Returns:
            The product as stored after the update.

        Raises:
            ValueError: For an unknown field or language, or an empty value.
            NotFoundError: If no product has this id.
            AmbiguousUpdateError: If more than one row was affected.
        """
        if field not in LOCALIZED_FIELDS:
            raise ValueError(f"Unknown localized field '{field}'. Expected one of: {', '.join(LOCALIZED_FIELDS)}")
        self._check_language(lang)
        if value is not None and not value.strip():
            raise ValueError("Localized value must not be empty; pass None to clear it")

        column = self._localized_columns[(field, lang)]
        return self._update_single_row(StatementId.UPDATE_LOCALIZED_FIELD, product_id, column, value)

    def update_image_url(self, product_id: int, url: str) -> Product:
        """Point one product at a new absolute http(s) image URL.

        Same transaction and row-count rules as ``update_localized_field``.
        """
        parsed = urlparse(url or "")
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Image URL must be an absolute http(s) URL, got {url!r}")

        return self._update_single_row(StatementId.UPDATE_IMAGE_URL, product_id, "image_url", url)

    def run(self, statement_id, **params):
        """Run a statement by its identifier.

        Example:
            service.run("fetch-by-type", product_type="ai_agent", limit=10)
        """
        statement_id = StatementId(statement_id)
        handlers = {
            StatementId.FETCH_BY_ID: self.fetch_by_id,
            StatementId.FETCH_BY_TYPE: self.fetch_by_type,
            StatementId.FETCH_RANGE: self.fetch_range,
            StatementId.COUNT_BY_TYPE: self.count_by_type,
            StatementId.COUNT_ALL_TYPES: self.count_all_types,
            StatementId.TRANSLATION_STATUS: self.translation_status,
            StatementId.IMAGE_AUDIT: self.image_audit,
            StatementId.UPDATE_LOCALIZED_FIELD: self.update_localized_field,
            StatementId.UPDATE_IMAGE_URL: self.update_image_url,
        }
        return handlers[statement_id](**params)
