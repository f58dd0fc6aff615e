"""Data models module."""

from catalog.models.product import (
    LOCALIZED_FIELDS,
    ImageAudit,
    LocalizedValue,
    Product,
    ProductType,
    TranslationStatus,
    parse_timestamp,
)

__all__ = [
    "LOCALIZED_FIELDS",
    "ImageAudit",
    "LocalizedValue",
    "Product",
    "ProductType",
    "TranslationStatus",
    "parse_timestamp",
]
