"""Report formatting module."""

from catalog.reports.formatter import (
    FALLBACK_MARK,
    ReportKind,
    format_counts,
    format_image_audit,
    format_product,
    format_product_list,
    format_report,
    format_translation_status,
    format_type_listing,
)

__all__ = [
    "FALLBACK_MARK",
    "ReportKind",
    "format_counts",
    "format_image_audit",
    "format_product",
    "format_product_list",
    "format_report",
    "format_translation_status",
    "format_type_listing",
]
