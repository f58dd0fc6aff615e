"""Tests for report formatting."""

from datetime import datetime, timezone

import pytest

from catalog.models import ImageAudit, Product, ProductType, TranslationStatus
from catalog.reports import (
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

TIMESTAMP = datetime(2025, 6, 1, tzinfo=timezone.utc)


def make_product(product_id=529, product_type=ProductType.MCP_SERVER, **overrides) -> Product:
    values = dict(
        id=product_id,
        product_type=product_type,
        name="Google Drive",
        description="Google Drive integration over MCP.",
        stars_numeric=120,
        is_active=True,
        is_featured=False,
        category="File Systems",
        created_at=TIMESTAMP,
        updated_at=TIMESTAMP,
        name_localized={},
        description_localized={},
    )
    values.update(overrides)
    return Product(**values)


class TestFormatProduct:
    def test_localized_values_are_shown(self):
        product = make_product(
            name_localized={"pt": "Google Drive PT"},
            description_localized={"pt": "Integração Google Drive."},
            is_featured=True,
        )

        lines = format_product(product, "pt")

        assert lines[0] == "#529 Google Drive"
        assert "  Name (pt): Google Drive PT" in lines
        assert "  Type: mcp_server" in lines
        assert "  Category: File Systems" in lines
        assert "  Stars: 120" in lines
        assert "  Featured: yes  Active: yes" in lines
        assert "  Description (pt): Integração Google Drive." in lines
        assert not any(FALLBACK_MARK in line for line in lines)

    def test_missing_localized_name_is_flagged(self):
        lines = format_product(make_product(), "pt")
        assert "  Name (pt): (missing pt name)" in lines

    def test_missing_localized_description_falls_back(self):
        lines = format_product(make_product(), "pt")
        assert f"  Description (pt): Google Drive integration over MCP. {FALLBACK_MARK}" in lines

    def test_no_description_at_all(self):
        lines = format_product(make_product(description=None), "pt")
        assert f"  Description (pt): (no description) {FALLBACK_MARK}" in lines

    def test_output_is_deterministic(self):
        product = make_product(name_localized={"pt": "x"})
        assert format_product(product, "pt") == format_product(product, "pt")


class TestFormatLists:
    def test_numbered_listing_keeps_order(self):
        products = [
            make_product(554, name="MongoDB", stars_numeric=300, is_featured=True),
            make_product(529),
        ]

        lines = format_product_list(products, "pt", title="mcp_server")

        assert lines[0] == "mcp_server (2)"
        assert lines[1].startswith("1. #554 MongoDB (missing pt name)")
        assert lines[1].endswith("300 stars [featured]")
        assert lines[3].startswith("2. #529 Google Drive")
        assert lines[4].endswith(FALLBACK_MARK)

    def test_empty_listing(self):
        assert format_product_list([], "pt") == ["Products (0)", "  (none)"]

    def test_long_descriptions_are_truncated(self):
        product = make_product(description="word " * 100)
        preview = format_product_list([product], "en")[2]
        assert "..." in preview
        assert len(preview) < 200

    def test_type_listing_groups_in_fixed_order(self):
        products = [
            make_product(800, ProductType.AI_AGENT, name="AutoGPT"),
            make_product(529),
            make_product(700, ProductType.MCP_CLIENT, name="Claude Desktop", is_active=False),
        ]

        lines = format_type_listing(products, "en")
        titles = [line for line in lines if line and not line.startswith((" ", "1", "2"))]

        assert titles == ["mcp_server (1)", "mcp_client (1)", "ai_agent (1)"]
        assert any("[inactive]" in line for line in lines)


class TestFormatAggregates:
    def test_counts_include_every_type_and_total(self):
        counts = {ProductType.MCP_SERVER: 3, ProductType.AI_AGENT: 2}

        assert format_counts(counts) == [
            "mcp_server: 3",
            "mcp_client: 0",
            "ai_agent: 2",
            "ready_to_use: 0",
            "total: 5",
        ]

    def test_translation_status(self):
        status = TranslationStatus(language="pt", total=8, translated=6, fallback=1, placeholder=1)
        lines = format_translation_status(status)

        assert lines[0] == "Translation status (pt)"
        assert "  Translated: 6 (75.0%)" in lines
        assert "  Placeholder text: 1" in lines

    def test_translation_status_with_no_products(self):
        status = TranslationStatus(language="pt", total=0, translated=0, fallback=0, placeholder=0)
        assert "  Translated: 0 (0.0%)" in format_translation_status(status)

    def test_image_audit(self):
        audit = ImageAudit(
            products=[
                make_product(554, name="MongoDB", image_url=None),
                make_product(560, name="GitHub", image_url=""),
                make_product(600, name="Retired", image_url="/assets/client-logos/r.png", is_active=False),
            ],
            missing=1,
            empty=1,
            broken_asset=1,
        )

        lines = format_image_audit(audit)

        assert lines[0] == "Image audit (3)"
        assert "  #554 MongoDB (mcp_server): NULL" in lines
        assert "  #560 GitHub (mcp_server): (empty)" in lines
        assert "  #600 Retired (mcp_server): /assets/client-logos/r.png [inactive]" in lines
        assert lines[-3:] == ["  Missing: 1", "  Empty: 1", "  Broken asset path: 1"]

    def test_empty_image_audit(self):
        lines = format_image_audit(ImageAudit([], missing=0, empty=0, broken_asset=0))
        assert lines[:2] == ["Image audit (0)", "  (none)"]


class TestFormatReport:
    @pytest.mark.parametrize("kind", list(ReportKind))
    def test_dispatch(self, kind):
        product = make_product()
        rows = {
            ReportKind.DETAIL: product,
            ReportKind.LIST: [product],
            ReportKind.BY_TYPE: [product],
            ReportKind.COUNTS: {ProductType.MCP_SERVER: 1},
            ReportKind.TRANSLATION_STATUS: TranslationStatus("pt", 1, 1, 0, 0),
            ReportKind.IMAGE_AUDIT: ImageAudit([product], missing=1, empty=0, broken_asset=0),
        }[kind]

        lines = format_report(kind.value, rows, "pt")

        assert lines
        assert all(isinstance(line, str) for line in lines)

    def test_list_title(self):
        lines = format_report("list", [make_product()], "en", title="ids 500-600")
        assert lines[0] == "ids 500-600 (1)"
