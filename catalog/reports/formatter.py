"""Console report formatting for catalog rows.

Pure functions: they take rows and return display lines, nothing else.
"""

from enum import Enum
from typing import Dict, Iterable, List, Mapping, Sequence

from ..models import ImageAudit, Product, ProductType, TranslationStatus

FALLBACK_MARK = "[fallback]"
DESCRIPTION_PREVIEW = 120


class ReportKind(str, Enum):
    DETAIL = "detail"
    LIST = "list"
    BY_TYPE = "by-type"
    COUNTS = "counts"
    TRANSLATION_STATUS = "translation-status"
    IMAGE_AUDIT = "image-audit"


def _yes_no(flag: bool) -> str:
    return "yes" if flag else "no"


def _preview(text: str, width: int = DESCRIPTION_PREVIEW) -> str:
    text = " ".join(text.split())
    if len(text) <= width:
        return text
    return text[: width - 3].rstrip() + "..."


def format_product(product: Product, lang: str) -> List[str]:
    """Detailed lines for one product.

    A missing localized name is flagged explicitly; a missing localized
    description shows the canonical text marked as a fallback.
    """
    localized_name = product.localized_name(lang)
    description = product.localized_description(lang)

    if localized_name.is_fallback:
        name_line = f"  Name ({lang}): (missing {lang} name)"
    else:
        name_line = f"  Name ({lang}): {localized_name.text}"

    if description.text is None:
        description_line = f"  Description ({lang}): (no description) {FALLBACK_MARK}"
    elif description.is_fallback:
        description_line = f"  Description ({lang}): {description.text} {FALLBACK_MARK}"
    else:
        description_line = f"  Description ({lang}): {description.text}"

    return [
        f"#{product.id} {product.name}",
        name_line,
        f"  Type: {product.product_type.value}",
        f"  Category: {product.category or '-'}",
        f"  Stars: {product.stars_numeric}",
        f"  Featured: {_yes_no(product.is_featured)}  Active: {_yes_no(product.is_active)}",
        description_line,
        f"  Updated: {product.updated_at.isoformat()}",
    ]


def _summary_line(position: int, product: Product, lang: str) -> str:
    localized_name = product.localized_name(lang)
    localized = f"({localized_name.text})" if not localized_name.is_fallback else f"(missing {lang} name)"
    flags = []
    if product.is_featured:
        flags.append("featured")
    if not product.is_active:
        flags.append("inactive")
    suffix = f" [{', '.join(flags)}]" if flags else ""
    return (
        f"{position}. #{product.id} {product.name} {localized} - "
        f"{product.product_type.value}, {product.category or '-'}, "
        f"{product.stars_numeric} stars{suffix}"
    )


def format_product_list(products: Sequence[Product], lang: str, title: str = "Products") -> List[str]:
    """Numbered one-line-per-product listing, in the order given."""
    lines = [f"{title} ({len(products)})"]
    if not products:
        lines.append("  (none)")
        return lines

    for position, product in enumerate(products, start=1):
        lines.append(_summary_line(position, product, lang))
        description = product.localized_description(lang)
        if description.text:
            mark = f" {FALLBACK_MARK}" if description.is_fallback else ""
            lines.append(f"   {_preview(description.text)}{mark}")
    return lines


def format_type_listing(products: Iterable[Product], lang: str) -> List[str]:
    """Listing grouped by product type, types in their fixed order."""
    groups: Dict[ProductType, List[Product]] = {product_type: [] for product_type in ProductType}
    for product in products:
        groups[product.product_type].append(product)

    lines: List[str] = []
    for product_type, members in groups.items():
        if not members:
            continue
        lines.extend(format_product_list(members, lang, title=product_type.value))
        lines.append("")
    return lines[:-1] if lines else ["Products (0)", "  (none)"]


def format_counts(counts: Mapping[ProductType, int]) -> List[str]:
    lines = [f"{product_type.value}: {counts.get(product_type, 0)}" for product_type in ProductType]
    lines.append(f"total: {sum(counts.values())}")
    return lines


def format_translation_status(status: TranslationStatus) -> List[str]:
    return [
        f"Translation status ({status.language})",
        f"  Active products: {status.total}",
        f"  Translated: {status.translated} ({status.translated_ratio:.1%})",
        f"  Using canonical fallback: {status.fallback}",
        f"  Placeholder text: {status.placeholder}",
    ]


def _image_label(image_url) -> str:
    if image_url is None:
        return "NULL"
    if image_url == "":
        return "(empty)"
    return image_url


def format_image_audit(audit: ImageAudit) -> List[str]:
    """Products with unusable image URLs, then a tally per problem."""
    lines = [f"Image audit ({audit.total})"]
    if not audit.products:
        lines.append("  (none)")
    for product in audit.products:
        status = "" if product.is_active else " [inactive]"
        lines.append(
            f"  #{product.id} {product.name} ({product.product_type.value}): "
            f"{_image_label(product.image_url)}{status}"
        )
    lines.extend([
        f"  Missing: {audit.missing}",
        f"  Empty: {audit.empty}",
        f"  Broken asset path: {audit.broken_asset}",
    ])
    return lines


def format_report(kind, rows, lang: str, title: str = "Products") -> List[str]:
    """Format rows for a report kind.

    ``rows`` is a product, a list of products, a count mapping, a
    translation status or an image audit, depending on the kind. ``title``
    only applies to plain listings.
    """
    kind = ReportKind(kind)
    if kind is ReportKind.DETAIL:
        return format_product(rows, lang)
    if kind is ReportKind.LIST:
        return format_product_list(rows, lang, title=title)
    if kind is ReportKind.BY_TYPE:
        return format_type_listing(rows, lang)
    if kind is ReportKind.COUNTS:
        return format_counts(rows)
    if kind is ReportKind.IMAGE_AUDIT:
        return format_image_audit(rows)
    return format_translation_status(rows)
