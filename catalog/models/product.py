"""Product model for catalog rows."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional


class ProductType(str, Enum):
    """Catalog product categories, in display order."""

    MCP_SERVER = "mcp_server"
    MCP_CLIENT = "mcp_client"
    AI_AGENT = "ai_agent"
    READY_TO_USE = "ready_to_use"

    @classmethod
    def parse(cls, value: str) -> "ProductType":
        """Convert a raw type string, raising ValueError for unknown types."""
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(t.value for t in cls)
            raise ValueError(f"Unknown product type '{value}'. Expected one of: {allowed}") from None


LOCALIZED_FIELDS = ("name", "description")


class LocalizedValue(NamedTuple):
    """A display value and whether it came from the canonical field."""

    text: Optional[str]
    is_fallback: bool


def parse_timestamp(value: Any) -> datetime:
    """Normalize a stored timestamp to an aware UTC-based datetime."""
    # SQLite hands timestamps back as ISO strings
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _localized(row: Mapping[str, Any], field_name: str, languages: Iterable[str]) -> Dict[str, str]:
    values = {}
    for lang in languages:
        text = row.get(f"{field_name}_{lang}")
        if text:
            values[lang] = text
    return values


@dataclass(frozen=True)
class Product:
    """One catalog entry."""

    id: int
    product_type: ProductType
    name: str
    description: Optional[str]
    stars_numeric: int
    is_active: bool
    is_featured: bool
    category: Optional[str]
    created_at: datetime
    updated_at: datetime
    name_localized: Dict[str, str] = field(default_factory=dict)
    description_localized: Dict[str, str] = field(default_factory=dict)
    image_url: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any], languages: Iterable[str]) -> "Product":
        """Build a Product from a column-name → value mapping.

        Empty localized values are treated as absent.
        """
        languages = tuple(languages)
        return cls(
            id=int(row["id"]),
            product_type=ProductType.parse(row["product_type"]),
            name=row["name"],
            description=row.get("description"),
            stars_numeric=int(row.get("stars_numeric") or 0),
            is_active=bool(row.get("is_active")),
            is_featured=bool(row.get("is_featured")),
            category=row.get("category"),
            created_at=parse_timestamp(row["created_at"]),
            updated_at=parse_timestamp(row["updated_at"]),
            name_localized=_localized(row, "name", languages),
            description_localized=_localized(row, "description", languages),
            image_url=row.get("image_url"),
        )

    def localized_name(self, lang: str) -> LocalizedValue:
        if lang in self.name_localized:
            return LocalizedValue(self.name_localized[lang], False)
        return LocalizedValue(self.name, True)

    def localized_description(self, lang: str) -> LocalizedValue:
        if lang in self.description_localized:
            return LocalizedValue(self.description_localized[lang], False)
        return LocalizedValue(self.description, True)


@dataclass(frozen=True)
class TranslationStatus:
    """Translation completeness of active products for one language."""

    language: str
    total: int
    translated: int
    fallback: int
    placeholder: int

    @property
    def translated_ratio(self) -> float:
        if self.total == 0:
            return 0.0
        return self.translated / self.total


@dataclass(frozen=True)
class ImageAudit:
    """Products whose image URL would not render, with a tally per problem."""

    products: List[Product]
    missing: int
    empty: int
    broken_asset: int

    @property
    def total(self) -> int:
        return len(self.products)
