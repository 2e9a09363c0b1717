"""Search filter normalization.

Raw input from the search bar (free text, category id, city slug) is turned
into a canonical :class:`SearchFilter`. Unknown categories are not an error:
they normalize to "no category filter", the same as ``all``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum

from src.config import get_settings

logger = logging.getLogger(__name__)


class Category(StrEnum):
    """Fixed set of listing categories, keyed by their wire id."""

    ALL = "all"
    APPARTEMENT = "appartement"
    MAISON = "maison"
    TERRAIN = "terrain"
    BUREAU = "bureau"
    HOTEL = "hotel"


CATEGORY_LABELS: dict[Category, str] = {
    Category.ALL: "Toutes les catégories",
    Category.APPARTEMENT: "Appartements",
    Category.MAISON: "Maisons",
    Category.TERRAIN: "Terrains",
    Category.BUREAU: "Bureaux",
    Category.HOTEL: "Hôtels",
}

_CATEGORY_ALIASES: dict[str, Category] = {
    "apartment": Category.APPARTEMENT,
    "house": Category.MAISON,
    "land": Category.TERRAIN,
    "office": Category.BUREAU,
}


@dataclass(frozen=True, slots=True)
class SearchFilter:
    """Normalized search criteria. ``None`` means the predicate is absent."""

    query: str | None = None
    category: Category | None = None
    city: str | None = None

    @property
    def is_empty(self) -> bool:
        return self.query is None and self.category is None and self.city is None

    def as_query_params(self) -> dict[str, str]:
        """Query-string form carrying only the present keys."""

        params: dict[str, str] = {}
        if self.query is not None:
            params["query"] = self.query
        if self.category is not None:
            params["category"] = self.category.value
        if self.city is not None:
            params["city"] = self.city
        return params


def _clean_text(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_category(raw_category: object) -> Category | None:
    """Map a raw category id onto the enumerated set.

    ``all``, empty, unknown, and settings-disabled values all return ``None``.
    """

    text = _clean_text(raw_category)
    if text is None:
        return None

    if isinstance(raw_category, Category):
        category: Category | None = raw_category
    else:
        lowered = text.lower()
        try:
            category = Category(lowered)
        except ValueError:
            category = _CATEGORY_ALIASES.get(lowered)

    if category is None:
        logger.debug("Unknown category %r treated as no category filter", text)
        return None
    if category is Category.ALL:
        return None
    if category.value not in get_settings().enabled_categories:
        logger.debug("Disabled category %r treated as no category filter", text)
        return None
    return category


def normalize_filter(
    raw_query: object = None,
    raw_category: object = None,
    raw_city: object = None,
) -> SearchFilter:
    """Build a canonical filter from raw user input."""

    return SearchFilter(
        query=_clean_text(raw_query),
        category=parse_category(raw_category),
        city=_clean_text(raw_city),
    )


def _field(record: object, *names: str) -> object:
    """First non-null value among ``names``, read by key or attribute."""

    for name in names:
        if isinstance(record, Mapping):
            value = record.get(name)
        else:
            value = getattr(record, name, None)
        if value is not None:
            return value
    return None


def matches(search_filter: SearchFilter, record: object) -> bool:
    """Return True when ``record`` satisfies every present predicate."""

    if search_filter.query is not None:
        title = _field(record, "title")
        if title is None or search_filter.query.lower() not in str(title).lower():
            return False

    if search_filter.category is not None:
        if _field(record, "type") != search_filter.category.value:
            return False

    if search_filter.city is not None:
        if _field(record, "city_slug", "city") != search_filter.city:
            return False

    return True
