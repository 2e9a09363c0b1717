"""Listing search: filter normalization, executors, and pagination."""

from src.search.filters import Category, SearchFilter, matches, normalize_filter
from src.search.pagination import Page, PageLink

__all__ = [
    "Category",
    "Page",
    "PageLink",
    "SearchFilter",
    "matches",
    "normalize_filter",
]
