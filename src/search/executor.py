"""Query executors: in-memory and store-backed search over listings.

Both strategies apply the same three predicates (title contains the query,
type equals the category, city equals the city slug) and return a
:class:`~src.search.pagination.Page`. Call sites may swap one for the other.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import get_settings
from src.db.repositories import search_posts
from src.errors import InvalidSourceError, StoreUnavailableError
from src.search.filters import SearchFilter, matches
from src.search.pagination import Page, build_page, validate_page_args

logger = logging.getLogger(__name__)


class QueryExecutor(Protocol):
    async def execute(
        self,
        search_filter: SearchFilter,
        *,
        page: int = 1,
        per_page: int | None = None,
    ) -> Page[Any]: ...


def _resolve_page_size(page: int, per_page: int | None) -> int:
    settings = get_settings()
    size = settings.search_page_size if per_page is None else per_page
    return validate_page_args(page, size, settings.search_max_page_size)


class InMemoryQueryExecutor:
    """Filter an already-fetched collection of listing records.

    The filter is stable: matching records keep their input order.
    """

    def __init__(self, source: Sequence[Any], *, base_path: str | None = None) -> None:
        if (
            source is None
            or isinstance(source, (str, bytes, bytearray, Mapping))
            or not isinstance(source, Sequence)
        ):
            raise InvalidSourceError(
                f"Search source must be a sequence of listings, got {type(source).__name__}"
            )
        self._source = source
        self._base_path = base_path or get_settings().search_base_path

    def filter_records(self, search_filter: SearchFilter) -> list[Any]:
        return [record for record in self._source if matches(search_filter, record)]

    async def execute(
        self,
        search_filter: SearchFilter,
        *,
        page: int = 1,
        per_page: int | None = None,
    ) -> Page[Any]:
        size = _resolve_page_size(page, per_page)
        matched = self.filter_records(search_filter)
        start = (page - 1) * size
        return build_page(
            matched[start : start + size],
            total=len(matched),
            page=page,
            per_page=size,
            base_path=self._base_path,
            params=search_filter.as_query_params(),
        )


class StoreQueryExecutor:
    """Run the search against the listing store with server-side pagination."""

    def __init__(self, session: AsyncSession, *, base_path: str | None = None) -> None:
        self._session = session
        self._base_path = base_path or get_settings().search_base_path

    async def execute(
        self,
        search_filter: SearchFilter,
        *,
        page: int = 1,
        per_page: int | None = None,
    ) -> Page[Any]:
        size = _resolve_page_size(page, per_page)
        try:
            rows, total = await search_posts(
                self._session,
                search_filter,
                offset=(page - 1) * size,
                limit=size,
            )
        except (DBAPIError, OSError) as exc:
            logger.warning("Listing store query failed for %s: %s", search_filter, exc)
            raise StoreUnavailableError("Listing store unavailable") from exc

        return build_page(
            rows,
            total=total,
            page=page,
            per_page=size,
            base_path=self._base_path,
            params=search_filter.as_query_params(),
        )
