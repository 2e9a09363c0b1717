"""Interactive search state driven by the search bar.

Keystrokes and selections update the raw input synchronously; a submit
normalizes it and runs one query. Each submit is tagged with an increasing
sequence number and only the latest one may publish its result, so a slow
earlier response never overwrites a newer one.
"""

from __future__ import annotations

import logging
from typing import Any

from src.search.executor import QueryExecutor
from src.search.filters import SearchFilter, normalize_filter
from src.search.pagination import Page

logger = logging.getLogger(__name__)

SUBMIT_KEY = "Enter"


class SearchSession:
    """Search bar state for one user session (single logical writer)."""

    def __init__(
        self,
        executor: QueryExecutor,
        *,
        query: str = "",
        category: str | None = None,
        city: str | None = None,
    ) -> None:
        self._executor = executor
        self._raw_query = query
        self._raw_category = category
        self._raw_city = city
        self._issued = 0
        self.latest: Page[Any] | None = None

    @property
    def current_filter(self) -> SearchFilter:
        return normalize_filter(self._raw_query, self._raw_category, self._raw_city)

    @property
    def last_issued(self) -> int:
        return self._issued

    def set_query(self, text: str) -> None:
        self._raw_query = text

    def clear_query(self) -> None:
        self._raw_query = ""

    def select_category(self, category: str | None) -> None:
        self._raw_category = category

    def select_city(self, city: str | None) -> None:
        self._raw_city = city

    async def handle_key(self, key: str) -> Page[Any] | None:
        """Enter submits; any other key is ignored."""

        if key != SUBMIT_KEY:
            return None
        return await self.submit()

    async def submit(self, *, page: int = 1) -> Page[Any] | None:
        """Run the current filter; return the page unless it went stale.

        A stale request is dropped whether it succeeded or failed; only the
        latest request may raise.
        """

        self._issued += 1
        sequence = self._issued
        try:
            result = await self._executor.execute(self.current_filter, page=page)
        except Exception as exc:
            if sequence == self._issued:
                raise
            logger.debug(
                "Discarding stale search failure %s (latest issued %s): %s",
                sequence,
                self._issued,
                exc,
            )
            return None

        if sequence != self._issued:
            logger.debug(
                "Discarding stale search response %s (latest issued %s)",
                sequence,
                self._issued,
            )
            return None

        self.latest = result
        return result
