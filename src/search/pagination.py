"""Paginated result container and link metadata."""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar
from urllib.parse import urlencode

T = TypeVar("T")

PREVIOUS_LABEL = "« Previous"
NEXT_LABEL = "Next »"
ELLIPSIS_LABEL = "..."

# Pages shown on each side of the current page before collapsing into "...".
_LINK_WINDOW = 2


@dataclass(frozen=True, slots=True)
class PageLink:
    url: str | None
    label: str
    active: bool = False

    def to_dict(self) -> dict[str, object]:
        return {"url": self.url, "label": self.label, "active": self.active}


@dataclass(slots=True)
class Page(Generic[T]):
    """One page of search results plus navigation metadata."""

    items: list[T]
    total: int
    page: int
    per_page: int
    links: list[PageLink] = field(default_factory=list)
    next_page_url: str | None = None
    prev_page_url: str | None = None

    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self.total / self.per_page))

    @property
    def from_index(self) -> int | None:
        if not self.items:
            return None
        return (self.page - 1) * self.per_page + 1

    @property
    def to_index(self) -> int | None:
        if not self.items:
            return None
        return (self.page - 1) * self.per_page + len(self.items)

    def meta(self) -> dict[str, object]:
        return {
            "current_page": self.page,
            "last_page": self.last_page,
            "per_page": self.per_page,
            "total": self.total,
            "from": self.from_index,
            "to": self.to_index,
            "next_page_url": self.next_page_url,
            "prev_page_url": self.prev_page_url,
        }


def validate_page_args(page: int, per_page: int, max_per_page: int) -> int:
    """Check 1-based page arguments and return the capped page size."""

    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    if per_page < 1:
        raise ValueError(f"per_page must be >= 1, got {per_page}")
    return min(per_page, max_per_page)


def page_url(base_path: str, params: Mapping[str, object], page: int) -> str:
    query = {key: value for key, value in params.items() if value is not None}
    query["page"] = page
    return f"{base_path}?{urlencode(query)}"


def _page_numbers(current: int, last: int) -> list[int | None]:
    """Page numbers to render, with ``None`` marking a collapsed gap."""

    if last <= 2 * _LINK_WINDOW + 5:
        return list(range(1, last + 1))

    shown = {1, 2, last - 1, last}
    shown.update(range(current - _LINK_WINDOW, current + _LINK_WINDOW + 1))
    numbers: list[int | None] = []
    previous = 0
    for number in sorted(n for n in shown if 1 <= n <= last):
        if number - previous > 1:
            numbers.append(None)
        numbers.append(number)
        previous = number
    return numbers


def build_page(
    items: Sequence[T],
    *,
    total: int,
    page: int,
    per_page: int,
    base_path: str,
    params: Mapping[str, object],
) -> Page[T]:
    """Assemble a :class:`Page` with previous/numbered/next links."""

    result: Page[T] = Page(
        items=list(items), total=total, page=page, per_page=per_page
    )
    last = result.last_page

    result.prev_page_url = (
        page_url(base_path, params, page - 1) if 1 < page <= last + 1 else None
    )
    result.next_page_url = (
        page_url(base_path, params, page + 1) if page < last else None
    )

    links = [PageLink(result.prev_page_url, PREVIOUS_LABEL)]
    for number in _page_numbers(page, last):
        if number is None:
            links.append(PageLink(None, ELLIPSIS_LABEL))
        else:
            links.append(
                PageLink(page_url(base_path, params, number), str(number), number == page)
            )
    links.append(PageLink(result.next_page_url, NEXT_LABEL))
    result.links = links
    return result
