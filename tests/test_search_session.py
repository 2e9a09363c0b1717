"""Tests for search bar state and last-request-wins submission."""

from typing import Any

import anyio
import pytest

from src.errors import StoreUnavailableError
from src.search.executor import InMemoryQueryExecutor
from src.search.filters import Category, SearchFilter
from src.search.pagination import Page, build_page
from src.search.session import SearchSession

pytestmark = pytest.mark.anyio

LISTINGS = [
    {"id": 1, "title": "Villa Moderne", "type": "maison", "city_slug": "casablanca"},
    {"id": 2, "title": "Appartement Centre", "type": "appartement", "city_slug": "rabat"},
]


class _GatedExecutor:
    """Executor whose calls block until the test releases them."""

    def __init__(self) -> None:
        self.calls: list[SearchFilter] = []
        self.gates: list[anyio.Event] = []
        self.started: list[anyio.Event] = []
        self.failures: dict[int, Exception] = {}

    def prepare(self, count: int) -> None:
        self.gates = [anyio.Event() for _ in range(count)]
        self.started = [anyio.Event() for _ in range(count)]

    async def execute(
        self,
        search_filter: SearchFilter,
        *,
        page: int = 1,
        per_page: int | None = None,
    ) -> Page[Any]:
        index = len(self.calls)
        self.calls.append(search_filter)
        self.started[index].set()
        await self.gates[index].wait()
        if index in self.failures:
            raise self.failures[index]
        return build_page(
            [search_filter.query],
            total=1,
            page=page,
            per_page=per_page or 12,
            base_path="/recherche",
            params=search_filter.as_query_params(),
        )


async def test_enter_submits_current_input() -> None:
    session = SearchSession(InMemoryQueryExecutor(LISTINGS))
    session.set_query("villa")

    result = await session.handle_key("Enter")

    assert result is not None
    assert [item["id"] for item in result.items] == [1]
    assert session.latest is result


async def test_other_keys_do_not_submit() -> None:
    session = SearchSession(InMemoryQueryExecutor(LISTINGS))
    session.set_query("villa")

    for key in ("v", "Tab", "Escape", "enter"):
        assert await session.handle_key(key) is None

    assert session.last_issued == 0
    assert session.latest is None


async def test_typing_only_changes_raw_input() -> None:
    session = SearchSession(InMemoryQueryExecutor(LISTINGS), category="all")
    session.set_query("  villa ")
    session.select_category("maison")
    session.select_city("casablanca")

    assert session.current_filter == SearchFilter(
        query="villa", category=Category.MAISON, city="casablanca"
    )

    session.clear_query()
    session.select_category("all")
    session.select_city(None)
    assert session.current_filter == SearchFilter()


async def test_category_selection_filters_next_submit() -> None:
    session = SearchSession(InMemoryQueryExecutor(LISTINGS))
    session.select_category("appartement")

    result = await session.submit()

    assert result is not None
    assert [item["id"] for item in result.items] == [2]


async def test_slow_earlier_response_is_discarded() -> None:
    executor = _GatedExecutor()
    executor.prepare(2)
    session = SearchSession(executor)
    outcomes: dict[str, Page[Any] | None] = {}

    async def submit_as(label: str) -> None:
        outcomes[label] = await session.submit()

    async with anyio.create_task_group() as tg:
        session.set_query("villa")
        tg.start_soon(submit_as, "first")
        await executor.started[0].wait()

        session.set_query("riad")
        tg.start_soon(submit_as, "second")
        await executor.started[1].wait()

        executor.gates[1].set()
        with anyio.fail_after(1):
            while "second" not in outcomes:
                await anyio.sleep(0)
        executor.gates[0].set()

    assert outcomes["first"] is None
    second = outcomes["second"]
    assert second is not None
    assert second.items == ["riad"]
    assert session.latest is second
    assert session.last_issued == 2


async def test_in_order_responses_publish_the_latest() -> None:
    executor = _GatedExecutor()
    executor.prepare(2)
    for gate in executor.gates:
        gate.set()
    session = SearchSession(executor)

    session.set_query("villa")
    first = await session.submit()
    session.set_query("riad")
    second = await session.submit()

    assert first is not None and first.items == ["villa"]
    assert second is not None and second.items == ["riad"]
    assert session.latest is second


async def test_slow_earlier_failure_is_discarded() -> None:
    executor = _GatedExecutor()
    executor.prepare(2)
    executor.failures[0] = StoreUnavailableError("Listing store unavailable")
    session = SearchSession(executor)
    outcomes: dict[str, Page[Any] | None] = {}

    async def submit_as(label: str) -> None:
        outcomes[label] = await session.submit()

    async with anyio.create_task_group() as tg:
        session.set_query("villa")
        tg.start_soon(submit_as, "first")
        await executor.started[0].wait()

        session.set_query("riad")
        tg.start_soon(submit_as, "second")
        await executor.started[1].wait()

        executor.gates[1].set()
        with anyio.fail_after(1):
            while "second" not in outcomes:
                await anyio.sleep(0)
        executor.gates[0].set()

    assert outcomes["first"] is None
    second = outcomes["second"]
    assert second is not None
    assert session.latest is second


async def test_latest_failure_still_raises() -> None:
    executor = _GatedExecutor()
    executor.prepare(1)
    executor.gates[0].set()
    executor.failures[0] = StoreUnavailableError("Listing store unavailable")
    session = SearchSession(executor)

    with pytest.raises(StoreUnavailableError):
        await session.submit()

    assert session.latest is None
