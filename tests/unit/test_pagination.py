"""Tests for the lazy cursor pagination engine."""

import pytest

from jike_client.errors import RequestFailureError
from jike_client.pagination import PaginatedOption, paginate


def make_items(start, count):
    return [{"id": str(i)} for i in range(start, start + count)]


class FakePages:
    """Fetch function serving fixed pages keyed by cursor; records cursors asked for."""

    def __init__(self, pages):
        # pages: {cursor: (next_cursor, items)}
        self.pages = pages
        self.cursors = []

    async def __call__(self, cursor):
        self.cursors.append(cursor)
        return self.pages[cursor]


class TestTermination:
    @pytest.mark.unit
    async def test_full_single_page_with_limit_equal_to_page_size(self):
        fetch = FakePages({None: (None, make_items(0, 10))})

        items = await paginate(fetch, option=PaginatedOption(limit=10, page_size=10)).collect()

        assert len(items) == 10
        assert fetch.cursors == [None]

    @pytest.mark.unit
    async def test_absent_cursor_stops_before_limit(self):
        fetch = FakePages({None: (None, make_items(0, 10))})

        items = await paginate(fetch, option=PaginatedOption(limit=50)).collect()

        assert len(items) == 10
        assert len(fetch.cursors) == 1

    @pytest.mark.unit
    async def test_limit_stops_fetching_even_with_cursor(self):
        fetch = FakePages({None: ("a", make_items(0, 5)), "a": ("b", make_items(5, 5))})

        items = await paginate(fetch, option=PaginatedOption(limit=5)).collect()

        assert [item["id"] for item in items] == ["0", "1", "2", "3", "4"]
        assert fetch.cursors == [None]

    @pytest.mark.unit
    async def test_limit_truncates_last_page(self):
        fetch = FakePages({None: ("a", make_items(0, 5)), "a": ("b", make_items(5, 5))})

        items = await paginate(fetch, option=PaginatedOption(limit=7)).collect()

        assert len(items) == 7
        assert fetch.cursors == [None, "a"]

    @pytest.mark.unit
    async def test_without_limit_follows_cursors_to_the_end(self):
        fetch = FakePages({None: ("a", make_items(0, 3)), "a": ("b", make_items(3, 3)), "b": (None, make_items(6, 1))})

        items = await paginate(fetch).collect()

        assert len(items) == 7
        assert fetch.cursors == [None, "a", "b"]

    @pytest.mark.unit
    async def test_repeated_cursor_stops(self):
        fetch = FakePages({None: ("a", make_items(0, 2)), "a": ("a", make_items(2, 2))})

        items = await paginate(fetch).collect()

        assert len(items) == 4
        assert fetch.cursors == [None, "a"]

    @pytest.mark.unit
    async def test_max_pages_cap(self):
        fetch = FakePages({None: ("a", make_items(0, 2)), "a": ("b", make_items(2, 2)), "b": ("c", make_items(4, 2))})

        items = await paginate(fetch, option=PaginatedOption(max_pages=2)).collect()

        assert len(items) == 4
        assert fetch.cursors == [None, "a"]

    @pytest.mark.unit
    async def test_resume_from_last_key(self):
        fetch = FakePages({"a": (None, make_items(5, 2))})

        items = await paginate(fetch, option=PaginatedOption(last_key="a")).collect()

        assert [item["id"] for item in items] == ["5", "6"]
        assert fetch.cursors == ["a"]

    @pytest.mark.unit
    async def test_empty_first_page(self):
        fetch = FakePages({None: (None, [])})

        sequence = paginate(fetch)

        assert await sequence.collect() == []
        assert not sequence.has_more


class TestOrderingAndAnnotation:
    @pytest.mark.unit
    async def test_server_order_across_pages(self):
        fetch = FakePages({None: ("a", make_items(0, 3)), "a": (None, make_items(3, 3))})

        items = await paginate(fetch).collect()

        assert [item["id"] for item in items] == ["0", "1", "2", "3", "4", "5"]

    @pytest.mark.unit
    async def test_annotate_called_once_per_item_in_yield_order(self):
        fetch = FakePages({None: ("a", make_items(0, 3)), "a": (None, make_items(3, 2))})
        seen = []

        def annotate(item, items):
            seen.append(item["id"])
            return {"total": len(items) + 1}

        items = await paginate(fetch, annotate).collect()

        assert seen == ["0", "1", "2", "3", "4"]
        assert [item["total"] for item in items] == [1, 2, 3, 4, 5]

    @pytest.mark.unit
    async def test_annotate_does_not_mutate_server_items(self):
        page = make_items(0, 1)
        fetch = FakePages({None: (None, page)})

        (item,) = await paginate(fetch, lambda item, items: {"extra": True}).collect()

        assert item == {"id": "0", "extra": True}
        assert page == [{"id": "0"}]

    @pytest.mark.unit
    async def test_annotate_not_called_for_items_never_consumed(self):
        fetch = FakePages({None: ("a", make_items(0, 5))})
        calls = []

        sequence = paginate(fetch, lambda item, items: calls.append(item) or {})
        async for _ in sequence:
            break

        assert len(calls) == 1


class TestSequenceBehaviour:
    @pytest.mark.unit
    async def test_is_lazy(self):
        fetch = FakePages({None: ("a", make_items(0, 2)), "a": (None, make_items(2, 2))})

        sequence = paginate(fetch)

        assert fetch.cursors == []
        await sequence.__anext__()
        assert fetch.cursors == [None]

    @pytest.mark.unit
    async def test_stopping_early_stops_fetching(self):
        fetch = FakePages({None: ("a", make_items(0, 2)), "a": ("b", make_items(2, 2))})

        async for item in paginate(fetch):
            if item["id"] == "1":
                break

        assert fetch.cursors == [None]

    @pytest.mark.unit
    async def test_not_restartable(self):
        fetch = FakePages({None: (None, make_items(0, 3))})
        sequence = paginate(fetch)

        first = await sequence.collect()
        second = await sequence.collect()

        assert len(first) == 3
        assert second == []
        assert fetch.cursors == [None]

    @pytest.mark.unit
    async def test_next_batch_and_has_more(self):
        fetch = FakePages({None: ("a", make_items(0, 2)), "a": (None, make_items(2, 1))})
        sequence = paginate(fetch)

        assert sequence.has_more
        assert [item["id"] for item in await sequence.next_batch()] == ["0", "1"]
        assert sequence.has_more
        assert [item["id"] for item in await sequence.next_batch()] == ["2"]
        assert not sequence.has_more
        assert await sequence.next_batch() == []
        assert sequence.fetch_count == 2
        assert sequence.fetched_count == 3

    @pytest.mark.unit
    async def test_next_batch_skips_empty_page_with_cursor(self):
        fetch = FakePages({None: ("a", []), "a": ("b", []), "b": (None, make_items(0, 2))})
        sequence = paginate(fetch)

        assert [item["id"] for item in await sequence.next_batch()] == ["0", "1"]
        assert fetch.cursors == [None, "a", "b"]
        assert not sequence.has_more
        assert await sequence.next_batch() == []

    @pytest.mark.unit
    async def test_next_batch_empty_pages_until_end(self):
        fetch = FakePages({None: ("a", []), "a": (None, [])})
        sequence = paginate(fetch)

        assert await sequence.next_batch() == []
        assert sequence.fetch_count == 2
        assert not sequence.has_more

    @pytest.mark.unit
    async def test_next_batch_respects_limit(self):
        fetch = FakePages({None: ("a", make_items(0, 5))})
        sequence = paginate(fetch, option=PaginatedOption(limit=3))

        assert len(await sequence.next_batch()) == 3
        assert not sequence.has_more
        assert await sequence.next_batch() == []

    @pytest.mark.unit
    async def test_failure_aborts_and_keeps_yielded_items(self):
        async def fetch(cursor):
            if cursor is None:
                return "a", make_items(0, 2)
            raise RequestFailureError("query failed", operation="query")

        yielded = []
        with pytest.raises(RequestFailureError):
            async for item in paginate(fetch):
                yielded.append(item)

        assert [item["id"] for item in yielded] == ["0", "1"]

    @pytest.mark.unit
    def test_option_records_sort_declaration(self):
        option = PaginatedOption(sort_by="createdAt", order="asc")

        sequence = paginate(FakePages({}), option=option)

        assert sequence.option.sort_by == "createdAt"
        assert sequence.option.order == "asc"
