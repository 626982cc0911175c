"""Lazy cursor pagination.

Turns a "load more" protocol, where each response carries the cursor of the
next page and the last page carries none, into an async sequence of items.

```python
async def fetch_page(cursor):
    result = await api.notifications.list(load_more_key=...)
    return next_cursor, items

sequence = paginate(fetch_page, lambda item, seen: {"total": len(seen) + 1}, PaginatedOption(limit=50))
async for item in sequence:
    ...
```

A sequence is single use: cursors are stateful, so iterate a new sequence to
start over. Pages are only fetched when the consumer asks for more items, so
stopping iteration early stops fetching.

The sequence ends when the server returns no cursor, when `limit` items have
been produced, when the server repeats a cursor it already returned, or after
`max_pages` fetches.
"""

import logging
from collections import deque
from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, Literal, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K")

Item = dict[str, Any]
Page = tuple[K | None, list[Item]]
PageFetcher = Callable[[K | None], Awaitable[Page[K]]]
Annotator = Callable[[Item, list[Item]], Mapping[str, Any]]


@dataclass(frozen=True)
class PaginatedOption(Generic[K]):
    """Options for a paginated query.

    Attributes:
        limit: Maximum number of items to produce; unlimited when None.
        page_size: Items requested per page, passed on to the server by the
            caller's fetch function.
        sort_by: Declared sort key, recorded on the sequence. Does not change
            the order items arrive in, which is the server's.
        order: Declared sort direction for `sort_by`.
        last_key: Cursor to resume from instead of the first page.
        max_pages: Hard cap on fetches.
    """

    limit: int | None = None
    page_size: int | None = None
    sort_by: str | None = None
    order: Literal["asc", "desc"] = "desc"
    last_key: K | None = None
    max_pages: int | None = None


class PaginatedSequence(Generic[K]):
    """Async iterator over the items of successive pages.

    States: has more, then exhausted. Exhausted is terminal.
    """

    def __init__(
        self,
        fetch_page: PageFetcher[K],
        annotate: Annotator | None = None,
        option: PaginatedOption[K] | None = None,
    ) -> None:
        self._fetch_page = fetch_page
        self._annotate = annotate
        self.option = option or PaginatedOption()

        self._cursor: K | None = self.option.last_key
        self._seen_cursors: list[Any] = []
        if self._cursor is not None:
            self._seen_cursors.append(self._cursor)
        self._buffer: deque[Item] = deque()
        self._items: list[Item] = []
        self._exhausted = False
        self.fetch_count = 0

    @property
    def has_more(self) -> bool:
        """Whether more items may still be produced."""
        if self._buffer:
            return not self._limit_reached()
        return not self._exhausted and not self._limit_reached()

    @property
    def fetched_count(self) -> int:
        """Number of items produced so far."""
        return len(self._items)

    @property
    def cursor(self) -> K | None:
        """Cursor the next fetch would use."""
        return self._cursor

    def _limit_reached(self) -> bool:
        limit = self.option.limit
        return limit is not None and len(self._items) >= limit

    async def _fetch(self) -> None:
        """Fetch one page into the buffer and advance the cursor."""
        next_cursor, items = await self._fetch_page(self._cursor)
        self.fetch_count += 1
        self._buffer.extend(items)
        logger.debug(f"Fetched page {self.fetch_count} with {len(items)} items, next cursor: {next_cursor!r}")

        if next_cursor is None:
            self._exhausted = True
        elif next_cursor in self._seen_cursors:
            logger.warning(f"Server repeated cursor {next_cursor!r}, stopping pagination")
            self._exhausted = True
        elif self.option.max_pages is not None and self.fetch_count >= self.option.max_pages:
            logger.warning(f"Reached max_pages={self.option.max_pages}, stopping pagination")
            self._exhausted = True
        else:
            self._seen_cursors.append(next_cursor)
            self._cursor = next_cursor

    def _emit(self, item: Item) -> Item:
        if self._annotate is not None:
            item = {**item, **self._annotate(item, self._items)}
        self._items.append(item)
        return item

    def _finish(self) -> None:
        self._exhausted = True
        self._buffer.clear()

    def __aiter__(self) -> AsyncIterator[Item]:
        return self

    async def __anext__(self) -> Item:
        if self._limit_reached():
            self._finish()
            raise StopAsyncIteration

        while not self._buffer:
            if self._exhausted:
                raise StopAsyncIteration
            await self._fetch()

        return self._emit(self._buffer.popleft())

    async def next_batch(self) -> list[Item]:
        """Produce the items of the next non-empty page, or `[]` once exhausted.

        Items already buffered by item-wise iteration are returned first.
        Empty pages with a further cursor are skipped.
        """
        if self._limit_reached():
            self._finish()
            return []

        while not self._buffer and not self._exhausted:
            await self._fetch()

        batch = []
        while self._buffer and not self._limit_reached():
            batch.append(self._emit(self._buffer.popleft()))
        if self._limit_reached():
            self._finish()
        return batch

    async def collect(self) -> list[Item]:
        """Consume the rest of the sequence into a list."""
        return [item async for item in self]


def paginate(
    fetch_page: PageFetcher[K],
    annotate: Annotator | None = None,
    option: PaginatedOption[K] | None = None,
) -> PaginatedSequence[K]:
    """Create a lazy sequence over `fetch_page`.

    Args:
        fetch_page: Called with the current cursor (None for the first page);
            returns `(next_cursor, items)`, `next_cursor` None on the last page.
        annotate: Called once per item, in order, with the item and the items
            produced before it; the returned mapping is merged into a copy of
            the item.
        option: Limit, page size and other options.
    """
    return PaginatedSequence(fetch_page, annotate, option)
