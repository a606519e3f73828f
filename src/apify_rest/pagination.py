"""
Offset/limit pagination over Apify list endpoints.

Every list endpoint answers with the envelope::

    {"data": {"items": [...], "total": N, "offset": N, "limit": N, "desc": bool}}

This module provides:
- PaginatedResponse / PageData: schema of that envelope, every field optional
- items / total / has_next_page / next_page_options: total helper functions
  that never raise, whatever shape they are given
- stream: lazy iterator over the items of all pages, one page in flight,
  fetched only as the consumer pulls
- collect_all: materialize every item (unbounded memory, see its docstring)
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Callable, Iterator, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from apify_rest.errors import ApifyError
from apify_rest.result import Result

logger = logging.getLogger(__name__)


class PageRequestOptions(BaseModel):
    """
    Offset/limit/sort state for a single page request.

    Instances are frozen: the engine derives the next page's options from
    the previous response instead of mutating.
    """

    model_config = ConfigDict(frozen=True)

    offset: int = Field(default=0, ge=0, description="Number of items to skip")
    limit: Optional[int] = Field(
        default=None, gt=0, description="Page size (None lets the server choose)"
    )
    desc: Optional[bool] = Field(default=None, description="Sort newest first")

    def to_params(self) -> dict[str, Any]:
        """Render as query parameters (None dropped, desc as 1/0)."""
        params: dict[str, Any] = {"offset": self.offset}
        if self.limit is not None:
            params["limit"] = self.limit
        if self.desc is not None:
            params["desc"] = 1 if self.desc else 0
        return params


class PageData(BaseModel):
    """Body of one page; all fields optional since servers may omit any."""

    model_config = ConfigDict(extra="allow")

    items: list[Any] = Field(default_factory=list)
    total: Optional[int] = None
    offset: Optional[int] = None
    limit: Optional[int] = None
    count: Optional[int] = None
    desc: Optional[bool] = None


_FIELD_ADAPTERS: dict[str, TypeAdapter] = {
    "items": TypeAdapter(list[Any]),
    "total": TypeAdapter(int),
    "offset": TypeAdapter(int),
    "limit": TypeAdapter(int),
    "count": TypeAdapter(int),
    "desc": TypeAdapter(bool),
}


class PaginatedResponse(BaseModel):
    """Envelope of a list endpoint response: ``{"data": PageData}``."""

    data: Optional[PageData] = None

    @classmethod
    def parse(cls, raw: Any) -> "PaginatedResponse":
        """
        Build from a raw decoded envelope without ever raising.

        Fields that fail validation are dropped one by one, so a bad
        ``total`` does not cost the page its ``items``.
        """
        if isinstance(raw, PaginatedResponse):
            return raw
        if not isinstance(raw, Mapping):
            return cls()
        return cls(data=_parse_page_data(raw.get("data")))

    @classmethod
    def from_page(cls, page: Any) -> "PaginatedResponse":
        """Wrap an already unwrapped page body (as returned by HTTPClient)."""
        return cls(data=_parse_page_data(page))


def _parse_page_data(raw: Any) -> PageData | None:
    if isinstance(raw, PageData):
        return raw
    if not isinstance(raw, Mapping):
        return None
    fields: dict[str, Any] = {}
    for name, adapter in _FIELD_ADAPTERS.items():
        if name not in raw or raw[name] is None:
            continue
        try:
            fields[name] = adapter.validate_python(raw[name])
        except ValidationError:
            logger.debug(f"Dropping malformed page field {name!r}: {raw[name]!r}")
    return PageData(**fields)


PageFetch = Callable[[PageRequestOptions], Result[Union[PaginatedResponse, Mapping[str, Any]]]]


# =============================================================================
# Helpers (total functions)
# =============================================================================


def items(response: Any) -> list[Any]:
    """Items of a page; empty for any malformed or missing-field input."""
    data = PaginatedResponse.parse(response).data
    return list(data.items) if data is not None else []


def total(response: Any) -> int:
    """Server-side total of matching items; 0 when absent."""
    data = PaginatedResponse.parse(response).data
    if data is None or data.total is None:
        return 0
    return max(data.total, 0)


extract_items = items
extract_total = total


def has_next_page(response: Any) -> bool:
    """
    True iff ``offset + limit < total``.

    Any missing field, a non-positive limit or a negative offset answers
    False: a malformed response ends pagination rather than looping on it.
    """
    data = PaginatedResponse.parse(response).data
    if data is None or data.offset is None or data.limit is None or data.total is None:
        return False
    if data.limit <= 0 or data.offset < 0:
        return False
    return data.offset + data.limit < data.total


def next_page_options(response: Any) -> PageRequestOptions | None:
    """
    Options for the page after ``response``, or None when it is the last.

    The sort direction is carried over so offsets stay stable for the
    lifetime of the iteration.
    """
    if not has_next_page(response):
        return None
    data = PaginatedResponse.parse(response).data
    assert data is not None and data.offset is not None and data.limit is not None
    return PageRequestOptions(offset=data.offset + data.limit, limit=data.limit, desc=data.desc)


# =============================================================================
# Engine
# =============================================================================


class PageStream:
    """
    Lazy iterator over the items of every page of a list endpoint.

    State is private to this instance: the current options, the items of
    the current page not yet handed out, and a terminal flag. A page is
    fetched only when the consumer asks for an item beyond the current
    page, so abandoning iteration never triggers another fetch.

    A failed fetch ends iteration; items yielded before it stand and the
    error is kept, unchanged, on ``error``. ``exhausted`` and ``failed`` are
    mutually exclusive and final.

    Usage:
        pages = stream(fetch_runs, PageRequestOptions(limit=100, desc=True))
        for run in pages:
            ...
        if pages.failed:
            handle(pages.error)
    """

    def __init__(
        self,
        page_fetch: PageFetch,
        initial_options: PageRequestOptions | None = None,
    ) -> None:
        self._page_fetch = page_fetch
        self._options: PageRequestOptions | None = initial_options or PageRequestOptions()
        self._buffer: deque[Any] = deque()
        self.exhausted = False
        self.error: ApifyError | None = None
        self.pages_fetched = 0
        self.items_yielded = 0
        self.total: int | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @property
    def done(self) -> bool:
        return self.exhausted or self.failed

    def __iter__(self) -> Iterator[Any]:
        return self

    def __next__(self) -> Any:
        while not self._buffer:
            if self.done or self._options is None:
                raise StopIteration
            self._fetch_next_page()
        self.items_yielded += 1
        return self._buffer.popleft()

    def _fetch_next_page(self) -> None:
        options = self._options
        assert options is not None
        logger.debug(
            f"Fetching page {self.pages_fetched + 1} "
            f"(offset={options.offset}, limit={options.limit}, desc={options.desc})"
        )
        result = self._page_fetch(options)
        self.pages_fetched += 1

        if not result.ok:
            logger.debug(f"Page fetch at offset {options.offset} failed: {result.error}")
            self.error = result.error
            self._options = None
            return

        response = PaginatedResponse.parse(result.value)
        page_items = items(response)
        self.total = total(response)
        self._buffer.extend(page_items)
        logger.debug(f"Page at offset {options.offset} returned {len(page_items)} items")

        self._options = next_page_options(response)
        if self._options is None:
            self.exhausted = True

    def result(self) -> Result[None]:
        """Terminal outcome: failure with the page error, success otherwise."""
        if self.error is not None:
            return Result.failure(self.error)
        return Result.success(None)


def stream(
    page_fetch: PageFetch,
    initial_options: PageRequestOptions | None = None,
) -> PageStream:
    """
    Lazily iterate the items of all pages.

    Calling again with the same arguments starts over from the first page.

    Args:
        page_fetch: ``(PageRequestOptions) -> Result[PaginatedResponse]``
        initial_options: Starting offset/limit/desc

    Returns:
        PageStream yielding individual items in server order
    """
    return PageStream(page_fetch, initial_options)


def collect_all(
    page_fetch: PageFetch,
    initial_options: PageRequestOptions | None = None,
) -> Result[list[Any]]:
    """
    Fetch every page and return all items in one list.

    This holds the full result set in memory and defeats the laziness of
    ``stream``; prefer ``stream`` for large listings.

    Returns:
        Result with all items, or the first page-fetch error
    """
    pages = stream(page_fetch, initial_options)
    collected = list(pages)
    if pages.failed:
        return Result.failure(pages.error)  # type: ignore[arg-type]
    return Result.success(collected)
