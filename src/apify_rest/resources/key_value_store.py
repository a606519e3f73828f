"""Key-value store clients."""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Callable, Iterator, Mapping
from urllib.parse import quote

from apify_rest.errors import ApifyError
from apify_rest.http import JSON_CONTENT_TYPE
from apify_rest.resources.base import ResourceClient, ResourceCollectionClient
from apify_rest.result import Result

logger = logging.getLogger(__name__)


class KeyStream:
    """
    Lazy iterator over every key entry of a store.

    Keys are paged by ``exclusiveStartKey`` rather than offset. Otherwise
    this behaves like ``PageStream``: entries are yielded one by one, the
    next page is fetched only when the current one is used up, and a failed
    fetch ends iteration with the error kept on ``error``.
    """

    def __init__(self, page_fetch: Callable[[str | None], Result[Any]]) -> None:
        self._page_fetch = page_fetch
        self._buffer: deque[Any] = deque()
        self._start_key: str | None = None
        self.exhausted = False
        self.error: ApifyError | None = None
        self.pages_fetched = 0

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
            if self.done:
                raise StopIteration
            self._fetch_next_page()
        return self._buffer.popleft()

    def _fetch_next_page(self) -> None:
        result = self._page_fetch(self._start_key)
        self.pages_fetched += 1
        if not result.ok:
            logger.debug(f"Key page after {self._start_key!r} failed: {result.error}")
            self.error = result.error
            return

        body = result.value if isinstance(result.value, Mapping) else {}
        self._buffer.extend(body.get("items") or [])
        self._start_key = body.get("nextExclusiveStartKey")
        if not body.get("isTruncated") or not self._start_key:
            self.exhausted = True

    def result(self) -> Result[None]:
        """Terminal outcome: failure with the page error, success otherwise."""
        if self.error is not None:
            return Result.failure(self.error)
        return Result.success(None)


class KeyValueStore(ResourceClient):
    """Client for a specific key-value store."""

    resource_path = "key-value-stores"

    def _record_url(self, key: str) -> str:
        return self.url(f"records/{quote(key, safe='')}")

    def get_record(self, key: str) -> Result[Any]:
        """Get a record value (decoded JSON, or text for other content types)."""
        return self._get(self._record_url(key))

    def set_record(
        self, key: str, value: Any, content_type: str = JSON_CONTENT_TYPE
    ) -> Result[None]:
        return self._put(self._record_url(key), value, content_type=content_type)

    def delete_record(self, key: str) -> Result[None]:
        return self._delete(self._record_url(key))

    def list_keys(
        self,
        limit: int | None = None,
        exclusive_start_key: str | None = None,
    ) -> Result[Any]:
        """One page of keys with ``isTruncated`` and ``nextExclusiveStartKey``."""
        params = {"limit": limit, "exclusiveStartKey": exclusive_start_key}
        return self._get(self.url("keys"), params=params)

    def iterate_keys(self, limit: int | None = None) -> KeyStream:
        """Lazily iterate every key entry; ``limit`` is the page size."""
        return KeyStream(lambda start_key: self.list_keys(limit, start_key))


class KeyValueStoreCollection(ResourceCollectionClient):
    resource_path = "key-value-stores"
