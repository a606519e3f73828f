"""
Dataset clients.

The items endpoint answers with a bare JSON array and reports pagination in
``X-Apify-Pagination-*`` headers instead of the usual envelope;
``Dataset.fetch_items_page`` rebuilds a ``PaginatedResponse`` from those
headers so item iteration runs on the shared pagination engine.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any
from urllib.parse import quote

import httpx

from apify_rest import pagination
from apify_rest.errors import ApifyError, ErrorKind, response_body
from apify_rest.http import JSON_CONTENT_TYPE
from apify_rest.pagination import PageRequestOptions, PageStream, PaginatedResponse
from apify_rest.resources.base import ResourceClient, ResourceCollectionClient
from apify_rest.result import Result
from apify_rest.retry import retry_result
from apify_rest.streaming import ChunkStream

logger = logging.getLogger(__name__)

PAGINATION_HEADERS = {
    "offset": "X-Apify-Pagination-Offset",
    "limit": "X-Apify-Pagination-Limit",
    "count": "X-Apify-Pagination-Count",
    "total": "X-Apify-Pagination-Total",
    "desc": "X-Apify-Pagination-Desc",
}


def items_params(
    fields: list[str] | None = None,
    omit: list[str] | None = None,
    unwind: str | None = None,
    skip_empty: bool | None = None,
    skip_hidden: bool | None = None,
    clean: bool | None = None,
    view: str | None = None,
    simplified: bool | None = None,
) -> dict[str, Any]:
    """Query parameters for the dataset items endpoint."""
    return {
        "fields": fields,
        "omit": omit,
        "unwind": unwind,
        "skipEmpty": skip_empty,
        "skipHidden": skip_hidden,
        "clean": clean,
        "view": view,
        "simplified": simplified,
    }


def page_from_items_response(response: httpx.Response) -> PaginatedResponse:
    """Assemble a page from a bare item array and its pagination headers."""
    body = response_body(response)
    page: dict[str, Any] = {"items": body if isinstance(body, list) else []}
    for field, header in PAGINATION_HEADERS.items():
        value = response.headers.get(header)
        if value is not None:
            page[field] = value
    return PaginatedResponse.from_page(page)


class Dataset(ResourceClient):
    """Client for a specific dataset."""

    resource_path = "datasets"

    def list_items(
        self,
        offset: int = 0,
        limit: int | None = None,
        desc: bool | None = None,
        **item_options: Any,
    ) -> Result[Any]:
        """
        Get one batch of items as decoded JSON.

        Args:
            offset: Number of items to skip
            limit: Maximum number of items
            desc: Newest items first
            **item_options: fields, omit, unwind, skip_empty, skip_hidden,
                clean, view, simplified
        """
        options = PageRequestOptions(offset=offset, limit=limit, desc=desc)
        params = {**items_params(**item_options), **options.to_params(), "format": "json"}
        return self._get(self.url("items"), params=params)

    def fetch_items_page(
        self, options: PageRequestOptions, **item_options: Any
    ) -> Result[PaginatedResponse]:
        params = {**items_params(**item_options), **options.to_params(), "format": "json"}
        return retry_result(
            self.http.send, self.retry, "GET", self.url("items"), params=params
        ).map(page_from_items_response)

    def iterate_items(
        self,
        offset: int = 0,
        page_size: int = 1000,
        desc: bool | None = None,
        **item_options: Any,
    ) -> PageStream:
        """Lazily iterate all items, ``page_size`` items per request."""
        options = PageRequestOptions(offset=offset, limit=page_size, desc=desc)
        return pagination.stream(
            lambda opts: self.fetch_items_page(opts, **item_options), options
        )

    def stream_items(self, item_format: str = "json", **item_options: Any) -> Result[ChunkStream]:
        """Stream the raw serialized items (json, jsonl, csv, xlsx, xml, html, rss)."""
        params = {**items_params(**item_options), "format": item_format}
        return self.http.open_stream(self.url("items"), params=params)

    def download_items(
        self,
        file_path: str | Path,
        item_format: str = "json",
        **item_options: Any,
    ) -> Result[int]:
        """
        Stream the items into a local file.

        Returns:
            Result with the number of bytes written; local I/O failures are
            ``file_error``, stream failures are passed through unchanged
        """
        file_path = Path(file_path)
        opened = self.stream_items(item_format, **item_options)
        if not opened.ok:
            return Result.failure(opened.error)  # type: ignore[arg-type]
        stream = opened.value
        assert stream is not None

        written = 0
        try:
            with stream, file_path.open("wb") as fh:
                for chunk in stream:
                    fh.write(chunk)
                    written += len(chunk)
        except OSError as e:
            return Result.failure(
                ApifyError(ErrorKind.FILE_ERROR, str(e), {"path": str(file_path)})
            )

        if stream.error is not None:
            return Result.failure(stream.error)
        logger.debug(f"Downloaded {written} bytes from {self.url('items')} to {file_path}")
        return Result.success(written)

    def get_item(self, item_id: str) -> Result[Any]:
        return self._get(self.url(f"items/{quote(item_id, safe='')}"))

    def push_items(self, items: Any, content_type: str = JSON_CONTENT_TYPE) -> Result[None]:
        """Append one item (a mapping) or many (a list) to the dataset."""
        return self._post(self.url("items"), items, content_type=content_type)

    def statistics(self) -> Result[Any]:
        return self._get(self.url("statistics"))


class DatasetCollection(ResourceCollectionClient):
    """Datasets of the user. Extra list filter: ``unnamed``."""

    resource_path = "datasets"
