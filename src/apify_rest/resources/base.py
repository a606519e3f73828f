"""
Base classes for resource clients.

A ``ResourceClient`` addresses one resource (``datasets/<id>``); a
``ResourceCollectionClient`` addresses a listing (``datasets``), optionally
nested under a parent (``acts/<id>/runs``). Both build paths relative to
the versioned API URL and delegate to the shared ``HTTPClient``. Idempotent
verbs go through the retry layer; POST never does.
"""

from __future__ import annotations

import time
from typing import Any, Callable, ClassVar, Mapping
from urllib.parse import quote

from apify_rest import pagination
from apify_rest.errors import ApifyError, ErrorKind
from apify_rest.http import JSON_CONTENT_TYPE, HTTPClient
from apify_rest.pagination import PageRequestOptions, PageStream, PaginatedResponse
from apify_rest.result import Result
from apify_rest.retry import RetryConfig, retry_result

TERMINAL_STATUSES = frozenset({"SUCCEEDED", "FAILED", "ABORTED", "TIMED-OUT"})


class _BaseClient:
    def __init__(self, http: HTTPClient, retry: RetryConfig | None = None) -> None:
        self.http = http
        self.retry = retry or RetryConfig.from_client_config(http.config)

    def _get(self, path: str, params: Mapping[str, Any] | None = None) -> Result[Any]:
        return retry_result(self.http.get, self.retry, path, params=params)

    def _put(
        self,
        path: str,
        body: Any,
        params: Mapping[str, Any] | None = None,
        content_type: str = JSON_CONTENT_TYPE,
    ) -> Result[Any]:
        return retry_result(
            self.http.put, self.retry, path, body, params=params, content_type=content_type
        )

    def _delete(self, path: str, params: Mapping[str, Any] | None = None) -> Result[Any]:
        return retry_result(self.http.delete, self.retry, path, params=params)

    def _post(
        self,
        path: str,
        body: Any = None,
        params: Mapping[str, Any] | None = None,
        content_type: str = JSON_CONTENT_TYPE,
    ) -> Result[Any]:
        return self.http.post(path, body, params=params, content_type=content_type)


class ResourceClient(_BaseClient):
    """
    Client for a single resource.

    Subclasses set ``resource_path``. The resource can also be addressed by
    an explicit ``path`` (e.g. ``actor-runs/<id>/dataset`` for a run's
    default dataset).
    """

    resource_path: ClassVar[str] = ""

    def __init__(
        self,
        http: HTTPClient,
        resource_id: str | None = None,
        *,
        path: str | None = None,
        retry: RetryConfig | None = None,
    ) -> None:
        super().__init__(http, retry)
        if resource_id is None and path is None:
            raise ValueError(f"{type(self).__name__} needs a resource_id or a path")
        self.resource_id = resource_id
        self._path = path

    @classmethod
    def safe_id(cls, resource_id: str) -> str:
        """URL-encode an id so it stays a single path segment."""
        return quote(resource_id, safe="")

    def url(self, path: str | None = None) -> str:
        """Path of this resource, optionally extended with a sub-path."""
        base = self._path or f"{self.resource_path}/{self.safe_id(self.resource_id or '')}"
        return f"{base}/{path}" if path else base

    def public_url(self, path: str | None = None) -> str:
        """Absolute URL under the public base URL, for links handed to users."""
        return f"{self.http.config.public_api_url}/{self.url(path)}"

    def get(self) -> Result[Any]:
        """Get the resource data."""
        return self._get(self.url())

    def update(self, data: Mapping[str, Any]) -> Result[Any]:
        """Update the resource."""
        return self._put(self.url(), dict(data))

    def delete(self) -> Result[None]:
        """Delete the resource."""
        return self._delete(self.url())

    def _child(self, cls: type[ResourceClient], path: str) -> Any:
        return cls(self.http, path=self.url(path), retry=self.retry)

    def _collection(self, cls: type[ResourceCollectionClient]) -> Any:
        return cls(self.http, parent_path=self.url(), retry=self.retry)

    def _wait_for_terminal_status(
        self,
        timeout_secs: float,
        poll_interval_secs: float,
        sleep: Callable[[float], None] = time.sleep,
    ) -> Result[Any]:
        """
        Poll ``get()`` until the resource reaches a terminal status.

        Returns the final resource data, the first fetch error unchanged, or
        a ``timeout_error`` if the status is still running at the deadline.
        """
        deadline = time.monotonic() + timeout_secs
        while True:
            result = self.get()
            if not result.ok:
                return result
            data = result.value or {}
            if data.get("status") in TERMINAL_STATUSES:
                return result
            if time.monotonic() >= deadline:
                return Result.failure(
                    ApifyError(
                        ErrorKind.TIMEOUT_ERROR,
                        f"{type(self).__name__} did not finish within {timeout_secs}s",
                        {"last_status": data.get("status")},
                    )
                )
            sleep(poll_interval_secs)


class ResourceCollectionClient(_BaseClient):
    """
    Client for a paginated collection of resources.

    Subclasses set ``resource_path`` (top level, e.g. ``actor-runs``) and
    ``nested_path`` (under a parent, e.g. ``runs`` for ``acts/<id>/runs``).
    """

    resource_path: ClassVar[str] = ""
    nested_path: ClassVar[str | None] = None

    def __init__(
        self,
        http: HTTPClient,
        *,
        parent_path: str | None = None,
        retry: RetryConfig | None = None,
    ) -> None:
        super().__init__(http, retry)
        self.parent_path = parent_path

    def url(self, path: str | None = None) -> str:
        if self.parent_path:
            base = f"{self.parent_path}/{self.nested_path or self.resource_path}"
        else:
            base = self.resource_path
        return f"{base}/{path}" if path else base

    def fetch_page(
        self, options: PageRequestOptions, **filters: Any
    ) -> Result[PaginatedResponse]:
        """Fetch one page; the page fetch used by ``iterate`` and ``list_all``."""
        params = {**filters, **options.to_params()}
        return self._get(self.url(), params=params).map(PaginatedResponse.from_page)

    def list(
        self,
        offset: int = 0,
        limit: int | None = None,
        desc: bool | None = None,
        **filters: Any,
    ) -> Result[PaginatedResponse]:
        """List a single page of the collection."""
        options = PageRequestOptions(offset=offset, limit=limit, desc=desc)
        return self.fetch_page(options, **filters)

    def iterate(
        self,
        offset: int = 0,
        limit: int | None = None,
        desc: bool | None = None,
        **filters: Any,
    ) -> PageStream:
        """Lazily iterate every item across pages; ``limit`` is the page size."""
        options = PageRequestOptions(offset=offset, limit=limit, desc=desc)
        return pagination.stream(lambda opts: self.fetch_page(opts, **filters), options)

    def list_all(
        self,
        offset: int = 0,
        limit: int | None = None,
        desc: bool | None = None,
        **filters: Any,
    ) -> Result[list[Any]]:
        """Collect every item in memory. Prefer ``iterate`` for large collections."""
        options = PageRequestOptions(offset=offset, limit=limit, desc=desc)
        return pagination.collect_all(lambda opts: self.fetch_page(opts, **filters), options)

    def create(self, data: Mapping[str, Any] | None = None) -> Result[Any]:
        """Create a new resource in the collection."""
        return self._post(self.url(), dict(data or {}))

    def get_by_name(self, name: str) -> Result[Any]:
        """Find a resource by name; success with None when absent."""
        pages = self.iterate()
        for item in pages:
            if isinstance(item, Mapping) and item.get("name") == name:
                return Result.success(item)
        if pages.failed:
            return Result.failure(pages.error)  # type: ignore[arg-type]
        return Result.success(None)

    def get_or_create(self, name: str, data: Mapping[str, Any] | None = None) -> Result[Any]:
        """Return the resource named ``name``, creating it if needed."""
        found = self.get_by_name(name)
        if not found.ok or found.value is not None:
            return found
        return self.create({**(data or {}), "name": name})
