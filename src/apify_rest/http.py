"""
HTTP request executor for the Apify API.

One method per verb, each issuing exactly one network call and returning a
``Result``. Successful bodies are unwrapped from the ``{"data": ...}``
envelope; every non-2xx status and every transport exception is routed
through the error classifier. Retries are not performed here.
"""

from __future__ import annotations

import json
import logging
import platform
import threading
from typing import Any, Mapping

import httpx

from apify_rest import __version__
from apify_rest.config import ClientConfig
from apify_rest.errors import (
    ApifyError,
    ErrorKind,
    classify_response,
    classify_transport_error,
    response_body,
)
from apify_rest.result import Result
from apify_rest.streaming import ChunkStream

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
USER_AGENT = f"apify-rest/{__version__} (Python/{platform.python_version()})"


def build_params(params: Mapping[str, Any] | None) -> dict[str, Any]:
    """
    Prepare query parameters: drop None values, render booleans as 1/0.

    The Apify API reads boolean flags such as ``desc`` or ``clean`` as
    ``1``/``0``; lists are joined with commas (``fields``, ``omit``).
    """
    prepared: dict[str, Any] = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = 1 if value else 0
        elif isinstance(value, (list, tuple)):
            value = ",".join(str(v) for v in value)
        prepared[key] = value
    return prepared


def unwrap_envelope(body: Any) -> Any:
    """Return ``X`` for a ``{"data": X}`` envelope, otherwise the body itself."""
    if isinstance(body, dict) and len(body) == 1 and "data" in body:
        return body["data"]
    return body


def encode_body(body: Any, content_type: str) -> bytes:
    """
    Encode a request body for the wire.

    Raw bytes are sent as-is whatever the content type and strings are UTF-8
    encoded. Other values are JSON-encoded, which needs a JSON content type.

    Raises:
        TypeError, ValueError: If the value cannot be encoded
    """
    if isinstance(body, (bytes, bytearray)):
        return bytes(body)
    if content_type == JSON_CONTENT_TYPE:
        return json.dumps(body).encode("utf-8")
    if isinstance(body, str):
        return body.encode("utf-8")
    raise TypeError(f"{type(body).__name__} body needs a {JSON_CONTENT_TYPE} content type")


def _unwrap_response(response: httpx.Response) -> Any:
    if response.status_code == 204:
        return None
    return unwrap_envelope(response_body(response))


class HTTPClient:
    """
    Apify API HTTP executor.

    Wraps a lazily created ``httpx.Client`` preconfigured with the base URL,
    authorization and user-agent headers. Configuration is read-only after
    construction, so one instance can serve concurrent callers.

    Usage:
        http = HTTPClient(ClientConfig(token="..."))
        result = http.get("acts", params={"limit": 10})
        if result.ok:
            print(result.value["items"])
    """

    def __init__(self, config: ClientConfig | None = None) -> None:
        self.config = config or ClientConfig()
        self._client: httpx.Client | None = None
        self._lock = threading.Lock()

    @property
    def user_agent(self) -> str:
        if self.config.user_agent_suffix:
            return f"{USER_AGENT} {self.config.user_agent_suffix}"
        return USER_AGENT

    def default_headers(self) -> dict[str, str]:
        headers = {
            "User-Agent": self.user_agent,
            "Accept": JSON_CONTENT_TYPE,
        }
        if self.config.token:
            headers["Authorization"] = f"Bearer {self.config.token}"
        return headers

    @property
    def client(self) -> httpx.Client:
        """Lazy-initialized httpx client, created once even under concurrent first use."""
        if self._client is None:
            with self._lock:
                if self._client is None:
                    self._client = httpx.Client(
                        base_url=self.config.api_url + "/",
                        headers=self.default_headers(),
                        timeout=self.config.timeout_secs,
                        follow_redirects=True,
                    )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        with self._lock:
            if self._client is not None:
                self._client.close()
                self._client = None

    def __enter__(self) -> "HTTPClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # =========================================================================
    # Verbs
    # =========================================================================

    def get(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> Result[Any]:
        return self.request("GET", path, params=params, headers=headers, timeout=timeout)

    def post(
        self,
        path: str,
        body: Any = None,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        content_type: str = JSON_CONTENT_TYPE,
        timeout: float | None = None,
    ) -> Result[Any]:
        return self.request(
            "POST",
            path,
            body,
            params=params,
            headers=headers,
            content_type=content_type,
            timeout=timeout,
        )

    def put(
        self,
        path: str,
        body: Any = None,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        content_type: str = JSON_CONTENT_TYPE,
        timeout: float | None = None,
    ) -> Result[Any]:
        return self.request(
            "PUT",
            path,
            body,
            params=params,
            headers=headers,
            content_type=content_type,
            timeout=timeout,
        )

    def patch(
        self,
        path: str,
        body: Any = None,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        content_type: str = JSON_CONTENT_TYPE,
        timeout: float | None = None,
    ) -> Result[Any]:
        return self.request(
            "PATCH",
            path,
            body,
            params=params,
            headers=headers,
            content_type=content_type,
            timeout=timeout,
        )

    def delete(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> Result[Any]:
        return self.request("DELETE", path, params=params, headers=headers, timeout=timeout)

    # =========================================================================
    # Core request
    # =========================================================================

    def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        content_type: str = JSON_CONTENT_TYPE,
        timeout: float | None = None,
    ) -> Result[Any]:
        """
        Issue a single HTTP request.

        Args:
            method: HTTP verb
            path: Path relative to the versioned API URL (absolute URLs pass through)
            body: JSON-serializable value, str, or raw bytes (sent unchanged)
            params: Query parameters (None values dropped)
            headers: Extra headers for this call
            content_type: Body content type; JSON bodies are encoded here
            timeout: Per-call timeout override in seconds

        Returns:
            Result with the unwrapped body, or a classified ApifyError
        """
        return self.send(
            method,
            path,
            body,
            params=params,
            headers=headers,
            content_type=content_type,
            timeout=timeout,
        ).map(_unwrap_response)

    def send(
        self,
        method: str,
        path: str,
        body: Any = None,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        content_type: str = JSON_CONTENT_TYPE,
        timeout: float | None = None,
    ) -> Result[httpx.Response]:
        """
        Like ``request`` but keeps the successful ``httpx.Response``.

        Used by endpoints that carry metadata in headers (dataset items
        report pagination in ``X-Apify-Pagination-*``).
        """
        request_headers = dict(headers or {})
        kwargs: dict[str, Any] = {
            "params": build_params(params),
            "headers": request_headers,
        }
        if timeout is not None:
            kwargs["timeout"] = timeout

        if body is not None:
            try:
                kwargs["content"] = encode_body(body, content_type)
            except (TypeError, ValueError) as e:
                logger.debug(f"{method} {path} body could not be encoded: {e}")
                return Result.failure(
                    ApifyError(
                        ErrorKind.VALIDATION_ERROR,
                        f"Request body could not be encoded as {content_type}: {e}",
                        {"cause_type": type(e).__name__},
                    )
                )
            request_headers["Content-Type"] = content_type

        try:
            response = self.client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.debug(f"{method} {path} failed before a response: {e}")
            return Result.failure(classify_transport_error(e))

        logger.debug(f"{method} {path} -> {response.status_code}")
        if 200 <= response.status_code < 300:
            return Result.success(response)
        return Result.failure(classify_response(response.status_code, response_body(response)))

    # =========================================================================
    # Streaming
    # =========================================================================

    def open_stream(
        self,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Result[ChunkStream]:
        """
        Prepare a streamed GET request.

        Nothing is sent until the first chunk is pulled. Connection failures
        and non-2xx statuses end the returned stream immediately and are
        reported on ``ChunkStream.error``.
        """
        timeout = httpx.Timeout(
            self.config.timeout_secs,
            read=self.config.stream_chunk_timeout_secs,
        )
        prepared_params = build_params(params)
        request_headers = dict(headers or {})

        def send() -> httpx.Response:
            request = self.client.build_request(
                "GET",
                path,
                params=prepared_params,
                headers=request_headers,
                timeout=timeout,
            )
            return self.client.send(request, stream=True)

        return Result.success(ChunkStream(send, url=path))
