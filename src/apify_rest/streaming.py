"""
Chunked stream reader.

Turns a streamed httpx response into a lazy, finite, non-restartable
iterator of byte chunks. Failures never escape as exceptions: iteration
simply ends and the classified error is left on ``ChunkStream.error``.
"""

from __future__ import annotations

import logging
from typing import Callable, Generator, Iterator

import httpx

from apify_rest.errors import (
    ApifyError,
    ErrorKind,
    classify_response,
    classify_transport_error,
    response_body,
)

logger = logging.getLogger(__name__)


def _error_body(response: httpx.Response) -> object:
    try:
        response.read()
    except (httpx.HTTPError, httpx.StreamError):
        return None
    return response_body(response)


class ChunkStream:
    """
    Lazy iterator over the byte chunks of one streamed HTTP response.

    The request is sent on the first pull. Each later pull reads the next
    chunk from the socket, so nothing beyond the chunk being handed to the
    consumer is buffered. The per-chunk wait is bounded by the read timeout
    of the underlying request.

    The read loop runs in a generator whose ``finally`` closes the response,
    so the connection goes back to the pool on completion, on failure, on
    ``close()`` and when an abandoned stream is garbage-collected.

    Terminal states:
    - completed: the body was fully read (``error`` is None)
    - failed: ``error`` holds the classified ApifyError
    - closed: the consumer called ``close()`` before the end

    Usage:
        with client.open_stream("datasets/abc/items").unwrap() as stream:
            for chunk in stream:
                sink.write(chunk)
        if stream.error:
            ...
    """

    def __init__(self, send: Callable[[], httpx.Response], url: str = "") -> None:
        """
        Args:
            send: Callable issuing the request with ``stream=True``
            url: Target URL, used in log messages only
        """
        self._send = send
        self.url = url
        self._chunks: Generator[bytes, None, None] | None = None
        self._done = False
        self.chunks_delivered = 0
        self.error: ApifyError | None = None

    @property
    def done(self) -> bool:
        return self._done

    @property
    def failed(self) -> bool:
        return self.error is not None

    def __iter__(self) -> "ChunkStream":
        return self

    def __next__(self) -> bytes:
        if self._done:
            raise StopIteration
        if self._chunks is None:
            self._chunks = self._read()
        return next(self._chunks)

    def _read(self) -> Generator[bytes, None, None]:
        try:
            response = self._send()
        except httpx.HTTPError as e:
            self._fail(classify_transport_error(e))
            return

        try:
            if not response.is_success:
                self._fail(classify_response(response.status_code, _error_body(response)))
                return
            for chunk in response.iter_bytes():
                self.chunks_delivered += 1
                yield chunk
            logger.debug(f"Stream {self.url} completed after {self.chunks_delivered} chunks")
        except httpx.TimeoutException as e:
            self._fail(
                ApifyError(
                    ErrorKind.TIMEOUT_ERROR,
                    "Stream timeout",
                    {"cause_type": type(e).__name__, "chunks_delivered": self.chunks_delivered},
                )
            )
        except (httpx.HTTPError, httpx.StreamError) as e:
            if self.chunks_delivered:
                error = ApifyError(
                    ErrorKind.STREAM_ERROR,
                    str(e) or type(e).__name__,
                    {"cause_type": type(e).__name__, "chunks_delivered": self.chunks_delivered},
                )
            else:
                error = classify_transport_error(e)
            self._fail(error)
        finally:
            self._done = True
            response.close()

    def _fail(self, error: ApifyError) -> None:
        logger.debug(f"Stream {self.url} failed: {error}")
        self.error = error
        self._done = True

    def close(self) -> None:
        """Release the connection. Safe to call more than once."""
        self._done = True
        if self._chunks is not None:
            self._chunks.close()

    def __enter__(self) -> "ChunkStream":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def read_all(self) -> bytes:
        """Consume the rest of the stream into memory."""
        return b"".join(self)

    def iter_lines(self) -> Iterator[str]:
        """
        Yield decoded text lines, joining lines split across chunk borders.

        Line terminators are stripped. A trailing line without a newline is
        yielded when the stream ends.
        """
        pending = b""
        for chunk in self:
            pending += chunk
            *lines, pending = pending.split(b"\n")
            for line in lines:
                yield line.rstrip(b"\r").decode("utf-8", errors="replace")
        if pending:
            yield pending.rstrip(b"\r").decode("utf-8", errors="replace")
