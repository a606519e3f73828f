"""Run and build log client."""

from __future__ import annotations

from apify_rest.resources.base import ResourceClient
from apify_rest.result import Result
from apify_rest.streaming import ChunkStream


class Log(ResourceClient):
    """
    Log of a run or build (``logs/<id>``).

    ``get()`` returns the whole log as text; ``stream()`` follows it chunk
    by chunk while the run is still writing.
    """

    resource_path = "logs"

    def stream(self, raw: bool = False) -> Result[ChunkStream]:
        return self.http.open_stream(self.url(), params={"stream": True, "raw": raw or None})
