"""Actor build clients."""

from __future__ import annotations

from typing import Any

from apify_rest.resources.base import ResourceClient, ResourceCollectionClient
from apify_rest.resources.log import Log
from apify_rest.result import Result


class Build(ResourceClient):
    resource_path = "actor-builds"

    def abort(self) -> Result[Any]:
        return self._post(self.url("abort"))

    def wait_for_finish(
        self,
        timeout_secs: float = 60.0,
        poll_interval_secs: float = 1.0,
    ) -> Result[Any]:
        """Poll the build until it reaches a terminal status."""
        return self._wait_for_terminal_status(timeout_secs, poll_interval_secs)

    def log(self) -> Log:
        return self._child(Log, "log")


class BuildCollection(ResourceCollectionClient):
    resource_path = "actor-builds"
    nested_path = "builds"
