"""Schedule clients."""

from __future__ import annotations

from typing import Any

from apify_rest.resources.base import ResourceClient, ResourceCollectionClient
from apify_rest.result import Result


class Schedule(ResourceClient):
    resource_path = "schedules"

    def get_log(self) -> Result[Any]:
        """Execution history of the schedule."""
        return self._get(self.url("log"))


class ScheduleCollection(ResourceCollectionClient):
    resource_path = "schedules"
