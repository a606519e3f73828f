"""Actor run clients."""

from __future__ import annotations

from typing import Any, Mapping

from apify_rest.errors import ApifyError, ErrorKind
from apify_rest.resources.base import ResourceClient, ResourceCollectionClient
from apify_rest.resources.dataset import Dataset
from apify_rest.resources.key_value_store import KeyValueStore
from apify_rest.resources.log import Log
from apify_rest.resources.request_queue import RequestQueue
from apify_rest.result import Result


def started_run_id(run_data: Any) -> Result[str]:
    """Id of a just-started run, or ``unknown_error`` if the response lacks one."""
    run_id = run_data.get("id") if isinstance(run_data, Mapping) else None
    if isinstance(run_id, str) and run_id:
        return Result.success(run_id)
    return Result.failure(
        ApifyError(
            ErrorKind.UNKNOWN_ERROR,
            "Start response did not contain a run id",
            {"body_type": type(run_data).__name__},
        )
    )


class Run(ResourceClient):
    """Client for a specific actor run."""

    resource_path = "actor-runs"

    def abort(self, gracefully: bool | None = None) -> Result[Any]:
        """Abort the run; returns the updated run object."""
        return self._post(self.url("abort"), None, params={"gracefully": gracefully})

    def metamorph(
        self,
        target_actor_id: str,
        run_input: Any = None,
        *,
        build: str | None = None,
    ) -> Result[Any]:
        """Transform the run into a run of another actor."""
        params = {"targetActorId": target_actor_id, "build": build}
        return self._post(self.url("metamorph"), run_input, params=params)

    def resurrect(self) -> Result[Any]:
        """Resurrect a finished run."""
        return self._post(self.url("resurrect"))

    def wait_for_finish(
        self,
        timeout_secs: float = 60.0,
        poll_interval_secs: float = 1.0,
    ) -> Result[Any]:
        """
        Poll the run until it is SUCCEEDED, FAILED, ABORTED or TIMED-OUT.

        Returns:
            Result with the final run object, or a timeout_error failure
        """
        return self._wait_for_terminal_status(timeout_secs, poll_interval_secs)

    def dataset(self) -> Dataset:
        """Client for the run's default dataset."""
        return self._child(Dataset, "dataset")

    def key_value_store(self) -> KeyValueStore:
        """Client for the run's default key-value store."""
        return self._child(KeyValueStore, "key-value-store")

    def request_queue(self) -> RequestQueue:
        """Client for the run's default request queue."""
        return self._child(RequestQueue, "request-queue")

    def log(self) -> Log:
        return self._child(Log, "log")


class RunCollection(ResourceCollectionClient):
    """Runs of the user, or of one actor/task. Filter with ``status=...``."""

    resource_path = "actor-runs"
    nested_path = "runs"
