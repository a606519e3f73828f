"""Actor task clients."""

from __future__ import annotations

from typing import Any

from apify_rest.resources.actor import run_params
from apify_rest.resources.base import ResourceClient, ResourceCollectionClient
from apify_rest.resources.run import Run, RunCollection, started_run_id
from apify_rest.resources.webhook import WebhookCollection
from apify_rest.result import Result


class Task(ResourceClient):
    """Client for a saved actor task (``user/task-name`` or an id)."""

    resource_path = "actor-tasks"

    @classmethod
    def safe_id(cls, resource_id: str) -> str:
        return super().safe_id(resource_id.replace("/", "~"))

    def start(self, task_input: Any = None, **options: Any) -> Result[Any]:
        """Start the task; ``task_input`` overrides the saved input."""
        return self._post(self.url("runs"), task_input, params=run_params(**options))

    def call(
        self,
        task_input: Any = None,
        *,
        wait_secs: float = 60.0,
        poll_interval_secs: float = 1.0,
        **options: Any,
    ) -> Result[Any]:
        """Start the task and wait for the run to finish."""
        started = self.start(task_input, **options)
        if not started.ok:
            return started
        run_id = started_run_id(started.value)
        if not run_id.ok:
            return run_id
        run = Run(self.http, run_id.unwrap(), retry=self.retry)
        return run.wait_for_finish(timeout_secs=wait_secs, poll_interval_secs=poll_interval_secs)

    def get_input(self) -> Result[Any]:
        return self._get(self.url("input"))

    def update_input(self, task_input: Any) -> Result[Any]:
        return self._put(self.url("input"), task_input)

    def last_run(self) -> Run:
        return self._child(Run, "runs/last")

    def runs(self) -> RunCollection:
        return self._collection(RunCollection)

    def webhooks(self) -> WebhookCollection:
        return self._collection(WebhookCollection)


class TaskCollection(ResourceCollectionClient):
    resource_path = "actor-tasks"
