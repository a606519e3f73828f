"""Actor clients: a single actor, the actor collection and actor versions."""

from __future__ import annotations

import base64
import json
from typing import Any, Mapping

from apify_rest.http import JSON_CONTENT_TYPE, build_params
from apify_rest.resources.base import ResourceClient, ResourceCollectionClient
from apify_rest.resources.build import BuildCollection
from apify_rest.resources.run import Run, RunCollection, started_run_id
from apify_rest.resources.webhook import WebhookCollection
from apify_rest.result import Result


def encode_webhooks(webhooks: list[Mapping[str, Any]] | None) -> str | None:
    """Ad-hoc webhooks travel as base64-encoded JSON in the query string."""
    if not webhooks:
        return None
    return base64.b64encode(json.dumps(list(webhooks)).encode("utf-8")).decode("ascii")


def run_params(
    build: str | None = None,
    memory: int | None = None,
    timeout: int | None = None,
    wait_for_finish: int | None = None,
    max_items: int | None = None,
    max_total_charge_usd: float | None = None,
    webhooks: list[Mapping[str, Any]] | None = None,
) -> dict[str, Any]:
    """Query parameters shared by actor and task runs."""
    return build_params(
        {
            "build": build,
            "memory": memory,
            "timeout": timeout,
            "waitForFinish": wait_for_finish,
            "maxItems": max_items,
            "maxTotalChargeUsd": max_total_charge_usd,
            "webhooks": encode_webhooks(webhooks),
        }
    )


class Actor(ResourceClient):
    """
    Client for a specific actor.

    Actor names use ``~`` instead of ``/`` in URLs
    (``apify/web-scraper`` -> ``acts/apify~web-scraper``).
    """

    resource_path = "acts"

    @classmethod
    def safe_id(cls, resource_id: str) -> str:
        return super().safe_id(resource_id.replace("/", "~"))

    def start(
        self,
        run_input: Any = None,
        *,
        content_type: str = JSON_CONTENT_TYPE,
        **options: Any,
    ) -> Result[Any]:
        """
        Start the actor and return the run object immediately.

        Args:
            run_input: Input passed to the actor
            content_type: Content type of the input
            **options: build, memory, timeout, wait_for_finish, max_items,
                max_total_charge_usd, webhooks

        Returns:
            Result with the run object
        """
        return self._post(
            self.url("runs"),
            run_input,
            params=run_params(**options),
            content_type=content_type,
        )

    def call(
        self,
        run_input: Any = None,
        *,
        wait_secs: float = 60.0,
        poll_interval_secs: float = 1.0,
        **options: Any,
    ) -> Result[Any]:
        """Start the actor and wait for the run to reach a terminal status."""
        started = self.start(run_input, **options)
        if not started.ok:
            return started
        run_id = started_run_id(started.value)
        if not run_id.ok:
            return run_id
        run = Run(self.http, run_id.unwrap(), retry=self.retry)
        return run.wait_for_finish(timeout_secs=wait_secs, poll_interval_secs=poll_interval_secs)

    def build(
        self,
        version_number: str | None = None,
        *,
        beta_packages: bool | None = None,
        tag: str | None = None,
        use_cache: bool | None = None,
        wait_for_finish: int | None = None,
    ) -> Result[Any]:
        """Build the actor; returns the build object."""
        params = {
            "version": version_number,
            "betaPackages": beta_packages,
            "tag": tag,
            "useCache": use_cache,
            "waitForFinish": wait_for_finish,
        }
        return self._post(self.url("builds"), None, params=params)

    def last_run(self) -> Run:
        """Client for the actor's most recent run."""
        return self._child(Run, "runs/last")

    def runs(self) -> RunCollection:
        return self._collection(RunCollection)

    def builds(self) -> BuildCollection:
        return self._collection(BuildCollection)

    def versions(self) -> ActorVersionCollection:
        return self._collection(ActorVersionCollection)

    def webhooks(self) -> WebhookCollection:
        return self._collection(WebhookCollection)


class ActorCollection(ResourceCollectionClient):
    """
    Actors of the current user or the whole platform.

    Extra list filters: ``my``, ``category``, ``username``, ``search``.
    """

    resource_path = "acts"


class ActorVersionCollection(ResourceCollectionClient):
    """Versions of one actor (``acts/<id>/versions``)."""

    resource_path = "versions"
