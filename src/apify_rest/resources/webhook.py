"""Webhook and webhook dispatch clients."""

from __future__ import annotations

from typing import Any

from apify_rest.resources.base import ResourceClient, ResourceCollectionClient
from apify_rest.result import Result


class Webhook(ResourceClient):
    """Client for a specific webhook."""

    resource_path = "webhooks"

    def test(self) -> Result[Any]:
        """Send a test dispatch; returns the dispatch object."""
        return self._post(self.url("test"))

    def dispatches(self) -> WebhookDispatchCollection:
        return self._collection(WebhookDispatchCollection)


class WebhookCollection(ResourceCollectionClient):
    resource_path = "webhooks"


class WebhookDispatch(ResourceClient):
    resource_path = "webhook-dispatches"


class WebhookDispatchCollection(ResourceCollectionClient):
    resource_path = "webhook-dispatches"
    nested_path = "dispatches"
