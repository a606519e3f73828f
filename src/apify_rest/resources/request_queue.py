"""Request queue clients."""

from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import quote

from apify_rest.resources.base import ResourceClient, ResourceCollectionClient
from apify_rest.result import Result


class RequestQueue(ResourceClient):
    """Client for a specific request queue."""

    resource_path = "request-queues"

    def _request_url(self, request_id: str) -> str:
        return self.url(f"requests/{quote(request_id, safe='')}")

    def add_request(self, request: Mapping[str, Any], forefront: bool | None = None) -> Result[Any]:
        return self._post(self.url("requests"), dict(request), params={"forefront": forefront})

    def get_request(self, request_id: str) -> Result[Any]:
        return self._get(self._request_url(request_id))

    def update_request(
        self, request_id: str, request: Mapping[str, Any], forefront: bool | None = None
    ) -> Result[Any]:
        return self._put(
            self._request_url(request_id), dict(request), params={"forefront": forefront}
        )

    def delete_request(self, request_id: str) -> Result[None]:
        return self._delete(self._request_url(request_id))

    def get_head(self, limit: int | None = None) -> Result[Any]:
        """First ``limit`` requests at the head of the queue."""
        return self._get(self.url("head"), params={"limit": limit})

    def batch_add_requests(
        self, requests: list[Mapping[str, Any]], forefront: bool | None = None
    ) -> Result[Any]:
        return self._post(
            self.url("requests/batch"),
            [dict(r) for r in requests],
            params={"forefront": forefront},
        )

    def list_requests(
        self, limit: int | None = None, exclusive_start_id: str | None = None
    ) -> Result[Any]:
        params = {"limit": limit, "exclusiveStartId": exclusive_start_id}
        return self._get(self.url("requests"), params=params)


class RequestQueueCollection(ResourceCollectionClient):
    resource_path = "request-queues"
