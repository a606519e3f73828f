"""User client."""

from __future__ import annotations

from typing import Any

from apify_rest.resources.base import ResourceClient
from apify_rest.result import Result


class User(ResourceClient):
    """
    Client for a user account. ``me`` addresses the token's owner.

    Public profile data is available for any user; usage and limits only
    for ``me``.
    """

    resource_path = "users"

    def monthly_usage(self, date: str | None = None) -> Result[Any]:
        """Usage of the billing cycle containing ``date`` (YYYY-MM-DD)."""
        return self._get(self.url("usage/monthly"), params={"date": date})

    def limits(self) -> Result[Any]:
        return self._get(self.url("limits"))
