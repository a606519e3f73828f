"""Apify Store listing."""

from __future__ import annotations

from apify_rest.resources.base import ResourceCollectionClient


class StoreCollection(ResourceCollectionClient):
    """
    Public actors in the Apify Store.

    Extra list filters: ``search``, ``category``, ``username``, ``pricingModel``,
    ``sortBy``.
    """

    resource_path = "store"
