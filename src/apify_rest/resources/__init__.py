"""
Resource clients.

Thin builders that map Apify resources onto the HTTP executor and the
pagination engine.
"""

from apify_rest.resources.actor import Actor, ActorCollection, ActorVersionCollection
from apify_rest.resources.base import ResourceClient, ResourceCollectionClient
from apify_rest.resources.build import Build, BuildCollection
from apify_rest.resources.dataset import Dataset, DatasetCollection
from apify_rest.resources.key_value_store import (
    KeyStream,
    KeyValueStore,
    KeyValueStoreCollection,
)
from apify_rest.resources.log import Log
from apify_rest.resources.request_queue import RequestQueue, RequestQueueCollection
from apify_rest.resources.run import Run, RunCollection
from apify_rest.resources.schedule import Schedule, ScheduleCollection
from apify_rest.resources.store import StoreCollection
from apify_rest.resources.task import Task, TaskCollection
from apify_rest.resources.user import User
from apify_rest.resources.webhook import (
    Webhook,
    WebhookCollection,
    WebhookDispatch,
    WebhookDispatchCollection,
)

__all__ = [
    "ResourceClient",
    "ResourceCollectionClient",
    "Actor",
    "ActorCollection",
    "ActorVersionCollection",
    "Build",
    "BuildCollection",
    "Dataset",
    "DatasetCollection",
    "KeyStream",
    "KeyValueStore",
    "KeyValueStoreCollection",
    "Log",
    "RequestQueue",
    "RequestQueueCollection",
    "Run",
    "RunCollection",
    "Schedule",
    "ScheduleCollection",
    "StoreCollection",
    "Task",
    "TaskCollection",
    "User",
    "Webhook",
    "WebhookCollection",
    "WebhookDispatch",
    "WebhookDispatchCollection",
]
