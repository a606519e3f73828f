"""
Apify API client facade.

Entry point that owns the configuration and the shared HTTP executor and
hands out resource clients.
"""

from __future__ import annotations

from typing import Any

from apify_rest.config import ClientConfig
from apify_rest.http import HTTPClient
from apify_rest.resources import (
    Actor,
    ActorCollection,
    Build,
    BuildCollection,
    Dataset,
    DatasetCollection,
    KeyValueStore,
    KeyValueStoreCollection,
    Log,
    RequestQueue,
    RequestQueueCollection,
    Run,
    RunCollection,
    Schedule,
    ScheduleCollection,
    StoreCollection,
    Task,
    TaskCollection,
    User,
    Webhook,
    WebhookCollection,
    WebhookDispatch,
    WebhookDispatchCollection,
)
from apify_rest.retry import RetryConfig


class ApifyClient:
    """
    Apify API client.

    Usage:
        with ApifyClient(token="...") as client:
            run = client.actor("apify/web-scraper").call({"startUrls": [...]}).unwrap()
            for item in client.dataset(run["defaultDatasetId"]).iterate_items():
                print(item)

    The token falls back to the APIFY_TOKEN environment variable. Every
    method returns a ``Result``; nothing raises on HTTP or network failure.
    """

    def __init__(self, token: str | None = None, **options: Any) -> None:
        """
        Args:
            token: Apify API token (reads APIFY_TOKEN when omitted)
            **options: Any ClientConfig field (base_url, timeout_secs,
                max_retries, min_delay_between_retries_ms, ...)
        """
        self.config = ClientConfig.from_env(token=token, **options)
        self.http = HTTPClient(self.config)
        self.retry = RetryConfig.from_client_config(self.config)

    @classmethod
    def from_config(cls, config: ClientConfig) -> "ApifyClient":
        client = cls.__new__(cls)
        client.config = config
        client.http = HTTPClient(config)
        client.retry = RetryConfig.from_client_config(config)
        return client

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "ApifyClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # =========================================================================
    # Single resources
    # =========================================================================

    def actor(self, actor_id: str) -> Actor:
        """Actor by id or ``username/actor-name``."""
        return Actor(self.http, actor_id, retry=self.retry)

    def build(self, build_id: str) -> Build:
        return Build(self.http, build_id, retry=self.retry)

    def dataset(self, dataset_id: str) -> Dataset:
        return Dataset(self.http, dataset_id, retry=self.retry)

    def key_value_store(self, store_id: str) -> KeyValueStore:
        return KeyValueStore(self.http, store_id, retry=self.retry)

    def request_queue(self, queue_id: str) -> RequestQueue:
        return RequestQueue(self.http, queue_id, retry=self.retry)

    def run(self, run_id: str) -> Run:
        return Run(self.http, run_id, retry=self.retry)

    def log(self, build_or_run_id: str) -> Log:
        return Log(self.http, build_or_run_id, retry=self.retry)

    def schedule(self, schedule_id: str) -> Schedule:
        return Schedule(self.http, schedule_id, retry=self.retry)

    def task(self, task_id: str) -> Task:
        """Task by id or ``username/task-name``."""
        return Task(self.http, task_id, retry=self.retry)

    def user(self, user_id: str = "me") -> User:
        return User(self.http, user_id, retry=self.retry)

    def webhook(self, webhook_id: str) -> Webhook:
        return Webhook(self.http, webhook_id, retry=self.retry)

    def webhook_dispatch(self, dispatch_id: str) -> WebhookDispatch:
        return WebhookDispatch(self.http, dispatch_id, retry=self.retry)

    # =========================================================================
    # Collections
    # =========================================================================

    def actors(self) -> ActorCollection:
        return ActorCollection(self.http, retry=self.retry)

    def builds(self) -> BuildCollection:
        return BuildCollection(self.http, retry=self.retry)

    def datasets(self) -> DatasetCollection:
        return DatasetCollection(self.http, retry=self.retry)

    def key_value_stores(self) -> KeyValueStoreCollection:
        return KeyValueStoreCollection(self.http, retry=self.retry)

    def request_queues(self) -> RequestQueueCollection:
        return RequestQueueCollection(self.http, retry=self.retry)

    def runs(self) -> RunCollection:
        return RunCollection(self.http, retry=self.retry)

    def schedules(self) -> ScheduleCollection:
        return ScheduleCollection(self.http, retry=self.retry)

    def tasks(self) -> TaskCollection:
        return TaskCollection(self.http, retry=self.retry)

    def webhooks(self) -> WebhookCollection:
        return WebhookCollection(self.http, retry=self.retry)

    def webhook_dispatches(self) -> WebhookDispatchCollection:
        return WebhookDispatchCollection(self.http, retry=self.retry)

    def store(self) -> StoreCollection:
        return StoreCollection(self.http, retry=self.retry)
