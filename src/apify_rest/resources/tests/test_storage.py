"""Tests for key-value store, request queue and other small clients."""

from __future__ import annotations

import json

import httpx

from apify_rest.errors import ErrorKind
from apify_rest.resources import (
    KeyValueStore,
    Log,
    RequestQueue,
    Schedule,
    User,
    Webhook,
    WebhookDispatchCollection,
)


class TestKeyValueStore:
    """Tests for record access and key iteration."""

    def test_get_record_json(self, http, mock_httpx, no_retry):
        mock_httpx.request.return_value = httpx.Response(200, json={"data": 1, "other": 2})

        result = KeyValueStore(http, "s1", retry=no_retry).get_record("OUTPUT")

        assert result.value == {"data": 1, "other": 2}
        assert mock_httpx.request.call_args.args == ("GET", "key-value-stores/s1/records/OUTPUT")

    def test_key_is_encoded(self, http, mock_httpx, no_retry):
        mock_httpx.request.return_value = httpx.Response(200, text="x")

        KeyValueStore(http, "s1", retry=no_retry).get_record("a/b")

        assert mock_httpx.request.call_args.args[1] == "key-value-stores/s1/records/a%2Fb"

    def test_set_record_text(self, http, mock_httpx, no_retry):
        mock_httpx.request.return_value = httpx.Response(201)

        result = KeyValueStore(http, "s1", retry=no_retry).set_record(
            "note", "hello", content_type="text/plain"
        )

        assert result.ok
        call = mock_httpx.request.call_args
        assert call.args == ("PUT", "key-value-stores/s1/records/note")
        assert call.kwargs["content"] == b"hello"

    def test_set_record_raw_bytes(self, http, mock_httpx, no_retry):
        mock_httpx.request.return_value = httpx.Response(201)

        result = KeyValueStore(http, "s1", retry=no_retry).set_record("k", b'{"a": 1}')

        assert result.ok
        assert mock_httpx.request.call_args.kwargs["content"] == b'{"a": 1}'

    def test_delete_record(self, http, mock_httpx, no_retry):
        mock_httpx.request.return_value = httpx.Response(204)

        assert KeyValueStore(http, "s1", retry=no_retry).delete_record("k").ok

    def test_iterate_keys(self, http, mock_httpx, no_retry):
        mock_httpx.request.side_effect = [
            httpx.Response(
                200,
                json={
                    "data": {
                        "items": [{"key": "a"}, {"key": "b"}],
                        "isTruncated": True,
                        "nextExclusiveStartKey": "b",
                    }
                },
            ),
            httpx.Response(
                200,
                json={"data": {"items": [{"key": "c"}], "isTruncated": False}},
            ),
        ]

        keys = KeyValueStore(http, "s1", retry=no_retry).iterate_keys(limit=2)

        assert [entry["key"] for entry in keys] == ["a", "b", "c"]
        assert keys.exhausted
        assert keys.pages_fetched == 2
        second_params = mock_httpx.request.call_args_list[1].kwargs["params"]
        assert second_params == {"limit": 2, "exclusiveStartKey": "b"}

    def test_iterate_keys_error(self, http, mock_httpx, no_retry):
        mock_httpx.request.return_value = httpx.Response(404)

        keys = KeyValueStore(http, "s1", retry=no_retry).iterate_keys()

        assert list(keys) == []
        assert keys.error.kind == ErrorKind.NOT_FOUND_ERROR
        assert keys.result().error == keys.error

    def test_iterate_keys_error_after_first_page(self, http, mock_httpx, no_retry):
        mock_httpx.request.side_effect = [
            httpx.Response(
                200,
                json={
                    "data": {
                        "items": [{"key": "a"}],
                        "isTruncated": True,
                        "nextExclusiveStartKey": "a",
                    }
                },
            ),
            httpx.Response(500),
        ]

        keys = KeyValueStore(http, "s1", retry=no_retry).iterate_keys(limit=1)

        assert [entry["key"] for entry in keys] == ["a"]
        assert keys.error.kind == ErrorKind.SERVER_ERROR
        assert not keys.exhausted

    def test_iterate_keys_is_lazy(self, http, mock_httpx, no_retry):
        keys = KeyValueStore(http, "s1", retry=no_retry).iterate_keys()

        mock_httpx.request.assert_not_called()
        assert not keys.done


class TestRequestQueue:
    def test_add_request(self, http, mock_httpx):
        mock_httpx.request.return_value = httpx.Response(
            201, json={"data": {"requestId": "q1", "wasAlreadyPresent": False}}
        )

        result = RequestQueue(http, "rq1").add_request(
            {"url": "https://x.io", "uniqueKey": "x"}, forefront=True
        )

        assert result.value["requestId"] == "q1"
        call = mock_httpx.request.call_args
        assert call.args == ("POST", "request-queues/rq1/requests")
        assert call.kwargs["params"] == {"forefront": 1}

    def test_get_head(self, http, mock_httpx, no_retry):
        mock_httpx.request.return_value = httpx.Response(200, json={"data": {"items": []}})

        RequestQueue(http, "rq1", retry=no_retry).get_head(limit=5)

        call = mock_httpx.request.call_args
        assert call.args == ("GET", "request-queues/rq1/head")
        assert call.kwargs["params"] == {"limit": 5}

    def test_batch_add(self, http, mock_httpx):
        mock_httpx.request.return_value = httpx.Response(201, json={"data": {}})

        RequestQueue(http, "rq1").batch_add_requests([{"url": "https://a.io"}])

        call = mock_httpx.request.call_args
        assert call.args == ("POST", "request-queues/rq1/requests/batch")
        assert json.loads(call.kwargs["content"]) == [{"url": "https://a.io"}]

    def test_update_and_delete_request(self, http, mock_httpx, no_retry):
        mock_httpx.request.return_value = httpx.Response(200, json={"data": {}})
        queue = RequestQueue(http, "rq1", retry=no_retry)

        queue.update_request("q1", {"id": "q1", "url": "https://x.io"})
        assert mock_httpx.request.call_args.args == ("PUT", "request-queues/rq1/requests/q1")

        queue.delete_request("q1")
        assert mock_httpx.request.call_args.args == ("DELETE", "request-queues/rq1/requests/q1")


class TestLog:
    def test_stream(self, http, mock_httpx):
        mock_httpx.send.return_value = httpx.Response(200, content=iter([b"line 1\nline", b" 2\n"]))

        stream = Log(http, "r1").stream().value

        assert list(stream.iter_lines()) == ["line 1", "line 2"]
        assert mock_httpx.build_request.call_args.kwargs["params"] == {"stream": 1}
        assert mock_httpx.build_request.call_args.args == ("GET", "logs/r1")


class TestMisc:
    def test_webhook_test_and_dispatches(self, http, mock_httpx):
        mock_httpx.request.return_value = httpx.Response(200, json={"data": {"id": "d1"}})
        webhook = Webhook(http, "w1")

        webhook.test()

        assert mock_httpx.request.call_args.args == ("POST", "webhooks/w1/test")
        dispatches = webhook.dispatches()
        assert isinstance(dispatches, WebhookDispatchCollection)
        assert dispatches.url() == "webhooks/w1/dispatches"

    def test_schedule_log(self, http, mock_httpx, no_retry):
        mock_httpx.request.return_value = httpx.Response(200, json={"data": []})

        assert Schedule(http, "s1", retry=no_retry).get_log().value == []
        assert mock_httpx.request.call_args.args == ("GET", "schedules/s1/log")

    def test_user_usage(self, http, mock_httpx, no_retry):
        mock_httpx.request.return_value = httpx.Response(200, json={"data": {"usageCycle": {}}})

        User(http, "me", retry=no_retry).monthly_usage("2024-05-01")

        call = mock_httpx.request.call_args
        assert call.args == ("GET", "users/me/usage/monthly")
        assert call.kwargs["params"] == {"date": "2024-05-01"}
