"""Tests for pagination helpers and the lazy page engine."""

from __future__ import annotations

from itertools import islice

import pytest

from apify_rest import pagination
from apify_rest.errors import ApifyError, ErrorKind
from apify_rest.pagination import (
    PageRequestOptions,
    PageStream,
    PaginatedResponse,
    collect_all,
    has_next_page,
    items,
    next_page_options,
    stream,
    total,
)
from apify_rest.result import Result


def envelope(items_=None, **fields):
    data = {"items": items_ or [], **fields}
    return {"data": data}


class FakeEndpoint:
    """
    A list endpoint over an in-memory collection.

    Records every request so tests can assert how many pages were fetched
    and with which options.
    """

    def __init__(self, data, page_size=10, fail_at_offset=None, error=None):
        self.data = list(data)
        self.page_size = page_size
        self.fail_at_offset = fail_at_offset
        self.error = error or ApifyError(ErrorKind.SERVER_ERROR, "boom", {"status_code": 500})
        self.requests: list[PageRequestOptions] = []

    def __call__(self, options: PageRequestOptions) -> Result:
        self.requests.append(options)
        if self.fail_at_offset is not None and options.offset >= self.fail_at_offset:
            return Result.failure(self.error)
        limit = options.limit or self.page_size
        page = self.data[options.offset : options.offset + limit]
        return Result.success(
            PaginatedResponse.parse(
                envelope(
                    page,
                    total=len(self.data),
                    offset=options.offset,
                    limit=limit,
                    count=len(page),
                    desc=options.desc,
                )
            )
        )


# =============================================================================
# Helpers
# =============================================================================


class TestItems:
    def test_items(self):
        assert items(envelope([1, 2, 3])) == [1, 2, 3]

    @pytest.mark.parametrize(
        "raw",
        [None, {}, {"data": None}, {"data": {}}, {"data": {"items": "nope"}}, [1, 2], "x"],
    )
    def test_malformed_is_empty(self, raw):
        assert items(raw) == []

    def test_accepts_parsed_response(self):
        assert items(PaginatedResponse.parse(envelope(["a"]))) == ["a"]

    def test_extract_aliases(self):
        assert pagination.extract_items(envelope([1])) == [1]
        assert pagination.extract_total(envelope(total=4)) == 4


class TestTotal:
    def test_total(self):
        assert total(envelope(total=42)) == 42

    @pytest.mark.parametrize("raw", [None, {}, {"data": {}}, {"data": {"total": "many"}}])
    def test_missing_is_zero(self, raw):
        assert total(raw) == 0

    def test_never_negative(self):
        assert total(envelope(total=-3)) == 0

    def test_bad_total_keeps_items(self):
        raw = {"data": {"items": [1], "total": "many"}}
        assert items(raw) == [1]
        assert total(raw) == 0


class TestHasNextPage:
    def test_more_pages(self):
        assert has_next_page(envelope(total=25, offset=10, limit=10))

    def test_last_page(self):
        assert not has_next_page(envelope(total=25, offset=20, limit=10))

    def test_exact_boundary(self):
        assert not has_next_page(envelope(total=20, offset=10, limit=10))

    @pytest.mark.parametrize(
        "fields",
        [
            {"offset": 0, "limit": 10},
            {"total": 25, "limit": 10},
            {"total": 25, "offset": 0},
        ],
    )
    def test_missing_field_is_false(self, fields):
        assert not has_next_page(envelope(**fields))

    def test_zero_limit_is_false(self):
        assert not has_next_page(envelope(total=25, offset=0, limit=0))

    def test_negative_offset_is_false(self):
        assert not has_next_page(envelope(total=25, offset=-10, limit=5))

    def test_garbage_is_false(self):
        assert not has_next_page(None)
        assert not has_next_page("page")


class TestNextPageOptions:
    def test_advances_offset(self):
        options = next_page_options(envelope(total=25, offset=10, limit=10, desc=True))
        assert options == PageRequestOptions(offset=20, limit=10, desc=True)

    def test_none_on_last_page(self):
        assert next_page_options(envelope(total=25, offset=20, limit=10)) is None


class TestPageRequestOptions:
    def test_to_params(self):
        assert PageRequestOptions(offset=5, limit=10, desc=True).to_params() == {
            "offset": 5,
            "limit": 10,
            "desc": 1,
        }

    def test_defaults_omit_unset(self):
        assert PageRequestOptions().to_params() == {"offset": 0}

    def test_validation(self):
        with pytest.raises(ValueError):
            PageRequestOptions(offset=-1)
        with pytest.raises(ValueError):
            PageRequestOptions(limit=0)


class TestPaginatedResponse:
    def test_parse_full(self):
        response = PaginatedResponse.parse(
            envelope([{"id": 1}], total=1, offset=0, limit=10, count=1, desc=False)
        )
        assert response.data.items == [{"id": 1}]
        assert response.data.count == 1
        assert response.data.desc is False

    def test_header_strings_coerced(self):
        """Dataset pagination headers arrive as strings."""
        page = PaginatedResponse.from_page(
            {"items": [], "total": "100", "offset": "0", "limit": "50", "desc": "true"}
        )
        assert page.data.total == 100
        assert page.data.limit == 50
        assert page.data.desc is True

    def test_from_page_non_mapping(self):
        assert PaginatedResponse.from_page([1, 2]).data is None

    def test_items_only_page(self):
        page = PaginatedResponse.from_page({"items": []})
        assert page.data.items == []


# =============================================================================
# Engine
# =============================================================================


class TestStream:
    """Tests for the lazy page stream."""

    def test_collects_all_items_in_order(self):
        endpoint = FakeEndpoint(range(25), page_size=10)

        result = list(stream(endpoint, PageRequestOptions(limit=10)))

        assert result == list(range(25))
        assert [r.offset for r in endpoint.requests] == [0, 10, 20]

    def test_nothing_fetched_before_first_pull(self):
        endpoint = FakeEndpoint(range(25))

        pages = stream(endpoint, PageRequestOptions(limit=10))

        assert endpoint.requests == []
        assert isinstance(pages, PageStream)

    def test_early_stop_fetches_one_page(self):
        endpoint = FakeEndpoint(range(25))

        taken = list(islice(stream(endpoint, PageRequestOptions(limit=10)), 3))

        assert taken == [0, 1, 2]
        assert len(endpoint.requests) == 1

    def test_next_page_fetched_only_when_needed(self):
        endpoint = FakeEndpoint(range(25))
        pages = stream(endpoint, PageRequestOptions(limit=10))

        list(islice(pages, 10))
        assert len(endpoint.requests) == 1

        next(pages)
        assert len(endpoint.requests) == 2

    def test_error_ends_iteration_and_keeps_error(self):
        endpoint = FakeEndpoint(range(25), fail_at_offset=10)
        pages = stream(endpoint, PageRequestOptions(limit=10))

        result = list(pages)

        assert result == list(range(10))
        assert pages.failed
        assert len(endpoint.requests) == 2
        assert not pages.exhausted
        assert pages.error is endpoint.error
        assert pages.result().error is endpoint.error

    def test_no_fetch_after_error(self):
        endpoint = FakeEndpoint(range(25), fail_at_offset=0)
        pages = stream(endpoint, PageRequestOptions(limit=10))

        assert list(pages) == []
        assert list(pages) == []
        assert len(endpoint.requests) == 1

    def test_empty_collection(self):
        endpoint = FakeEndpoint([])
        pages = stream(endpoint, PageRequestOptions(limit=10))

        assert list(pages) == []
        assert pages.exhausted
        assert pages.result().ok
        assert len(endpoint.requests) == 1

    def test_starting_offset_respected(self):
        endpoint = FakeEndpoint(range(25))

        assert list(stream(endpoint, PageRequestOptions(offset=15, limit=10))) == list(
            range(15, 25)
        )
        assert [r.offset for r in endpoint.requests] == [15]

    def test_desc_carried_across_pages(self):
        endpoint = FakeEndpoint(range(25))

        list(stream(endpoint, PageRequestOptions(limit=10, desc=True)))

        assert all(r.desc is True for r in endpoint.requests)

    def test_server_chosen_limit_followed(self):
        """Without a limit the next offset comes from the limit the server reports."""
        endpoint = FakeEndpoint(range(12), page_size=5)

        assert list(stream(endpoint)) == list(range(12))
        assert [r.offset for r in endpoint.requests] == [0, 5, 10]
        assert [r.limit for r in endpoint.requests] == [None, 5, 5]

    def test_missing_pagination_fields_stop_after_one_page(self):
        calls = []

        def page_fetch(options):
            calls.append(options)
            return Result.success({"data": {"items": [1, 2]}})

        assert list(stream(page_fetch)) == [1, 2]
        assert len(calls) == 1

    def test_deterministic(self):
        first = list(stream(FakeEndpoint(range(25)), PageRequestOptions(limit=7)))
        second = list(stream(FakeEndpoint(range(25)), PageRequestOptions(limit=7)))
        assert first == second == list(range(25))

    def test_counters(self):
        pages = stream(FakeEndpoint(range(25)), PageRequestOptions(limit=10))
        list(pages)

        assert pages.pages_fetched == 3
        assert pages.items_yielded == 25
        assert pages.total == 25
        assert pages.done

    def test_independent_streams(self):
        endpoint = FakeEndpoint(range(5))
        a = stream(endpoint, PageRequestOptions(limit=2))
        b = stream(endpoint, PageRequestOptions(limit=2))

        assert next(a) == 0
        assert list(b) == [0, 1, 2, 3, 4]
        assert list(a) == [1, 2, 3, 4]


class TestCollectAll:
    def test_success(self):
        endpoint = FakeEndpoint(range(25))

        result = collect_all(endpoint, PageRequestOptions(limit=10))

        assert result.ok
        assert result.value == list(range(25))
        assert len(endpoint.requests) == 3

    def test_failure_returns_first_error(self):
        endpoint = FakeEndpoint(range(25), fail_at_offset=20)

        result = collect_all(endpoint, PageRequestOptions(limit=10))

        assert not result.ok
        assert result.error is endpoint.error

    def test_module_level_access(self):
        assert pagination.collect_all(FakeEndpoint([])).value == []
