"""
Unit tests for the Asana extractor and bounded paging
"""

import httpx
import pytest
from core.exceptions import (
    AuthenticationError,
    ConfigurationError,
    NetworkError,
    PaginationLimitError,
    RateLimitError,
    ResourceNotFoundError,
    RetryableError,
    SourceResponseError,
)
from ingestion.extractors.asana_extractor import AsanaExtractor, OPT_FIELDS


def make_extractor(handler, **kwargs):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    options = {
        "access_token": "test-token",
        "project_id": "123",
        "retry_delay": 0,
        "client": client,
    }
    options.update(kwargs)
    return AsanaExtractor(**options)


class TestAsanaExtractor:
    """Request building, paging and error mapping"""

    @pytest.mark.asyncio
    async def test_fetch_all_follows_offsets(self):
        requests = []

        def handler(request):
            requests.append(request)
            offset = request.url.params.get("offset")
            if offset is None:
                return httpx.Response(200, json={"data": [{"gid": "1"}, {"gid": "2"}], "next_page": {"offset": "abc"}})
            return httpx.Response(200, json={"data": [{"gid": "3"}], "next_page": None})

        extractor = make_extractor(handler, page_size=2)
        records = await extractor.fetch_all()

        assert [r["gid"] for r in records] == ["1", "2", "3"]
        assert len(requests) == 2

        first = requests[0]
        assert first.url.path == "/api/1.0/projects/123/tasks"
        assert first.headers["Authorization"] == "Bearer test-token"
        assert first.url.params["limit"] == "2"
        assert first.url.params["opt_fields"] == OPT_FIELDS
        assert "offset" not in first.url.params
        assert requests[1].url.params["offset"] == "abc"

    @pytest.mark.asyncio
    async def test_missing_credentials(self):
        def handler(request):
            raise AssertionError("no request expected")

        extractor = make_extractor(handler, access_token=None)

        with pytest.raises(ConfigurationError) as exc_info:
            await extractor.fetch_all()

        assert "ASANA_ACCESS_TOKEN" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_missing_project(self):
        extractor = make_extractor(lambda request: httpx.Response(200), project_id="")

        with pytest.raises(ConfigurationError):
            await extractor.fetch_all()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_authentication_error_not_retried(self, status):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(status, text="Not Authorized")

        extractor = make_extractor(handler)

        with pytest.raises(AuthenticationError) as exc_info:
            await extractor.fetch_all()

        assert len(calls) == 1
        assert exc_info.value.message == f"Asana API error: {status} - Not Authorized"

    @pytest.mark.asyncio
    async def test_not_found(self):
        extractor = make_extractor(lambda request: httpx.Response(404, text="Unknown project"))

        with pytest.raises(ResourceNotFoundError):
            await extractor.fetch_all()

    @pytest.mark.asyncio
    async def test_other_client_error(self):
        extractor = make_extractor(lambda request: httpx.Response(400, text="bad opt_fields"))

        with pytest.raises(SourceResponseError) as exc_info:
            await extractor.fetch_all()

        assert exc_info.value.message == "Asana API error: 400 - bad opt_fields"

    @pytest.mark.asyncio
    async def test_server_error_retried_then_succeeds(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) < 3:
                return httpx.Response(503, text="busy")
            return httpx.Response(200, json={"data": [{"gid": "1"}], "next_page": None})

        extractor = make_extractor(handler, max_retries=3)
        records = await extractor.fetch_all()

        assert len(calls) == 3
        assert records == [{"gid": "1"}]

    @pytest.mark.asyncio
    async def test_server_error_exhausts_retries(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(500, text="boom")

        extractor = make_extractor(handler, max_retries=2)

        with pytest.raises(NetworkError) as exc_info:
            await extractor.fetch_all()

        assert len(calls) == 2
        assert isinstance(exc_info.value, RetryableError)
        assert exc_info.value.context["retry_count"] == 2
        assert not hasattr(exc_info.value, "max_retries")

    @pytest.mark.asyncio
    async def test_rate_limit_exhausts_retries(self):
        extractor = make_extractor(
            lambda request: httpx.Response(429, headers={"Retry-After": "0"}),
            max_retries=2
        )

        with pytest.raises(RateLimitError):
            await extractor.fetch_all()

    @pytest.mark.asyncio
    async def test_timeout_becomes_network_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        extractor = make_extractor(handler, max_retries=2)

        with pytest.raises(NetworkError) as exc_info:
            await extractor.fetch_all()

        assert isinstance(exc_info.value.original_exception, httpx.TimeoutException)

    @pytest.mark.asyncio
    async def test_connection_error_becomes_network_error(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        extractor = make_extractor(handler, max_retries=1)

        with pytest.raises(NetworkError):
            await extractor.fetch_all()

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        extractor = make_extractor(lambda request: httpx.Response(200, text="<html>"))

        with pytest.raises(SourceResponseError):
            await extractor.fetch_all()

    @pytest.mark.asyncio
    async def test_missing_data_key(self):
        extractor = make_extractor(lambda request: httpx.Response(200, json={"errors": []}))

        with pytest.raises(SourceResponseError):
            await extractor.fetch_all()

    @pytest.mark.asyncio
    async def test_non_object_records_skipped(self):
        extractor = make_extractor(lambda request: httpx.Response(
            200, json={"data": [{"gid": "1"}, None, "oops", 7, {"gid": "2"}], "next_page": None}
        ))

        records = await extractor.fetch_all()

        assert records == [{"gid": "1"}, {"gid": "2"}]

    @pytest.mark.asyncio
    async def test_failure_on_later_page_returns_nothing(self):
        def handler(request):
            if request.url.params.get("offset") is None:
                return httpx.Response(200, json={"data": [{"gid": "1"}], "next_page": {"offset": "p2"}})
            return httpx.Response(500, text="boom")

        extractor = make_extractor(handler, max_retries=1)

        with pytest.raises(NetworkError):
            await extractor.fetch_all()


class TestPaginationBounds:
    """Hard stops against a source that never ends"""

    @pytest.mark.asyncio
    async def test_max_pages(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"data": [], "next_page": {"offset": f"o{len(calls)}"}})

        extractor = make_extractor(handler, max_pages=3)

        with pytest.raises(PaginationLimitError) as exc_info:
            await extractor.fetch_all()

        assert len(calls) == 3
        assert exc_info.value.context["max_pages"] == 3

    @pytest.mark.asyncio
    async def test_repeated_offset(self):
        def handler(request):
            return httpx.Response(200, json={"data": [{"gid": "1"}], "next_page": {"offset": "same"}})

        extractor = make_extractor(handler)

        with pytest.raises(PaginationLimitError):
            await extractor.fetch_all()

    @pytest.mark.asyncio
    async def test_max_duration(self, stub_source):
        source = stub_source([[{"gid": "1"}], [{"gid": "2"}]], max_duration_seconds=-1)

        with pytest.raises(PaginationLimitError):
            await source.fetch_all()

    @pytest.mark.asyncio
    async def test_stub_source_pages(self, stub_source):
        source = stub_source([[{"gid": "1"}], [{"gid": "2"}, {"gid": "3"}]])

        records = await source.fetch_all()

        assert len(records) == 3
        assert source.requested_offsets == [None, "1"]
