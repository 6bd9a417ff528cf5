"""Tests for ServiceNowClient against a mocked Table API."""

import asyncio
import base64
import json

import httpx
import pytest

from docsdesk.core.errors import ApiError, RequestCancelledError, TransportError
from docsdesk.core.retry_config import RetryConfig
from docsdesk.integrations.servicenow import TableQueryParams, parse_retry_after
from docsdesk.integrations.servicenow.client import USER_AGENT

from conftest import INSTANCE, MaxJitterRandom, json_response


class TestParseRetryAfter:
    """Test Retry-After header parsing."""

    def test_numeric(self):
        assert parse_retry_after("2") == 2
        assert parse_retry_after(" 30 ") == 30

    def test_ignored_values(self):
        """Test absent, non-numeric and negative values are ignored."""
        assert parse_retry_after(None) is None
        assert parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT") is None
        assert parse_retry_after("soon") is None
        assert parse_retry_after("-1") is None


class TestRequests:
    """Test URL, header and body construction."""

    @pytest.mark.asyncio
    async def test_get_table_url_and_headers(self, make_client):
        """Test GET builds the collection URL, query string and fixed headers."""
        seen = []

        def handler(request):
            seen.append(request)
            return json_response(200, {"result": [{"sys_id": "1"}]})

        async with make_client(handler) as client:
            result = await client.get_table("incident", TableQueryParams(limit=10, filter="a>b"))

        assert result == {"result": [{"sys_id": "1"}]}
        request = seen[0]
        assert request.method == "GET"
        assert str(request.url) == (
            f"{INSTANCE}/api/now/table/incident"
            "?sysparm_limit=10&sysparm_query=a%3Eb&sysparm_display_value=false"
        )
        assert request.headers["Authorization"] == "Basic " + base64.b64encode(b"u:p").decode()
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["Accept"] == "application/json"
        assert request.headers["User-Agent"] == USER_AGENT

    @pytest.mark.asyncio
    async def test_create_posts_json(self, make_client):
        """Test create POSTs the payload to the collection URL."""
        seen = []

        def handler(request):
            seen.append(request)
            return json_response(201, {"result": {"sys_id": "abc", "number": "INC001"}})

        async with make_client(handler) as client:
            result = await client.create("incident", {"short_description": "Printer on fire"})

        assert result["result"]["number"] == "INC001"
        assert seen[0].method == "POST"
        assert str(seen[0].url) == f"{INSTANCE}/api/now/table/incident"
        assert json.loads(seen[0].content) == {"short_description": "Printer on fire"}

    @pytest.mark.asyncio
    async def test_patch_targets_record(self, make_client):
        """Test patch sends only the supplied fields to the record URL."""
        seen = []

        def handler(request):
            seen.append(request)
            return json_response(200, {"result": {"sys_id": "abc", "state": "6"}})

        async with make_client(handler) as client:
            await client.patch("incident", "abc", {"state": "6"})

        assert seen[0].method == "PATCH"
        assert str(seen[0].url) == f"{INSTANCE}/api/now/table/incident/abc"
        assert json.loads(seen[0].content) == {"state": "6"}

    @pytest.mark.asyncio
    async def test_delete_empty_body_returns_none(self, make_client):
        """Test DELETE with an empty 204 body succeeds and returns None."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(204)

        async with make_client(handler) as client:
            assert await client.delete("incident", "abc") is None

        assert seen[0].method == "DELETE"
        assert seen[0].content == b""

    @pytest.mark.asyncio
    async def test_record_id_is_encoded_as_one_path_segment(self, make_client):
        """Test reserved characters in sys_id cannot add a query string or path."""
        seen = []

        def handler(request):
            seen.append(request)
            return json_response(200, {"result": {}})

        async with make_client(handler) as client:
            await client.patch("incident", "abc?sysparm_query=active=true", {"state": "6"})
            await client.delete("incident", "a/b")

        assert seen[0].url.raw_path == b"/api/now/table/incident/abc%3Fsysparm_query%3Dactive%3Dtrue"
        assert seen[0].url.query == b""
        assert seen[1].url.raw_path == b"/api/now/table/incident/a%2Fb"

    @pytest.mark.asyncio
    async def test_empty_record_id_rejected_before_sending(self, make_client):
        """Test patch and delete refuse an empty sys_id instead of hitting the collection."""
        seen = []

        def handler(request):
            seen.append(request)
            return json_response(200, {"result": {}})

        async with make_client(handler) as client:
            with pytest.raises(ValueError):
                await client.patch("incident", "", {"state": "6"})
            with pytest.raises(ValueError):
                await client.delete("incident", "")

        assert seen == []


class TestErrors:
    """Test error mapping and retry integration."""

    @pytest.mark.asyncio
    async def test_404_maps_to_api_error_without_retry(self, make_client, recording_sleep):
        """Test 404 raises ApiError with body after a single attempt."""
        calls = []

        def handler(request):
            calls.append(request)
            return json_response(404, {"error": {"message": "No Record found"}})

        async with make_client(handler) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.patch("incident", "missing", {"state": "6"})

        error = exc_info.value
        assert error.status_code == 404
        assert error.body == {"error": {"message": "No Record found"}}
        assert error.method == "PATCH"
        assert error.url == f"{INSTANCE}/api/now/table/incident/missing"
        assert len(calls) == 1
        assert recording_sleep.delays == []

    @pytest.mark.asyncio
    async def test_unparseable_error_body_becomes_empty_dict(self, make_client):
        """Test a non-JSON error body is replaced with {}."""

        async with make_client(
            lambda request: httpx.Response(500, content=b"<html>oops</html>"),
            retry_config=RetryConfig(max_attempts=1),
        ) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.get_table("incident")

        assert exc_info.value.body == {}
        assert exc_info.value.retry_after_seconds is None

    @pytest.mark.asyncio
    async def test_429_honors_retry_after(self, make_client, recording_sleep):
        """Test 429 with Retry-After waits exactly that long, then succeeds."""
        responses = [
            json_response(429, {}, headers={"Retry-After": "2"}),
            json_response(200, {"result": []}),
        ]

        async with make_client(lambda request: responses.pop(0)) as client:
            assert await client.get_table("incident") == {"result": []}

        assert recording_sleep.delays == [2.0]

    @pytest.mark.asyncio
    async def test_5xx_exhausts_attempts(self, make_client, recording_sleep):
        """Test a persistent 503 is attempted max_attempts times."""
        calls = []

        def handler(request):
            calls.append(request)
            return json_response(503, {"error": "maintenance"})

        async with make_client(handler) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.get_table("incident")

        assert exc_info.value.status_code == 503
        assert len(calls) == 5
        assert len(recording_sleep.delays) == 4

    @pytest.mark.asyncio
    async def test_transport_error_retried_then_succeeds(self, make_client):
        """Test connection failures are retried and wrapped as TransportError."""
        attempts = []

        def handler(request):
            attempts.append(request)
            if len(attempts) < 3:
                raise httpx.ConnectError("connection refused", request=request)
            return json_response(200, {"result": []})

        async with make_client(handler) as client:
            assert await client.get_table("incident") == {"result": []}

        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_transport_error_after_exhaustion(self, make_client):
        """Test TransportError surfaces with the httpx error chained."""

        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with make_client(handler, retry_config=RetryConfig(max_attempts=2)) as client:
            with pytest.raises(TransportError) as exc_info:
                await client.get_table("incident")

        assert isinstance(exc_info.value.__cause__, httpx.ReadTimeout)
        assert exc_info.value.method == "GET"

    @pytest.mark.asyncio
    async def test_errors_never_carry_auth_header(self, make_client):
        """Test neither the message nor the attributes include credentials."""
        header_value = base64.b64encode(b"u:p").decode()

        async with make_client(
            lambda request: json_response(401, {"error": "bad creds"}),
        ) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.get_table("incident")

        error = exc_info.value
        assert header_value not in str(error)
        assert header_value not in repr(vars(error))

    @pytest.mark.asyncio
    async def test_cancel_event_aborts_request(self, make_client):
        """Test a cancel event raises RequestCancelledError and is not retried."""
        calls = []

        async def handler(request):
            calls.append(request)
            await asyncio.sleep(60)
            return json_response(200, {"result": []})

        cancel = asyncio.Event()
        asyncio.get_running_loop().call_later(0.05, cancel.set)

        async with make_client(handler) as client:
            with pytest.raises(RequestCancelledError):
                await asyncio.wait_for(
                    client.get_table("incident", cancel_event=cancel), timeout=5
                )

        assert len(calls) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("headers", [None, {"Retry-After": "soon"}])
    async def test_429_without_usable_retry_after_uses_backoff(
        self, make_client, recording_sleep, headers
    ):
        """Test a 429 with a missing or non-numeric Retry-After falls back to jittered backoff."""
        responses = [
            json_response(429, {"error": {"message": "slow down"}}, headers=headers),
            json_response(200, {"result": []}),
        ]

        async with make_client(lambda request: responses.pop(0), rng=MaxJitterRandom()) as client:
            assert await client.get_table("incident") == {"result": []}

        # base 500ms plus the full 15% jitter
        assert recording_sleep.delays == [0.575]


class TestConcurrency:
    """Test one client serving many concurrent callers."""

    @pytest.mark.asyncio
    async def test_concurrent_calls_retry_independently(self, make_client):
        """Test each caller's retry sequence is independent of the others."""
        failures_left = {"incident": 2}

        def handler(request):
            table = request.url.path.rsplit("/", 1)[-1]
            if failures_left.get(table, 0) > 0:
                failures_left[table] -= 1
                return json_response(502)
            return json_response(200, {"result": [{"table": table}]})

        async with make_client(handler) as client:
            results = await asyncio.gather(
                client.get_table("incident"),
                client.get_table("kb_knowledge"),
                client.get_table("sys_user_group"),
            )

        assert [r["result"][0]["table"] for r in results] == [
            "incident",
            "kb_knowledge",
            "sys_user_group",
        ]
