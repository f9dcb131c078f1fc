import asyncio
import base64

import aiohttp
import pytest
from aioresponses import aioresponses

from acsdk.adapters.aiohttp_client_adapter import AioHttpClientAdapter
from acsdk.core.exceptions import ApiError

"""
Tests for AioHttpClientAdapter behavior.

Each test verifies how the adapter builds requests and maps responses and
errors into ApiError. Expected outcomes:
- Every request carries Basic credentials built from the token.
- Non-2xx responses raise ApiError with the HTTP status and the server's
  `message` (or "Unexpected response").
- Network errors and timeouts raise ApiError without a status, which the
  poller treats as transient.
"""

BASE = "http://api.example.test"


def first_call(m):
    return next(iter(m.requests.values()))[0]


def test_requires_token():
    with pytest.raises(ValueError, match="No token"):
        AioHttpClientAdapter(BASE, "")


@pytest.mark.asyncio
async def test_get_sends_basic_auth_and_query():
    url = f"{BASE}/jobs/job-1/events?offset=3"
    with aioresponses() as m:
        m.get(url, payload={"data": []}, status=200)

        async with AioHttpClientAdapter(BASE, "secret") as client:
            data = await client.request("jobs/job-1/events", query={"offset": 3, "skip": None})

        assert data == {"data": []}
        call = first_call(m)
        expected = "Basic " + base64.b64encode(b"secret:").decode()
        assert call.kwargs["headers"]["Authorization"] == expected
        assert call.kwargs["params"] == {"offset": "3"}


@pytest.mark.asyncio
async def test_base_url_is_canonicalised():
    with aioresponses() as m:
        m.get(f"{BASE}/v1/services", payload=[], status=200)

        async with AioHttpClientAdapter(f"{BASE}/v1", "tok") as client:
            assert client.base_url == f"{BASE}/v1/"
            assert await client.request("/services") == []


@pytest.mark.asyncio
async def test_post_sends_json_body_and_custom_headers():
    url = f"{BASE}/jobs"
    with aioresponses() as m:
        m.post(url, payload={"id": "job-1"}, status=201)

        async with AioHttpClientAdapter(BASE, "tok") as client:
            result = await client.request(
                "jobs", method="POST", body={"serviceId": "s"}, headers={"X-Trace": "1"}
            )

        assert result == {"id": "job-1"}
        call = first_call(m)
        assert call.kwargs["json"] == {"serviceId": "s"}
        assert call.kwargs["headers"]["X-Trace"] == "1"


@pytest.mark.asyncio
async def test_parse_false_returns_raw_bytes():
    url = f"{BASE}/jobs/job-1/screenshots/1.png"
    with aioresponses() as m:
        m.get(url, body=b"\x89PNG", status=200, content_type="image/png")

        async with AioHttpClientAdapter(BASE, "tok") as client:
            assert await client.request("jobs/job-1/screenshots/1.png", parse=False) == b"\x89PNG"


@pytest.mark.asyncio
async def test_client_error_carries_status_and_server_message():
    url = f"{BASE}/jobs/missing/events?offset=0"
    with aioresponses() as m:
        m.get(url, payload={"message": "Job not found"}, status=404)

        async with AioHttpClientAdapter(BASE, "tok") as client:
            with pytest.raises(ApiError) as excinfo:
                await client.request("jobs/missing/events", query={"offset": 0})

    assert excinfo.value.status == 404
    assert excinfo.value.message == "Job not found"
    assert excinfo.value.is_transient is False


@pytest.mark.asyncio
async def test_server_error_without_json_body():
    url = f"{BASE}/jobs"
    with aioresponses() as m:
        m.get(url, body="Server Error", status=500, content_type="text/plain")

        async with AioHttpClientAdapter(BASE, "tok") as client:
            with pytest.raises(ApiError) as excinfo:
                await client.request("jobs")

    assert excinfo.value.status == 500
    assert excinfo.value.message == "Unexpected response"
    assert excinfo.value.is_transient is True


@pytest.mark.asyncio
async def test_timeout_has_no_status():
    url = f"{BASE}/slow"
    with aioresponses() as m:
        m.get(url, exception=asyncio.TimeoutError())

        async with AioHttpClientAdapter(BASE, "tok") as client:
            with pytest.raises(ApiError) as excinfo:
                await client.request("slow")

    assert excinfo.value.status is None
    assert excinfo.value.is_transient is True


@pytest.mark.asyncio
async def test_connection_error_has_no_status():
    url = f"{BASE}/down"
    with aioresponses() as m:
        m.get(url, exception=aiohttp.ClientConnectionError("refused"))

        async with AioHttpClientAdapter(BASE, "tok") as client:
            with pytest.raises(ApiError) as excinfo:
                await client.request("down")

    assert excinfo.value.status is None


@pytest.mark.asyncio
async def test_request_outside_context_manager_fails():
    client = AioHttpClientAdapter(BASE, "tok")
    with pytest.raises(RuntimeError):
        await client.request("jobs")
