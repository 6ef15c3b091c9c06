"""Tests for the Overpass mirror failover."""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import httpx
import pytest

from errors import AllEndpointsFailedError
from overpass import fetch_overpass

MIRRORS = ["https://a.example/api", "https://b.example/api", "https://c.example/api"]


def _run(handler, query="[out:json];node(1);out;", endpoints=MIRRORS):
    async def go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await fetch_overpass(client, query, endpoints)
    return asyncio.run(go())


def test_only_last_endpoint_succeeds():
    attempts = []

    def handler(request):
        attempts.append(str(request.url))
        if request.url.host == "a.example":
            return httpx.Response(429, text="Too Many Requests")
        if request.url.host == "b.example":
            raise httpx.ConnectTimeout("timed out", request=request)
        return httpx.Response(200, json={"elements": [{"id": 7}]})

    assert _run(handler) == {"elements": [{"id": 7}]}
    assert attempts == MIRRORS


def test_first_success_stops_failover():
    attempts = []

    def handler(request):
        attempts.append(request.url.host)
        return httpx.Response(200, json={"elements": []})

    _run(handler)
    assert attempts == ["a.example"]


def test_all_endpoints_failing_raises():
    attempts = []

    def handler(request):
        attempts.append(request.url.host)
        return httpx.Response(504)

    with pytest.raises(AllEndpointsFailedError) as excinfo:
        _run(handler)
    assert attempts == ["a.example", "b.example", "c.example"]
    assert excinfo.value.endpoints == MIRRORS


def test_invalid_json_counts_as_failure():
    def handler(request):
        if request.url.host == "a.example":
            return httpx.Response(200, text="<html>rate limited</html>")
        return httpx.Response(200, json={"elements": []})

    assert _run(handler) == {"elements": []}


def test_request_shape():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={})

    _run(handler, query="\n  [out:json];\n", endpoints=MIRRORS[:1])
    request = seen[0]
    assert request.method == "POST"
    assert request.headers["Content-Type"] == "text/plain"
    assert request.headers["User-Agent"]
    assert request.content == b"[out:json];"


def test_no_endpoints_raises():
    with pytest.raises(AllEndpointsFailedError):
        _run(lambda r: httpx.Response(200, json={}), endpoints=[])


def test_non_object_body_fails_over():
    attempts = []

    def handler(request):
        attempts.append(request.url.host)
        if request.url.host == "a.example":
            return httpx.Response(200, json=[])
        if request.url.host == "b.example":
            return httpx.Response(200, json=None)
        return httpx.Response(200, json={"elements": []})

    assert _run(handler) == {"elements": []}
    assert attempts == ["a.example", "b.example", "c.example"]
