"""
Tests for the async Detect client: successful calls against the in-process app
and translation of every failure mode into the typed error hierarchy.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest

from api import contract
from api.requests import OutliersRequest
from client import (
    CallCancelled,
    OutliersClient,
    ResponseDecodeError,
    RpcError,
    ServiceUnavailable,
)
from run import demo_metrics
from services.detect_service import detect_service

from conftest import TEST_BASE_URL, make_client


def _mock_client(handler, **kwargs) -> OutliersClient:
    return OutliersClient(
        base_url=TEST_BASE_URL,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


@pytest.mark.asyncio
async def test_detect_demo_batch():
    async with make_client() as client:
        assert await client.detect(demo_metrics(seed=21)) == [7, 113, 835]


@pytest.mark.asyncio
async def test_detect_accepts_request_model_and_empty_batch():
    async with make_client() as client:
        assert await client.detect(OutliersRequest()) == []
        assert await client.detect(demo_metrics(size=1)) == []


@pytest.mark.asyncio
async def test_call_returns_wire_message():
    request = OutliersRequest(metrics=demo_metrics(seed=8)).to_message()
    async with make_client() as client:
        first = await client.call(request)
        second = await client.call(request)
    assert first == second
    assert list(first.indices) == [7, 113, 835]


@pytest.mark.asyncio
async def test_server_failure_surfaces_as_rpc_error(monkeypatch):
    def boom(payload, content_type):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(detect_service, "detect", boom)
    async with make_client() as client:
        with pytest.raises(RpcError) as exc_info:
            await client.detect(demo_metrics(size=5))
    assert exc_info.value.code == "internal_error"
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_non_json_error_body_is_reported_as_unknown():
    client = _mock_client(lambda request: httpx.Response(502, text="bad gateway"))
    async with client:
        with pytest.raises(RpcError) as exc_info:
            await client.detect([])
    assert exc_info.value.code == "unknown"
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_connection_failure_is_service_unavailable():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with _mock_client(refuse) as client:
        with pytest.raises(ServiceUnavailable):
            await client.detect([])


@pytest.mark.asyncio
async def test_connection_failure_is_retried_when_configured():
    calls = []

    def flaky(request):
        calls.append(request)
        if len(calls) < 3:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(200, content=contract.encode(contract.OutliersResponse(indices=[2])))

    async with _mock_client(flaky, retry_attempts=3) as client:
        assert await client.detect([]) == [2]
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_deadline_is_call_cancelled_and_not_retried():
    calls = []

    def slow(request):
        calls.append(request)
        raise httpx.ReadTimeout("timed out", request=request)

    async with _mock_client(slow, retry_attempts=3) as client:
        with pytest.raises(CallCancelled):
            await client.detect([], timeout=0.01)
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_undecodable_reply_is_response_decode_error():
    client = _mock_client(lambda request: httpx.Response(200, content=b"\x0a\x05\x0a"))
    async with client:
        with pytest.raises(ResponseDecodeError):
            await client.detect([])


@pytest.mark.asyncio
async def test_caller_cancellation_propagates():
    started = asyncio.Event()

    async def hang(request):
        started.set()
        await asyncio.sleep(30)
        return httpx.Response(200)

    class HangingTransport(httpx.AsyncBaseTransport):
        async def handle_async_request(self, request):
            return await hang(request)

    client = OutliersClient(base_url=TEST_BASE_URL, transport=HangingTransport())
    async with client:
        task = asyncio.create_task(client.detect([]))
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task


@pytest.mark.asyncio
async def test_context_manager_closes_connection():
    client = make_client()
    async with client:
        pass
    assert client._client.is_closed


def test_defaults_come_from_settings(monkeypatch):
    from config import settings

    monkeypatch.setattr(settings, "server_url", "http://outliers.internal:9999/")
    monkeypatch.setattr(settings, "client_timeout", 3.5)
    client = OutliersClient()
    assert client.base_url == "http://outliers.internal:9999"
    assert client.timeout == 3.5
    assert client.retry_attempts == 1


@pytest.mark.asyncio
async def test_default_transport_speaks_http1_only():
    async with OutliersClient() as client:
        pool = client._client._transport._pool
        assert pool._http1 is True
        assert pool._http2 is False
