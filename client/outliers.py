"""
Async client for the Outliers Detect operation.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any, Dict, Iterable, List, Optional, Type, Union

import httpx
from pydantic import ValidationError

from api import contract
from api.errors import DecodeError
from api.requests import Metric, OutliersRequest
from api.responses import ErrorBody, OutliersResponse
from client.exceptions import (
    CallCancelled,
    ResponseDecodeError,
    RpcError,
    ServiceUnavailable,
)
from client.retry import retry
from config import CONTENT_TYPE_PROTOBUF, settings

log = logging.getLogger(__name__)

_HEADERS = {
    "Content-Type": CONTENT_TYPE_PROTOBUF,
    "Accept": CONTENT_TYPE_PROTOBUF,
}


def _rpc_error(resp: httpx.Response) -> RpcError:
    try:
        body = ErrorBody.model_validate_json(resp.content)
        return RpcError(body.code, body.detail, status_code=resp.status_code)
    except ValidationError:
        return RpcError("unknown", resp.text or resp.reason_phrase, status_code=resp.status_code)


class OutliersClient:
    """Owns one HTTP/1.1 keep-alive connection pool to a Detect server; close
    it with ``aclose`` or use the client as an async context manager.

    Concurrent calls on one client run over separate pooled connections."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        retry_attempts: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = str(base_url or settings.server_url).rstrip("/")
        self.timeout = settings.client_timeout if timeout is None else timeout
        self.retry_attempts = max(
            1, settings.client_retry_attempts if retry_attempts is None else retry_attempts
        )
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=transport,
        )
        self._send = retry(
            attempts=self.retry_attempts,
            delay=settings.client_retry_delay,
            backoff=settings.client_retry_backoff,
            exceptions=(ServiceUnavailable,),
        )(self._post)

    async def __aenter__(self) -> OutliersClient:
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _post(self, payload: bytes, timeout: Optional[float]) -> httpx.Response:
        kwargs: Dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout"] = timeout
        url = f"{self.base_url}{contract.DETECT_PATH}"
        try:
            return await self._client.post(
                contract.DETECT_PATH, content=payload, headers=_HEADERS, **kwargs
            )
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            raise ServiceUnavailable(f"Cannot reach Outliers server at {url}") from e
        except httpx.TimeoutException as e:
            raise CallCancelled(f"Detect call to {url} exceeded its deadline") from e
        except httpx.RequestError as e:
            raise ServiceUnavailable(f"Connection to Outliers server at {url} failed: {e}") from e

    async def call(self, request: Any, timeout: Optional[float] = None) -> Any:
        """Send a wire ``OutliersRequest`` and return the wire ``OutliersResponse``."""
        resp = await self._send(contract.encode(request), timeout)
        if resp.status_code != 200:
            raise _rpc_error(resp)
        try:
            return contract.decode(contract.OutliersResponse, resp.content)
        except DecodeError as e:
            raise ResponseDecodeError(str(e)) from e

    async def detect(
        self,
        metrics: Union[OutliersRequest, Iterable[Metric]],
        timeout: Optional[float] = None,
    ) -> List[int]:
        request = metrics if isinstance(metrics, OutliersRequest) else OutliersRequest(metrics=list(metrics))
        message = await self.call(request.to_message(), timeout=timeout)
        indices = OutliersResponse.from_message(message).indices
        log.debug("detect: %d metrics -> %d outliers", len(request.metrics), len(indices))
        return indices


async def detect_outliers(
    metrics: Union[OutliersRequest, Iterable[Metric]],
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
) -> List[int]:
    async with OutliersClient(base_url=base_url, timeout=timeout) as client:
        return await client.detect(metrics)
