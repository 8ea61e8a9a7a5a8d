from __future__ import annotations

import asyncio
from typing import List, Optional

from fastapi import APIRouter, Request, Response

from api import contract
from api.errors import DecodeError, RequestTooLarge
from api.routes.exception import handle_exceptions
from config import settings
from services.detect_service import detect_service

router = APIRouter(tags=["Outliers"])


class _ComputeSlots:
    """Bounds concurrent detections; recreated when the event loop changes."""

    def __init__(self, limit: int) -> None:
        self.limit = max(1, int(limit))
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._semaphore: Optional[asyncio.Semaphore] = None

    def get(self) -> asyncio.Semaphore:
        loop = asyncio.get_running_loop()
        if self._semaphore is None or self._loop is not loop:
            self._semaphore = asyncio.Semaphore(self.limit)
            self._loop = loop
        return self._semaphore


compute_slots = _ComputeSlots(settings.max_concurrency)


def _too_large(size: int, limit: int) -> RequestTooLarge:
    return RequestTooLarge(f"request of {size} bytes exceeds limit of {limit}")


async def read_limited_body(request: Request, limit: int) -> bytes:
    """Read the request body, rejecting it as soon as it passes ``limit`` bytes."""
    declared = request.headers.get("content-length")
    if declared is not None:
        try:
            size = int(declared)
        except ValueError as exc:
            raise DecodeError(f"invalid Content-Length {declared!r}") from exc
        if size > limit:
            raise _too_large(size, limit)

    chunks: List[bytes] = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            raise _too_large(received, limit)
        chunks.append(chunk)
    return b"".join(chunks)


@router.post(contract.DETECT_PATH)
@handle_exceptions
async def detect(request: Request) -> Response:
    content_type = contract.normalize_content_type(request.headers.get("content-type"))
    payload = await read_limited_body(request, detect_service.max_request_bytes)
    async with compute_slots.get():
        body = await asyncio.to_thread(detect_service.detect, payload, content_type)
    return Response(content=body, media_type=content_type)
