"""
Server-side error taxonomy for the Detect operation.

Each error carries the HTTP status and the machine readable code that is sent
back to the caller as ``{"code": ..., "detail": ...}``.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import Any, Dict


class RpcServerError(Exception):
    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail)
        self.detail = detail or self.code.replace("_", " ")

    def to_body(self) -> Dict[str, Any]:
        return {"code": self.code, "detail": self.detail}


class DecodeError(RpcServerError):
    status_code = 400
    code = "decode_error"


class RequestTooLarge(RpcServerError):
    status_code = 413
    code = "request_too_large"


class UnsupportedMediaType(RpcServerError):
    status_code = 415
    code = "unsupported_media_type"


class InternalError(RpcServerError):
    status_code = 500
    code = "internal_error"
