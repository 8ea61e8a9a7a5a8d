"""
Dispatch for the Detect operation: decode the request, score its values and
encode the reply. Holds no per-call state, so one instance serves every
concurrent caller.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from api import contract
from api.errors import RequestTooLarge
from config import CONTENT_TYPE_PROTOBUF, settings
from engine.outliers import find_outliers

log = logging.getLogger(__name__)


class DetectService:
    def __init__(
        self,
        threshold_sigma: Optional[float] = None,
        max_request_bytes: Optional[int] = None,
    ) -> None:
        self.threshold_sigma = (
            settings.outlier_threshold_sigma if threshold_sigma is None else threshold_sigma
        )
        self.max_request_bytes = (
            settings.max_request_bytes if max_request_bytes is None else max_request_bytes
        )

    def detect_message(self, request: Any) -> Any:
        values = [m.value for m in request.metrics]
        indices = find_outliers(values, self.threshold_sigma)
        return contract.OutliersResponse(indices=indices)

    def detect(self, payload: bytes, content_type: str = CONTENT_TYPE_PROTOBUF) -> bytes:
        if len(payload) > self.max_request_bytes:
            raise RequestTooLarge(
                f"request of {len(payload)} bytes exceeds limit of {self.max_request_bytes}"
            )

        request = contract.decode(contract.OutliersRequest, payload, content_type)
        log.info("detect: request size %d", len(request.metrics))

        response = self.detect_message(request)
        log.info("detect: found %d outliers", len(response.indices))
        return contract.encode(response, content_type)


detect_service = DetectService()
