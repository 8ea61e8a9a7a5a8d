"""
Response models for the Detect operation.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field

from api import contract


class OutliersResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    indices: List[int] = Field(default_factory=list)

    def to_message(self) -> Any:
        return contract.OutliersResponse(indices=self.indices)

    @classmethod
    def from_message(cls, message: Any) -> OutliersResponse:
        return cls(indices=list(message.indices))


class ErrorBody(BaseModel):
    code: str
    detail: str


__all__ = ["ErrorBody", "OutliersResponse"]
