"""
Request models for the Detect operation.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from api import contract


class Metric(BaseModel):
    model_config = ConfigDict(frozen=True)

    time: datetime
    name: str
    value: float

    @field_validator("time")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        return v if v.tzinfo is not None else v.replace(tzinfo=timezone.utc)

    def to_message(self) -> Any:
        message = contract.Metric(name=self.name, value=self.value)
        message.time.FromDatetime(self.time)
        return message

    @classmethod
    def from_message(cls, message: Any) -> Metric:
        # datetime has microsecond resolution, sub-microsecond nanos are dropped
        return cls(
            time=message.time.ToDatetime(tzinfo=timezone.utc),
            name=message.name,
            value=message.value,
        )


class OutliersRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    metrics: List[Metric] = Field(default_factory=list)

    def values(self) -> List[float]:
        return [m.value for m in self.metrics]

    def to_message(self) -> Any:
        return contract.OutliersRequest(metrics=[m.to_message() for m in self.metrics])

    @classmethod
    def from_message(cls, message: Any) -> OutliersRequest:
        return cls(metrics=[Metric.from_message(m) for m in message.metrics])


__all__ = ["Metric", "OutliersRequest"]
