"""
Wire contract for the Outliers service.

Builds the ``outliers`` protobuf file descriptor in-process, mirroring
``protos/outliers.proto``, and exposes the generated message classes together
with the codec used on both sides of the transport.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from typing import Optional, Type, TypeVar

from google.protobuf import (
    descriptor_pb2,
    descriptor_pool,
    json_format,
    message_factory,
    timestamp_pb2,
)
from google.protobuf.message import DecodeError as ProtoDecodeError
from google.protobuf.message import Message

from api.errors import DecodeError, UnsupportedMediaType
from config import CONTENT_TYPE_JSON, CONTENT_TYPE_PROTOBUF, SUPPORTED_CONTENT_TYPES

M = TypeVar("M", bound=Message)

PACKAGE = "outliers"
PROTO_FILE = "outliers/outliers.proto"
SERVICE_NAME = f"{PACKAGE}.Outliers"
DETECT_METHOD = "Detect"
DETECT_PATH = f"/{SERVICE_NAME}/{DETECT_METHOD}"

_FIELD = descriptor_pb2.FieldDescriptorProto


def _add_field(
    message: descriptor_pb2.DescriptorProto,
    name: str,
    number: int,
    field_type: int,
    label: int = _FIELD.LABEL_OPTIONAL,
    type_name: str = "",
) -> None:
    field = message.field.add(name=name, number=number, type=field_type, label=label)
    if type_name:
        field.type_name = type_name


def build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    """Describe ``protos/outliers.proto``. Tags are wire format, never renumber."""
    file_proto = descriptor_pb2.FileDescriptorProto(
        name=PROTO_FILE,
        package=PACKAGE,
        syntax="proto3",
        dependency=[timestamp_pb2.DESCRIPTOR.name],
    )

    metric = file_proto.message_type.add(name="Metric")
    _add_field(metric, "time", 1, _FIELD.TYPE_MESSAGE, type_name=".google.protobuf.Timestamp")
    _add_field(metric, "name", 2, _FIELD.TYPE_STRING)
    _add_field(metric, "value", 3, _FIELD.TYPE_DOUBLE)

    request = file_proto.message_type.add(name="OutliersRequest")
    _add_field(
        request,
        "metrics",
        1,
        _FIELD.TYPE_MESSAGE,
        label=_FIELD.LABEL_REPEATED,
        type_name=f".{PACKAGE}.Metric",
    )

    response = file_proto.message_type.add(name="OutliersResponse")
    _add_field(response, "indices", 1, _FIELD.TYPE_INT32, label=_FIELD.LABEL_REPEATED)

    service = file_proto.service.add(name="Outliers")
    service.method.add(
        name=DETECT_METHOD,
        input_type=f".{PACKAGE}.OutliersRequest",
        output_type=f".{PACKAGE}.OutliersResponse",
    )
    return file_proto


_pool = descriptor_pool.Default()
_pool.AddSerializedFile(build_file_descriptor().SerializeToString())

Metric = message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{PACKAGE}.Metric"))
OutliersRequest = message_factory.GetMessageClass(
    _pool.FindMessageTypeByName(f"{PACKAGE}.OutliersRequest")
)
OutliersResponse = message_factory.GetMessageClass(
    _pool.FindMessageTypeByName(f"{PACKAGE}.OutliersResponse")
)
SERVICE = _pool.FindServiceByName(SERVICE_NAME)


def normalize_content_type(header: Optional[str]) -> str:
    """Strip parameters from a Content-Type header; empty means protobuf."""
    if not header:
        return CONTENT_TYPE_PROTOBUF
    value = header.split(";", 1)[0].strip().lower()
    if value not in SUPPORTED_CONTENT_TYPES:
        raise UnsupportedMediaType(
            f"content type {value!r} is not supported, use one of {', '.join(SUPPORTED_CONTENT_TYPES)}"
        )
    return value


def encode(message: Message, content_type: str = CONTENT_TYPE_PROTOBUF) -> bytes:
    if content_type == CONTENT_TYPE_JSON:
        return json_format.MessageToJson(message).encode("utf-8")
    return message.SerializeToString()


def decode(message_class: Type[M], payload: bytes, content_type: str = CONTENT_TYPE_PROTOBUF) -> M:
    name = message_class.DESCRIPTOR.name
    try:
        if content_type == CONTENT_TYPE_JSON:
            return json_format.Parse(payload, message_class())
        return message_class.FromString(payload)
    except (ProtoDecodeError, json_format.ParseError, UnicodeDecodeError) as exc:
        raise DecodeError(f"malformed {name}: {exc}") from exc
