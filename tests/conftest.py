"""Shared fixtures for building serialized file descriptors and binary blobs."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Sequence

import pytest
from google.protobuf import descriptor_pb2

_FieldProto = descriptor_pb2.FieldDescriptorProto

DEFAULT_FILLER = b"\x00\x13\x37GARBAGE\xff\x00"


def build_file_descriptor(
    name: str,
    dependencies: Sequence[str] = (),
    *,
    package: str = "demo",
    syntax: str = "proto3",
) -> bytes:
    proto = descriptor_pb2.FileDescriptorProto(
        name=name,
        package=package,
        dependency=list(dependencies),
        syntax=syntax,
    )
    message = proto.message_type.add(name=_message_name_for(name))
    message.field.add(
        name="value",
        number=1,
        type=_FieldProto.TYPE_STRING,
        label=_FieldProto.LABEL_OPTIONAL,
    )
    return proto.SerializeToString()


def build_blob(*descriptors: bytes, filler: bytes = DEFAULT_FILLER) -> bytes:
    return filler + filler.join(descriptors) + filler


def _message_name_for(file_name: str) -> str:
    parts = [part for part in re.split(r"[^A-Za-z0-9]+", file_name) if part]
    return "".join(part[:1].upper() + part[1:] for part in parts) or "Message"


@pytest.fixture
def file_descriptor_bytes() -> Callable[..., bytes]:
    return build_file_descriptor


@pytest.fixture
def blob_of() -> Callable[..., bytes]:
    return build_blob


@pytest.fixture(autouse=True)
def _restore_package_logger():
    """Undo logger configuration leaked by CLI runs so tests stay order-independent."""
    package_logger = logging.getLogger("embedded_proto_dump")
    level = package_logger.level
    handlers = list(package_logger.handlers)
    propagate = package_logger.propagate
    yield
    package_logger.setLevel(level)
    package_logger.handlers[:] = handlers
    package_logger.propagate = propagate
