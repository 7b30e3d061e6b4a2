"""Conversion of raw candidates into named schema descriptors."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from google.protobuf import descriptor_pb2
from google.protobuf.message import DecodeError

from embedded_proto_dump.schema_management.schema_models import (
    DEFAULT_COMPILED_EXTENSION,
    SchemaDescriptor,
)

from .scan_models import RawCandidate

logger = logging.getLogger(__name__)


class DescriptorParseError(Exception):
    """Raised when candidate bytes do not decode into a usable file descriptor."""


def parse_descriptor_bytes(
    data: bytes,
    *,
    offset: int | None = None,
    compiled_extension: str = DEFAULT_COMPILED_EXTENSION,
) -> SchemaDescriptor:
    """Decode one serialized `FileDescriptorProto`."""
    proto = descriptor_pb2.FileDescriptorProto()
    try:
        proto.ParseFromString(data)
    except DecodeError as exc:
        raise DescriptorParseError(f"Invalid file descriptor: {exc}") from exc
    if not proto.name:
        raise DescriptorParseError("File descriptor has no name.")

    return SchemaDescriptor(
        name=proto.name,
        dependencies=tuple(proto.dependency),
        raw_bytes=bytes(data),
        proto=proto,
        offset=offset,
        compiled_extension=compiled_extension,
    )


def parse_candidate(
    candidate: RawCandidate, *, compiled_extension: str = DEFAULT_COMPILED_EXTENSION
) -> SchemaDescriptor:
    """Decode the bytes of one scanner candidate."""
    try:
        return parse_descriptor_bytes(
            candidate.data, offset=candidate.start, compiled_extension=compiled_extension
        )
    except DescriptorParseError as exc:
        raise DescriptorParseError(f"Candidate at 0x{candidate.start:X}: {exc}") from exc


def parse_candidates(
    candidates: Iterable[RawCandidate],
    *,
    compiled_extension: str = DEFAULT_COMPILED_EXTENSION,
) -> dict[str, SchemaDescriptor]:
    """Parse candidates into a name-keyed map, dropping the ones that fail to decode.

    A name found more than once keeps the descriptor found last.
    """
    descriptors: dict[str, SchemaDescriptor] = {}
    for candidate in candidates:
        try:
            descriptor = parse_candidate(candidate, compiled_extension=compiled_extension)
        except DescriptorParseError as exc:
            logger.warning("Skipping candidate: %s", exc)
            continue

        previous = descriptors.get(descriptor.name)
        if previous is not None:
            logger.warning(
                "Duplicate descriptor %s at 0x%X replaces the one at 0x%X",
                descriptor.name,
                candidate.start,
                previous.offset or 0,
            )
        descriptors[descriptor.name] = descriptor
        logger.info("Found %s in binary file", descriptor.name)
    return descriptors
