"""Candidate parsing tests."""

from __future__ import annotations

import logging

import pytest
from google.protobuf import descriptor_pb2
from embedded_proto_dump.descriptor_scanning.descriptor_parsing import (
    DescriptorParseError,
    parse_candidate,
    parse_candidates,
    parse_descriptor_bytes,
)
from embedded_proto_dump.descriptor_scanning.scan_models import RawCandidate


def _candidate(data: bytes, start: int = 0) -> RawCandidate:
    return RawCandidate(start=start, end=start + len(data), data=data)


def test_parse_candidate_exposes_name_dependencies_and_raw_bytes(file_descriptor_bytes) -> None:
    data = file_descriptor_bytes("shop/order.proto", ["shop/common.proto", "a.proto"])

    descriptor = parse_candidate(_candidate(data, start=64))

    assert descriptor.name == "shop/order.proto"
    assert descriptor.dependencies == ("shop/common.proto", "a.proto")
    assert descriptor.raw_bytes == data
    assert descriptor.offset == 64
    assert descriptor.compiled_name == "shop/order.pb"
    assert descriptor.rendered_text is None


def test_parse_candidate_uses_configured_compiled_extension(file_descriptor_bytes) -> None:
    descriptor = parse_candidate(
        _candidate(file_descriptor_bytes("a.proto")), compiled_extension=".desc"
    )

    assert descriptor.compiled_name == "a.desc"


def test_truncated_candidate_raises_parse_error() -> None:
    with pytest.raises(DescriptorParseError, match="0x10"):
        parse_candidate(_candidate(b"\x0a\x05ab", start=16))


def test_descriptor_without_name_raises_parse_error() -> None:
    data = descriptor_pb2.FileDescriptorProto(package="nameless").SerializeToString()

    with pytest.raises(DescriptorParseError, match="no name"):
        parse_descriptor_bytes(data)


def test_parse_candidates_drops_failures_with_warning(file_descriptor_bytes, caplog) -> None:
    good = file_descriptor_bytes("a.proto")
    candidates = [_candidate(b"\x0a\x05ab"), _candidate(good, start=100)]

    with caplog.at_level(logging.WARNING):
        descriptors = parse_candidates(candidates)

    assert list(descriptors) == ["a.proto"]
    assert "Skipping candidate" in caplog.text


def test_duplicate_names_keep_the_last_descriptor_found(file_descriptor_bytes, caplog) -> None:
    first = file_descriptor_bytes("dup.proto", package="first")
    second = file_descriptor_bytes("dup.proto", package="second")

    with caplog.at_level(logging.WARNING):
        descriptors = parse_candidates([_candidate(first, 0), _candidate(second, 500)])

    assert len(descriptors) == 1
    assert descriptors["dup.proto"].raw_bytes == second
    assert descriptors["dup.proto"].proto.package == "second"
    assert "Duplicate descriptor dup.proto" in caplog.text


def test_parse_candidates_logs_every_discovered_file(file_descriptor_bytes, caplog) -> None:
    candidates = [
        _candidate(file_descriptor_bytes("a.proto")),
        _candidate(file_descriptor_bytes("b.proto"), start=50),
    ]

    with caplog.at_level(logging.INFO):
        parse_candidates(candidates)

    assert "Found a.proto in binary file" in caplog.text
    assert "Found b.proto in binary file" in caplog.text
