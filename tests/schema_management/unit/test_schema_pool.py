"""Schema pool service tests."""

from __future__ import annotations

import logging

import pytest
from google.protobuf import descriptor_pb2
from embedded_proto_dump.configuration.runtime_settings import RenderFormat
from embedded_proto_dump.descriptor_scanning.descriptor_parsing import parse_descriptor_bytes
from embedded_proto_dump.schema_management.schema_pool import (
    MissingDependencyError,
    SchemaPool,
    SchemaPoolError,
)


def test_register_renders_text_and_marks_file_as_found(file_descriptor_bytes) -> None:
    pool = SchemaPool()
    descriptor = parse_descriptor_bytes(file_descriptor_bytes("a.proto"))

    assert pool.find("a.proto") is False
    text = pool.register(descriptor)

    assert pool.find("a.proto") is True
    assert descriptor.rendered_text == text
    assert text.startswith('syntax = "proto3";\n\npackage demo;\n')
    assert "message AProto {\n  string value = 1;\n}\n" in text
    assert pool.registered_names == ("a.proto",)


def test_register_rejects_unregistered_dependencies(file_descriptor_bytes) -> None:
    pool = SchemaPool()
    descriptor = parse_descriptor_bytes(file_descriptor_bytes("b.proto", ["a.proto"]))

    with pytest.raises(MissingDependencyError) as exc_info:
        pool.register(descriptor)

    assert exc_info.value.missing == ("a.proto",)
    assert pool.find("b.proto") is False
    assert descriptor.rendered_text is None


def test_register_after_dependency_lists_import(file_descriptor_bytes) -> None:
    pool = SchemaPool()
    pool.register(parse_descriptor_bytes(file_descriptor_bytes("a.proto")))

    text = pool.register(parse_descriptor_bytes(file_descriptor_bytes("b.proto", ["a.proto"])))

    assert 'import "a.proto";' in text


def test_textproto_format_renders_descriptor_message(file_descriptor_bytes) -> None:
    pool = SchemaPool(render_format=RenderFormat.TEXTPROTO)

    text = pool.register(parse_descriptor_bytes(file_descriptor_bytes("a.proto")))

    assert text.startswith('name: "a.proto"\npackage: "demo"\n')
    assert 'syntax: "proto3"' in text


def test_runtime_files_can_be_imported_without_rendering() -> None:
    pool = SchemaPool()

    assert pool.has_runtime_file("google/protobuf/timestamp.proto")
    assert not pool.has_runtime_file("not/bundled.proto")
    pool.import_runtime_file("google/protobuf/timestamp.proto")

    assert pool.find("google/protobuf/timestamp.proto")
    assert pool.registered_names == ()


def test_import_of_unknown_runtime_file_fails() -> None:
    with pytest.raises(SchemaPoolError):
        SchemaPool().import_runtime_file("not/bundled.proto")


_Field = descriptor_pb2.FieldDescriptorProto


def _varint(value: int) -> bytes:
    encoded = bytearray()
    while value > 0x7F:
        encoded.append(value & 0x7F | 0x80)
        value >>= 7
    encoded.append(value)
    return bytes(encoded)


def _option_extensions_file() -> descriptor_pb2.FileDescriptorProto:
    proto = descriptor_pb2.FileDescriptorProto(
        name="myopts.proto",
        package="opts",
        dependency=["google/protobuf/descriptor.proto"],
        syntax="proto3",
    )
    proto.extension.add(
        name="greeting",
        number=50001,
        type=_Field.TYPE_STRING,
        label=_Field.LABEL_OPTIONAL,
        extendee=".google.protobuf.MessageOptions",
    )
    proto.extension.add(
        name="weight",
        number=50002,
        type=_Field.TYPE_INT32,
        label=_Field.LABEL_OPTIONAL,
        extendee=".google.protobuf.FieldOptions",
    )
    return proto


def _file_using_custom_options() -> descriptor_pb2.FileDescriptorProto:
    proto = descriptor_pb2.FileDescriptorProto(
        name="users.proto", package="u", dependency=["myopts.proto"], syntax="proto3"
    )
    message = proto.message_type.add(name="User")
    # Set through raw wire bytes, the way compiled descriptors carry custom options.
    message.options.MergeFromString(_varint(50001 << 3 | 2) + _varint(5) + b"hello")
    field = message.field.add(
        name="id", number=1, type=_Field.TYPE_INT64, label=_Field.LABEL_OPTIONAL
    )
    field.options.MergeFromString(_varint(50002 << 3) + _varint(3))
    return proto


def test_custom_options_from_registered_extensions_are_rendered(caplog) -> None:
    pool = SchemaPool()
    pool.import_runtime_file("google/protobuf/descriptor.proto")
    pool.register(parse_descriptor_bytes(_option_extensions_file().SerializeToString()))

    with caplog.at_level(logging.WARNING, logger="embedded_proto_dump"):
        text = pool.register(
            parse_descriptor_bytes(_file_using_custom_options().SerializeToString())
        )

    assert text == (
        'syntax = "proto3";\n'
        "\n"
        "package u;\n"
        "\n"
        'import "myopts.proto";\n'
        "\n"
        "message User {\n"
        '  option (opts.greeting) = "hello";\n'
        "  int64 id = 1 [(opts.weight) = 3];\n"
        "}\n"
    )
    assert "Dropping" not in caplog.text


def test_custom_options_survive_in_textproto_format() -> None:
    pool = SchemaPool(render_format=RenderFormat.TEXTPROTO)
    pool.import_runtime_file("google/protobuf/descriptor.proto")
    pool.register(parse_descriptor_bytes(_option_extensions_file().SerializeToString()))

    text = pool.register(parse_descriptor_bytes(_file_using_custom_options().SerializeToString()))

    assert '[opts.greeting]: "hello"' in text
    assert "[opts.weight]: 3" in text
