"""Render file descriptors as `.proto` source text."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from typing import Any

from google.protobuf import descriptor_pb2, text_encoding, text_format, unknown_fields
from google.protobuf.descriptor import FieldDescriptor
from google.protobuf.message import Message

logger = logging.getLogger(__name__)

_FieldProto = descriptor_pb2.FieldDescriptorProto

INDENT = "  "
# Exclusive upper bound of message field numbers (2**29) and the inclusive enum maximum.
MESSAGE_RANGE_MAX = 536870912
ENUM_RANGE_MAX = 2147483647

_SCALAR_TYPE_NAMES = {
    _FieldProto.TYPE_DOUBLE: "double",
    _FieldProto.TYPE_FLOAT: "float",
    _FieldProto.TYPE_INT64: "int64",
    _FieldProto.TYPE_UINT64: "uint64",
    _FieldProto.TYPE_INT32: "int32",
    _FieldProto.TYPE_FIXED64: "fixed64",
    _FieldProto.TYPE_FIXED32: "fixed32",
    _FieldProto.TYPE_BOOL: "bool",
    _FieldProto.TYPE_STRING: "string",
    _FieldProto.TYPE_BYTES: "bytes",
    _FieldProto.TYPE_UINT32: "uint32",
    _FieldProto.TYPE_SFIXED32: "sfixed32",
    _FieldProto.TYPE_SFIXED64: "sfixed64",
    _FieldProto.TYPE_SINT32: "sint32",
    _FieldProto.TYPE_SINT64: "sint64",
}


def render_textproto(proto: descriptor_pb2.FileDescriptorProto) -> str:
    """Render the descriptor message itself in protobuf text format."""
    return text_format.MessageToString(proto)


def render_proto_file(proto: descriptor_pb2.FileDescriptorProto) -> str:
    """Render a file descriptor as `.proto` source.

    Type references keep the fully qualified form stored in compiled
    descriptors (`.package.Type`). Custom options are rendered when `proto`
    was decoded by message classes that know their extensions; the rest are
    logged and skipped.
    """
    lines: list[str] = []
    _render_header(proto, lines)

    scope = f".{proto.package}" if proto.package else ""
    extensions_by_extendee = _group_extensions(proto.extension)
    for message in proto.message_type:
        _render_message(message, proto.syntax, lines, scope=scope, depth=0)
        lines.append("")
    for enum in proto.enum_type:
        _render_enum(enum, lines, depth=0)
        lines.append("")
    for service in proto.service:
        _render_service(service, lines)
        lines.append("")
    for extendee, fields in extensions_by_extendee:
        _render_extend_block(extendee, fields, proto.syntax, lines, depth=0)
        lines.append("")

    return "\n".join(lines).rstrip("\n") + "\n"


def _render_header(proto: descriptor_pb2.FileDescriptorProto, lines: list[str]) -> None:
    if proto.syntax == "editions":
        edition = descriptor_pb2.Edition.Name(proto.edition).removeprefix("EDITION_")
        lines.append(f'edition = "{edition}";')
    else:
        lines.append(f'syntax = "{proto.syntax or "proto2"}";')
    lines.append("")

    if proto.package:
        lines.append(f"package {proto.package};")
        lines.append("")

    if proto.dependency:
        public = set(proto.public_dependency)
        weak = set(proto.weak_dependency)
        for index, dependency in enumerate(proto.dependency):
            modifier = "public " if index in public else "weak " if index in weak else ""
            lines.append(f"import {modifier}{_quote(dependency)};")
        lines.append("")

    file_options = _format_options(proto.options)
    if file_options:
        lines.extend(f"option {option};" for option in file_options)
        lines.append("")


def _render_message(
    message: descriptor_pb2.DescriptorProto,
    syntax: str,
    lines: list[str],
    *,
    scope: str,
    depth: int,
    header: str | None = None,
) -> None:
    indent = INDENT * depth
    inner = INDENT * (depth + 1)
    full_name = f"{scope}.{message.name}"
    lines.append(header or f"{indent}message {message.name} {{")

    lines.extend(f"{inner}option {option};" for option in _format_options(message.options))

    # Keyed by fully qualified name, the form compiled type references use.
    nested_by_name = {f"{full_name}.{nested.name}": nested for nested in message.nested_type}
    inlined = {
        type_name
        for type_name, nested in nested_by_name.items()
        if nested.options.map_entry or _is_group_type(type_name, message.field)
    }
    for type_name, nested in nested_by_name.items():
        if type_name not in inlined:
            _render_message(nested, syntax, lines, scope=full_name, depth=depth + 1)
    for enum in message.enum_type:
        _render_enum(enum, lines, depth=depth + 1)

    rendered_oneofs: set[int] = set()
    for field in message.field:
        oneof_index = _real_oneof_index(field)
        if oneof_index is None:
            _render_field(field, syntax, nested_by_name, lines, depth=depth + 1)
            continue
        if oneof_index in rendered_oneofs:
            continue
        rendered_oneofs.add(oneof_index)
        _render_oneof(message, oneof_index, syntax, nested_by_name, lines, depth=depth + 1)

    for extension_range in message.extension_range:
        options = _format_options(extension_range.options)
        suffix = f" [{', '.join(options)}]" if options else ""
        span = _format_range(extension_range.start, extension_range.end - 1, MESSAGE_RANGE_MAX - 1)
        lines.append(f"{inner}extensions {span}{suffix};")

    for extendee, fields in _group_extensions(message.extension):
        _render_extend_block(extendee, fields, syntax, lines, depth=depth + 1)

    if message.reserved_range:
        spans = (
            _format_range(item.start, item.end - 1, MESSAGE_RANGE_MAX - 1)
            for item in message.reserved_range
        )
        lines.append(f"{inner}reserved {', '.join(spans)};")
    if message.reserved_name:
        lines.append(f"{inner}reserved {', '.join(_quote(name) for name in message.reserved_name)};")

    lines.append(f"{indent}}}")


def _render_oneof(
    message: descriptor_pb2.DescriptorProto,
    oneof_index: int,
    syntax: str,
    nested_by_name: dict[str, descriptor_pb2.DescriptorProto],
    lines: list[str],
    *,
    depth: int,
) -> None:
    indent = INDENT * depth
    oneof = message.oneof_decl[oneof_index]
    lines.append(f"{indent}oneof {oneof.name} {{")
    lines.extend(f"{indent}{INDENT}option {option};" for option in _format_options(oneof.options))
    for field in message.field:
        if _real_oneof_index(field) == oneof_index:
            _render_field(field, syntax, nested_by_name, lines, depth=depth + 1, in_oneof=True)
    lines.append(f"{indent}}}")


def _render_field(
    field: descriptor_pb2.FieldDescriptorProto,
    syntax: str,
    nested_by_name: dict[str, descriptor_pb2.DescriptorProto],
    lines: list[str],
    *,
    depth: int,
    in_oneof: bool = False,
) -> None:
    indent = INDENT * depth
    options = _field_option_entries(field)
    suffix = f" [{', '.join(options)}]" if options else ""

    nested = nested_by_name.get(field.type_name)
    if nested is not None and nested.options.map_entry:
        key, value = _map_entry_types(nested)
        lines.append(f"{indent}map<{key}, {value}> {field.name} = {field.number}{suffix};")
        return

    label = "" if in_oneof else _field_label(field, syntax)
    if field.type == _FieldProto.TYPE_GROUP and nested is not None:
        header = f"{indent}{label}group {nested.name} = {field.number}{suffix} {{"
        scope = field.type_name.rsplit(".", 1)[0]
        _render_message(nested, syntax, lines, scope=scope, depth=depth, header=header)
        return

    lines.append(f"{indent}{label}{_field_type(field)} {field.name} = {field.number}{suffix};")


def _render_enum(enum: descriptor_pb2.EnumDescriptorProto, lines: list[str], *, depth: int) -> None:
    indent = INDENT * depth
    inner = INDENT * (depth + 1)
    lines.append(f"{indent}enum {enum.name} {{")
    lines.extend(f"{inner}option {option};" for option in _format_options(enum.options))
    for value in enum.value:
        options = _format_options(value.options)
        suffix = f" [{', '.join(options)}]" if options else ""
        lines.append(f"{inner}{value.name} = {value.number}{suffix};")
    if enum.reserved_range:
        spans = (_format_range(item.start, item.end, ENUM_RANGE_MAX) for item in enum.reserved_range)
        lines.append(f"{inner}reserved {', '.join(spans)};")
    if enum.reserved_name:
        lines.append(f"{inner}reserved {', '.join(_quote(name) for name in enum.reserved_name)};")
    lines.append(f"{indent}}}")


def _render_service(service: descriptor_pb2.ServiceDescriptorProto, lines: list[str]) -> None:
    lines.append(f"service {service.name} {{")
    lines.extend(f"{INDENT}option {option};" for option in _format_options(service.options))
    for method in service.method:
        request = f"stream {method.input_type}" if method.client_streaming else method.input_type
        response = f"stream {method.output_type}" if method.server_streaming else method.output_type
        signature = f"{INDENT}rpc {method.name}({request}) returns ({response})"
        options = _format_options(method.options)
        if not options:
            lines.append(f"{signature};")
            continue
        lines.append(f"{signature} {{")
        lines.extend(f"{INDENT * 2}option {option};" for option in options)
        lines.append(f"{INDENT}}}")
    lines.append("}")


def _render_extend_block(
    extendee: str,
    fields: Sequence[descriptor_pb2.FieldDescriptorProto],
    syntax: str,
    lines: list[str],
    *,
    depth: int,
) -> None:
    indent = INDENT * depth
    lines.append(f"{indent}extend {extendee} {{")
    for field in fields:
        _render_field(field, syntax, {}, lines, depth=depth + 1)
    lines.append(f"{indent}}}")


def _group_extensions(
    extensions: Sequence[descriptor_pb2.FieldDescriptorProto],
) -> list[tuple[str, list[descriptor_pb2.FieldDescriptorProto]]]:
    grouped: dict[str, list[descriptor_pb2.FieldDescriptorProto]] = {}
    for extension in extensions:
        grouped.setdefault(extension.extendee, []).append(extension)
    return list(grouped.items())


def _field_label(field: descriptor_pb2.FieldDescriptorProto, syntax: str) -> str:
    if field.label == _FieldProto.LABEL_REPEATED:
        return "repeated "
    if field.label == _FieldProto.LABEL_REQUIRED:
        return "required "
    if syntax == "editions":
        return ""
    if syntax == "proto3" and not field.proto3_optional:
        return ""
    return "optional "


def _field_type(field: descriptor_pb2.FieldDescriptorProto) -> str:
    scalar = _SCALAR_TYPE_NAMES.get(field.type)
    if scalar is not None:
        return scalar
    return field.type_name


def _real_oneof_index(field: descriptor_pb2.FieldDescriptorProto) -> int | None:
    # proto3 `optional` fields live in a synthetic oneof that is not written out.
    if not field.HasField("oneof_index") or field.proto3_optional:
        return None
    return field.oneof_index


def _is_group_type(
    type_name: str, fields: Sequence[descriptor_pb2.FieldDescriptorProto]
) -> bool:
    return any(
        field.type == _FieldProto.TYPE_GROUP and field.type_name == type_name
        for field in fields
    )


def _map_entry_types(entry: descriptor_pb2.DescriptorProto) -> tuple[str, str]:
    by_number = {field.number: field for field in entry.field}
    return _field_type(by_number[1]), _field_type(by_number[2])


def _field_option_entries(field: descriptor_pb2.FieldDescriptorProto) -> list[str]:
    entries: list[str] = []
    if field.HasField("default_value"):
        entries.append(f"default = {_format_default(field)}")
    if field.HasField("json_name") and field.json_name != _default_json_name(field.name):
        entries.append(f"json_name = {_quote(field.json_name)}")
    entries.extend(_format_options(field.options))
    return entries


def _format_default(field: descriptor_pb2.FieldDescriptorProto) -> str:
    if field.type == _FieldProto.TYPE_STRING:
        return _quote(field.default_value)
    if field.type == _FieldProto.TYPE_BYTES:
        # Stored already C-escaped.
        return f'"{field.default_value}"'
    return field.default_value


def _default_json_name(name: str) -> str:
    parts: list[str] = []
    capitalize_next = False
    for char in name:
        if char == "_":
            capitalize_next = True
        elif capitalize_next:
            parts.append(char.upper())
            capitalize_next = False
        else:
            parts.append(char)
    return "".join(parts)


def _format_options(options: Message) -> list[str]:
    """Format the set fields of an `*Options` message as `name = value` entries."""
    entries: list[str] = []
    for descriptor, value in options.ListFields():
        if descriptor.name == "uninterpreted_option":
            continue
        name = f"({descriptor.full_name})" if descriptor.is_extension else descriptor.name
        values = value if descriptor.label == FieldDescriptor.LABEL_REPEATED else (value,)
        entries.extend(f"{name} = {_format_option_value(descriptor, item)}" for item in values)

    unresolved = len(unknown_fields.UnknownFieldSet(options))
    if unresolved:
        logger.warning(
            "Dropping %d %s entries whose extension is not loaded",
            unresolved,
            options.DESCRIPTOR.full_name,
        )
    return entries


def _format_option_value(descriptor: FieldDescriptor, value: Any) -> str:
    if descriptor.type == FieldDescriptor.TYPE_ENUM:
        enum_value = descriptor.enum_type.values_by_number.get(value)
        return enum_value.name if enum_value is not None else str(value)
    if descriptor.type in (FieldDescriptor.TYPE_MESSAGE, FieldDescriptor.TYPE_GROUP):
        return f"{{ {text_format.MessageToString(value, as_one_line=True)} }}"
    if descriptor.type == FieldDescriptor.TYPE_BOOL:
        return "true" if value else "false"
    if descriptor.type in (FieldDescriptor.TYPE_STRING, FieldDescriptor.TYPE_BYTES):
        return _quote(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "nan"
        if math.isinf(value):
            return "inf" if value > 0 else "-inf"
        return repr(value)
    return str(value)


def _quote(value: str | bytes) -> str:
    return f'"{text_encoding.CEscape(value, as_utf8=isinstance(value, str))}"'


def _format_range(start: int, last: int, maximum: int) -> str:
    if start == last:
        return str(start)
    upper = "max" if last >= maximum else str(last)
    return f"{start} to {upper}"
