"""Schema pool service backed by a protobuf descriptor pool."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import cast

# Imported for their side effect of registering the well-known types in the default pool.
from google.protobuf import (  # noqa: F401  # pylint: disable=unused-import
    any_pb2,
    api_pb2,
    descriptor_pb2,
    descriptor_pool,
    duration_pb2,
    empty_pb2,
    field_mask_pb2,
    message_factory,
    source_context_pb2,
    struct_pb2,
    timestamp_pb2,
    type_pb2,
    wrappers_pb2,
)
from google.protobuf.message import Message

from embedded_proto_dump.configuration.runtime_settings import RenderFormat

from .proto_text_renderer import render_proto_file, render_textproto
from .schema_models import SchemaDescriptor

logger = logging.getLogger(__name__)

TextRenderer = Callable[[descriptor_pb2.FileDescriptorProto], str]

OPTIONS_EXTENDEE_PREFIX = ".google.protobuf."
OPTIONS_EXTENDEE_SUFFIX = "Options"

_RENDERERS: dict[RenderFormat, TextRenderer] = {
    RenderFormat.PROTO: render_proto_file,
    RenderFormat.TEXTPROTO: render_textproto,
}


class SchemaPoolError(Exception):
    """Raised when a descriptor cannot be built into the pool."""


class MissingDependencyError(SchemaPoolError):
    """Raised when a descriptor is registered before all of its dependencies."""

    def __init__(self, name: str, missing: tuple[str, ...]) -> None:
        super().__init__(f"{name} depends on unregistered files: {', '.join(missing)}")
        self.name = name
        self.missing = missing


class SchemaPool:
    """Registry that validates descriptors against registered dependencies and renders them."""

    def __init__(
        self,
        *,
        render_format: RenderFormat = RenderFormat.PROTO,
        renderer: TextRenderer | None = None,
    ) -> None:
        self._pool = descriptor_pool.DescriptorPool()
        self._renderer = renderer or _RENDERERS[render_format]
        self._registered: list[str] = []
        # Serialized files in the order they were built, replayed into the options pool.
        self._built_files: list[bytes] = []
        self._option_extension_files: list[str] = []
        self._options_aware_class: type[Message] | None = None

    @property
    def registered_names(self) -> tuple[str, ...]:
        return tuple(self._registered)

    def find(self, name: str) -> bool:
        """Report whether a file with this name is already built into the pool."""
        try:
            self._pool.FindFileByName(name)
        except KeyError:
            return False
        return True

    def register(self, descriptor: SchemaDescriptor) -> str:
        """Build `descriptor` into the pool and store its rendered text on it."""
        missing = tuple(name for name in descriptor.dependencies if not self.find(name))
        if missing:
            raise MissingDependencyError(descriptor.name, missing)

        serialized = descriptor.proto.SerializeToString()
        try:
            file_descriptor = self._pool.AddSerializedFile(serialized)
        except (TypeError, KeyError, ValueError) as exc:
            raise SchemaPoolError(f"Failed to build {descriptor.name}: {exc}") from exc
        self._record_built_file(descriptor.proto, serialized)

        canonical = descriptor_pb2.FileDescriptorProto()
        file_descriptor.CopyToProto(canonical)
        text = self._renderer(self._with_custom_options(canonical))
        descriptor.mark_rendered(text)
        self._registered.append(descriptor.name)
        return text

    def has_runtime_file(self, name: str) -> bool:
        """Report whether the protobuf runtime ships a file with this name."""
        try:
            descriptor_pool.Default().FindFileByName(name)
        except KeyError:
            return False
        return True

    def import_runtime_file(self, name: str) -> None:
        """Copy a runtime-bundled file (and its imports) into the pool without rendering it."""
        if self.find(name):
            return
        try:
            runtime_file = descriptor_pool.Default().FindFileByName(name)
        except KeyError as exc:
            raise SchemaPoolError(f"{name} is not bundled with the protobuf runtime.") from exc

        proto = descriptor_pb2.FileDescriptorProto()
        runtime_file.CopyToProto(proto)
        for dependency in proto.dependency:
            self.import_runtime_file(dependency)
        serialized = proto.SerializeToString()
        try:
            self._pool.AddSerializedFile(serialized)
        except (TypeError, KeyError, ValueError) as exc:
            raise SchemaPoolError(f"Failed to import runtime file {name}: {exc}") from exc
        self._record_built_file(proto, serialized)
        logger.info("Imported %s from the protobuf runtime", name)

    def _record_built_file(
        self, proto: descriptor_pb2.FileDescriptorProto, serialized: bytes
    ) -> None:
        self._built_files.append(serialized)
        if any(_extends_options(field) for field in _all_extensions(proto)):
            self._option_extension_files.append(proto.name)
            self._options_aware_class = None

    def _with_custom_options(
        self, canonical: descriptor_pb2.FileDescriptorProto
    ) -> descriptor_pb2.FileDescriptorProto:
        """Decode `canonical` again so options set through loaded extensions are readable.

        A plain `descriptor_pb2` message keeps such options as unknown fields.
        """
        if not self._option_extension_files:
            return canonical
        message_class = self._options_aware_file_class()
        return cast(
            descriptor_pb2.FileDescriptorProto,
            message_class.FromString(canonical.SerializeToString()),
        )

    def _options_aware_file_class(self) -> type[Message]:
        # Generated classes bind their extensions when created, so a fresh pool is
        # built whenever another option-extending file has been added.
        if self._options_aware_class is None:
            options_pool = descriptor_pool.DescriptorPool()
            try:
                for serialized in self._built_files:
                    options_pool.AddSerializedFile(serialized)
            except (TypeError, KeyError, ValueError) as exc:
                raise SchemaPoolError(f"Failed to load custom option extensions: {exc}") from exc
            message_factory.GetMessageClassesForFiles(self._option_extension_files, options_pool)
            self._options_aware_class = message_factory.GetMessageClass(
                options_pool.FindMessageTypeByName("google.protobuf.FileDescriptorProto")
            )
        return self._options_aware_class


def _all_extensions(
    proto: descriptor_pb2.FileDescriptorProto,
) -> Iterable[descriptor_pb2.FieldDescriptorProto]:
    yield from proto.extension
    messages = list(proto.message_type)
    while messages:
        message = messages.pop()
        yield from message.extension
        messages.extend(message.nested_type)


def _extends_options(field: descriptor_pb2.FieldDescriptorProto) -> bool:
    return field.extendee.startswith(OPTIONS_EXTENDEE_PREFIX) and field.extendee.endswith(
        OPTIONS_EXTENDEE_SUFFIX
    )
