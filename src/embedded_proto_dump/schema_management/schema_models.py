"""Schema management entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import PurePosixPath

from google.protobuf import descriptor_pb2

DEFAULT_COMPILED_EXTENSION = ".pb"


def compiled_name_for(name: str, extension: str = DEFAULT_COMPILED_EXTENSION) -> str:
    """Replace the final extension of `name`, keeping any directory components."""
    path = PurePosixPath(name)
    if path.suffix:
        return str(path.with_suffix(extension))
    return f"{name}{extension}"


class DescriptorAlreadyRenderedError(Exception):
    """Raised when rendered text is assigned to a descriptor twice."""


@dataclass
class SchemaDescriptor:
    """One discovered schema file and the exact bytes it was parsed from."""

    name: str
    dependencies: tuple[str, ...]
    raw_bytes: bytes
    proto: descriptor_pb2.FileDescriptorProto = field(repr=False, compare=False)
    offset: int | None = None
    compiled_extension: str = DEFAULT_COMPILED_EXTENSION
    rendered_text: str | None = field(default=None, compare=False)

    @property
    def compiled_name(self) -> str:
        return compiled_name_for(self.name, self.compiled_extension)

    @property
    def is_rendered(self) -> bool:
        return self.rendered_text is not None

    def mark_rendered(self, text: str) -> None:
        if self.rendered_text is not None:
            raise DescriptorAlreadyRenderedError(f"{self.name} has already been rendered.")
        self.rendered_text = text
