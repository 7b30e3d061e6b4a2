"""Schema management exports."""

from .proto_text_renderer import render_proto_file, render_textproto
from .schema_models import (
    DEFAULT_COMPILED_EXTENSION,
    DescriptorAlreadyRenderedError,
    SchemaDescriptor,
    compiled_name_for,
)
from .schema_pool import MissingDependencyError, SchemaPool, SchemaPoolError

__all__ = [
    "DEFAULT_COMPILED_EXTENSION",
    "DescriptorAlreadyRenderedError",
    "SchemaDescriptor",
    "compiled_name_for",
    "MissingDependencyError",
    "SchemaPool",
    "SchemaPoolError",
    "render_proto_file",
    "render_textproto",
]
