"""Configuration domain entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

# Serialized `syntax = "proto3"` (field 12, length-delimited) closes every proto3 descriptor.
DEFAULT_END_MARKER = b"\x62\x06proto3"
DEFAULT_NAME_MARKER = b".proto"
# Field 1 (name), wire type 2.
DEFAULT_NAME_TAG = 0x0A


class RenderFormat(str, Enum):
    """Text representation written for every resolved descriptor."""

    PROTO = "proto"
    TEXTPROTO = "textproto"


@dataclass(frozen=True)
class ScannerSettings:
    """Byte patterns used to locate descriptor boundaries."""

    end_marker: bytes = DEFAULT_END_MARKER
    name_marker: bytes = DEFAULT_NAME_MARKER
    name_tag: int = DEFAULT_NAME_TAG


@dataclass(frozen=True)
class OutputSettings:
    """Output tree layout and change-tracking behavior."""

    text_dir: str = "text"
    compiled_dir: str = "compiled"
    compiled_extension: str = ".pb"
    backup_replaced_files: bool = False


@dataclass(frozen=True)
class RenderingSettings:
    """Schema text rendering options."""

    format: RenderFormat = RenderFormat.PROTO


@dataclass(frozen=True)
class ResolutionSettings:
    """Dependency resolution options."""

    allow_runtime_dependencies: bool = False


@dataclass(frozen=True)
class Configuration:
    """Top-level configuration aggregate."""

    path: Path | None = None
    scanner: ScannerSettings = field(default_factory=ScannerSettings)
    output: OutputSettings = field(default_factory=OutputSettings)
    rendering: RenderingSettings = field(default_factory=RenderingSettings)
    resolution: ResolutionSettings = field(default_factory=ResolutionSettings)


DEFAULT_SCANNER_SETTINGS = ScannerSettings()
DEFAULT_OUTPUT_SETTINGS = OutputSettings()
