"""Configuration loader service."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path, PurePosixPath
from typing import Any

import yaml

from .runtime_settings import (
    DEFAULT_END_MARKER,
    DEFAULT_NAME_MARKER,
    DEFAULT_NAME_TAG,
    Configuration,
    OutputSettings,
    RenderFormat,
    RenderingSettings,
    ResolutionSettings,
    ScannerSettings,
)


class ConfigurationError(Exception):
    """Raised when the configuration file is invalid."""


def load_configuration(config_path: Path | str | None = None) -> Configuration:
    """Load and validate the configuration file, or return defaults when no path is given."""
    if config_path is None:
        return Configuration()

    path = Path(config_path)
    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Failed to parse configuration file: {exc}") from exc

    if parsed is None:
        parsed = {}

    if not isinstance(parsed, Mapping):
        raise ConfigurationError("Configuration root must be a mapping.")

    return Configuration(
        path=path,
        scanner=_parse_scanner_section(parsed.get("scanner")),
        output=_parse_output_section(parsed.get("output")),
        rendering=_parse_rendering_section(parsed.get("rendering")),
        resolution=_parse_resolution_section(parsed.get("resolution")),
    )


def _parse_scanner_section(value: Any) -> ScannerSettings:
    section = _optional_mapping(value, "scanner")
    name_marker = section.get("name_marker")
    end_marker_hex = section.get("end_marker_hex")
    name_tag = section.get("name_tag", DEFAULT_NAME_TAG)

    return ScannerSettings(
        end_marker=(
            DEFAULT_END_MARKER
            if end_marker_hex is None
            else _parse_hex_bytes(end_marker_hex, "scanner.end_marker_hex")
        ),
        name_marker=(
            DEFAULT_NAME_MARKER
            if name_marker is None
            else _require_non_empty_string(name_marker, "scanner.name_marker").encode("utf-8")
        ),
        name_tag=_require_byte(name_tag, "scanner.name_tag"),
    )


def _parse_output_section(value: Any) -> OutputSettings:
    section = _optional_mapping(value, "output")
    defaults = OutputSettings()
    text_dir = _require_relative_dir(section.get("text_dir", defaults.text_dir), "output.text_dir")
    compiled_dir = _require_relative_dir(
        section.get("compiled_dir", defaults.compiled_dir), "output.compiled_dir"
    )
    compiled_extension = _require_non_empty_string(
        section.get("compiled_extension", defaults.compiled_extension),
        "output.compiled_extension",
    )
    if not compiled_extension.startswith(".") or len(compiled_extension) < 2:
        raise ConfigurationError("output.compiled_extension must look like '.pb'.")
    if "/" in compiled_extension or "\\" in compiled_extension:
        raise ConfigurationError("output.compiled_extension must not contain path separators.")
    backup = _require_bool(
        section.get("backup_replaced_files", defaults.backup_replaced_files),
        "output.backup_replaced_files",
    )
    return OutputSettings(
        text_dir=text_dir,
        compiled_dir=compiled_dir,
        compiled_extension=compiled_extension,
        backup_replaced_files=backup,
    )


def _parse_rendering_section(value: Any) -> RenderingSettings:
    section = _optional_mapping(value, "rendering")
    raw_format = _require_non_empty_string(
        section.get("format", RenderFormat.PROTO.value), "rendering.format"
    ).lower()
    try:
        render_format = RenderFormat(raw_format)
    except ValueError as exc:
        supported = ", ".join(item.value for item in RenderFormat)
        raise ConfigurationError(
            f"rendering.format '{raw_format}' is not supported (expected one of: {supported})."
        ) from exc
    return RenderingSettings(format=render_format)


def _parse_resolution_section(value: Any) -> ResolutionSettings:
    section = _optional_mapping(value, "resolution")
    allow_runtime = _require_bool(
        section.get("allow_runtime_dependencies", False),
        "resolution.allow_runtime_dependencies",
    )
    return ResolutionSettings(allow_runtime_dependencies=allow_runtime)


def _parse_hex_bytes(value: Any, field_name: str) -> bytes:
    text = _require_non_empty_string(value, field_name)
    try:
        return bytes.fromhex(text)
    except ValueError as exc:
        raise ConfigurationError(f"{field_name} must be a hexadecimal byte string.") from exc


def _optional_mapping(value: Any, section_name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Configuration section '{section_name}' must be a mapping.")
    return value


def _require_relative_dir(value: Any, field_name: str) -> str:
    text = _require_non_empty_string(value, field_name)
    path = PurePosixPath(text.replace("\\", "/"))
    if path.is_absolute() or ".." in path.parts:
        raise ConfigurationError(f"{field_name} must be a relative directory inside the output.")
    return text


def _require_non_empty_string(value: Any, field_name: str) -> str:
    if not isinstance(value, str):
        raise ConfigurationError(f"{field_name} must be a string.")
    stripped = value.strip()
    if not stripped:
        raise ConfigurationError(f"{field_name} must not be empty.")
    return stripped


def _require_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(f"{field_name} must be a boolean.")
    return value


def _require_byte(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer.")
    if not 0 <= value <= 0xFF:
        raise ConfigurationError(f"{field_name} must be between 0 and 255.")
    return value
