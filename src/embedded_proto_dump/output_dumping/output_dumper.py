"""Writes schema text and compiled descriptors into the output tree."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path, PurePosixPath

from embedded_proto_dump.configuration.runtime_settings import (
    DEFAULT_OUTPUT_SETTINGS,
    OutputSettings,
)
from embedded_proto_dump.schema_management.schema_models import SchemaDescriptor

from .dump_models import DumpStatus, FileDumpResult

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".old"
TEXT_ENCODING = "utf-8"


class OutputDumpError(Exception):
    """Raised when an output file cannot be written."""


def dump_all(
    load_order: Sequence[str],
    descriptors: Mapping[str, SchemaDescriptor],
    output_dir: Path | str,
    backup_enabled: bool,
    *,
    settings: OutputSettings = DEFAULT_OUTPUT_SETTINGS,
) -> list[FileDumpResult]:
    """Dump every resolved descriptor in load order, stopping at the first failure."""
    return [
        dump_file(descriptors[name], output_dir, backup_enabled, settings=settings)
        for name in load_order
    ]


def dump_file(
    descriptor: SchemaDescriptor,
    output_dir: Path | str,
    backup_enabled: bool,
    *,
    settings: OutputSettings = DEFAULT_OUTPUT_SETTINGS,
) -> FileDumpResult:
    """Write the text and compiled artifacts of one descriptor.

    The text file is only rewritten when its bytes differ from the previous
    dump; with backups enabled the previous version is kept as `<file>.old`.
    The compiled file is rewritten every time.
    """
    if descriptor.rendered_text is None:
        raise OutputDumpError(f"{descriptor.name} has not been resolved; nothing to dump.")

    root = Path(output_dir)
    text_path = root / settings.text_dir / _relative_path(descriptor.name)
    compiled_path = root / settings.compiled_dir / _relative_path(descriptor.compiled_name)
    logger.info("Extracting %s", descriptor.name)

    _ensure_parent(text_path)
    _ensure_parent(compiled_path)

    content = descriptor.rendered_text.encode(TEXT_ENCODING)
    status, backup_path = _write_text_artifact(descriptor.name, text_path, content, backup_enabled)
    _write_bytes(compiled_path, descriptor.raw_bytes)

    return FileDumpResult(
        name=descriptor.name,
        text_path=text_path,
        compiled_path=compiled_path,
        status=status,
        backup_path=backup_path,
    )


def _write_text_artifact(
    name: str, text_path: Path, content: bytes, backup_enabled: bool
) -> tuple[DumpStatus, Path | None]:
    if not text_path.exists():
        logger.info(">>> New schema file: %s", name)
        _write_bytes(text_path, content)
        return DumpStatus.NEW, None

    # Compare full contents; sizes alone are unreliable across newline conventions.
    if _read_bytes(text_path) == content:
        return DumpStatus.UNCHANGED, None

    logger.info(">>> %s has changed", name)
    backup_path: Path | None = None
    if backup_enabled:
        backup_path = text_path.with_name(text_path.name + BACKUP_SUFFIX)
        try:
            text_path.replace(backup_path)
        except OSError as exc:
            raise OutputDumpError(
                f"Failed to back up {text_path} to {backup_path}: {exc}"
            ) from exc
    _write_bytes(text_path, content)
    return DumpStatus.CHANGED, backup_path


def _relative_path(name: str) -> PurePosixPath:
    path = PurePosixPath(name.replace("\\", "/"))
    if path.is_absolute() or ".." in path.parts or not path.parts:
        raise OutputDumpError(f"Refusing to write outside the output directory: {name}")
    return path


def _ensure_parent(path: Path) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputDumpError(f"Failed to create directory {path.parent}: {exc}") from exc


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise OutputDumpError(f"Failed to read {path}: {exc}") from exc


def _write_bytes(path: Path, content: bytes) -> None:
    try:
        path.write_bytes(content)
    except OSError as exc:
        raise OutputDumpError(f"Failed to write {path}: {exc}") from exc
