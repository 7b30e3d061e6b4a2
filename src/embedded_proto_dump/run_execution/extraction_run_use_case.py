"""Extraction run use-case service."""

from __future__ import annotations

import logging
from pathlib import Path

from embedded_proto_dump.configuration import (
    Configuration,
    ConfigurationError,
    load_configuration,
)
from embedded_proto_dump.dependency_resolution import DependencyResolutionError, DependencyResolver
from embedded_proto_dump.descriptor_scanning import parse_candidates, scan
from embedded_proto_dump.output_dumping import (
    OutputDumpError,
    dump_all,
    write_load_order_manifest,
)
from embedded_proto_dump.schema_management import SchemaPool, SchemaPoolError

from .run_contracts import RunOutcome, RunRequest

logger = logging.getLogger(__name__)


class RunExecutionError(Exception):
    """Raised when an extraction run cannot be completed."""


def execute_extraction_run(request: RunRequest) -> RunOutcome:
    """Scan the input file, resolve every descriptor found and dump the results."""
    configuration = _load_run_configuration(request.config_path)
    buffer = _read_input(request.input_path)
    output_dir = Path(request.output_dir)
    backup_enabled = (
        configuration.output.backup_replaced_files if request.backup is None else request.backup
    )

    candidates = scan(buffer, configuration.scanner)
    descriptors = parse_candidates(
        candidates, compiled_extension=configuration.output.compiled_extension
    )
    logger.info("Discovered %d descriptors in %d candidates", len(descriptors), len(candidates))

    pool = SchemaPool(render_format=configuration.rendering.format)
    resolver = DependencyResolver(
        descriptors,
        pool,
        allow_runtime_dependencies=configuration.resolution.allow_runtime_dependencies,
    )
    try:
        load_order = resolver.resolve_all()
        dump_results = dump_all(
            load_order,
            descriptors,
            output_dir,
            backup_enabled,
            settings=configuration.output,
        )
        manifest_path = (
            write_load_order_manifest(
                output_dir / request.manifest_filename, load_order, descriptors
            )
            if request.manifest_filename
            else None
        )
    except (DependencyResolutionError, SchemaPoolError, OutputDumpError) as exc:
        raise RunExecutionError(str(exc)) from exc

    return RunOutcome(
        output_dir=output_dir.resolve(),
        candidates_found=len(candidates),
        load_order=tuple(load_order),
        dump_results=tuple(dump_results),
        manifest_path=manifest_path,
    )


def _load_run_configuration(config_path: str | None) -> Configuration:
    try:
        return load_configuration(config_path)
    except (ConfigurationError, OSError) as exc:
        raise RunExecutionError(str(exc)) from exc


def _read_input(input_path: str) -> bytes:
    try:
        return Path(input_path).read_bytes()
    except OSError as exc:
        raise RunExecutionError(f"Failed to read input file {input_path}: {exc}") from exc
