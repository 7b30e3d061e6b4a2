"""Load-order manifest rendering."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path

from embedded_proto_dump.schema_management.schema_models import SchemaDescriptor

from .output_dumper import OutputDumpError

MANIFEST_INDENT = "    "


def render_load_order_manifest(
    load_order: Sequence[str], descriptors: Mapping[str, SchemaDescriptor]
) -> str:
    """Return the compiled names in load order as a JSON array, one entry per line.

    Downstream tooling expects `[` and `]` on their own lines, four-space
    indented entries and no trailing newline, including for an empty order.
    """
    entries = [
        f"\n{MANIFEST_INDENT}{json.dumps(descriptors[name].compiled_name, ensure_ascii=False)}"
        for name in load_order
    ]
    return "[" + ",".join(entries) + "\n]"


def write_load_order_manifest(
    manifest_path: Path | str,
    load_order: Sequence[str],
    descriptors: Mapping[str, SchemaDescriptor],
) -> Path:
    """Write the manifest and return its path."""
    path = Path(manifest_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            render_load_order_manifest(load_order, descriptors), encoding="utf-8", newline=""
        )
    except OSError as exc:
        raise OutputDumpError(f"Failed to write manifest {path}: {exc}") from exc
    return path
