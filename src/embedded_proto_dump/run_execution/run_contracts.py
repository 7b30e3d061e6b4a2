"""Run execution entities."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from embedded_proto_dump.output_dumping.dump_models import DumpStatus, FileDumpResult


@dataclass(frozen=True)
class RunRequest:
    """Input contract for executing one extraction run."""

    input_path: str
    output_dir: str
    manifest_filename: str | None = None
    config_path: str | None = None
    backup: bool | None = None


@dataclass(frozen=True)
class RunOutcome:
    """Output contract for one completed extraction run."""

    output_dir: Path
    candidates_found: int
    load_order: tuple[str, ...]
    dump_results: tuple[FileDumpResult, ...]
    manifest_path: Path | None

    def count(self, status: DumpStatus) -> int:
        return sum(1 for result in self.dump_results if result.status == status)
