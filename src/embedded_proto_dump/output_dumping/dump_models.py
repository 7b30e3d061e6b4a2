"""Output dumping entities."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class DumpStatus(str, Enum):
    """Change-tracking outcome for one schema text file."""

    NEW = "new"
    CHANGED = "changed"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class FileDumpResult:
    """Paths written for one descriptor and how its text compared to the previous dump."""

    name: str
    text_path: Path
    compiled_path: Path
    status: DumpStatus
    backup_path: Path | None = None
