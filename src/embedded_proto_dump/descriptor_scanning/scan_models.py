"""Descriptor scanning entities."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RawCandidate:
    """Contiguous `[start, end)` byte range that probably holds one serialized descriptor."""

    start: int
    end: int
    data: bytes

    def __len__(self) -> int:
        return self.end - self.start
