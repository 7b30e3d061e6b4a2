"""Heuristic scanner for serialized file descriptors inside a flat buffer."""

from __future__ import annotations

import logging
from collections.abc import Iterator

from embedded_proto_dump.configuration.runtime_settings import (
    DEFAULT_SCANNER_SETTINGS,
    ScannerSettings,
)

from .scan_models import RawCandidate

logger = logging.getLogger(__name__)

Buffer = bytes | bytearray


def iter_candidates(
    buffer: Buffer, settings: ScannerSettings = DEFAULT_SCANNER_SETTINGS
) -> Iterator[RawCandidate]:
    """Yield non-overlapping descriptor candidates in ascending offset order.

    The end of a descriptor is more distinctive than its start, so the scan looks
    for the end marker first and then walks backward to the name field. Every
    candidate found becomes the lower bound for the next one.
    """
    position = 0
    while True:
        marker_offset = buffer.find(settings.end_marker, position)
        if marker_offset == -1:
            return

        end = marker_offset + len(settings.end_marker)
        start = find_descriptor_start(buffer, position, end, settings)
        if start is None:
            logger.debug("Discarding end marker at 0x%X without a valid name field", marker_offset)
        else:
            yield RawCandidate(start=start, end=end, data=bytes(buffer[start:end]))
        position = end


def scan(
    buffer: Buffer, settings: ScannerSettings = DEFAULT_SCANNER_SETTINGS
) -> list[RawCandidate]:
    """Return every descriptor candidate found in `buffer`."""
    return list(iter_candidates(buffer, settings))


def find_descriptor_start(
    buffer: Buffer,
    lower_bound: int,
    end: int,
    settings: ScannerSettings = DEFAULT_SCANNER_SETTINGS,
) -> int | None:
    """Locate the name-field tag that opens the descriptor ending at `end`.

    The file name is the first field of a descriptor and ends with the name
    marker, so each marker occurrence (latest first) is checked against the
    nearest preceding tag byte. The byte after the tag must equal the distance
    from the tag to the end of the marker. Only a single length byte is read,
    which means names of 128 bytes or more never validate.
    """
    tag = bytes((settings.name_tag,))
    search_end = end
    while True:
        suffix_start = buffer.rfind(settings.name_marker, lower_bound, search_end)
        if suffix_start == -1:
            return None
        suffix_end = suffix_start + len(settings.name_marker)

        start = buffer.rfind(tag, lower_bound, suffix_end)
        if start == -1:
            return None

        if start + 1 < len(buffer) and start + 2 + buffer[start + 1] == suffix_end:
            return start
        search_end = suffix_start
