"""Descriptor scanning exports."""

from .descriptor_parsing import (
    DescriptorParseError,
    parse_candidate,
    parse_candidates,
    parse_descriptor_bytes,
)
from .descriptor_scanner import find_descriptor_start, iter_candidates, scan
from .scan_models import RawCandidate

__all__ = [
    "RawCandidate",
    "DescriptorParseError",
    "find_descriptor_start",
    "iter_candidates",
    "scan",
    "parse_candidate",
    "parse_candidates",
    "parse_descriptor_bytes",
]
