"""Dependency resolution failures."""

from __future__ import annotations


class DependencyResolutionError(Exception):
    """Raised when discovered descriptors cannot be ordered and registered."""


class UnknownDependency(DependencyResolutionError):
    """A dependency name was never discovered in the scanned buffer."""

    def __init__(self, name: str, required_by: str | None = None) -> None:
        if required_by is None:
            message = f"Unknown dependency: {name}"
        else:
            message = f"Unknown dependency: {name} (imported by {required_by})"
        super().__init__(message)
        self.name = name
        self.required_by = required_by


class CyclicDependency(DependencyResolutionError):
    """Descriptors import each other in a loop."""

    def __init__(self, chain: tuple[str, ...]) -> None:
        super().__init__(f"Cyclic dependency: {' -> '.join(chain)}")
        self.chain = chain
