"""Dependency resolution exports."""

from .dependency_resolver import DependencyResolver, resolve_all
from .resolution_errors import CyclicDependency, DependencyResolutionError, UnknownDependency

__all__ = [
    "DependencyResolver",
    "resolve_all",
    "DependencyResolutionError",
    "UnknownDependency",
    "CyclicDependency",
]
