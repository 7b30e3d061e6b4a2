"""Dependency-first registration of discovered descriptors."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping

from embedded_proto_dump.schema_management.schema_models import SchemaDescriptor
from embedded_proto_dump.schema_management.schema_pool import SchemaPool

from .resolution_errors import CyclicDependency, UnknownDependency

logger = logging.getLogger(__name__)

LOG_INDENT_WIDTH = 3


class DependencyResolver:
    """Registers descriptors into a schema pool so every file follows its imports.

    The pending set and the pool are owned by the caller and mutated in place.
    Descent uses an explicit stack with an in-progress marker per name, so
    import cycles are reported instead of recursing forever.
    """

    def __init__(
        self,
        descriptors: Mapping[str, SchemaDescriptor],
        pool: SchemaPool,
        *,
        pending: set[str] | None = None,
        allow_runtime_dependencies: bool = False,
    ) -> None:
        self._descriptors = descriptors
        self._pool = pool
        self._pending = set(descriptors) if pending is None else pending
        self._allow_runtime_dependencies = allow_runtime_dependencies
        self._load_order: list[str] = []

    @property
    def load_order(self) -> tuple[str, ...]:
        return tuple(self._load_order)

    @property
    def pending(self) -> frozenset[str]:
        return frozenset(self._pending)

    def resolve_all(self) -> list[str]:
        """Resolve pending names until none remain and return the load order."""
        while self._pending:
            self.resolve(next(iter(self._pending)))
        return list(self._load_order)

    def resolve(self, name: str) -> None:
        """Register `name` after registering each of its unregistered dependencies."""
        if self._pool.find(name):
            self._pending.discard(name)
            return
        if name not in self._descriptors:
            if self._import_runtime_dependency(name):
                self._pending.discard(name)
                return
            raise UnknownDependency(name)

        stack: list[tuple[str, Iterator[str]]] = [self._enter(name, depth=0)]
        in_progress = {name}
        while stack:
            current, remaining = stack[-1]
            dependency = next((item for item in remaining if not self._pool.find(item)), None)
            if dependency is None:
                stack.pop()
                in_progress.discard(current)
                self._register(current)
                continue

            if dependency in in_progress:
                chain = [frame_name for frame_name, _ in stack]
                cycle = chain[chain.index(dependency):]
                raise CyclicDependency((*cycle, dependency))
            if dependency not in self._descriptors:
                if self._import_runtime_dependency(dependency):
                    continue
                raise UnknownDependency(dependency, required_by=current)

            stack.append(self._enter(dependency, depth=len(stack)))
            in_progress.add(dependency)

    def _enter(self, name: str, *, depth: int) -> tuple[str, Iterator[str]]:
        dependencies = self._descriptors[name].dependencies
        logger.info(
            "%sLoading %s (%d dependencies)",
            " " * (depth * LOG_INDENT_WIDTH),
            name,
            len(dependencies),
        )
        return name, iter(dependencies)

    def _register(self, name: str) -> None:
        self._pool.register(self._descriptors[name])
        self._load_order.append(name)
        self._pending.discard(name)

    def _import_runtime_dependency(self, name: str) -> bool:
        if not self._allow_runtime_dependencies or not self._pool.has_runtime_file(name):
            return False
        self._pool.import_runtime_file(name)
        return True


def resolve_all(
    pending: set[str],
    descriptors: Mapping[str, SchemaDescriptor],
    pool: SchemaPool,
    *,
    allow_runtime_dependencies: bool = False,
) -> list[str]:
    """Drain `pending` into `pool` and return the dependency-first load order."""
    resolver = DependencyResolver(
        descriptors,
        pool,
        pending=pending,
        allow_runtime_dependencies=allow_runtime_dependencies,
    )
    return resolver.resolve_all()
