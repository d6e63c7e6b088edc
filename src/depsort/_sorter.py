"""Depth-first topological sorter tolerant of cycles."""

import logging
from collections.abc import Hashable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import StrEnum

from ._errors import CircularDependencyError, MissingDependencyError, UnknownNodeError

logger = logging.getLogger(__name__)


class VertexState(StrEnum):
    """Traversal state of a vertex during one sort."""

    NOT_VISITED = "not_visited"
    IN_PROGRESS = "in_progress"
    VISITED = "visited"


@dataclass(slots=True)
class Vertex[K: Hashable, V]:
    """A registered node: its key, payload, traversal state and outgoing edges."""

    key: K
    value: V
    state: VertexState = VertexState.NOT_VISITED
    dependency_list: list[K] = field(default_factory=list)


@dataclass(slots=True)
class _Frame[K: Hashable, V]:
    """One pending step of the traversal stack.

    A regular frame walks the dependencies of ``vertex`` and emits it when done.
    A cycle frame walks the dependencies of an in-progress ``vertex`` and only
    visits the ones not yet reached; it never emits.
    """

    vertex: Vertex[K, V]
    pending: Iterator[K]
    cycle: bool = False


class TopologicalSorter[K: Hashable, V]:
    """Order payloads so that each one comes after everything it depends on.

    Nodes are registered with :meth:`add_node` and linked with
    :meth:`add_dependency`. :meth:`sort` runs a depth-first search and returns
    the payloads in postorder, then empties the sorter so it can be reused for
    an unrelated graph. The search runs in O(V + E).

    Before the search, nodes are stably ordered by how many dependencies they
    declare, fewest first. This only affects nodes without an ordering
    constraint between them and the order inside cycles.

    Args:
        allow_cycles: When True (the default), a cycle does not fail the sort;
            the nodes of the cycle are emitted in a best-effort order. When
            False, the first cycle found raises :class:`CircularDependencyError`.

    Example:
        >>> sorter = TopologicalSorter()
        >>> sorter.add_node("users", "users table")
        >>> sorter.add_node("groups", "groups table")
        >>> sorter.add_dependency("users", "groups")
        >>> sorter.sort()
        ['groups table', 'users table']

    """

    def __init__(self, *, allow_cycles: bool = True) -> None:
        self._allow_cycles = allow_cycles
        self._vertices: dict[K, Vertex[K, V]] = {}
        self._sorted: list[V] = []

    @property
    def allow_cycles(self) -> bool:
        """Whether cycles are tolerated instead of raising."""
        return self._allow_cycles

    def add_node(self, key: K, value: V) -> None:
        """Register a node, replacing any node previously registered under ``key``."""
        self._vertices[key] = Vertex(key, value)

    def has_node(self, key: K) -> bool:
        """Check whether a node is registered under ``key``."""
        return key in self._vertices

    def add_dependency(self, from_key: K, to_key: K) -> None:
        """Declare that the node ``from_key`` depends on the node ``to_key``.

        ``to_key`` does not have to be registered yet, but it must be by the
        time :meth:`sort` is called.

        Raises:
            UnknownNodeError: If ``from_key`` is not registered.

        """
        try:
            vertex = self._vertices[from_key]
        except KeyError:
            raise UnknownNodeError(from_key) from None
        vertex.dependency_list.append(to_key)

    def sort(self) -> list[V]:
        """Return the payloads of all nodes with dependencies first.

        On success the sorter is emptied. On failure the registered nodes and
        dependencies are kept, so the graph can be fixed and sorted again.

        Raises:
            MissingDependencyError: If a dependency points to an unregistered key.
            CircularDependencyError: If cycles are disallowed and one is found.

        """
        logger.debug(f"Sorting {len(self._vertices)} nodes (allow_cycles={self._allow_cycles})")
        ordered = sorted(self._vertices.values(), key=lambda vertex: len(vertex.dependency_list))

        try:
            for vertex in ordered:
                if vertex.state is VertexState.NOT_VISITED:
                    self._visit(vertex)
        except BaseException:
            # Keep the graph for a retry, but not the partial traversal
            self._reset_traversal()
            raise

        sorted_list = self._sorted

        self._vertices = {}
        self._sorted = []

        return sorted_list

    def __len__(self) -> int:
        """Return the number of registered nodes."""
        return len(self._vertices)

    def __contains__(self, key: object) -> bool:
        """Check whether a node is registered under ``key``."""
        return key in self._vertices

    def _visit(self, root: Vertex[K, V]) -> None:
        """Depth-first visit from ``root``, appending payloads in postorder."""
        stack = [self._enter(root)]

        while stack:
            frame = stack[-1]
            # The iterator keeps its position while a deeper frame is on top
            for dependency in frame.pending:
                next_frame = self._follow(frame, dependency)
                if next_frame is not None:
                    stack.append(next_frame)
                    break
            else:
                stack.pop()
                if not frame.cycle:
                    frame.vertex.state = VertexState.VISITED
                    self._sorted.append(frame.vertex.value)

    def _follow(self, frame: _Frame[K, V], dependency: K) -> _Frame[K, V] | None:
        """Handle one dependency of ``frame``, returning the frame to descend into, if any."""
        child = self._get_vertex(dependency, frame.vertex)

        if frame.cycle:
            # Settle the rest of the in-progress node's dependencies first
            if child.state is VertexState.NOT_VISITED:
                return self._enter(child)
            return None

        # Self-references are allowed
        if child is frame.vertex:
            return None

        match child.state:
            case VertexState.VISITED:
                return None
            case VertexState.IN_PROGRESS:
                if not self._allow_cycles:
                    raise CircularDependencyError(frame.vertex.key, child.key)
                logger.debug(f"Tolerating cyclic dependency between '{frame.vertex.key}' and '{child.key}'")
                return _Frame(child, iter(child.dependency_list), cycle=True)
            case VertexState.NOT_VISITED:
                return self._enter(child)

    @staticmethod
    def _enter(vertex: Vertex[K, V]) -> _Frame[K, V]:
        vertex.state = VertexState.IN_PROGRESS
        return _Frame(vertex, iter(vertex.dependency_list))

    def _get_vertex(self, key: K, owner: Vertex[K, V]) -> Vertex[K, V]:
        """Resolve ``key`` to its vertex.

        Raises:
            MissingDependencyError: If ``key`` is not registered.

        """
        try:
            return self._vertices[key]
        except KeyError:
            raise MissingDependencyError(owner.key, key) from None

    def _reset_traversal(self) -> None:
        for vertex in self._vertices.values():
            vertex.state = VertexState.NOT_VISITED
        self._sorted = []


def sort_dependencies[K: Hashable](
    dependencies: Mapping[K, Iterable[K]],
    *,
    allow_cycles: bool = True,
) -> list[K]:
    """Sort the keys of a dependency mapping (dependencies before dependents).

    Args:
        dependencies: Mapping from each node to the nodes it depends on.
            Every dependency must itself be a key of the mapping.
        allow_cycles: Whether cycles are tolerated, see :class:`TopologicalSorter`.

    Returns:
        The keys of ``dependencies`` in dependency order.

    Raises:
        MissingDependencyError: If a dependency is not a key of the mapping.
        CircularDependencyError: If cycles are disallowed and one is found.

    Example:
        >>> # b depends on a, c depends on b
        >>> sort_dependencies({"c": ["b"], "b": ["a"], "a": []})
        ['a', 'b', 'c']

    """
    sorter: TopologicalSorter[K, K] = TopologicalSorter(allow_cycles=allow_cycles)
    for key in dependencies:
        sorter.add_node(key, key)
    for key, targets in dependencies.items():
        for target in targets:
            sorter.add_dependency(key, target)
    return sorter.sort()
