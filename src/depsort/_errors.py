"""Exceptions raised while ordering a dependency graph."""

from collections.abc import Hashable


class DependencySortError(Exception):
    """Base class for errors raised by the topological sorter."""


class MissingDependencyError(DependencySortError):
    """A node depends on a key that is not registered in the sorter.

    Attributes:
        node: Key of the node declaring the dependency.
        dependency: The unregistered key it depends on.

    """

    def __init__(self, node: Hashable, dependency: Hashable) -> None:
        self.node = node
        self.dependency = dependency
        msg = f'Node "{node}" has a dependency on "{dependency}", but it is not registered to be sorted.'
        super().__init__(msg)


class CircularDependencyError(DependencySortError):
    """A cycle was found while cyclic dependencies are disallowed.

    Attributes:
        node: Key of the node being visited when the back-edge was found.
        dependency: Key of the in-progress node the back-edge points to.

    """

    def __init__(self, node: Hashable, dependency: Hashable) -> None:
        self.node = node
        self.dependency = dependency
        msg = (
            f'Graph contains a cyclic dependency between "{node}" and "{dependency}". '
            "For example: C depends on B, B depends on A, and A depends on C."
        )
        super().__init__(msg)


class UnknownNodeError(DependencySortError, KeyError):
    """A dependency was declared from a node that was never registered."""

    def __init__(self, node: Hashable) -> None:
        self.node = node
        msg = f'Cannot add a dependency from "{node}": the node is not registered. Call add_node() first.'
        super().__init__(msg)

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])
