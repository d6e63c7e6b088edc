"""Dependency ordering with a cycle-tolerant depth-first topological sorter."""

__all__ = [
    "CircularDependencyError",
    "DependencySortError",
    "GraphManifest",
    "ManifestError",
    "MissingDependencyError",
    "NodeSpec",
    "TopologicalSorter",
    "UnknownNodeError",
    "Vertex",
    "VertexState",
    "check_manifest",
    "load_manifest",
    "order_manifest",
    "sort_dependencies",
]

from ._errors import CircularDependencyError, DependencySortError, MissingDependencyError, UnknownNodeError
from ._manifest import GraphManifest, ManifestError, NodeSpec, check_manifest, load_manifest, order_manifest
from ._sorter import TopologicalSorter, Vertex, VertexState, sort_dependencies
