"""Graph manifests: TOML files declaring nodes and their dependencies."""

import logging
import tomllib
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ._errors import CircularDependencyError
from ._sorter import sort_dependencies

logger = logging.getLogger(__name__)


class ManifestError(Exception):
    """Error reading or validating a graph manifest."""


class NodeSpec(BaseModel):
    """A node entry, e.g. ``[nodes.users]``."""

    model_config = ConfigDict(extra="forbid")

    depends_on: list[str] = Field(default_factory=list)
    description: str | None = None


class GraphManifest(BaseModel):
    """A whole graph as declared in a manifest file.

    Example:
        ```toml
        allow_cycles = false

        [nodes.users]
        depends_on = ["groups"]

        [nodes.groups]
        ```

    """

    model_config = ConfigDict(extra="forbid")

    nodes: dict[str, NodeSpec] = Field(default_factory=dict)
    allow_cycles: bool | None = None

    def dependencies(self) -> dict[str, list[str]]:
        """Return the mapping from each node key to the keys it depends on."""
        return {key: list(node.depends_on) for key, node in self.nodes.items()}


def load_manifest(path: Path) -> GraphManifest:
    """Load and validate a manifest from a TOML file.

    Args:
        path: Path to the manifest file.

    Returns:
        The validated manifest.

    Raises:
        ManifestError: If the file is missing, is not valid TOML, or does not
            match the manifest schema.

    """
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError as e:
        msg = f"Manifest file not found: {path}"
        raise ManifestError(msg) from e
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {path}: {e}"
        raise ManifestError(msg) from e

    try:
        manifest = GraphManifest.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid manifest {path}: {e}"
        raise ManifestError(msg) from e

    logger.debug(f"Loaded {len(manifest.nodes)} nodes from {path}")
    return manifest


def order_manifest(manifest: GraphManifest, *, allow_cycles: bool) -> list[str]:
    """Return the node keys of ``manifest`` with dependencies first."""
    return sort_dependencies(manifest.dependencies(), allow_cycles=allow_cycles)


def check_manifest(manifest: GraphManifest) -> list[str]:
    """Validate the graph of a manifest without ordering it.

    Checks for:
    - Dependencies on nodes the manifest does not declare
    - Cycles (only when every dependency is declared)

    Returns:
        List of error messages. Empty list if the graph is valid.

    """
    errors: list[str] = []

    for key, node in manifest.nodes.items():
        errors.extend(
            f"Node '{key}' depends on undeclared node '{target}'"
            for target in node.depends_on
            if target not in manifest.nodes
        )

    if errors:
        return errors

    try:
        sort_dependencies(manifest.dependencies(), allow_cycles=False)
    except CircularDependencyError as e:
        errors.append(str(e))

    return errors
