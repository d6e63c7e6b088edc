"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path


class ConfigError(Exception):
    """Error in depsort configuration."""


@dataclass(slots=True, frozen=True)
class DepsortConfig:
    """Configuration loaded from the ``[tool.depsort]`` table of pyproject.toml.

    Relative paths are resolved from the project root (directory containing pyproject.toml).
    """

    manifest: Path | None = None
    allow_cycles: bool | None = None
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


def load_config(pyproject_path: Path) -> DepsortConfig:
    """Load and validate [tool.depsort] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed DepsortConfig

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    section = data.get("tool", {}).get("depsort", {})

    if not section:
        return DepsortConfig(project_root=project_root)

    manifest_path: Path | None = None
    if "manifest" in section:
        manifest_value = section["manifest"]
        if not isinstance(manifest_value, str):
            msg = "Invalid [tool.depsort].manifest: expected string path"
            raise ConfigError(msg)
        manifest_path = Path(manifest_value)
        if not manifest_path.is_absolute():
            manifest_path = project_root / manifest_path

    allow_cycles: bool | None = None
    if "allow_cycles" in section:
        allow_cycles = section["allow_cycles"]
        if not isinstance(allow_cycles, bool):
            msg = "Invalid [tool.depsort].allow_cycles: expected boolean"
            raise ConfigError(msg)

    return DepsortConfig(
        manifest=manifest_path,
        allow_cycles=allow_cycles,
        project_root=project_root,
    )


def get_config() -> DepsortConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        DepsortConfig (may be empty if no pyproject.toml or no [tool.depsort] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return DepsortConfig()
    return load_config(pyproject_path)
