"""
Installed-package version lookup.

The rule engine never inspects the host itself; it asks a resolver for the
installed version code of a package. Resolvers return None for packages that
are not installed.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping, Protocol

import yaml

logger = logging.getLogger(__name__)


class PackageVersionResolver(Protocol):
    """Protocol for resolving a package identifier to its installed version code."""

    def resolve(self, package_id: str) -> int | None:
        """
        Look up the installed version code.

        Args:
            package_id: Package identifier (e.g., "com.example.app")

        Returns:
            The installed version code, or None if the package is not installed.
        """
        ...


class StaticVersionResolver:
    """Resolve versions from an in-memory inventory."""

    def __init__(self, versions: Mapping[str, int] | None = None):
        self.versions: dict[str, int] = dict(versions or {})

    def resolve(self, package_id: str) -> int | None:
        return self.versions.get(package_id)


def _read_inventory(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValueError(f"invalid YAML in {path}: {e}") from e
    if suffix == ".toml":
        import tomllib

        return tomllib.loads(text)
    return json.loads(text)


def load_inventory(path: Path) -> dict[str, int]:
    """
    Load a package inventory file (JSON, YAML or TOML).

    The file maps package identifiers to integer version codes. Entries whose
    version is not an integer are skipped.

    Raises:
        ValueError: If the file cannot be parsed or does not contain a mapping.
    """
    data = _read_inventory(path)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"inventory {path} must map package identifiers to version codes")

    inventory: dict[str, int] = {}
    for package_id, version in data.items():
        if isinstance(version, bool) or not isinstance(version, int):
            logger.warning("Skipping %s in %s: version code %r is not an integer", package_id, path, version)
            continue
        inventory[str(package_id)] = version
    return inventory


class InventoryFileResolver(StaticVersionResolver):
    """Resolve versions from an inventory file loaded once at construction."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(load_inventory(path))


class CompositeVersionResolver:
    """
    Combine multiple resolvers.

    Tries each resolver in order until one reports the package installed.
    """

    def __init__(self, resolvers: list[PackageVersionResolver]):
        self.resolvers = resolvers

    def resolve(self, package_id: str) -> int | None:
        for resolver in self.resolvers:
            version = resolver.resolve(package_id)
            if version is not None:
                return version
        return None
