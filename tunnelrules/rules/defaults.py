"""Built-in rules compiled into the package."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Sequence

from .document import Category

# Trusted companion apps that always bypass the tunnel.
DEFAULT_EXCLUDE_RULES: Mapping[str, Sequence[str]] = MappingProxyType(
    {
        "ca.psiphon.conduit": ("*",),
        "network.ryve.app": ("*",),
    }
)

DEFAULT_INCLUDE_RULES: Mapping[str, Sequence[str]] = MappingProxyType({})

DEFAULT_RULES: Mapping[Category, Mapping[str, Sequence[str]]] = MappingProxyType(
    {
        Category.EXCLUDE: DEFAULT_EXCLUDE_RULES,
        Category.INCLUDE: DEFAULT_INCLUDE_RULES,
    }
)
