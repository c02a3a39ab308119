"""
Rule set manager: built-in plus runtime rules per category.

Built-in rules are parsed once when the manager is created and never change.
Runtime rules are replaced wholesale by configure_runtime_rules(). Both
categories live in one immutable snapshot that is swapped with a single
reference assignment, so readers see either the old rules or the new ones.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from ..resolver import PackageVersionResolver
from .defaults import DEFAULT_RULES
from .document import Category
from .version_rule import VersionRule, any_matches, parse_rules

logger = logging.getLogger(__name__)

RuleTable = Mapping[str, tuple[VersionRule, ...]]

_EMPTY_TABLE: RuleTable = MappingProxyType({})


@dataclass(frozen=True)
class _RuntimeRules:
    exclude: RuleTable = field(default_factory=lambda: _EMPTY_TABLE)
    include: RuleTable = field(default_factory=lambda: _EMPTY_TABLE)

    def table(self, category: Category) -> RuleTable:
        return self.exclude if category is Category.EXCLUDE else self.include


def _category(value: Category | str) -> Category:
    return value if isinstance(value, Category) else Category(value)


def _lookup(mapping: Mapping[Any, Any], category: Category) -> Any:
    # Accept both Category members and their string values as keys.
    if category.value in mapping:
        return mapping[category.value]
    return mapping.get(category)


def _build_builtin_table(category: Category, raw: Mapping[str, Sequence[str]]) -> RuleTable:
    table: dict[str, tuple[VersionRule, ...]] = {}
    for package_id, rule_strings in raw.items():
        rules = tuple(parse_rules(rule_strings))
        if not rules:
            raise ValueError(f"built-in {category.value} entry {package_id!r} has no valid rules")
        table[package_id] = rules
    return MappingProxyType(table)


def _build_runtime_table(raw: Any) -> tuple[RuleTable, int]:
    if not isinstance(raw, Mapping):
        return _EMPTY_TABLE, 0
    table: dict[str, tuple[VersionRule, ...]] = {}
    for package_id, rule_strings in raw.items():
        if not isinstance(rule_strings, (list, tuple)):
            continue
        rules = tuple(parse_rules(rule_strings))
        if rules:
            table[package_id] = rules
    return MappingProxyType(table), len(raw)


class RuleSetManager:
    """
    Decides whether a package is managed by the tunnel policy.

    Args:
        builtin_rules: Raw built-in rules per category (defaults to the
            package's compiled-in rules). Every entry must contain at least
            one valid rule string.
    """

    def __init__(self, builtin_rules: Mapping[Category, Mapping[str, Sequence[str]]] | None = None):
        raw = DEFAULT_RULES if builtin_rules is None else builtin_rules
        self._builtin: Mapping[Category, RuleTable] = MappingProxyType(
            {
                category: _build_builtin_table(category, _lookup(raw, category) or {})
                for category in Category
            }
        )
        self._runtime = _RuntimeRules()

    # --- Reconfiguration ---

    def configure_runtime_rules(self, document: Mapping[str, Any]) -> None:
        """
        Replace the runtime rules with the ones in a raw rule document.

        Packages whose rule strings are all invalid get no runtime entry.
        Nothing is persisted here.
        """
        exclude, exclude_received = _build_runtime_table(_lookup(document, Category.EXCLUDE))
        include, include_received = _build_runtime_table(_lookup(document, Category.INCLUDE))

        self._runtime = _RuntimeRules(exclude=exclude, include=include)

        logger.info(
            "Loaded runtime rules for %d excluded apps (%d received) and %d included apps (%d received)",
            len(exclude),
            exclude_received,
            len(include),
            include_received,
        )

    def clear_runtime_rules(self) -> None:
        self._runtime = _RuntimeRules()

    # --- Queries ---

    def rules_for_package(self, category: Category | str, package_id: str) -> tuple[VersionRule, ...]:
        """Built-in rules for the package followed by its runtime rules."""
        return self._rules_for(self._runtime, _category(category), package_id)

    def _rules_for(self, runtime: _RuntimeRules, category: Category, package_id: str) -> tuple[VersionRule, ...]:
        builtin = self._builtin[category].get(package_id, ())
        return builtin + runtime.table(category).get(package_id, ())

    def matches(self, category: Category | str, package_id: str, version_code: int) -> bool:
        return any_matches(self.rules_for_package(category, package_id), version_code)

    def matches_any(self, package_id: str, version_code: int) -> bool:
        """True if the package matches an exclude rule or an include rule."""
        runtime = self._runtime
        return any(
            any_matches(self._rules_for(runtime, category, package_id), version_code)
            for category in (Category.EXCLUDE, Category.INCLUDE)
        )

    def all_managed_identifiers(self, category: Category | str) -> set[str]:
        """Every package with a built-in or runtime rule, installed or not."""
        category = _category(category)
        return set(self._builtin[category]) | set(self._runtime.table(category))

    def version_aware_managed_identifiers(
        self,
        category: Category | str,
        resolver: PackageVersionResolver,
    ) -> set[str]:
        """Managed packages that are installed and whose installed version matches."""
        category = _category(category)
        runtime = self._runtime
        managed: set[str] = set()
        for package_id in set(self._builtin[category]) | set(runtime.table(category)):
            version_code = resolver.resolve(package_id)
            if version_code is None:
                continue
            if any_matches(self._rules_for(runtime, category, package_id), version_code):
                managed.add(package_id)
        return managed

    def runtime_package_ids(self, category: Category | str) -> set[str]:
        return set(self._runtime.table(_category(category)))
