"""Match query CLI commands: check, managed."""

from __future__ import annotations

import json
from pathlib import Path

from rich.console import Console
from rich.table import Table

from ..config import Settings
from ..resolver import InventoryFileResolver
from ..rules.document import Category
from ..rules.manager import RuleSetManager
from ..rules.storage import rule_document_store


def restore_manager(settings: Settings) -> RuleSetManager:
    """Build a manager with the persisted runtime rules applied."""
    manager = RuleSetManager()
    manager.configure_runtime_rules(rule_document_store(settings).load())
    return manager


def run_check(settings: Settings, package_id: str, version_code: int, *, output_json: bool = False) -> int:
    """
    Report which rules a package version matches.

    Returns:
        Exit code (0 = matched at least one rule, 1 = no match)
    """
    manager = restore_manager(settings)
    results = {category.value: manager.matches(category, package_id, version_code) for category in Category}
    matched = manager.matches_any(package_id, version_code)

    if output_json:
        print(json.dumps({"package": package_id, "version_code": version_code, **results, "any": matched}, indent=2))
        return 0 if matched else 1

    table = Table(title=f"{package_id} @ {version_code}")
    table.add_column("category", style="magenta")
    table.add_column("rules")
    table.add_column("match")
    for category in Category:
        rules = manager.rules_for_package(category, package_id)
        table.add_row(
            category.value,
            ", ".join(str(r) for r in rules) or "[dim]none[/]",
            "[green]yes[/]" if results[category.value] else "no",
        )
    Console().print(table)
    return 0 if matched else 1


def run_managed(
    settings: Settings,
    category: Category,
    *,
    inventory: Path | None = None,
    output_json: bool = False,
) -> int:
    """List managed identifiers, version-aware when an inventory is given."""
    err = Console(stderr=True)
    manager = restore_manager(settings)

    if inventory is None:
        packages = manager.all_managed_identifiers(category)
    else:
        try:
            resolver = InventoryFileResolver(inventory)
        except (OSError, ValueError) as e:
            err.print(f"Cannot load inventory {inventory}: {e}", style="bold red")
            return 1
        packages = manager.version_aware_managed_identifiers(category, resolver)

    if output_json:
        print(json.dumps(sorted(packages), indent=2))
    else:
        console = Console()
        for package_id in sorted(packages):
            console.print(package_id)
        if not packages:
            err.print(f"No managed {category.value} packages.", style="dim")
    return 0
