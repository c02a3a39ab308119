"""Rule document CLI commands: parse, import, show."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from rich.console import Console
from rich.table import Table

from ..config import Settings
from ..errors import DecodeFailure
from ..rules.document import Category, RuleDocument, coerce_document
from ..rules.manager import RuleSetManager
from ..rules.storage import rule_document_store
from ..rules.version_rule import parse_rule


def read_rule_document(path: Path) -> RuleDocument:
    """
    Read a rule document from a JSON or YAML file.

    Raises:
        OSError: If the file cannot be read.
        DecodeFailure: If the content is not a valid rule document.
    """
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in (".yaml", ".yml"):
            data: Any = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError, RecursionError) as e:
        raise DecodeFailure(f"cannot parse {path}: {e}") from e
    return coerce_document(data)


def run_parse(rule_strings: list[str], *, output_json: bool = False) -> int:
    """Show how each rule string parses. Exit code 1 if any is invalid."""
    parsed = [(text, parse_rule(text)) for text in rule_strings]

    if output_json:
        print(json.dumps(
            [{"input": text, "rule": (str(rule) if rule else None), "kind": (type(rule).__name__ if rule else None)}
             for text, rule in parsed],
            indent=2,
        ))
    else:
        table = Table(title="Version rules")
        table.add_column("input", style="cyan")
        table.add_column("kind", style="magenta")
        table.add_column("normalized")
        for text, rule in parsed:
            if rule is None:
                table.add_row(repr(text), "[red]invalid[/]", "[dim]dropped[/]")
            else:
                table.add_row(repr(text), type(rule).__name__, str(rule))
        Console().print(table)

    return 0 if all(rule is not None for _, rule in parsed) else 1


def run_import(settings: Settings, source: Path, *, dry_run: bool = False) -> int:
    """Validate a rule document, apply it, and persist it unless dry_run."""
    console = Console()
    err = Console(stderr=True)

    try:
        document = read_rule_document(source)
    except OSError as e:
        err.print(f"Cannot read {source}: {e}", style="bold red")
        return 1
    except DecodeFailure as e:
        err.print(f"Invalid rule document: {e}", style="bold red")
        return 1

    manager = RuleSetManager()
    manager.configure_runtime_rules(document)

    for category in Category:
        received = len(document[category.value])
        kept = len(manager.runtime_package_ids(category))
        console.print(f"{category.value}: {kept}/{received} packages with valid rules")
        for package_id in sorted(set(document[category.value]) - manager.runtime_package_ids(category)):
            console.print(f"  [yellow]skipped[/] {package_id} (no valid rules)")

    if dry_run:
        console.print("Dry run: nothing saved.", style="dim")
        return 0

    store = rule_document_store(settings)
    if not store.save(document):
        err.print(f"Failed to save rules to {store.final_path}", style="bold red")
        return 1

    console.print(f"Saved rules to {store.final_path}", style="green")
    return 0


def run_show(settings: Settings, *, output_json: bool = False) -> int:
    """Print the persisted rule document."""
    document = rule_document_store(settings).load()

    if output_json:
        print(json.dumps(document, indent=2, sort_keys=True))
        return 0

    table = Table(title=f"Runtime rules ({settings.rules_path})")
    table.add_column("category", style="magenta")
    table.add_column("package", style="cyan", no_wrap=True)
    table.add_column("rules")
    for category in Category:
        for package_id, rule_strings in sorted(document[category.value].items()):
            table.add_row(category.value, package_id, ", ".join(rule_strings))

    Console().print(table)
    return 0
