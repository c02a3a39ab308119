from __future__ import annotations

import logging
from pathlib import Path

import pytest

from tunnelrules.resolver import (
    CompositeVersionResolver,
    InventoryFileResolver,
    StaticVersionResolver,
    load_inventory,
)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_static_resolver() -> None:
    resolver = StaticVersionResolver({"pkg.a": 3})
    assert resolver.resolve("pkg.a") == 3
    assert resolver.resolve("pkg.missing") is None


@pytest.mark.parametrize(
    "name,text",
    [
        ("inv.json", '{"pkg.a": 150, "pkg.b": 7}'),
        ("inv.yaml", "pkg.a: 150\npkg.b: 7\n"),
        ("inv.toml", '"pkg.a" = 150\n"pkg.b" = 7\n'),
    ],
)
def test_inventory_formats(tmp_path: Path, name: str, text: str) -> None:
    resolver = InventoryFileResolver(_write(tmp_path / name, text))
    assert resolver.resolve("pkg.a") == 150
    assert resolver.resolve("pkg.b") == 7


def test_inventory_skips_non_integer_versions(tmp_path: Path, caplog) -> None:
    path = _write(tmp_path / "inv.json", '{"pkg.a": "150", "pkg.b": true, "pkg.c": 1.5, "pkg.d": 4}')
    with caplog.at_level(logging.WARNING, logger="tunnelrules.resolver"):
        assert load_inventory(path) == {"pkg.d": 4}
    assert "pkg.a" in caplog.text


def test_inventory_must_be_mapping(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        load_inventory(_write(tmp_path / "inv.json", "[1, 2]"))


def test_inventory_invalid_yaml_raises_value_error(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        load_inventory(_write(tmp_path / "inv.yaml", "pkg.a: [unclosed\n"))


def test_empty_yaml_inventory(tmp_path: Path) -> None:
    assert load_inventory(_write(tmp_path / "inv.yaml", "")) == {}


def test_composite_resolver_first_installed_wins() -> None:
    resolver = CompositeVersionResolver(
        [StaticVersionResolver({"pkg.a": 1}), StaticVersionResolver({"pkg.a": 2, "pkg.b": 3})]
    )
    assert resolver.resolve("pkg.a") == 1
    assert resolver.resolve("pkg.b") == 3
    assert resolver.resolve("pkg.c") is None
