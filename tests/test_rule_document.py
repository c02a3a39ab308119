from __future__ import annotations

import json

import pytest

from tunnelrules.errors import DecodeFailure
from tunnelrules.rules.document import (
    Category,
    coerce_document,
    decode_document,
    empty_document,
    encode_document,
)
from tunnelrules.rules.manager import RuleSetManager
from tunnelrules.rules.storage import rule_document_store


def test_empty_document_has_both_categories() -> None:
    assert empty_document() == {"exclude": {}, "include": {}}


def test_encode_writes_both_top_level_fields() -> None:
    data = json.loads(encode_document({"include": {"com.other.app": ["[100-200]", ">=300"]}}))
    assert data == {"exclude": {}, "include": {"com.other.app": ["[100-200]", ">=300"]}}


def test_decode_example_document() -> None:
    raw = b'{"exclude": {"com.example.app": ["*"]}, "include": {"com.other.app": ["[100-200]", ">=300"]}}'
    assert decode_document(raw) == {
        "exclude": {"com.example.app": ["*"]},
        "include": {"com.other.app": ["[100-200]", ">=300"]},
    }


def test_decode_keeps_invalid_rule_strings_verbatim() -> None:
    doc = decode_document(b'{"exclude": {"pkg": ["bogus", "5"]}}')
    assert doc["exclude"]["pkg"] == ["bogus", "5"]


def test_missing_or_non_object_category_becomes_empty() -> None:
    assert decode_document(b'{"exclude": {"pkg": ["*"]}}')["include"] == {}
    assert decode_document(b'{"exclude": [], "include": null}') == empty_document()


@pytest.mark.parametrize(
    "raw",
    [
        b"",
        b"{",
        b"[]",
        b'"text"',
        b'{"exclude": {"pkg": "*"}}',
        b"\xff\xfe",
    ],
)
def test_decode_rejects_malformed_content(raw: bytes) -> None:
    with pytest.raises(DecodeFailure):
        decode_document(raw)


def test_decode_reads_non_string_rules_as_their_json_text() -> None:
    doc = decode_document(b'{"exclude": {"pkg.a": [150, null, true], "pkg.b": ["*"]}}')
    assert doc["exclude"] == {"pkg.a": ["150", "true"], "pkg.b": ["*"]}


def test_decode_rejects_deeply_nested_json() -> None:
    with pytest.raises(DecodeFailure):
        decode_document(b"[" * 200000)


def test_coerce_rejects_non_string_package_ids() -> None:
    with pytest.raises(DecodeFailure):
        coerce_document({"include": {1: ["*"]}})


def test_category_values() -> None:
    assert [c.value for c in Category] == ["exclude", "include"]


def test_rule_document_store_uses_settings_paths(settings) -> None:
    store = rule_document_store(settings)
    assert store.lock_path == settings.data_dir / "vpn_rules.lock"
    assert store.temp_path == settings.data_dir / "vpn_rules_temp.json"
    assert store.final_path == settings.data_dir / "vpn_rules.json"

    doc = {"exclude": {"pkg.b": ["[100-200]"]}, "include": {}}
    assert store.save(doc)
    assert rule_document_store(settings).load() == doc


def test_rule_document_store_corrupt_file_loads_empty(settings) -> None:
    settings.data_dir.mkdir(parents=True)
    settings.rules_path.write_text('{"exclude": {"pkg": "*"}}', encoding="utf-8")
    assert rule_document_store(settings).load() == empty_document()


def test_rule_document_store_deeply_nested_file_loads_empty(settings) -> None:
    settings.data_dir.mkdir(parents=True)
    settings.rules_path.write_bytes(b"[" * 200000)
    assert rule_document_store(settings).load() == empty_document()


def test_numeric_rule_keeps_rest_of_document(settings) -> None:
    settings.data_dir.mkdir(parents=True)
    settings.rules_path.write_text('{"exclude": {"pkg.a": [150], "pkg.b": ["*"]}}', encoding="utf-8")

    manager = RuleSetManager(builtin_rules={})
    manager.configure_runtime_rules(rule_document_store(settings).load())

    assert manager.matches(Category.EXCLUDE, "pkg.a", 150)
    assert not manager.matches(Category.EXCLUDE, "pkg.a", 151)
    assert manager.matches(Category.EXCLUDE, "pkg.b", 7)
