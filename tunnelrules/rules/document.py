"""
Raw rule document: the persisted, pre-parse form of the runtime rules.

    {"exclude": {"com.example.app": ["*"]},
     "include": {"com.other.app": ["[100-200]", ">=300"]}}

Rule strings are kept verbatim here; parsing into matchers happens when the
document is applied to a RuleSetManager.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from ..errors import DecodeFailure


class Category(str, Enum):
    """Which policy list a package's rules belong to."""

    EXCLUDE = "exclude"
    INCLUDE = "include"


RuleDocument = dict[str, dict[str, list[str]]]


def empty_document() -> RuleDocument:
    return {category.value: {} for category in Category}


def _coerce_category(name: str, raw: Any) -> dict[str, list[str]]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        # A category that is present but not an object is treated as absent.
        return {}

    entries: dict[str, list[str]] = {}
    for package_id, rule_strings in raw.items():
        if not isinstance(package_id, str):
            raise DecodeFailure(f"{name}: package identifier must be a string, got {package_id!r}")
        if not isinstance(rule_strings, list):
            raise DecodeFailure(f"{name}.{package_id}: rules must be an array")
        entries[package_id] = [_rule_text(r) for r in rule_strings if r is not None]
    return entries


def _rule_text(value: Any) -> str:
    # Non-string elements keep their JSON text ([150] reads as "150"); ones
    # that are not valid rules are dropped later by the rule parser.
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"))


def coerce_document(obj: Any) -> RuleDocument:
    """
    Validate an in-memory object and return a normalized RuleDocument.

    Both categories are always present in the result. Unknown top-level keys
    are ignored.

    Raises:
        DecodeFailure: If the object does not have the document's shape.
    """
    if not isinstance(obj, dict):
        raise DecodeFailure(f"rule document must be an object, got {type(obj).__name__}")
    return {category.value: _coerce_category(category.value, obj.get(category.value)) for category in Category}


def encode_document(document: RuleDocument) -> bytes:
    """Serialize a document to UTF-8 JSON with both categories present."""
    normalized = {category.value: dict(document.get(category.value) or {}) for category in Category}
    return json.dumps(normalized, sort_keys=True, separators=(",", ":")).encode("utf-8")


def decode_document(data: bytes) -> RuleDocument:
    """
    Parse persisted bytes back into a RuleDocument.

    Raises:
        DecodeFailure: On invalid UTF-8, invalid JSON or a structural mismatch.
    """
    try:
        obj = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DecodeFailure(f"rule document is not valid JSON: {e}") from e
    except RecursionError as e:
        raise DecodeFailure("rule document is nested too deeply") from e
    return coerce_document(obj)
