"""Version rule language, raw rule documents and the rule set manager."""

from .document import Category, RuleDocument, coerce_document, decode_document, empty_document, encode_document
from .manager import RuleSetManager
from .storage import rule_document_store
from .version_rule import (
    AnyVersion,
    ComparisonRule,
    ExactVersion,
    RangeRule,
    VersionRule,
    any_matches,
    parse_rule,
    parse_rules,
)

__all__ = [
    # Rule language
    "VersionRule",
    "AnyVersion",
    "ExactVersion",
    "ComparisonRule",
    "RangeRule",
    "parse_rule",
    "parse_rules",
    "any_matches",
    # Documents
    "Category",
    "RuleDocument",
    "coerce_document",
    "decode_document",
    "empty_document",
    "encode_document",
    "rule_document_store",
    # Manager
    "RuleSetManager",
]
