"""
Version rule language.

A rule string encodes exactly one constraint on an integer version code:

    "*"            any version
    "150"          exactly 150
    ">=100" ">100" "<=100" "<100"
    "[100-200]"    100..200 inclusive

Strings are trimmed and must match one form completely. Anything else is
dropped by the parser instead of raising.
"""

from __future__ import annotations

import logging
import operator
import re
from dataclasses import dataclass
from typing import Callable, Iterable, Literal, Union

logger = logging.getLogger(__name__)

# Version codes are 32-bit signed integers on the platforms that produce them.
MAX_VERSION_CODE = 2**31 - 1

Comparator = Literal[">", ">=", "<", "<="]

_COMPARATORS: dict[str, Callable[[int, int], bool]] = {
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
}

_WILDCARD = "*"
_RANGE_RE = re.compile(r"\[([0-9]+)-([0-9]+)\]")
_COMPARISON_RE = re.compile(r"(>=|>|<=|<)([0-9]+)")
_EXACT_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class AnyVersion:
    """Matches every version code."""

    def matches(self, version_code: int) -> bool:
        return True

    def __str__(self) -> str:
        return _WILDCARD


@dataclass(frozen=True)
class ExactVersion:
    version: int

    def matches(self, version_code: int) -> bool:
        return version_code == self.version

    def __str__(self) -> str:
        return str(self.version)


@dataclass(frozen=True)
class ComparisonRule:
    op: Comparator
    value: int

    def __post_init__(self) -> None:
        if self.op not in _COMPARATORS:
            raise ValueError(f"unknown comparison operator: {self.op!r}")

    def matches(self, version_code: int) -> bool:
        return _COMPARATORS[self.op](version_code, self.value)

    def __str__(self) -> str:
        return f"{self.op}{self.value}"


@dataclass(frozen=True)
class RangeRule:
    """Inclusive range; min_version must not exceed max_version."""

    min_version: int
    max_version: int

    def __post_init__(self) -> None:
        if self.min_version > self.max_version:
            raise ValueError(f"range minimum {self.min_version} exceeds maximum {self.max_version}")

    def matches(self, version_code: int) -> bool:
        return self.min_version <= version_code <= self.max_version

    def __str__(self) -> str:
        return f"[{self.min_version}-{self.max_version}]"


VersionRule = Union[AnyVersion, ExactVersion, ComparisonRule, RangeRule]


def _to_version_code(digits: str) -> int | None:
    value = int(digits)
    if value > MAX_VERSION_CODE:
        return None
    return value


def parse_rule(text: str | None) -> VersionRule | None:
    """
    Parse one rule string.

    Forms are tried in order: wildcard, range, comparison, exact. The first
    form whose pattern matches decides the outcome, so a range with
    min > max is rejected rather than retried as something else.

    Returns:
        The parsed rule, or None if the string is not a valid rule.
    """
    if not isinstance(text, str):
        return None
    rule = text.strip()
    if not rule:
        return None

    if rule == _WILDCARD:
        return AnyVersion()

    m = _RANGE_RE.fullmatch(rule)
    if m:
        low = _to_version_code(m.group(1))
        high = _to_version_code(m.group(2))
        if low is None or high is None or low > high:
            return None
        return RangeRule(low, high)

    m = _COMPARISON_RE.fullmatch(rule)
    if m:
        value = _to_version_code(m.group(2))
        if value is None:
            return None
        return ComparisonRule(m.group(1), value)  # type: ignore[arg-type]

    if _EXACT_RE.fullmatch(rule):
        value = _to_version_code(rule)
        if value is None:
            return None
        return ExactVersion(value)

    return None


def parse_rules(texts: Iterable[str]) -> list[VersionRule]:
    """Parse rule strings in order, silently dropping the invalid ones."""
    rules: list[VersionRule] = []
    for text in texts:
        rule = parse_rule(text)
        if rule is None:
            logger.debug("Dropping invalid version rule %r", text)
            continue
        rules.append(rule)
    return rules


def any_matches(rules: Iterable[VersionRule], version_code: int) -> bool:
    """True if at least one rule matches; an empty sequence never matches."""
    return any(rule.matches(version_code) for rule in rules)
