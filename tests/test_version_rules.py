from __future__ import annotations

import pytest

from tunnelrules.rules.version_rule import (
    MAX_VERSION_CODE,
    AnyVersion,
    ComparisonRule,
    ExactVersion,
    RangeRule,
    any_matches,
    parse_rule,
    parse_rules,
)


# -----------------------------------------------------------------------------
# Parsing
# -----------------------------------------------------------------------------


@pytest.mark.parametrize(
    "text,expected",
    [
        ("*", AnyVersion()),
        ("150", ExactVersion(150)),
        ("0", ExactVersion(0)),
        (">=100", ComparisonRule(">=", 100)),
        (">100", ComparisonRule(">", 100)),
        ("<=100", ComparisonRule("<=", 100)),
        ("<100", ComparisonRule("<", 100)),
        ("[100-200]", RangeRule(100, 200)),
        ("[7-7]", RangeRule(7, 7)),
        ("  >=5  ", ComparisonRule(">=", 5)),
        ("\t[1-2]\n", RangeRule(1, 2)),
    ],
)
def test_parse_valid_forms(text: str, expected) -> None:
    assert parse_rule(text) == expected


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   ",
        "bogus",
        "[200-100]",
        "[100-]",
        "[-100-200]",
        "-5",
        "+5",
        "=100",
        "==100",
        "> 100",
        "[100 - 200]",
        "100-200",
        "1.5",
        "**",
        "*1",
        "150abc",
        "٣",  # non-ASCII digit
        str(MAX_VERSION_CODE + 1),
        f">={MAX_VERSION_CODE + 1}",
        f"[1-{MAX_VERSION_CODE + 1}]",
    ],
)
def test_parse_invalid_forms(text: str) -> None:
    assert parse_rule(text) is None


def test_parse_rejects_non_strings() -> None:
    assert parse_rule(None) is None
    assert parse_rule(150) is None  # type: ignore[arg-type]


def test_largest_version_code_is_accepted() -> None:
    assert parse_rule(str(MAX_VERSION_CODE)) == ExactVersion(MAX_VERSION_CODE)


def test_parse_rules_drops_invalid_and_keeps_order() -> None:
    rules = parse_rules(["*", "bogus", "50"])
    assert rules == [AnyVersion(), ExactVersion(50)]


def test_parse_rules_all_invalid_is_empty() -> None:
    assert parse_rules(["nope", "[9-1]", ""]) == []
    assert parse_rules([]) == []


def test_range_constructor_enforces_order() -> None:
    with pytest.raises(ValueError):
        RangeRule(200, 100)


def test_comparison_constructor_rejects_unknown_operator() -> None:
    with pytest.raises(ValueError):
        ComparisonRule("==", 1)  # type: ignore[arg-type]


def test_rules_render_back_to_rule_strings() -> None:
    for text in ["*", "150", ">=100", ">1", "<=3", "<100", "[100-200]"]:
        assert str(parse_rule(text)) == text


# -----------------------------------------------------------------------------
# Matching
# -----------------------------------------------------------------------------


class TestMatches:
    """Literal semantics of each rule form."""

    def test_wildcard_matches_everything(self):
        rule = parse_rule("*")
        for version in (0, -1, 1, 42, MAX_VERSION_CODE, -(2**31)):
            assert rule.matches(version)

    def test_exact(self):
        rule = parse_rule("150")
        assert rule.matches(150)
        assert not rule.matches(149)
        assert not rule.matches(151)

    def test_greater_or_equal(self):
        rule = parse_rule(">=100")
        assert rule.matches(100)
        assert rule.matches(101)
        assert not rule.matches(99)

    def test_greater(self):
        rule = parse_rule(">100")
        assert rule.matches(101)
        assert not rule.matches(100)

    def test_less(self):
        rule = parse_rule("<100")
        assert rule.matches(99)
        assert rule.matches(-3)
        assert not rule.matches(100)

    def test_less_or_equal(self):
        rule = parse_rule("<=100")
        assert rule.matches(100)
        assert not rule.matches(101)

    def test_range_is_inclusive(self):
        rule = parse_rule("[100-200]")
        assert rule.matches(100)
        assert rule.matches(150)
        assert rule.matches(200)
        assert not rule.matches(99)
        assert not rule.matches(201)


def test_any_matches_is_or_over_rules() -> None:
    rules = parse_rules(["[100-200]", ">=300"])
    assert any_matches(rules, 150)
    assert any_matches(rules, 300)
    assert not any_matches(rules, 250)


def test_any_matches_empty_is_false() -> None:
    assert not any_matches([], 0)
    assert not any_matches(iter(()), 1)
