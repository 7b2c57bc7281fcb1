"""
Tests for context validation.

Tests:
- The reference line in mob and skill context
- Trigger rules per context
- Catalog lookups, required attributes and value types
- Chance and health modifier checks
- Status and summary helpers
"""

import logging

import pytest

from ..dsl import (
    IssueKind,
    LineContext,
    Severity,
    display_message,
    parse_line,
    status_line,
    validate_line,
    validate_lines,
)
from .conftest import EXAMPLE_LINE


def kinds(result):
    return [issue.kind for issue in result.issues]


class TestReferenceLine:
    """The documented example line against the built-in catalog."""

    def test_mob_context_is_clean(self):
        result = validate_line(parse_line(EXAMPLE_LINE), "mob")
        assert result.valid
        assert result.errors == []
        assert result.warnings == []

    def test_skill_context_has_one_warning(self):
        result = validate_line(parse_line(EXAMPLE_LINE), "skill")
        assert result.valid
        assert result.errors == []
        assert kinds(result) == [IssueKind.TRIGGER_IGNORED_IN_SKILL_CONTEXT]
        assert result.warnings[0].severity == Severity.WARNING


class TestTriggerRules:
    """Trigger requirements by context."""

    @pytest.mark.parametrize("text, has_trigger", [
        ("- damage{amount=1} @target ~onAttack", True),
        ("- damage{amount=1} @target", False),
        ("- heal{amount=2} @self ~onTimer:20", True),
        ("- cancelevent", False),
    ])
    def test_mob_requires_trigger(self, validator, text, has_trigger):
        result = validator.validate(parse_line(text), LineContext.MOB)
        assert result.has_issue(IssueKind.TRIGGER_REQUIRED_IN_MOB_CONTEXT) is (not has_trigger)
        assert result.valid is has_trigger

    @pytest.mark.parametrize("text, has_trigger", [
        ("- damage{amount=1} @target ~onAttack", True),
        ("- damage{amount=1} @target", False),
    ])
    def test_skill_warns_about_trigger(self, validator, text, has_trigger):
        result = validator.validate(parse_line(text), LineContext.SKILL)
        assert not result.has_issue(IssueKind.TRIGGER_REQUIRED_IN_MOB_CONTEXT)
        assert result.has_issue(IssueKind.TRIGGER_IGNORED_IN_SKILL_CONTEXT) is has_trigger
        assert result.valid

    def test_trigger_field_is_kept(self):
        parsed = parse_line("- damage{amount=1} @target ~onAttack")
        validate_line(parsed, "skill")
        assert parsed.trigger == "~onAttack"

    def test_unknown_context_falls_back_to_skill(self, caplog):
        parsed = parse_line("- damage{amount=1} @target")
        with caplog.at_level(logging.WARNING):
            result = validate_line(parsed, "boss")
        assert result.valid
        assert not result.has_issue(IssueKind.TRIGGER_REQUIRED_IN_MOB_CONTEXT)
        assert "Unknown line context" in caplog.text

    def test_context_string_is_case_insensitive(self):
        result = validate_line(parse_line("- damage{amount=1} @target"), "MOB")
        assert result.has_issue(IssueKind.TRIGGER_REQUIRED_IN_MOB_CONTEXT)


class TestCatalogRules:
    """Tests for catalog lookups and attribute schemas."""

    def test_parse_error_is_reported_alone(self, validator):
        result = validator.validate(parse_line("- damage{amount=10 @target"), "mob")
        assert not result.valid
        assert kinds(result) == [IssueKind.UNTERMINATED_ATTRIBUTE_BLOCK]

    def test_validate_many_keeps_order(self, validator):
        lines = [parse_line(EXAMPLE_LINE), parse_line("- explode{power=4} @self ~onDeath")]
        results = validator.validate_many(lines, "mob")
        assert [r.valid for r in results] == [True, False]
        assert results[0] == validator.validate(lines[0], "mob")

    def test_unknown_mechanic_is_error(self, validator):
        result = validator.validate(parse_line("- explode{power=4} @self ~onDeath"), "mob")
        assert not result.valid
        assert IssueKind.UNKNOWN_MECHANIC in kinds(result)

    def test_mechanic_alias_and_case(self, validator):
        result = validator.validate(parse_line("- E:P{p=flame} @Self ~OnSpawn"), "mob")
        assert result.valid
        assert result.warnings == []

    def test_unknown_targeter_trigger_condition_are_warnings(self, validator):
        result = validator.validate(
            parse_line("- heal{amount=1} @nowhere ~onWhenever ?mystery"), "mob"
        )
        assert result.valid
        assert kinds(result) == [
            IssueKind.UNKNOWN_TARGETER,
            IssueKind.UNKNOWN_TRIGGER,
            IssueKind.UNKNOWN_CONDITION,
        ]

    def test_missing_required_attribute(self, validator):
        result = validator.validate(parse_line("- damage{element=fire} @target ~onAttack"), "mob")
        assert not result.valid
        issue = result.errors[0]
        assert issue.kind == IssueKind.MISSING_REQUIRED_ATTRIBUTE
        assert issue.field == "amount"

    def test_required_attribute_alias_satisfies(self, validator):
        result = validator.validate(parse_line("- damage{a=3} @target ~onAttack"), "mob")
        assert result.valid

    def test_type_mismatch_is_warning(self, validator):
        result = validator.validate(parse_line("- damage{amount=lots} @target ~onAttack"), "mob")
        assert result.valid
        assert kinds(result) == [IssueKind.ATTRIBUTE_TYPE_MISMATCH]

    def test_range_mismatch_is_warning(self, validator):
        result = validator.validate(parse_line("- damage{amount=-5} @target ~onAttack"), "mob")
        assert result.valid
        assert kinds(result) == [IssueKind.ATTRIBUTE_TYPE_MISMATCH]

    def test_boolean_type(self, validator):
        result = validator.validate(
            parse_line("- damage{amount=5;ignorearmor=maybe} @target ~onAttack"), "mob"
        )
        assert kinds(result) == [IssueKind.ATTRIBUTE_TYPE_MISMATCH]

    def test_placeholder_values_not_type_checked(self, validator):
        result = validator.validate(
            parse_line("- damage{amount=<caster.var.power>} @target ~onAttack"), "mob"
        )
        assert result.valid
        assert result.warnings == []


class TestChanceAndHealth:
    """Tests for chance range and health modifier grammar."""

    @pytest.mark.parametrize("chance, ok", [("0", True), ("1", True), ("0.75", True), ("1.5", False)])
    def test_chance_range(self, validator, chance, ok):
        result = validator.validate(parse_line(f"- heal{{amount=1}} @self ~onTimer {chance}"), "mob")
        assert result.has_issue(IssueKind.CHANCE_OUT_OF_RANGE) is (not ok)
        assert result.valid is ok

    @pytest.mark.parametrize("modifier, ok", [
        ("<50%", True),
        (">=25%", True),
        ("=30%-60%", True),
        ("<50", False),
        ("=>50%", False),
        ("<half", False),
    ])
    def test_health_modifier_grammar(self, validator, modifier, ok):
        result = validator.validate(parse_line(f"- heal{{amount=1}} @self ~onDamaged {modifier}"), "mob")
        assert result.has_issue(IssueKind.MALFORMED_HEALTH_MODIFIER) is (not ok)
        assert result.valid is ok

    def test_strict_parse_error_is_echoed(self, validator):
        parsed = parse_line("- heal{amount=1} @self ~onDamaged <half", strict=True)
        result = validator.validate(parsed, "mob")
        assert kinds(result) == [IssueKind.MALFORMED_HEALTH_MODIFIER]
        assert result.errors[0].field == "health_modifier"


class TestHelpers:
    """Tests for status_line, display_message and validate_lines."""

    def test_status_line_hides_skill_trigger_warning(self):
        result = validate_line(parse_line(EXAMPLE_LINE), "skill")
        assert status_line(result) == "✓ Valid"

    def test_status_line_shows_first_error(self):
        result = validate_line(parse_line("- damage{amount=1} @target"), "mob")
        assert status_line(result).startswith("✗ ")

    def test_status_line_shows_other_warnings(self):
        result = validate_line(parse_line("- heal{amount=1} @nowhere ~onTimer"), "mob")
        assert status_line(result) == "⚠ Unknown targeter 'nowhere'"

    def test_display_message(self):
        result = validate_line(parse_line("- explode @nowhere"), "mob")
        message = display_message(result)
        assert message.startswith("Errors (2):")
        assert "Warnings (1):" in message

    def test_display_message_no_issues(self):
        result = validate_line(parse_line(EXAMPLE_LINE), "mob")
        assert display_message(result) == "No issues found."

    def test_validate_lines_skips_comments_and_blanks(self):
        lines = [parse_line(t) for t in [
            "# Attack",
            "- damage{amount=1} @target ~onAttack",
            "",
            "- damage{amount=1} @target",
        ]]
        summary = validate_lines(lines, "mob")
        assert summary.total == 2
        assert summary.valid == 1
        assert summary.invalid == 1
        assert [index for index, _ in summary.details] == [1, 3]
