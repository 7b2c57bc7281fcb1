"""
Line Validation - Context rules for parsed skill lines.

Validates that:
1. The line parsed at all
2. The mechanic, targeter, trigger and conditions are known to the catalog
3. Required attributes are present and values match their declared types
4. Chance and health modifier are well-formed
5. The trigger usage fits the context (mob lines need one, skill lines ignore it)

Validation never raises on line content; every problem is an Issue.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable
import logging

from ..catalog import Catalog, default_catalog
from .line import ParsedLine, ParseErrorKind
from .parser import HEALTH_MODIFIER_PATTERN

logger = logging.getLogger(__name__)


class LineContext(Enum):
    """Where a line lives: a mob's Skills list or a metaskill sequence."""
    MOB = "mob"
    SKILL = "skill"


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


class IssueKind(Enum):
    """Every problem the validator can report."""
    # Echoes of parse errors
    MISSING_MECHANIC_NAME = "missing_mechanic_name"
    UNTERMINATED_ATTRIBUTE_BLOCK = "unterminated_attribute_block"

    UNKNOWN_MECHANIC = "unknown_mechanic"
    UNKNOWN_TARGETER = "unknown_targeter"
    UNKNOWN_TRIGGER = "unknown_trigger"
    UNKNOWN_CONDITION = "unknown_condition"
    MISSING_REQUIRED_ATTRIBUTE = "missing_required_attribute"
    ATTRIBUTE_TYPE_MISMATCH = "attribute_type_mismatch"
    CHANCE_OUT_OF_RANGE = "chance_out_of_range"
    MALFORMED_HEALTH_MODIFIER = "malformed_health_modifier"
    TRIGGER_REQUIRED_IN_MOB_CONTEXT = "trigger_required_in_mob_context"
    TRIGGER_IGNORED_IN_SKILL_CONTEXT = "trigger_ignored_in_skill_context"


_PARSE_ERROR_ISSUES = {
    ParseErrorKind.MISSING_MECHANIC_NAME: IssueKind.MISSING_MECHANIC_NAME,
    ParseErrorKind.UNTERMINATED_ATTRIBUTE_BLOCK: IssueKind.UNTERMINATED_ATTRIBUTE_BLOCK,
    ParseErrorKind.MALFORMED_HEALTH_MODIFIER: IssueKind.MALFORMED_HEALTH_MODIFIER,
}

_PARSE_ERROR_MESSAGES = {
    ParseErrorKind.MISSING_MECHANIC_NAME: "Line has no mechanic name",
    ParseErrorKind.UNTERMINATED_ATTRIBUTE_BLOCK: "Attribute block is missing its closing '}'",
    ParseErrorKind.MALFORMED_HEALTH_MODIFIER: "Health modifier is malformed",
}


@dataclass(frozen=True)
class Issue:
    """A single validation finding."""
    kind: IssueKind
    severity: Severity
    message: str
    field: str | None = None


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[Issue] = field(default_factory=list)
    warnings: list[Issue] = field(default_factory=list)

    @property
    def issues(self) -> list[Issue]:
        return self.errors + self.warnings

    def has_issue(self, kind: IssueKind) -> bool:
        return any(issue.kind == kind for issue in self.issues)


@dataclass
class LineValidationSummary:
    """Counts for a batch of validated lines."""
    total: int
    valid: int
    invalid: int
    details: list[tuple[int, ValidationResult]]


class SkillLineValidator:
    """
    Validates parsed lines against a catalog.

    Usage:
        validator = SkillLineValidator(catalog)
        result = validator.validate(parse_line(text), LineContext.MOB)

    The validator holds no state besides the read-only catalog, so one
    instance can be reused for any number of lines.
    """

    def __init__(self, catalog: Catalog):
        self.catalog = catalog

    def validate(self, parsed: ParsedLine, context: LineContext | str) -> ValidationResult:
        context = coerce_context(context)
        errors: list[Issue] = []
        warnings: list[Issue] = []

        if not parsed.valid:
            kind = parsed.parse_error or ParseErrorKind.MISSING_MECHANIC_NAME
            errors.append(Issue(
                kind=_PARSE_ERROR_ISSUES[kind],
                severity=Severity.ERROR,
                message=_PARSE_ERROR_MESSAGES[kind],
                field="health_modifier" if kind == ParseErrorKind.MALFORMED_HEALTH_MODIFIER
                else "mechanic",
            ))
            return ValidationResult(valid=False, errors=errors, warnings=warnings)

        # Catalog lookups
        mechanic = self.catalog.get_mechanic(parsed.mechanic_name)
        if mechanic is None:
            errors.append(_error(
                IssueKind.UNKNOWN_MECHANIC,
                f"Unknown mechanic '{parsed.mechanic_name}'",
                "mechanic",
            ))

        if parsed.targeter_name and not self.catalog.has_targeter(parsed.targeter_name):
            warnings.append(_warning(
                IssueKind.UNKNOWN_TARGETER,
                f"Unknown targeter '{parsed.targeter_name}'",
                "targeter",
            ))

        if parsed.trigger_name and not self.catalog.has_trigger(parsed.trigger_name):
            warnings.append(_warning(
                IssueKind.UNKNOWN_TRIGGER,
                f"Unknown trigger '{parsed.trigger_name}'",
                "trigger",
            ))

        for condition in parsed.conditions:
            if not self.catalog.has_condition(condition.name):
                warnings.append(_warning(
                    IssueKind.UNKNOWN_CONDITION,
                    f"Unknown condition '{condition.name}'",
                    "conditions",
                ))

        # Attribute schema
        if mechanic is not None:
            present = {key.lower() for key in parsed.attributes}
            for required in mechanic.required_attributes:
                if not present.intersection(n.lower() for n in required.all_names):
                    errors.append(_error(
                        IssueKind.MISSING_REQUIRED_ATTRIBUTE,
                        f"'{mechanic.name}' requires attribute '{required.name}'",
                        required.name,
                    ))

            for key, value in parsed.attributes.items():
                definition = mechanic.get_attribute(key)
                if definition is None:
                    continue
                problem = definition.check_value(value)
                if problem:
                    warnings.append(_warning(
                        IssueKind.ATTRIBUTE_TYPE_MISMATCH,
                        f"Attribute '{key}': {problem}",
                        key,
                    ))

        # Chance and health modifier
        if parsed.chance is not None and not 0.0 <= parsed.chance <= 1.0:
            errors.append(_error(
                IssueKind.CHANCE_OUT_OF_RANGE,
                f"Chance {parsed.chance:g} must be between 0 and 1",
                "chance",
            ))

        if parsed.health_modifier and not HEALTH_MODIFIER_PATTERN.match(parsed.health_modifier):
            errors.append(_error(
                IssueKind.MALFORMED_HEALTH_MODIFIER,
                f"Malformed health modifier '{parsed.health_modifier}' "
                "(expected e.g. <50%, >=25% or =30%-60%)",
                "health_modifier",
            ))

        # Context
        if context == LineContext.MOB and parsed.trigger is None:
            errors.append(_error(
                IssueKind.TRIGGER_REQUIRED_IN_MOB_CONTEXT,
                "Mob skill lines need a trigger (e.g. ~onAttack)",
                "trigger",
            ))
        elif context == LineContext.SKILL and parsed.trigger is not None:
            warnings.append(_warning(
                IssueKind.TRIGGER_IGNORED_IN_SKILL_CONTEXT,
                f"Trigger '{parsed.trigger}' is ignored inside a metaskill",
                "trigger",
            ))

        return ValidationResult(valid=not errors, errors=errors, warnings=warnings)

    def validate_many(
        self, lines: Iterable[ParsedLine], context: LineContext | str
    ) -> list[ValidationResult]:
        return [self.validate(line, context) for line in lines]


def validate_line(
    parsed: ParsedLine,
    context: LineContext | str,
    catalog: Catalog | None = None,
) -> ValidationResult:
    """Validate one line, against the built-in catalog unless one is given."""
    return SkillLineValidator(catalog or default_catalog()).validate(parsed, context)


def validate_lines(
    lines: Iterable[ParsedLine],
    context: LineContext | str,
    catalog: Catalog | None = None,
) -> LineValidationSummary:
    """
    Validate a list of lines, skipping comments and blank lines.

    details holds (line index, result) for every line that was checked.
    """
    validator = SkillLineValidator(catalog or default_catalog())
    details = []
    for index, line in enumerate(lines):
        if line.is_comment or line.is_blank:
            continue
        details.append((index, validator.validate(line, context)))

    valid = sum(1 for _, result in details if result.valid)
    return LineValidationSummary(
        total=len(details),
        valid=valid,
        invalid=len(details) - valid,
        details=details,
    )


def status_line(result: ValidationResult) -> str:
    """
    One-line status for inline display.

    The skill-context trigger warning is left out: the line still works and
    the warning would otherwise show on every trigger-carrying metaskill line.
    """
    warnings = [
        w for w in result.warnings
        if w.kind != IssueKind.TRIGGER_IGNORED_IN_SKILL_CONTEXT
    ]
    if result.errors:
        return f"✗ {result.errors[0].message}"
    if warnings:
        return f"⚠ {warnings[0].message}"
    return "✓ Valid"


def display_message(result: ValidationResult) -> str:
    """Multi-line listing of every error and warning."""
    if not result.errors and not result.warnings:
        return "No issues found."
    lines = []
    if result.errors:
        lines.append(f"Errors ({len(result.errors)}):")
        lines.extend(f"  ✗ {issue.message}" for issue in result.errors)
    if result.warnings:
        lines.append(f"Warnings ({len(result.warnings)}):")
        lines.extend(f"  ⚠ {issue.message}" for issue in result.warnings)
    return "\n".join(lines)


def coerce_context(context: LineContext | str) -> LineContext:
    if isinstance(context, LineContext):
        return context
    try:
        return LineContext(str(context).lower())
    except ValueError:
        logger.warning("Unknown line context %r, validating as 'skill'", context)
        return LineContext.SKILL


def _error(kind: IssueKind, message: str, field_name: str | None = None) -> Issue:
    return Issue(kind=kind, severity=Severity.ERROR, message=message, field=field_name)


def _warning(kind: IssueKind, message: str, field_name: str | None = None) -> Issue:
    return Issue(kind=kind, severity=Severity.WARNING, message=message, field=field_name)
