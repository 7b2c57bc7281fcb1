"""Skill-line DSL - parsing, formatting and context validation."""

from .line import ConditionRef, ParsedLine, ParseErrorKind
from .parser import SkillLineParser, parse_line, parse_lines
from .formatter import format_line, format_lines
from .validation import (
    Issue,
    IssueKind,
    LineContext,
    LineValidationSummary,
    Severity,
    SkillLineValidator,
    ValidationResult,
    display_message,
    status_line,
    validate_line,
    validate_lines,
)

__all__ = [
    "ConditionRef",
    "ParsedLine",
    "ParseErrorKind",
    "SkillLineParser",
    "parse_line",
    "parse_lines",
    "format_line",
    "format_lines",
    "Issue",
    "IssueKind",
    "LineContext",
    "LineValidationSummary",
    "Severity",
    "SkillLineValidator",
    "ValidationResult",
    "display_message",
    "status_line",
    "validate_line",
    "validate_lines",
]
