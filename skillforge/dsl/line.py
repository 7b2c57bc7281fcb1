"""
Skill Line Model - Structured form of a single skill line.

A skill line looks like:

    - mechanic{key=value;...} @targeter ~trigger ?condition{args}&other 0.5 <50%

Every field is optional except the mechanic name. Lines are parsed once at the
boundary into a ParsedLine and that value is passed through every later stage
(validation, similarity, grouping). Raw text is only ever the serialization
form.

Key design decisions:
- ParsedLine is immutable and hashable: attributes and condition args are
  read-only mappings, conditions a tuple
- ParsedLine is always re-derived from source_text
- Original casing is preserved in every field
- A line that fails to parse still carries whatever was recovered
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class ParseErrorKind(Enum):
    """Why a line could not be parsed."""
    MISSING_MECHANIC_NAME = "missing_mechanic_name"
    UNTERMINATED_ATTRIBUTE_BLOCK = "unterminated_attribute_block"
    MALFORMED_HEALTH_MODIFIER = "malformed_health_modifier"  # strict mode only


@dataclass(frozen=True)
class ConditionRef:
    """
    An inline condition reference.

    The prefix is the literal marker that introduced the condition:
    - "?", "?!", "?~", "?~!" for the first condition of a chain
    - "&" (optionally followed by "!" or "~") for joined conditions

    "~" means the condition checks the trigger entity instead of the caster,
    "!" negates the condition.
    """
    name: str
    args: Mapping[str, str] = field(default_factory=dict)
    prefix: str = "?"

    def __post_init__(self):
        object.__setattr__(self, "args", MappingProxyType(dict(self.args)))

    def __hash__(self):
        return hash((self.name, frozenset(self.args.items()), self.prefix))

    @property
    def negated(self) -> bool:
        return "!" in self.prefix

    @property
    def trigger_scoped(self) -> bool:
        return "~" in self.prefix

    @property
    def joined(self) -> bool:
        """True when this condition was chained onto the previous one with '&'."""
        return self.prefix.startswith("&")


@dataclass(frozen=True)
class ParsedLine:
    """
    A parsed skill line.

    Callers must check `valid` before relying on the structured fields.
    Invalid lines keep `source_text` and any fields recovered before the
    parse error.
    """
    mechanic_name: str
    source_text: str
    attributes: Mapping[str, str] = field(default_factory=dict)
    targeter: str | None = None
    trigger: str | None = None
    conditions: tuple[ConditionRef, ...] = ()
    chance: float | None = None
    health_modifier: str | None = None
    valid: bool = True
    parse_error: ParseErrorKind | None = None

    def __post_init__(self):
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))
        object.__setattr__(self, "conditions", tuple(self.conditions))

    def __hash__(self):
        return hash((
            self.mechanic_name,
            self.source_text,
            frozenset(self.attributes.items()),
            self.targeter,
            self.trigger,
            self.conditions,
            self.chance,
            self.health_modifier,
            self.valid,
            self.parse_error,
        ))

    @property
    def is_blank(self) -> bool:
        return not self.source_text.strip()

    @property
    def is_comment(self) -> bool:
        return self.source_text.strip().startswith("#")

    @property
    def comment_text(self) -> str | None:
        """Comment text without the leading '#', or None for non-comments."""
        if not self.is_comment:
            return None
        return self.source_text.strip().lstrip("#").strip()

    @property
    def targeter_name(self) -> str | None:
        """Targeter without the '@' sigil and without arguments."""
        if not self.targeter:
            return None
        return self.targeter[1:].split("{", 1)[0]

    @property
    def trigger_name(self) -> str | None:
        """Trigger without the '~' sigil and without its ':parameter'."""
        if not self.trigger:
            return None
        return self.trigger[1:].split(":", 1)[0]

    @property
    def trigger_parameter(self) -> str | None:
        if not self.trigger or ":" not in self.trigger:
            return None
        return self.trigger.split(":", 1)[1]

    def structural_key(self) -> tuple:
        """Everything that carries meaning, without the source text."""
        return (
            self.mechanic_name,
            tuple(self.attributes.items()),
            self.targeter,
            self.trigger,
            tuple((c.name, tuple(c.args.items()), c.prefix) for c in self.conditions),
            self.chance,
            self.health_modifier,
        )


def invalid_line(
    source_text: str,
    error: ParseErrorKind,
    mechanic_name: str = "",
    attributes: Mapping[str, str] | None = None,
) -> ParsedLine:
    """Create a ParsedLine for a line that failed to parse."""
    return ParsedLine(
        mechanic_name=mechanic_name,
        source_text=source_text,
        attributes=attributes or {},
        valid=False,
        parse_error=error,
    )
