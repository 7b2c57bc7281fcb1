"""
Skill Line Formatter - Canonical text for a ParsedLine.

Output order is fixed:

    - mechanic{k=v;...} @targeter ~trigger ?cond{..}&cond chance health

Formatting never changes meaning: parsing the formatted text yields the same
structured fields. Attribute values are written verbatim.
"""

from __future__ import annotations
from typing import Iterable, Mapping

from .line import ConditionRef, ParsedLine

# Keys that lead when attributes are sorted; the rest follow alphabetically.
ATTRIBUTE_PRIORITY = (
    "id", "type", "skill", "mechanic", "trigger", "targeter",
    "amount", "damage", "duration", "chance", "cooldown",
    "conditions", "targetConditions", "onTick", "onHit", "onEnd",
)


def format_line(
    parsed: ParsedLine,
    *,
    marker: bool = True,
    sort_attributes: bool = False,
) -> str:
    """
    Serialize a parsed line.

    Args:
        parsed: The line to format
        marker: Prefix the line with "- "
        sort_attributes: Order attribute keys by ATTRIBUTE_PRIORITY, then A-Z

    Invalid lines are returned as their trimmed source text.
    """
    if not parsed.valid:
        return parsed.source_text.strip()

    attributes = parsed.attributes
    if sort_attributes:
        attributes = {key: attributes[key] for key in sort_attribute_keys(attributes)}

    parts = [parsed.mechanic_name + format_arguments(attributes)]
    if parsed.targeter:
        parts.append(parsed.targeter)
    if parsed.trigger:
        parts.append(parsed.trigger)
    parts.extend(_format_conditions(parsed.conditions))
    if parsed.chance is not None:
        parts.append(format_chance(parsed.chance))
    if parsed.health_modifier:
        parts.append(parsed.health_modifier)

    text = " ".join(parts)
    return f"- {text}" if marker else text


def format_lines(lines: Iterable[ParsedLine], **options) -> list[str]:
    return [format_line(line, **options) for line in lines]


def format_arguments(args: Mapping[str, str]) -> str:
    """"{k=v;k2=v2}", or "" when there are no arguments."""
    if not args:
        return ""
    return "{" + ";".join(f"{key}={value}" for key, value in args.items()) + "}"


def format_chance(value: float) -> str:
    """Shortest plain decimal text for a chance (never scientific notation)."""
    text = repr(float(value))
    if "e" in text or "E" in text:
        text = f"{value:.20f}".rstrip("0").rstrip(".") or "0"
    return text


def sort_attribute_keys(attributes: Mapping[str, str]) -> list[str]:
    priority = {key.lower(): i for i, key in enumerate(ATTRIBUTE_PRIORITY)}
    return sorted(
        attributes,
        key=lambda k: (priority.get(k.lower(), len(priority)), k.lower()),
    )


def _format_conditions(conditions: tuple[ConditionRef, ...]) -> list[str]:
    tokens: list[str] = []
    for condition in conditions:
        prefix = condition.prefix or "?"
        if condition.joined and not tokens:
            prefix = "?" + prefix[1:]
        text = prefix + condition.name + format_arguments(condition.args)
        if condition.joined and tokens:
            tokens[-1] += text
        else:
            tokens.append(text)
    return tokens
