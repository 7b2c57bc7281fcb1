"""
Skill Line Parser - Turns one line of text into a ParsedLine.

Grammar (after an optional leading "- " marker):
1. Mechanic name: first run of characters that are not whitespace, '{', '@',
   '~' or '?'
2. Optional attribute block "{key=value;...}" directly after the name
3. Whitespace-separated tokens, classified by their first character:
   - @targeter, ~trigger[:parameter], ?condition chain joined by '&'
   - a bare decimal is the chance
   - a token starting with '<', '>' or '=' is the health modifier
   - anything else is ignored

Values may be double-quoted to carry a literal ';' or '}'. Splitting also
respects nested {} and [] so inline skill blocks stay in one piece.

The parser never raises. Malformed input yields valid=False plus the kind of
error and whatever fields were recovered.
"""

from __future__ import annotations
from typing import Callable, Iterable
import logging
import re

from .line import ConditionRef, ParsedLine, ParseErrorKind, invalid_line

logger = logging.getLogger(__name__)

CHANCE_PATTERN = re.compile(r"^\d*\.?\d+$")
HEALTH_MODIFIER_PATTERN = re.compile(r"^(<|<=|>|>=|=)\d+%(-\d+%)?$")

_LEADING_MARKER = re.compile(r"^-\s*")
_MECHANIC_NAME = re.compile(r"[^\s{@~?]+")
_CONDITION_HEAD = re.compile(r"\?[~!]*")
_CONDITION_MODIFIERS = re.compile(r"[~!]*")

_OPENERS = "{["
_CLOSERS = "}]"


class SkillLineParser:
    """
    Parses skill lines.

    Usage:
        parser = SkillLineParser()
        parsed = parser.parse("- damage{amount=10} @target ~onAttack")
        if parsed.valid:
            ...

    In strict mode a health modifier that does not match the
    operator+percentage grammar is a parse error instead of being left for
    the validator to report.
    """

    def __init__(self, strict: bool = False):
        self.strict = strict

    def parse(self, source_text: str) -> ParsedLine:
        return parse_line(source_text, strict=self.strict)

    def parse_many(self, lines: Iterable[str]) -> list[ParsedLine]:
        return [self.parse(line) for line in lines]


def parse_line(source_text: str, strict: bool = False) -> ParsedLine:
    """
    Parse a single skill line.

    Args:
        source_text: The raw line, with or without the leading "- "
        strict: Treat a malformed health modifier as a parse error

    Returns:
        A ParsedLine; check `valid` before using its structured fields
    """
    if not isinstance(source_text, str):
        source_text = ""

    text = source_text.strip()
    if not text or text.startswith("#"):
        return invalid_line(source_text, ParseErrorKind.MISSING_MECHANIC_NAME)

    text = _LEADING_MARKER.sub("", text, count=1)

    name_match = _MECHANIC_NAME.match(text)
    if not name_match:
        return invalid_line(source_text, ParseErrorKind.MISSING_MECHANIC_NAME)

    mechanic_name = name_match.group(0)
    pos = name_match.end()

    attributes: dict[str, str] = {}
    if pos < len(text) and text[pos] == "{":
        end = find_block_end(text, pos)
        if end == -1:
            return invalid_line(
                source_text,
                ParseErrorKind.UNTERMINATED_ATTRIBUTE_BLOCK,
                mechanic_name=mechanic_name,
            )
        attributes = parse_arguments(text[pos + 1:end])
        pos = end + 1

    targeter: str | None = None
    trigger: str | None = None
    conditions: list[ConditionRef] = []
    chance: float | None = None
    health_modifier: str | None = None

    for token in split_tokens(text[pos:]):
        lead = token[0]
        if lead == "@":
            if targeter is None:
                targeter = token
        elif lead == "~":
            if trigger is None:
                trigger = token
        elif lead == "?":
            chain = _parse_condition_chain(token)
            if chain is None:
                return invalid_line(
                    source_text,
                    ParseErrorKind.UNTERMINATED_ATTRIBUTE_BLOCK,
                    mechanic_name=mechanic_name,
                    attributes=attributes,
                )
            conditions.extend(chain)
        elif CHANCE_PATTERN.match(token):
            if chance is None:
                chance = float(token)
        elif lead in "<>=":
            if health_modifier is None:
                health_modifier = token
        else:
            logger.debug("Ignoring unrecognized token %r in %r", token, source_text)

    valid = True
    parse_error = None
    if strict and health_modifier and not HEALTH_MODIFIER_PATTERN.match(health_modifier):
        valid = False
        parse_error = ParseErrorKind.MALFORMED_HEALTH_MODIFIER

    return ParsedLine(
        mechanic_name=mechanic_name,
        source_text=source_text,
        attributes=attributes,
        targeter=targeter,
        trigger=trigger,
        conditions=tuple(conditions),
        chance=chance,
        health_modifier=health_modifier,
        valid=valid,
        parse_error=parse_error,
    )


def parse_lines(lines: Iterable[str], strict: bool = False) -> list[ParsedLine]:
    """Parse every line of an ordered list."""
    return [parse_line(line, strict=strict) for line in lines]


# ============================================================================
# Scanning helpers
# ============================================================================

def find_block_end(text: str, start: int) -> int:
    """
    Find the '}' closing the block that opens at text[start].

    Returns -1 when the block is never closed.
    """
    depth = 0
    in_quotes = False
    for i in range(start, len(text)):
        char = text[i]
        if char == '"':
            in_quotes = not in_quotes
        elif in_quotes:
            continue
        elif char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth -= 1
            if depth == 0:
                return i if char == "}" else -1
    return -1


def split_top_level(text: str, is_separator: Callable[[str], bool]) -> list[str]:
    """Split text on separator characters that are outside quotes and brackets."""
    parts = []
    current: list[str] = []
    depth = 0
    in_quotes = False

    for char in text:
        if char == '"':
            in_quotes = not in_quotes
        elif not in_quotes:
            if char in _OPENERS:
                depth += 1
            elif char in _CLOSERS:
                depth = max(0, depth - 1)
            elif depth == 0 and is_separator(char):
                parts.append("".join(current))
                current = []
                continue
        current.append(char)

    parts.append("".join(current))
    return parts


def split_tokens(text: str) -> list[str]:
    """Whitespace tokenization that keeps {...}, [...] and "..." together."""
    return [t for t in split_top_level(text, str.isspace) if t]


def parse_arguments(body: str) -> dict[str, str]:
    """
    Parse "key=value;key=value" into an ordered dict.

    Keys and values are trimmed. Value text is kept verbatim (quotes
    included). Parts without a key are skipped.
    """
    args: dict[str, str] = {}
    for part in split_top_level(body, lambda c: c == ";"):
        part = part.strip()
        if not part:
            continue
        eq = part.find("=")
        if eq <= 0:
            logger.debug("Skipping argument without key: %r", part)
            continue
        args[part[:eq].strip()] = part[eq + 1:].strip()
    return args


def _parse_condition_chain(token: str) -> list[ConditionRef] | None:
    """
    Parse "?cond{args}&other" into ConditionRefs.

    Returns None when a condition's argument block is unterminated.
    """
    head = _CONDITION_HEAD.match(token)
    first_prefix = head.group(0)
    pieces = split_top_level(token[head.end():], lambda c: c == "&")

    conditions = []
    for i, piece in enumerate(pieces):
        if i == 0:
            prefix = first_prefix
        else:
            modifiers = _CONDITION_MODIFIERS.match(piece).group(0)
            prefix = ("&" if conditions else "?") + modifiers
            piece = piece[len(modifiers):]

        brace = piece.find("{")
        if brace == -1:
            name, args = piece, {}
        else:
            end = find_block_end(piece, brace)
            if end == -1:
                return None
            name, args = piece[:brace], parse_arguments(piece[brace + 1:end])

        if not name:
            logger.debug("Skipping nameless condition in %r", token)
            continue
        conditions.append(ConditionRef(name=name, args=args, prefix=prefix))

    return conditions
