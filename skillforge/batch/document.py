"""
Skill Document - Named line sequences loaded from a YAML document.

A document maps entry names to entries:

    FireImp:                  # a mob: it has mob fields such as Type/Health
      Type: BLAZE
      Health: 40
      Skills:
      # Opening
      - skill{s=FireBurst} @target ~onAttack
    FireBurst:                # a metaskill sequence: no mob fields
      Skills:
      - damage{amount=10} @target

PyYAML drops comments, so the Skills blocks are also scanned in the raw text
and their '#' lines are put back in place. They carry the comment sections
the group detector works with.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping
import logging
import re

import yaml

logger = logging.getLogger(__name__)

# Top-level keys that only mob definitions carry (compared lowercased)
MOB_FIELDS = frozenset({
    "type", "mobtype", "health", "damage", "armor", "display", "faction",
    "options", "equipment", "drops", "bossbar", "mount", "disguise",
    "aigoalselectors", "aitargetselectors", "levelmodifiers", "modules",
    "damagemodifiers", "killmessages", "template",
})

_TOP_LEVEL_KEY = re.compile(r"^(['\"]?)([^\s#'\"][^:]*?)\1\s*:(\s*(#.*)?)?$")
_SKILLS_KEY = re.compile(r"^(\s+)skills\s*:\s*(#.*)?$", re.IGNORECASE)


class DocumentError(Exception):
    """Raised when a document cannot be loaded."""


class EntryKind(Enum):
    MOB = "mob"
    SKILL = "skill"


@dataclass
class SequenceEntry:
    """A named, ordered list of skill lines."""
    name: str
    kind: EntryKind
    lines: list[str] = field(default_factory=list)


@dataclass
class SkillDocument:
    entries: list[SequenceEntry] = field(default_factory=list)

    @property
    def names(self) -> list[str]:
        return [entry.name for entry in self.entries]

    def get_entry(self, name: str) -> SequenceEntry | None:
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> SkillDocument:
        """
        Build a document from already-parsed data.

        Entries whose value is not a mapping are skipped with a warning.
        Raises DocumentError if data itself is not a mapping.
        """
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise DocumentError("Document root must be a mapping of entry names")

        entries = []
        for name, body in data.items():
            if not isinstance(body, Mapping):
                logger.warning("Skipping entry %r: expected a mapping, got %s",
                               name, type(body).__name__)
                continue
            entries.append(SequenceEntry(
                name=str(name),
                kind=_entry_kind(body),
                lines=_skill_lines(name, body),
            ))
        return cls(entries=entries)


def load_document(yaml_text: str) -> SkillDocument:
    """
    Load a document from YAML text, keeping comment lines in Skills blocks.

    Raises DocumentError for text that is not valid YAML or not a mapping.
    """
    try:
        data = yaml.safe_load(yaml_text)
    except yaml.YAMLError as exc:
        raise DocumentError(f"Invalid YAML: {exc}") from exc

    document = SkillDocument.from_mapping(data)
    scanned = scan_skill_blocks(yaml_text)

    for entry in document.entries:
        block = scanned.get(entry.name)
        if not block:
            continue
        items = [line for line in block if not line.startswith("#")]
        if len(items) != len(entry.lines):
            logger.warning(
                "Comment scan of %r found %d items, YAML has %d; comments dropped",
                entry.name, len(items), len(entry.lines),
            )
            continue
        parsed = iter(entry.lines)
        entry.lines = [line if line.startswith("#") else next(parsed) for line in block]

    logger.debug("Loaded document with %d entries", len(document.entries))
    return document


def scan_skill_blocks(yaml_text: str) -> dict[str, list[str]]:
    """
    Raw-text scan of every entry's Skills block.

    Returns entry name -> list where comments appear as '# text' and each
    list item as the placeholder '-'. Only the order matters to the caller.
    """
    blocks: dict[str, list[str]] = {}
    current: str | None = None
    skills_indent: int | None = None

    for raw in yaml_text.splitlines():
        stripped = raw.strip()
        if not stripped:
            continue
        indent = len(raw) - len(raw.lstrip())

        if indent == 0 and not stripped.startswith(("#", "-")):
            match = _TOP_LEVEL_KEY.match(raw)
            current = match.group(2).strip() if match else None
            skills_indent = None
            continue

        if current is None:
            continue

        skills = _SKILLS_KEY.match(raw)
        if skills:
            skills_indent = len(skills.group(1))
            blocks[current] = []
            continue

        if skills_indent is None:
            continue

        if stripped.startswith("#"):
            if indent > 0:
                blocks[current].append("# " + stripped.lstrip("#").strip())
        elif stripped.startswith("-") and indent >= skills_indent:
            blocks[current].append("-")
        elif indent <= skills_indent:
            skills_indent = None

    return blocks


def _entry_kind(body: Mapping[str, Any]) -> EntryKind:
    keys = {str(key).lower() for key in body}
    return EntryKind.MOB if keys & MOB_FIELDS else EntryKind.SKILL


def _skill_lines(name: Any, body: Mapping[str, Any]) -> list[str]:
    skills = next((v for k, v in body.items() if str(k).lower() == "skills"), None)
    if skills is None:
        return []
    if not isinstance(skills, list):
        logger.warning("Entry %r: Skills should be a list, got %s", name, type(skills).__name__)
        return []

    lines = []
    for item in skills:
        if isinstance(item, str):
            lines.append(item)
        elif isinstance(item, Mapping):
            # "- message{m=Hi: there}" parses as a one-key mapping
            lines.extend(f"{key}: {value}" for key, value in item.items())
        else:
            lines.append("" if item is None else str(item))
    return lines
