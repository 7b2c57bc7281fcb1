"""
Group Detector - Segments an ordered line list into reviewable groups.

Two kinds of groups:
- comment sections: a '#' comment and the lines after it, up to the next comment
- trigger chains: before the first comment, runs of two or more consecutive
  valid lines sharing a trigger and a targeter

Groups are views over the current list. They are recomputed in full on every
call and never stored; editing the list means calling detect_groups again.

Suggestion hooks inspect groups and return advice. They never modify a group.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence
import re

from ..dsl.line import ParsedLine


class GroupKind(Enum):
    COMMENT_SECTION = "comment_section"
    TRIGGER_CHAIN = "trigger_chain"


class SemanticTag(Enum):
    SECTION = "section"
    DAMAGE_SEQUENCE = "damage_sequence"
    TIMER_SEQUENCE = "timer_sequence"
    GENERIC = "generic"


GROUP_ICONS = {
    SemanticTag.SECTION: "📁",
    SemanticTag.DAMAGE_SEQUENCE: "🛡",
    SemanticTag.TIMER_SEQUENCE: "⏱",
    SemanticTag.GENERIC: "🔗",
}

# Mechanics that stop a repeating timer sequence
HALTING_MECHANICS = frozenset({"cancelevent", "cancel", "remove", "suicide", "setstance"})


@dataclass(frozen=True)
class Group:
    kind: GroupKind
    tag: SemanticTag
    members: tuple[int, ...]
    parent_index: int | None
    label: str

    def __post_init__(self):
        object.__setattr__(self, "members", tuple(self.members))

    @property
    def size(self) -> int:
        return len(self.members)


@dataclass(frozen=True)
class GroupSuggestion:
    """Advice produced by a suggestion hook for one group."""
    group_index: int
    code: str
    message: str
    template: str = ""


@dataclass(frozen=True)
class GroupSummary:
    total_groups: int
    by_kind: dict[str, int]
    by_tag: dict[str, int]
    grouped_lines: int
    ungrouped_lines: int


SuggestionHook = Callable[[int, Group, Sequence[ParsedLine]], list[GroupSuggestion]]


def detect_groups(lines: Sequence[ParsedLine]) -> list[Group]:
    """
    Detect comment sections and trigger chains.

    Returns groups in line order: trigger chains (which can only occur before
    the first comment) followed by comment sections.
    """
    first_comment = next((i for i, line in enumerate(lines) if line.is_comment), len(lines))
    groups = _trigger_chains(lines, first_comment)
    groups.extend(_comment_sections(lines, first_comment))
    return groups


def standalone_indices(lines: Sequence[ParsedLine], groups: Sequence[Group]) -> list[int]:
    """Indices of non-comment, non-blank lines that belong to no group."""
    grouped = {index for group in groups for index in group.members}
    return [
        index for index, line in enumerate(lines)
        if not line.is_comment and not line.is_blank and index not in grouped
    ]


def group_icon(tag: SemanticTag) -> str:
    return GROUP_ICONS.get(tag, GROUP_ICONS[SemanticTag.GENERIC])


def trigger_label(trigger_name: str) -> str:
    """'onAttack' -> 'On-Attack Sequence'."""
    words = re.findall(r"[A-Z]?[a-z0-9]+|[A-Z]+(?![a-z])", trigger_name) or [trigger_name]
    return "-".join(word[:1].upper() + word[1:] for word in words) + " Sequence"


def trigger_tag(trigger_name: str) -> SemanticTag:
    lowered = trigger_name.lower()
    if lowered.startswith("ondamage"):
        return SemanticTag.DAMAGE_SEQUENCE
    if lowered.startswith("ontimer"):
        return SemanticTag.TIMER_SEQUENCE
    return SemanticTag.GENERIC


def summarize_groups(groups: Sequence[Group], lines: Sequence[ParsedLine]) -> GroupSummary:
    by_kind: dict[str, int] = {}
    by_tag: dict[str, int] = {}
    for group in groups:
        by_kind[group.kind.value] = by_kind.get(group.kind.value, 0) + 1
        by_tag[group.tag.value] = by_tag.get(group.tag.value, 0) + 1

    grouped = len({index for group in groups for index in group.members})
    return GroupSummary(
        total_groups=len(groups),
        by_kind=by_kind,
        by_tag=by_tag,
        grouped_lines=grouped,
        ungrouped_lines=len(standalone_indices(lines, groups)),
    )


# ============================================================================
# Detection
# ============================================================================

def _trigger_chains(lines: Sequence[ParsedLine], stop: int) -> list[Group]:
    groups = []
    run: list[int] = []

    def close_run():
        if len(run) >= 2:
            trigger_name = lines[run[0]].trigger_name or ""
            groups.append(Group(
                kind=GroupKind.TRIGGER_CHAIN,
                tag=trigger_tag(trigger_name),
                members=tuple(run),
                parent_index=run[0],
                label=trigger_label(trigger_name),
            ))

    for index in range(stop):
        line = lines[index]
        if not line.valid or line.trigger is None:
            close_run()
            run = []
            continue
        if run and not _chains_with(lines[run[-1]], line):
            close_run()
            run = []
        run.append(index)
    close_run()
    return groups


def _chains_with(previous: ParsedLine, line: ParsedLine) -> bool:
    return (
        previous.trigger.lower() == line.trigger.lower()
        and (previous.targeter or "").lower() == (line.targeter or "").lower()
    )


def _comment_sections(lines: Sequence[ParsedLine], start: int) -> list[Group]:
    groups = []
    index = start
    while index < len(lines):
        header_index = index
        members = []
        index += 1
        while index < len(lines) and not lines[index].is_comment:
            if not lines[index].is_blank:
                members.append(index)
            index += 1
        groups.append(Group(
            kind=GroupKind.COMMENT_SECTION,
            tag=SemanticTag.SECTION,
            members=members,
            parent_index=header_index,
            label=lines[header_index].comment_text or "",
        ))
    return groups


# ============================================================================
# Suggestion hooks
# ============================================================================

def suggest_for_groups(
    groups: Sequence[Group],
    lines: Sequence[ParsedLine],
    hooks: Sequence[SuggestionHook] | None = None,
) -> list[GroupSuggestion]:
    """Run every hook over every group and collect the suggestions."""
    hooks = DEFAULT_HOOKS if hooks is None else hooks
    suggestions = []
    for group_index, group in enumerate(groups):
        for hook in hooks:
            suggestions.extend(hook(group_index, group, lines))
    return suggestions


def unbounded_timer_hook(
    group_index: int, group: Group, lines: Sequence[ParsedLine]
) -> list[GroupSuggestion]:
    """A timer sequence with nothing that stops or gates it runs forever."""
    if group.tag != SemanticTag.TIMER_SEQUENCE:
        return []
    members = [lines[i] for i in group.members]
    if any(m.mechanic_name.lower() in HALTING_MECHANICS or m.conditions for m in members):
        return []
    return [GroupSuggestion(
        group_index=group_index,
        code="unbounded_timer",
        message="Timer sequence has no stop mechanic or condition gate",
        template="- cancelevent @self ?incombat",
    )]


def empty_section_hook(
    group_index: int, group: Group, lines: Sequence[ParsedLine]
) -> list[GroupSuggestion]:
    if group.kind != GroupKind.COMMENT_SECTION or group.members:
        return []
    return [GroupSuggestion(
        group_index=group_index,
        code="empty_section",
        message=f"Section '{group.label}' has no skill lines",
    )]


def repeated_mechanic_hook(
    group_index: int, group: Group, lines: Sequence[ParsedLine]
) -> list[GroupSuggestion]:
    """A chain that repeats one mechanic can usually be a single metaskill call."""
    if group.kind != GroupKind.TRIGGER_CHAIN:
        return []
    mechanics = {lines[i].mechanic_name.lower() for i in group.members}
    if len(mechanics) != 1:
        return []
    mechanic = lines[group.members[0]].mechanic_name
    return [GroupSuggestion(
        group_index=group_index,
        code="repeated_mechanic",
        message=f"All {group.size} lines in '{group.label}' use '{mechanic}'",
        template=f"- skill{{s=My{mechanic[:1].upper()}{mechanic[1:]}Sequence}} "
                 f"{lines[group.members[0]].targeter or '@self'} "
                 f"{lines[group.members[0]].trigger}",
    )]


DEFAULT_HOOKS: tuple[SuggestionHook, ...] = (
    unbounded_timer_hook,
    empty_section_hook,
    repeated_mechanic_hook,
)
