"""
Batch Analyzer - Runs the line engine over every entry of a document.

Per entry: parse, validate in the entry's context, detect duplicates and
groups. Across entries: build the call graph from skill-invoking attributes,
report references to names the document does not define, and propose
groupings of related metaskill sequences.

Nothing in here raises on bad content. A line that fails to parse is
reported as an invalid line and the analysis moves on.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable
import logging
import os

from ..analysis.clusters import AnalysisResult
from ..analysis.grouping import Group, detect_groups, standalone_indices
from ..analysis.similarity import (
    DEFAULT_EXCLUDED_MECHANICS,
    DEFAULT_THRESHOLD,
    DuplicateDetector,
)
from ..catalog import Catalog, default_catalog
from ..dsl.line import ParsedLine
from ..dsl.parser import parse_line
from ..dsl.validation import LineContext, SkillLineValidator, ValidationResult
from .document import EntryKind, SequenceEntry, SkillDocument

logger = logging.getLogger(__name__)

# Attributes whose value names another sequence, on any mechanic
CALLBACK_ATTRIBUTES = frozenset({
    "ontick", "onhit", "onend", "onstart", "onbounce",
    "ontimer", "onattack", "ondamaged",
})
# Short attribute names that only mean "call this skill" on skill-calling mechanics
SKILL_ATTRIBUTES = frozenset({"skill", "s", "meta", "m", "mechanics"})
SKILL_CALL_MECHANICS = frozenset({"skill", "metaskill", "meta", "randomskill"})

MIN_PREFIX_LENGTH = 3


@dataclass(frozen=True)
class CallEdge:
    source: str
    target: str
    attribute: str
    line_index: int


@dataclass(frozen=True)
class MissingReference:
    """A line that calls a sequence the document does not define."""
    entry: str
    name: str
    attribute: str
    line_index: int


@dataclass(frozen=True)
class SequenceGrouping:
    """A proposed group of related metaskill sequences."""
    kind: str  # "call-chain" or "name-prefix"
    members: tuple[str, ...]
    label: str

    def __post_init__(self):
        object.__setattr__(self, "members", tuple(self.members))


@dataclass
class EntryReport:
    name: str
    kind: EntryKind
    lines: list[ParsedLine]
    validations: list[tuple[int, ValidationResult]]
    analysis: AnalysisResult
    groups: list[Group]
    standalone: list[int]

    @property
    def invalid_lines(self) -> int:
        return sum(1 for _, result in self.validations if not result.valid)

    @property
    def error_count(self) -> int:
        return sum(len(result.errors) for _, result in self.validations)

    @property
    def warning_count(self) -> int:
        return sum(len(result.warnings) for _, result in self.validations)


@dataclass(frozen=True)
class BatchSummary:
    entries: int
    lines: int
    invalid_lines: int
    errors: int
    warnings: int
    duplicate_clusters: int
    similarity_clusters: int
    groupings: int
    standalone: int


@dataclass
class BatchReport:
    entries: list[EntryReport]
    edges: list[CallEdge]
    missing_references: list[MissingReference]
    groupings: list[SequenceGrouping]
    standalone: list[str]
    summary: BatchSummary = field(init=False)

    def __post_init__(self):
        self.summary = BatchSummary(
            entries=len(self.entries),
            lines=sum(
                1 for entry in self.entries for line in entry.lines
                if not line.is_comment and not line.is_blank
            ),
            invalid_lines=sum(entry.invalid_lines for entry in self.entries),
            errors=sum(entry.error_count for entry in self.entries),
            warnings=sum(entry.warning_count for entry in self.entries),
            duplicate_clusters=sum(len(e.analysis.duplicates) for e in self.entries),
            similarity_clusters=sum(len(e.analysis.similar_groups) for e in self.entries),
            groupings=len(self.groupings),
            standalone=len(self.standalone),
        )

    def get_entry(self, name: str) -> EntryReport | None:
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None


class BatchAnalyzer:
    """
    Analyzes every entry of a SkillDocument.

    Usage:
        analyzer = BatchAnalyzer(catalog, threshold=0.7)
        report = analyzer.analyze(load_document(text))
        print(report.summary.errors)
    """

    def __init__(
        self,
        catalog: Catalog | None = None,
        threshold: float = DEFAULT_THRESHOLD,
        excluded_mechanics: Iterable[str] = DEFAULT_EXCLUDED_MECHANICS,
    ):
        self.catalog = catalog or default_catalog()
        self.validator = SkillLineValidator(self.catalog)
        self.detector = DuplicateDetector(threshold, excluded_mechanics)

    def analyze(self, document: SkillDocument) -> BatchReport:
        entries = [self.analyze_entry(entry) for entry in document.entries]

        names = set(document.names)
        edges, missing = _call_graph(entries, names)
        skill_names = [e.name for e in entries if e.kind == EntryKind.SKILL]

        groupings = _call_chain_groupings(skill_names, edges)
        assigned = {name for grouping in groupings for name in grouping.members}
        groupings.extend(_prefix_groupings([n for n in skill_names if n not in assigned]))

        called = {edge.target for edge in edges if edge.source != edge.target}
        standalone = [name for name in skill_names if name not in called]

        report = BatchReport(
            entries=entries,
            edges=edges,
            missing_references=missing,
            groupings=groupings,
            standalone=standalone,
        )
        logger.info(
            "Batch analysis: %d entries, %d lines, %d errors, %d warnings",
            report.summary.entries, report.summary.lines,
            report.summary.errors, report.summary.warnings,
        )
        return report

    def analyze_entry(self, entry: SequenceEntry) -> EntryReport:
        lines = [parse_line(text) for text in entry.lines]
        context = LineContext.MOB if entry.kind == EntryKind.MOB else LineContext.SKILL

        validations = [
            (index, self.validator.validate(line, context))
            for index, line in enumerate(lines)
            if not line.is_comment and not line.is_blank
        ]
        groups = detect_groups(lines)
        return EntryReport(
            name=entry.name,
            kind=entry.kind,
            lines=lines,
            validations=validations,
            analysis=self.detector.analyze(lines),
            groups=groups,
            standalone=standalone_indices(lines, groups),
        )


def referenced_names(line: ParsedLine) -> list[tuple[str, str]]:
    """(attribute, sequence name) pairs a line calls."""
    if not line.valid:
        return []
    calls_skills = line.mechanic_name.lower() in SKILL_CALL_MECHANICS
    found = []
    for key, value in line.attributes.items():
        lowered = key.lower()
        if lowered in CALLBACK_ATTRIBUTES or (calls_skills and lowered in SKILL_ATTRIBUTES):
            name = _reference_name(value)
            if name:
                found.append((key, name))
    return found


def _reference_name(value: str) -> str | None:
    """Sequence name in an attribute value, or None for inline blocks."""
    name = value.strip().strip('"').strip("[]").strip()
    if not name or any(c.isspace() for c in name) or "{" in name:
        return None
    return name


def _call_graph(
    entries: list[EntryReport], names: set[str]
) -> tuple[list[CallEdge], list[MissingReference]]:
    edges = []
    missing = []
    for entry in entries:
        for index, line in enumerate(entry.lines):
            for attribute, name in referenced_names(line):
                if name in names:
                    edges.append(CallEdge(entry.name, name, attribute, index))
                elif not name.startswith("_") and ":" not in name:
                    missing.append(MissingReference(entry.name, name, attribute, index))
    return edges, missing


def _call_chain_groupings(
    skill_names: list[str], edges: list[CallEdge]
) -> list[SequenceGrouping]:
    """Connected components of the call graph restricted to skill sequences."""
    order = {name: i for i, name in enumerate(skill_names)}
    neighbours: dict[str, set[str]] = {name: set() for name in skill_names}
    for edge in edges:
        if edge.source in order and edge.target in order and edge.source != edge.target:
            neighbours[edge.source].add(edge.target)
            neighbours[edge.target].add(edge.source)

    groupings = []
    visited: set[str] = set()
    for name in skill_names:
        if name in visited or not neighbours[name]:
            continue
        component = []
        stack = [name]
        visited.add(name)
        while stack:
            current = stack.pop()
            component.append(current)
            for neighbour in neighbours[current]:
                if neighbour not in visited:
                    visited.add(neighbour)
                    stack.append(neighbour)
        component.sort(key=order.__getitem__)
        groupings.append(SequenceGrouping(
            kind="call-chain",
            members=component,
            label=f"{component[0]} call chain",
        ))
    return groupings


def _prefix_groupings(names: list[str]) -> list[SequenceGrouping]:
    """Group names sharing a literal prefix of MIN_PREFIX_LENGTH or more characters."""
    groupings = []
    remaining = list(names)
    while remaining:
        first = remaining.pop(0)
        members = [first]
        prefix = None
        for other in list(remaining):
            common = _common_prefix(first if prefix is None else prefix, other)
            if len(common) >= MIN_PREFIX_LENGTH:
                prefix = common
                members.append(other)
                remaining.remove(other)
        if len(members) >= 2:
            groupings.append(SequenceGrouping(
                kind="name-prefix",
                members=members,
                label=f"{prefix}*",
            ))
    return groupings


def _common_prefix(a: str, b: str) -> str:
    return os.path.commonprefix([a, b]).rstrip("-_")
