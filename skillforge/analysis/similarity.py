"""
Duplicate Detector - Exact and near-duplicate skill lines.

Two passes over a parsed line list:
1. Exact duplicates: identical trimmed text (comments and blank lines skipped)
2. Similarity: lines with the same mechanic are scored dimension by dimension
   (targeter, trigger, chance, health modifier, one per attribute key), pairs
   at or above the threshold are linked and every connected component of two
   or more lines becomes a SimilarityCluster

Only the first occurrence of an exact-duplicate text takes part in the second
pass, so a repeated line is reported once, as a DuplicateCluster.
"""

from __future__ import annotations
from typing import Iterable, Sequence
import logging

from ..dsl.formatter import format_chance
from ..dsl.line import ParsedLine
from ..dsl.parser import parse_line
from .clusters import (
    MISSING,
    AnalysisResult,
    AnalysisSummary,
    Difference,
    DuplicateCluster,
    SimilarityCluster,
    SimilarityMember,
)

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.7

# Pacing mechanics that are expected to repeat within a skill
DEFAULT_EXCLUDED_MECHANICS = ("delay", "wait", "pause")


class DuplicateDetector:
    """
    Finds duplicated and near-duplicated lines.

    Usage:
        detector = DuplicateDetector(threshold=0.8, excluded_mechanics=["delay"])
        result = detector.analyze(parse_lines(texts))
        for cluster in result.duplicates:
            ...

    Lines whose mechanic is in excluded_mechanics (compared case-insensitively)
    are skipped by both passes. By default these are the pacing mechanics
    delay, wait and pause; pass an empty list to compare every line.
    """

    def __init__(
        self,
        threshold: float = DEFAULT_THRESHOLD,
        excluded_mechanics: Iterable[str] = DEFAULT_EXCLUDED_MECHANICS,
    ):
        self.threshold = _clamp(threshold)
        self.excluded_mechanics = frozenset(m.lower() for m in excluded_mechanics)

    def set_threshold(self, threshold: float) -> None:
        self.threshold = _clamp(threshold)

    def is_excluded(self, line: ParsedLine) -> bool:
        return line.mechanic_name.lower() in self.excluded_mechanics

    def analyze(self, lines: Sequence[ParsedLine]) -> AnalysisResult:
        duplicates = self.find_exact_duplicates(lines)
        similar = self.find_similar_groups(lines)
        savings = sum(cluster.count - 1 for cluster in duplicates)

        logger.debug(
            "Analyzed %d lines: %d duplicate clusters, %d similarity clusters",
            len(lines), len(duplicates), len(similar),
        )
        return AnalysisResult(
            duplicates=duplicates,
            similar_groups=similar,
            summary=AnalysisSummary(
                total_lines=len(lines),
                exact_duplicates=len(duplicates),
                similar_groups=len(similar),
                potential_savings=savings,
            ),
        )

    def find_exact_duplicates(self, lines: Sequence[ParsedLine]) -> list[DuplicateCluster]:
        seen: dict[str, list[int]] = {}
        for index, line in enumerate(lines):
            if line.is_comment or line.is_blank or self.is_excluded(line):
                continue
            seen.setdefault(line.source_text.strip(), []).append(index)

        # dicts keep insertion order, so clusters come out by first index
        return [
            DuplicateCluster(source_line=text, member_indices=indices)
            for text, indices in seen.items()
            if len(indices) > 1
        ]

    def find_similar_groups(self, lines: Sequence[ParsedLine]) -> list[SimilarityCluster]:
        candidates = []
        seen_text = set()
        for index, line in enumerate(lines):
            text = line.source_text.strip()
            if not line.valid or self.is_excluded(line) or text in seen_text:
                continue
            seen_text.add(text)
            candidates.append(index)

        components = _UnionFind(candidates)
        for i, a in enumerate(candidates):
            for b in candidates[i + 1:]:
                if not _same_mechanic(lines[a], lines[b]):
                    continue
                if similarity(lines[a], lines[b]) >= self.threshold:
                    components.union(a, b)

        clusters = []
        for members in components.groups():
            if len(members) < 2:
                continue
            base_index = members[0]
            base = lines[base_index]
            clusters.append(SimilarityCluster(
                base_index=base_index,
                base_line=base.source_text.strip(),
                members=[
                    SimilarityMember(
                        index=index,
                        similarity=similarity(base, lines[index]),
                        differences=differences(base, lines[index]),
                    )
                    for index in members[1:]
                ],
            ))
        return clusters


def analyze_lines(
    lines: Iterable[ParsedLine | str],
    threshold: float = DEFAULT_THRESHOLD,
    excluded_mechanics: Iterable[str] = DEFAULT_EXCLUDED_MECHANICS,
) -> AnalysisResult:
    """Run the duplicate detector over raw or parsed lines."""
    parsed = [parse_line(line) if isinstance(line, str) else line for line in lines]
    return DuplicateDetector(threshold, excluded_mechanics).analyze(parsed)


def similarity(a: ParsedLine, b: ParsedLine) -> float:
    """
    Structural similarity in [0, 1].

    0.0 when either line is invalid or the mechanics differ; otherwise the
    share of dimensions on which both lines agree.
    """
    if not a.valid or not b.valid or not _same_mechanic(a, b):
        return 0.0
    if a is b or a.source_text.strip() == b.source_text.strip():
        return 1.0

    dimensions = _dimensions(a, b)
    agreeing = sum(1 for left, right in dimensions.values() if left == right)
    return agreeing / len(dimensions)


def differences(base: ParsedLine, member: ParsedLine) -> list[Difference]:
    """Every dimension on which member differs from base."""
    found = []
    for (dimension, key), (left, right) in _dimensions(base, member).items():
        if left != right:
            found.append(Difference(
                dimension=dimension,
                attribute_key=key,
                value_in_base=MISSING if left is None else left,
                value_in_member=MISSING if right is None else right,
            ))
    return found


def _dimensions(a: ParsedLine, b: ParsedLine) -> dict[tuple[str, str | None], tuple]:
    dimensions = {
        ("targeter", None): (a.targeter, b.targeter),
        ("trigger", None): (a.trigger, b.trigger),
        ("chance", None): (_chance_text(a), _chance_text(b)),
        ("health_modifier", None): (a.health_modifier, b.health_modifier),
    }
    for key in [*a.attributes, *(k for k in b.attributes if k not in a.attributes)]:
        dimensions[("attribute", key)] = (a.attributes.get(key), b.attributes.get(key))
    return dimensions


def _chance_text(line: ParsedLine) -> str | None:
    return None if line.chance is None else format_chance(line.chance)


def _same_mechanic(a: ParsedLine, b: ParsedLine) -> bool:
    return a.mechanic_name.lower() == b.mechanic_name.lower()


def _clamp(threshold: float) -> float:
    return max(0.0, min(1.0, float(threshold)))


class _UnionFind:
    """Disjoint sets over line indices."""

    def __init__(self, items: Iterable[int]):
        self.parent = {item: item for item in items}

    def find(self, item: int) -> int:
        while self.parent[item] != item:
            self.parent[item] = self.parent[self.parent[item]]
            item = self.parent[item]
        return item

    def union(self, a: int, b: int) -> None:
        root_a, root_b = self.find(a), self.find(b)
        if root_a != root_b:
            # lower index stays the root so the base line is stable
            if root_b < root_a:
                root_a, root_b = root_b, root_a
            self.parent[root_b] = root_a

    def groups(self) -> list[list[int]]:
        groups: dict[int, list[int]] = {}
        for item in self.parent:
            groups.setdefault(self.find(item), []).append(item)
        return sorted((sorted(g) for g in groups.values()), key=lambda g: g[0])
