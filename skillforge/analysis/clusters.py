"""
Analysis results - duplicate and similarity clusters.

Clusters are plain outputs: built fresh from a line list on every analysis
and never updated afterwards. Each carries a `kind` discriminant so callers
(the consolidation advisor, the service layer) can dispatch on it.
"""

from __future__ import annotations
from dataclasses import dataclass, field

MISSING = "(missing)"


@dataclass(frozen=True)
class Difference:
    """
    One dimension on which a member differs from its cluster's base line.

    dimension is "targeter", "trigger", "chance", "health_modifier" or
    "attribute"; attribute_key is set only for attribute differences.
    """
    dimension: str
    attribute_key: str | None
    value_in_base: str
    value_in_member: str

    @property
    def key(self) -> tuple[str, str | None]:
        return (self.dimension, self.attribute_key)


@dataclass(frozen=True)
class DuplicateCluster:
    """Lines whose trimmed text is identical."""
    source_line: str
    member_indices: tuple[int, ...]
    kind: str = field(default="exact", init=False)

    def __post_init__(self):
        object.__setattr__(self, "member_indices", tuple(self.member_indices))

    @property
    def count(self) -> int:
        return len(self.member_indices)


@dataclass(frozen=True)
class SimilarityMember:
    index: int
    similarity: float
    differences: tuple[Difference, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "differences", tuple(self.differences))


@dataclass(frozen=True)
class SimilarityCluster:
    """Structurally similar lines, compared against the lowest-index line."""
    base_index: int
    members: tuple[SimilarityMember, ...]
    base_line: str = ""
    kind: str = field(default="similar", init=False)

    def __post_init__(self):
        object.__setattr__(self, "members", tuple(self.members))

    @property
    def indices(self) -> list[int]:
        return [self.base_index] + [m.index for m in self.members]

    @property
    def average_similarity(self) -> float:
        if not self.members:
            return 1.0
        return sum(m.similarity for m in self.members) / len(self.members)

    def varying_values(self) -> list[tuple[str, str | None]]:
        """Distinct (dimension, attribute_key) pairs across all member differences."""
        seen: dict[tuple[str, str | None], None] = {}
        for member in self.members:
            for difference in member.differences:
                seen.setdefault(difference.key, None)
        return list(seen)


@dataclass(frozen=True)
class AnalysisSummary:
    total_lines: int
    exact_duplicates: int
    similar_groups: int
    potential_savings: int


@dataclass(frozen=True)
class AnalysisResult:
    duplicates: list[DuplicateCluster]
    similar_groups: list[SimilarityCluster]
    summary: AnalysisSummary
