"""Line-list analysis - duplicates, similarity clusters, groups and consolidation advice."""

from .clusters import (
    AnalysisResult,
    AnalysisSummary,
    Difference,
    DuplicateCluster,
    SimilarityCluster,
    SimilarityMember,
)
from .similarity import (
    DEFAULT_EXCLUDED_MECHANICS,
    DuplicateDetector,
    analyze_lines,
    differences,
    similarity,
)
from .grouping import (
    DEFAULT_HOOKS,
    Group,
    GroupKind,
    GroupSuggestion,
    GroupSummary,
    SemanticTag,
    detect_groups,
    group_icon,
    standalone_indices,
    suggest_for_groups,
    summarize_groups,
)
from .advisor import ConsolidationSuggestion, suggest

__all__ = [
    "AnalysisResult",
    "AnalysisSummary",
    "Difference",
    "DuplicateCluster",
    "SimilarityCluster",
    "SimilarityMember",
    "DEFAULT_EXCLUDED_MECHANICS",
    "DuplicateDetector",
    "analyze_lines",
    "differences",
    "similarity",
    "DEFAULT_HOOKS",
    "Group",
    "GroupKind",
    "GroupSuggestion",
    "GroupSummary",
    "SemanticTag",
    "detect_groups",
    "group_icon",
    "standalone_indices",
    "suggest_for_groups",
    "summarize_groups",
    "ConsolidationSuggestion",
    "suggest",
]
