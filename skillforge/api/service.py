"""
API Service - Business logic layer between API and engine.

The service:
1. Parses incoming text once into ParsedLines
2. Runs the engine (validation, duplicate detection, grouping, advice)
3. Converts engine results into the pydantic response models

This layer is framework-agnostic (used by the FastAPI app and the CLI).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .. import __version__
from ..analysis import (
    DuplicateCluster,
    DuplicateDetector,
    Group,
    SimilarityCluster,
    detect_groups,
    group_icon,
    standalone_indices,
    suggest,
    suggest_for_groups,
    summarize_groups,
)
from ..analysis.clusters import AnalysisResult
from ..batch import BatchAnalyzer, BatchReport, load_document
from ..catalog import Catalog
from ..config import EngineSettings
from ..dsl import (
    Issue,
    ParsedLine,
    SkillLineValidator,
    ValidationResult,
    format_line,
    parse_line,
    status_line,
)
from ..dsl.validation import coerce_context
from .schemas import (
    AnalysisSummaryInfo,
    AnalyzeResponse,
    BatchResponse,
    BatchSummaryInfo,
    CallEdgeInfo,
    ClusterSuggestions,
    ConditionInfo,
    ConsolidationSuggestionInfo,
    DifferenceInfo,
    DuplicateClusterInfo,
    EntryReportInfo,
    GroupInfo,
    GroupSuggestionInfo,
    GroupSummaryInfo,
    GroupsResponse,
    HealthResponse,
    IssueInfo,
    LineReportInfo,
    MissingReferenceInfo,
    ParsedLineResponse,
    SequenceGroupingInfo,
    SimilarityClusterInfo,
    SimilarityMemberInfo,
    SuggestResponse,
    ValidationResponse,
)


@dataclass
class EngineService:
    """
    Engine facade for the HTTP API and the CLI.

    Usage:
        service = EngineService.from_settings(EngineSettings.from_env())

        parsed = service.parse("- damage{amount=10} @target ~onAttack")
        result = service.validate(line, "mob")
        report = service.batch(yaml_text)   # raises DocumentError on bad YAML
    """
    settings: EngineSettings = field(default_factory=EngineSettings)
    catalog: Optional[Catalog] = None

    def __post_init__(self):
        if self.catalog is None:
            self.catalog = self.settings.load_catalog()
        self.validator = SkillLineValidator(self.catalog)

    @classmethod
    def from_settings(cls, settings: EngineSettings) -> EngineService:
        return cls(settings=settings)

    def health(self) -> HealthResponse:
        return HealthResponse(
            status="healthy",
            service="skillforge-engine",
            version=__version__,
            catalog_version=self.catalog.version,
        )

    # =========================================================================
    # Single lines
    # =========================================================================

    def parse(self, line: str, strict: bool = False) -> ParsedLineResponse:
        return _parsed_info(parse_line(line, strict=strict))

    def validate(self, line: str, context: str = "skill") -> ValidationResponse:
        line_context = coerce_context(context)
        result = self.validator.validate(parse_line(line), line_context)
        return ValidationResponse(
            valid=result.valid,
            context=line_context.value,
            errors=[_issue_info(i) for i in result.errors],
            warnings=[_issue_info(i) for i in result.warnings],
            status=status_line(result),
        )

    # =========================================================================
    # Line lists
    # =========================================================================

    def analyze(self, lines: Iterable[str], threshold: Optional[float] = None) -> AnalyzeResponse:
        parsed = [parse_line(line) for line in lines]
        return _analysis_info(self._detector(threshold).analyze(parsed))

    def groups(self, lines: Iterable[str]) -> GroupsResponse:
        parsed = [parse_line(line) for line in lines]
        groups = detect_groups(parsed)
        summary = summarize_groups(groups, parsed)
        return GroupsResponse(
            groups=[_group_info(g) for g in groups],
            standalone=standalone_indices(parsed, groups),
            suggestions=[
                GroupSuggestionInfo(
                    group_index=s.group_index,
                    code=s.code,
                    message=s.message,
                    template=s.template,
                )
                for s in suggest_for_groups(groups, parsed)
            ],
            summary=GroupSummaryInfo(
                total_groups=summary.total_groups,
                by_kind=summary.by_kind,
                by_tag=summary.by_tag,
                grouped_lines=summary.grouped_lines,
                ungrouped_lines=summary.ungrouped_lines,
            ),
        )

    def suggest(self, lines: Iterable[str], threshold: Optional[float] = None) -> SuggestResponse:
        parsed = [parse_line(line) for line in lines]
        result = self._detector(threshold).analyze(parsed)

        clusters: list[DuplicateCluster | SimilarityCluster] = [
            *result.duplicates, *result.similar_groups
        ]
        return SuggestResponse(clusters=[
            ClusterSuggestions(
                cluster_kind=cluster.kind,
                indices=_cluster_indices(cluster),
                suggestions=[
                    ConsolidationSuggestionInfo(
                        method=s.method,
                        description=s.description,
                        example=s.example,
                        benefit=s.benefit,
                    )
                    for s in suggest(cluster)
                ],
            )
            for cluster in clusters
        ])

    # =========================================================================
    # Documents
    # =========================================================================

    def batch(self, document_text: str, threshold: Optional[float] = None) -> BatchResponse:
        """
        Analyze a YAML document.

        Raises DocumentError if the text is not a valid document.
        """
        document = load_document(document_text)
        analyzer = BatchAnalyzer(
            self.catalog,
            threshold=self._threshold(threshold),
            excluded_mechanics=self.settings.excluded_mechanics,
        )
        return _batch_info(analyzer.analyze(document))

    def _threshold(self, threshold: Optional[float]) -> float:
        return self.settings.similarity_threshold if threshold is None else threshold

    def _detector(self, threshold: Optional[float]) -> DuplicateDetector:
        return DuplicateDetector(
            self._threshold(threshold),
            excluded_mechanics=self.settings.excluded_mechanics,
        )


# =============================================================================
# Conversion Helpers
# =============================================================================

def _parsed_info(parsed: ParsedLine) -> ParsedLineResponse:
    return ParsedLineResponse(
        source_text=parsed.source_text,
        valid=parsed.valid,
        parse_error=parsed.parse_error.value if parsed.parse_error else None,
        mechanic_name=parsed.mechanic_name,
        attributes=dict(parsed.attributes),
        targeter=parsed.targeter,
        trigger=parsed.trigger,
        conditions=[
            ConditionInfo(
                name=c.name,
                args=dict(c.args),
                prefix=c.prefix,
                negated=c.negated,
                trigger_scoped=c.trigger_scoped,
            )
            for c in parsed.conditions
        ],
        chance=parsed.chance,
        health_modifier=parsed.health_modifier,
        formatted=format_line(parsed),
    )


def _issue_info(issue: Issue) -> IssueInfo:
    return IssueInfo(
        kind=issue.kind.value,
        severity=issue.severity.value,
        message=issue.message,
        field=issue.field,
    )


def _duplicate_info(cluster: DuplicateCluster) -> DuplicateClusterInfo:
    return DuplicateClusterInfo(
        source_line=cluster.source_line,
        member_indices=list(cluster.member_indices),
        count=cluster.count,
    )


def _similarity_info(cluster: SimilarityCluster) -> SimilarityClusterInfo:
    return SimilarityClusterInfo(
        base_index=cluster.base_index,
        base_line=cluster.base_line,
        average_similarity=cluster.average_similarity,
        members=[
            SimilarityMemberInfo(
                index=m.index,
                similarity=m.similarity,
                differences=[
                    DifferenceInfo(
                        dimension=d.dimension,
                        attribute_key=d.attribute_key,
                        value_in_base=d.value_in_base,
                        value_in_member=d.value_in_member,
                    )
                    for d in m.differences
                ],
            )
            for m in cluster.members
        ],
    )


def _analysis_info(result: AnalysisResult) -> AnalyzeResponse:
    return AnalyzeResponse(
        duplicates=[_duplicate_info(c) for c in result.duplicates],
        similar_groups=[_similarity_info(c) for c in result.similar_groups],
        summary=AnalysisSummaryInfo(
            total_lines=result.summary.total_lines,
            exact_duplicates=result.summary.exact_duplicates,
            similar_groups=result.summary.similar_groups,
            potential_savings=result.summary.potential_savings,
        ),
    )


def _group_info(group: Group) -> GroupInfo:
    return GroupInfo(
        kind=group.kind.value,
        tag=group.tag.value,
        members=list(group.members),
        parent_index=group.parent_index,
        label=group.label,
        icon=group_icon(group.tag),
    )


def _cluster_indices(cluster: DuplicateCluster | SimilarityCluster) -> list[int]:
    if isinstance(cluster, DuplicateCluster):
        return list(cluster.member_indices)
    return cluster.indices


def _line_report(index: int, line: ParsedLine, result: ValidationResult) -> LineReportInfo:
    return LineReportInfo(
        index=index,
        line=line.source_text,
        valid=result.valid,
        errors=[_issue_info(i) for i in result.errors],
        warnings=[_issue_info(i) for i in result.warnings],
    )


def _batch_info(report: BatchReport) -> BatchResponse:
    summary = report.summary
    return BatchResponse(
        entries=[
            EntryReportInfo(
                name=entry.name,
                kind=entry.kind.value,
                line_count=len(entry.validations),
                invalid_lines=entry.invalid_lines,
                lines=[
                    _line_report(index, entry.lines[index], result)
                    for index, result in entry.validations
                ],
                duplicates=[_duplicate_info(c) for c in entry.analysis.duplicates],
                similar_groups=[_similarity_info(c) for c in entry.analysis.similar_groups],
                groups=[_group_info(g) for g in entry.groups],
                standalone=entry.standalone,
            )
            for entry in report.entries
        ],
        edges=[
            CallEdgeInfo(
                source=e.source, target=e.target,
                attribute=e.attribute, line_index=e.line_index,
            )
            for e in report.edges
        ],
        missing_references=[
            MissingReferenceInfo(
                entry=m.entry, name=m.name,
                attribute=m.attribute, line_index=m.line_index,
            )
            for m in report.missing_references
        ],
        groupings=[
            SequenceGroupingInfo(kind=g.kind, members=list(g.members), label=g.label)
            for g in report.groupings
        ],
        standalone=list(report.standalone),
        summary=BatchSummaryInfo(
            entries=summary.entries,
            lines=summary.lines,
            invalid_lines=summary.invalid_lines,
            errors=summary.errors,
            warnings=summary.warnings,
            duplicate_clusters=summary.duplicate_clusters,
            similarity_clusters=summary.similarity_clusters,
            groupings=summary.groupings,
            standalone=summary.standalone,
        ),
    )
