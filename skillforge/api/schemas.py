"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between an editor front end and the engine.
All responses include explicit types for OpenAPI schema generation.

Error Codes:
- INVALID_DOCUMENT: Batch document is not valid YAML or not a mapping of entries
- INVALID_CATALOG: Configured catalog file could not be loaded
- VALIDATION_ERROR: Request body failed validation
- INTERNAL_ERROR: Unexpected failure
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    INVALID_DOCUMENT = "INVALID_DOCUMENT"
    INVALID_CATALOG = "INVALID_CATALOG"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Request Models
# =============================================================================

class ParseRequest(BaseModel):
    """Request to parse one skill line."""
    line: str = Field(..., description="Skill line, with or without the leading '- '")
    strict: bool = Field(False, description="Treat a malformed health modifier as a parse error")


class ValidateRequest(BaseModel):
    """Request to validate one skill line."""
    line: str = Field(..., description="Skill line to validate")
    context: str = Field("skill", description="mob or skill; unknown values validate as skill")


class LinesRequest(BaseModel):
    """Request carrying an ordered list of skill lines."""
    lines: list[str] = Field(..., description="Ordered skill lines, comments included")
    threshold: Optional[float] = Field(
        None, ge=0.0, le=1.0, description="Similarity threshold (server default if omitted)"
    )


class BatchRequest(BaseModel):
    """Request to analyze a whole YAML document."""
    document: str = Field(..., description="YAML text mapping entry names to entries")
    threshold: Optional[float] = Field(None, ge=0.0, le=1.0)


# =============================================================================
# Line Models
# =============================================================================

class ConditionInfo(BaseModel):
    """An inline condition."""
    name: str
    args: dict[str, str] = Field(default_factory=dict)
    prefix: str = Field("?", description="Literal marker: ?, ?!, ?~, &, &! ...")
    negated: bool = False
    trigger_scoped: bool = False


class ParsedLineResponse(BaseModel):
    """Structured form of a skill line."""
    source_text: str
    valid: bool
    parse_error: Optional[str] = None
    mechanic_name: str
    attributes: dict[str, str] = Field(default_factory=dict)
    targeter: Optional[str] = None
    trigger: Optional[str] = None
    conditions: list[ConditionInfo] = Field(default_factory=list)
    chance: Optional[float] = None
    health_modifier: Optional[str] = None
    formatted: str = Field(..., description="Canonical text for the line")


class IssueInfo(BaseModel):
    """A validation finding."""
    kind: str
    severity: str = Field(..., description="error or warning")
    message: str
    field: Optional[str] = None


class ValidationResponse(BaseModel):
    """Result of validating one line."""
    valid: bool
    context: str
    errors: list[IssueInfo] = Field(default_factory=list)
    warnings: list[IssueInfo] = Field(default_factory=list)
    status: str = Field(..., description="One-line status for inline display")


# =============================================================================
# Analysis Models
# =============================================================================

class DifferenceInfo(BaseModel):
    dimension: str
    attribute_key: Optional[str] = None
    value_in_base: str
    value_in_member: str


class DuplicateClusterInfo(BaseModel):
    """Exact duplicates."""
    kind: str = "exact"
    source_line: str
    member_indices: list[int]
    count: int


class SimilarityMemberInfo(BaseModel):
    index: int
    similarity: float
    differences: list[DifferenceInfo] = Field(default_factory=list)


class SimilarityClusterInfo(BaseModel):
    """Similar lines compared against the base line."""
    kind: str = "similar"
    base_index: int
    base_line: str
    members: list[SimilarityMemberInfo]
    average_similarity: float


class AnalysisSummaryInfo(BaseModel):
    total_lines: int
    exact_duplicates: int
    similar_groups: int
    potential_savings: int


class AnalyzeResponse(BaseModel):
    """Duplicate and similarity analysis of a line list."""
    duplicates: list[DuplicateClusterInfo] = Field(default_factory=list)
    similar_groups: list[SimilarityClusterInfo] = Field(default_factory=list)
    summary: AnalysisSummaryInfo


class GroupInfo(BaseModel):
    kind: str = Field(..., description="comment_section or trigger_chain")
    tag: str = Field(..., description="section, damage_sequence, timer_sequence or generic")
    members: list[int]
    parent_index: Optional[int] = None
    label: str
    icon: str


class GroupSuggestionInfo(BaseModel):
    group_index: int
    code: str
    message: str
    template: str = ""


class GroupSummaryInfo(BaseModel):
    total_groups: int
    by_kind: dict[str, int] = Field(default_factory=dict)
    by_tag: dict[str, int] = Field(default_factory=dict)
    grouped_lines: int
    ungrouped_lines: int


class GroupsResponse(BaseModel):
    """Groups detected in a line list."""
    groups: list[GroupInfo] = Field(default_factory=list)
    standalone: list[int] = Field(default_factory=list)
    suggestions: list[GroupSuggestionInfo] = Field(default_factory=list)
    summary: GroupSummaryInfo


class ConsolidationSuggestionInfo(BaseModel):
    method: str = Field(
        ..., description="metaskill, variable, parameterized-metaskill or targeter-branch"
    )
    description: str
    example: str
    benefit: str


class ClusterSuggestions(BaseModel):
    """Consolidation suggestions for one cluster."""
    cluster_kind: str
    indices: list[int]
    suggestions: list[ConsolidationSuggestionInfo] = Field(default_factory=list)


class SuggestResponse(BaseModel):
    clusters: list[ClusterSuggestions] = Field(default_factory=list)


# =============================================================================
# Batch Models
# =============================================================================

class LineReportInfo(BaseModel):
    """Validation outcome for one line of an entry."""
    index: int
    line: str
    valid: bool
    errors: list[IssueInfo] = Field(default_factory=list)
    warnings: list[IssueInfo] = Field(default_factory=list)


class EntryReportInfo(BaseModel):
    name: str
    kind: str = Field(..., description="mob or skill")
    line_count: int
    invalid_lines: int
    lines: list[LineReportInfo] = Field(default_factory=list)
    duplicates: list[DuplicateClusterInfo] = Field(default_factory=list)
    similar_groups: list[SimilarityClusterInfo] = Field(default_factory=list)
    groups: list[GroupInfo] = Field(default_factory=list)
    standalone: list[int] = Field(default_factory=list)


class CallEdgeInfo(BaseModel):
    source: str
    target: str
    attribute: str
    line_index: int


class MissingReferenceInfo(BaseModel):
    entry: str
    name: str
    attribute: str
    line_index: int


class SequenceGroupingInfo(BaseModel):
    kind: str = Field(..., description="call-chain or name-prefix")
    members: list[str]
    label: str


class BatchSummaryInfo(BaseModel):
    entries: int
    lines: int
    invalid_lines: int
    errors: int
    warnings: int
    duplicate_clusters: int
    similarity_clusters: int
    groupings: int
    standalone: int


class BatchResponse(BaseModel):
    """Analysis of every entry in a document."""
    entries: list[EntryReportInfo] = Field(default_factory=list)
    edges: list[CallEdgeInfo] = Field(default_factory=list)
    missing_references: list[MissingReferenceInfo] = Field(default_factory=list)
    groupings: list[SequenceGroupingInfo] = Field(default_factory=list)
    standalone: list[str] = Field(default_factory=list)
    summary: BatchSummaryInfo


# =============================================================================
# System Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
    catalog_version: str = ""
