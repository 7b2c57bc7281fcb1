"""Batch analysis over whole documents of named skill-line sequences."""

from .document import (
    DocumentError,
    EntryKind,
    SequenceEntry,
    SkillDocument,
    load_document,
    scan_skill_blocks,
)
from .analyzer import (
    BatchAnalyzer,
    BatchReport,
    BatchSummary,
    CallEdge,
    EntryReport,
    MissingReference,
    SequenceGrouping,
    referenced_names,
)

__all__ = [
    "DocumentError",
    "EntryKind",
    "SequenceEntry",
    "SkillDocument",
    "load_document",
    "scan_skill_blocks",
    "BatchAnalyzer",
    "BatchReport",
    "BatchSummary",
    "CallEdge",
    "EntryReport",
    "MissingReference",
    "SequenceGrouping",
    "referenced_names",
]
