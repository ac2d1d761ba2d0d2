"""Data models for documents, extractions and resolver configuration."""

from textanchor.models.config import ConfigOverrides, FormatType, ResolverConfig
from textanchor.models.document import (
    AlignmentStatus,
    AnnotatedDocument,
    CharInterval,
    Extraction,
    SourceDocument,
)
from textanchor.models.records import (
    RawExtractionRecord,
    RecordWarning,
    ResolutionResult,
    WarningReason,
)

__all__ = [
    "AlignmentStatus",
    "AnnotatedDocument",
    "CharInterval",
    "ConfigOverrides",
    "Extraction",
    "FormatType",
    "RawExtractionRecord",
    "RecordWarning",
    "ResolutionResult",
    "ResolverConfig",
    "SourceDocument",
    "WarningReason",
]
