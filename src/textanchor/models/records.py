"""Models for parsed model output and resolution results."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from textanchor.models.document import AlignmentStatus, AnnotatedDocument


class WarningReason(str, Enum):
    """Reason codes for records dropped during parsing."""

    MISSING_CLASS = "missing_class"
    MISSING_TEXT = "missing_text"
    INVALID_TEXT = "invalid_text"
    INVALID_ATTRIBUTES = "invalid_attributes"
    RESERVED_ATTRIBUTE_KEY = "reserved_attribute_key"
    INVALID_INDEX = "invalid_index"
    INVALID_RECORD = "invalid_record"


class RawExtractionRecord(BaseModel):
    """One record as emitted by the model, before alignment.

    ``extraction_index`` is the index the model declared for the record, or
    its 1-based emission position when none was given.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    extraction_class: str = Field(..., min_length=1)
    extraction_text: str = Field(..., min_length=1)
    attributes: dict[str, str] = Field(default_factory=dict)
    extraction_index: int = Field(..., ge=0)


class RecordWarning(BaseModel):
    """A non-fatal problem found while parsing one record."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    reason: WarningReason
    message: str
    raw_text: str = Field(..., description="The offending record as JSON text")


class ResolutionResult(BaseModel):
    """Output of resolving one model response against one document."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    document: AnnotatedDocument
    warnings: tuple[RecordWarning, ...] = ()

    @property
    def aligned_count(self) -> int:
        return sum(1 for e in self.document.extractions if e.is_aligned)

    @property
    def unaligned_count(self) -> int:
        return sum(
            1
            for e in self.document.extractions
            if e.alignment_status is AlignmentStatus.UNALIGNED
        )
