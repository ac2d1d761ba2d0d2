"""Document and extraction models.

Defines the immutable values that flow out of a resolution pass: the source
document, character intervals, aligned extractions and the annotated document
that groups them.

All offsets are codepoint offsets into a Python ``str``, so multi-byte
scripts index the same way as ASCII text.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _generate_document_id() -> str:
    return f"doc_{uuid.uuid4().hex[:8]}"


class AlignmentStatus(str, Enum):
    """How an extraction was located in its source document."""

    EXACT = "match_exact"
    FUZZY = "match_fuzzy"
    UNALIGNED = "unaligned"


class CharInterval(BaseModel):
    """Half-open codepoint range ``[start, end)`` into a document's text."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    start: int = Field(..., ge=0, description="Inclusive start offset")
    end: int = Field(..., ge=0, description="Exclusive end offset")

    @model_validator(mode="after")
    def validate_order(self) -> CharInterval:
        """Ensure start does not exceed end."""
        if self.start > self.end:
            raise ValueError(
                f"start ({self.start}) must not be greater than end ({self.end})"
            )
        return self

    @property
    def length(self) -> int:
        return self.end - self.start

    def overlaps(self, start: int, end: int) -> bool:
        """Return True if ``[start, end)`` shares any position with this interval."""
        return start < self.end and end > self.start


class SourceDocument(BaseModel):
    """Immutable source text that extractions are anchored to.

    Attributes:
        id: Opaque document identifier (generated as ``doc_xxxxxxxx`` if omitted)
        text: The document text
        metadata: Optional string metadata supplied by the caller
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(default_factory=_generate_document_id)
    text: str = Field(..., description="Document text")
    metadata: dict[str, str] = Field(default_factory=dict)

    @field_validator("id")
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Validate the identifier is not blank."""
        if not v or not v.strip():
            raise ValueError("id must be a non-empty string")
        return v


class Extraction(BaseModel):
    """One classified span of text with its resolved source location.

    ``char_interval`` is present for EXACT and FUZZY extractions and absent
    for UNALIGNED ones.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    extraction_class: str
    extraction_text: str
    attributes: dict[str, str] = Field(default_factory=dict)
    char_interval: CharInterval | None = None
    alignment_status: AlignmentStatus
    group_index: int = Field(0, ge=0)
    extraction_index: int = Field(0, ge=0)

    @model_validator(mode="after")
    def validate_interval_presence(self) -> Extraction:
        """Ensure the interval is present exactly when the span was aligned."""
        unaligned = self.alignment_status is AlignmentStatus.UNALIGNED
        if unaligned and self.char_interval is not None:
            raise ValueError("unaligned extractions must not carry a char_interval")
        if not unaligned and self.char_interval is None:
            raise ValueError(
                f"{self.alignment_status.value} extractions require a char_interval"
            )
        return self

    @property
    def is_aligned(self) -> bool:
        return self.alignment_status is not AlignmentStatus.UNALIGNED


class AnnotatedDocument(BaseModel):
    """A source document together with its ordered extractions.

    Aligned extractions come first, ordered by start offset; unaligned ones
    follow in the order the model emitted them. Construction verifies that
    every interval lies inside the document and that every EXACT extraction
    matches its slice of the text codepoint for codepoint.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    document: SourceDocument
    extractions: tuple[Extraction, ...] = ()

    @model_validator(mode="after")
    def validate_extractions(self) -> AnnotatedDocument:
        """Check interval bounds, the exactness invariant and list ordering."""
        text = self.document.text
        seen_unaligned = False
        last_start = 0
        for position, extraction in enumerate(self.extractions):
            interval = extraction.char_interval
            if interval is None:
                seen_unaligned = True
                continue
            if seen_unaligned:
                raise ValueError(
                    f"extraction {position} is aligned but follows an unaligned one"
                )
            if interval.end > len(text):
                raise ValueError(
                    f"extraction {position} interval [{interval.start}, "
                    f"{interval.end}) exceeds document length {len(text)}"
                )
            if interval.start < last_start:
                raise ValueError(
                    f"extraction {position} is out of order "
                    f"(start {interval.start} < {last_start})"
                )
            last_start = interval.start
            if (
                extraction.alignment_status is AlignmentStatus.EXACT
                and text[interval.start : interval.end] != extraction.extraction_text
            ):
                raise ValueError(
                    f"extraction {position} is marked exact but the source slice "
                    f"{text[interval.start : interval.end]!r} differs from "
                    f"{extraction.extraction_text!r}"
                )
        return self

    @property
    def document_id(self) -> str:
        return self.document.id

    @property
    def text(self) -> str:
        return self.document.text

    def extractions_for_class(self, extraction_class: str) -> list[Extraction]:
        """Return the extractions of one class, in document order."""
        return [e for e in self.extractions if e.extraction_class == extraction_class]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dictionary.

        Unaligned extractions omit ``char_interval`` rather than writing null.
        """
        extractions = []
        for extraction in self.extractions:
            item = extraction.model_dump(mode="json", exclude_none=True)
            extractions.append(item)
        return {
            "document_id": self.document.id,
            "text": self.document.text,
            "metadata": dict(self.document.metadata),
            "extractions": extractions,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnnotatedDocument:
        """Rebuild an annotated document produced by :meth:`to_dict`."""
        document = SourceDocument(
            id=data["document_id"],
            text=data["text"],
            metadata=data.get("metadata") or {},
        )
        extractions = tuple(
            Extraction.model_validate(item) for item in data.get("extractions", [])
        )
        return cls(document=document, extractions=extractions)
