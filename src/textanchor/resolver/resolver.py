"""Resolve a model response into an annotated source document.

Usage:
    from textanchor import Resolver, SourceDocument

    resolver = Resolver()
    result = resolver.resolve(SourceDocument(text=text), response)
    for extraction in result.document.extractions:
        print(extraction.extraction_class, extraction.char_interval)
"""

from __future__ import annotations

import logging

from textanchor.models.config import ResolverConfig
from textanchor.models.document import (
    AnnotatedDocument,
    Extraction,
    SourceDocument,
)
from textanchor.models.records import RawExtractionRecord, ResolutionResult
from textanchor.resolver.aligner import Aligner
from textanchor.resolver.normalization import get_normalization_policy
from textanchor.resolver.ordering import order_extractions
from textanchor.resolver.parser import ResponseParser
from textanchor.resolver.tracker import OccurrenceTracker

logger = logging.getLogger(__name__)


class Resolver:
    """Parses model responses and anchors their extractions to the source.

    A Resolver only holds configuration. Every resolve() call creates its own
    tracker and aligner, so one instance may serve many documents, including
    from several threads at once.
    """

    def __init__(self, config: ResolverConfig | None = None) -> None:
        """Initialize the resolver.

        Args:
            config: Resolver configuration (defaults to ResolverConfig())

        Raises:
            ValueError: If the configured normalization policy is unknown
        """
        self.config = config or ResolverConfig()
        self.parser = ResponseParser(self.config)
        self.policy = (
            get_normalization_policy(self.config.normalization)
            if self.config.fuzzy_alignment
            else None
        )

    def resolve(self, document: SourceDocument, response: str) -> ResolutionResult:
        """Resolve one model response against one document.

        Args:
            document: The source document the model read
            response: Raw model response text

        Returns:
            ResolutionResult with the annotated document and record warnings

        Raises:
            ParseError: If the response has no usable structured block
        """
        parsed = self.parser.parse(response)
        extractions = self.align_records(document, parsed.records)
        annotated = AnnotatedDocument(
            document=document, extractions=tuple(order_extractions(extractions))
        )
        result = ResolutionResult(document=annotated, warnings=tuple(parsed.warnings))
        logger.info(
            f"Resolved document {document.id}: {len(extractions)} extractions "
            f"({result.aligned_count} aligned, {result.unaligned_count} unaligned, "
            f"{len(result.warnings)} records dropped)"
        )
        return result

    def align_records(
        self, document: SourceDocument, records: list[RawExtractionRecord]
    ) -> list[Extraction]:
        """Align records against a document, in emission order.

        Args:
            document: The source document
            records: Parsed records in the order the model emitted them

        Returns:
            Extractions in emission order (group indices not yet assigned)
        """
        aligner = Aligner(
            document,
            OccurrenceTracker(),
            policy=self.policy,
            token_overlap_threshold=self.config.token_overlap_threshold,
        )
        extractions: list[Extraction] = []
        for record in records:
            interval, status = aligner.align(record.extraction_text)
            extractions.append(
                Extraction(
                    extraction_class=record.extraction_class,
                    extraction_text=record.extraction_text,
                    attributes=dict(record.attributes),
                    char_interval=interval,
                    alignment_status=status,
                    extraction_index=record.extraction_index,
                )
            )
        return extractions


def resolve(
    document: SourceDocument,
    response: str,
    config: ResolverConfig | None = None,
) -> ResolutionResult:
    """Resolve a response with a one-off Resolver. See Resolver.resolve()."""
    return Resolver(config).resolve(document, response)
