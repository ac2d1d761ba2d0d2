"""Extraction resolution: parsing, alignment, occurrence tracking and ordering."""

from textanchor.resolver.aligner import Aligner
from textanchor.resolver.formats import (
    FORMAT_STRATEGIES,
    FormatStrategy,
    extract_structured_content,
)
from textanchor.resolver.normalization import (
    NORMALIZATION_POLICIES,
    NormalizationPolicy,
    NormalizedText,
    get_normalization_policy,
)
from textanchor.resolver.ordering import order_extractions
from textanchor.resolver.parser import ParsedResponse, ResponseParser
from textanchor.resolver.resolver import Resolver, resolve
from textanchor.resolver.tracker import OccurrenceTracker

__all__ = [
    "Aligner",
    "FORMAT_STRATEGIES",
    "FormatStrategy",
    "NORMALIZATION_POLICIES",
    "NormalizationPolicy",
    "NormalizedText",
    "OccurrenceTracker",
    "ParsedResponse",
    "Resolver",
    "ResponseParser",
    "extract_structured_content",
    "get_normalization_policy",
    "order_extractions",
    "resolve",
]
