"""textanchor - Anchor LLM extractions to exact spans of their source text.

textanchor takes the raw response a language model produced for an
extraction prompt and turns it into verified extractions, each tied to a
codepoint-accurate interval of the original document.

Main features:
- JSON and YAML responses, fenced or embedded in prose
- Exact, occurrence-aware alignment with fuzzy fallback
- Pluggable normalization policies
- Malformed records reported as warnings instead of failing the document
"""

from textanchor.lib.errors import (
    ConfigError,
    ParseError,
    RecordDefectError,
    TextAnchorError,
)
from textanchor.models import (
    AlignmentStatus,
    AnnotatedDocument,
    CharInterval,
    Extraction,
    FormatType,
    RecordWarning,
    ResolutionResult,
    ResolverConfig,
    SourceDocument,
    WarningReason,
)
from textanchor.resolver import Resolver, resolve

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "AlignmentStatus",
    "AnnotatedDocument",
    "CharInterval",
    "ConfigError",
    "Extraction",
    "FormatType",
    "ParseError",
    "RecordDefectError",
    "RecordWarning",
    "ResolutionResult",
    "Resolver",
    "ResolverConfig",
    "SourceDocument",
    "TextAnchorError",
    "WarningReason",
    "resolve",
]
