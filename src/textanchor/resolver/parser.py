"""Turn a model response into raw extraction records.

The structured block located by textanchor.resolver.formats can take several
shapes, all of which models produce in practice:

- ``{"extractions": [...]}`` whose items are structured records
  (``{"extraction_class": ..., "extraction_text": ..., "attributes": {...}}``),
  category-keyed records (``{"person": "Alice", "person_attributes": {...}}``)
  or bare strings
- a top-level list of such items
- a category mapping (``{"characters": ["Alice", "Bob"], "places": "Paris"}``)

Records keep the order in which they appear in the response. A malformed
record is dropped with a RecordWarning; only an unusable top-level structure
raises ParseError.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from textanchor.lib.errors import ParseError, RecordDefectError
from textanchor.models.config import ResolverConfig
from textanchor.models.records import RawExtractionRecord, RecordWarning, WarningReason
from textanchor.resolver.formats import extract_structured_content

logger = logging.getLogger(__name__)

EXTRACTIONS_KEY = "extractions"
RESERVED_ATTRIBUTE_KEYS = frozenset({"class", "text", "interval"})

_CLASS_KEYS = ("extraction_class", "class")
_TEXT_KEYS = ("extraction_text", "text")
_INDEX_KEYS = ("extraction_index", "index")
_ATTRIBUTES_KEY = "attributes"


@dataclass
class ParsedResponse:
    """Records and warnings produced from one response."""

    records: list[RawExtractionRecord] = field(default_factory=list)
    warnings: list[RecordWarning] = field(default_factory=list)


@dataclass
class _Candidate:
    """A record located in the response, not yet validated."""

    extraction_class: Any
    extraction_text: Any
    attributes: Any = None
    index: Any = None
    raw: Any = None
    defect: str | None = None


def _render_raw(value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return repr(value)


def _scalar_to_str(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def flatten_attributes(attributes: dict[Any, Any], prefix: str = "") -> dict[str, str]:
    """Collapse nested attribute values into a flat string mapping.

    Nested mappings become dotted keys, lists are joined with ", " (null
    items skipped), booleans render as true/false and null as an empty string.

    Example:
        >>> flatten_attributes({"role": "lead", "aka": ["A", "B"], "age": {"n": 3}})
        {'role': 'lead', 'aka': 'A, B', 'age.n': '3'}
    """
    flat: dict[str, str] = {}
    for key, value in attributes.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(flatten_attributes(value, prefix=f"{name}."))
        elif isinstance(value, list):
            flat[name] = ", ".join(
                _render_raw(item) if isinstance(item, dict | list) else _scalar_to_str(item)
                for item in value
                if item is not None
            )
        else:
            flat[name] = _scalar_to_str(value)
    return flat


class ResponseParser:
    """Parses model responses into RawExtractionRecords.

    The parser holds only configuration; every call to parse() works on its
    own local state.
    """

    def __init__(self, config: ResolverConfig | None = None) -> None:
        """Initialize the parser.

        Args:
            config: Resolver configuration (defaults to ResolverConfig())
        """
        self.config = config or ResolverConfig()

    def parse(self, response: str) -> ParsedResponse:
        """Parse a raw model response.

        Args:
            response: Raw model response text

        Returns:
            ParsedResponse with records in emission order and any warnings

        Raises:
            ParseError: If the response has no usable structured block
        """
        content = extract_structured_content(
            response, self.config.format, self.config.fence_output
        )
        result = ParsedResponse()
        position = 0
        for candidate in self._iter_candidates(content):
            position += 1
            try:
                record = self._build_record(candidate, position)
            except RecordDefectError as e:
                raw_text = _render_raw(candidate.raw)
                logger.warning(f"Dropping extraction record ({e.reason}): {e.message}")
                result.warnings.append(
                    RecordWarning(
                        reason=WarningReason(e.reason),
                        message=e.message,
                        raw_text=raw_text,
                    )
                )
                continue
            result.records.append(record)

        logger.debug(
            f"Parsed {len(result.records)} records "
            f"({len(result.warnings)} dropped) from {self.config.format.value} response"
        )
        return result

    # ------------------------------------------------------------------
    # Shape handling
    # ------------------------------------------------------------------

    def _iter_candidates(self, content: Any) -> Iterator[_Candidate]:
        if isinstance(content, list):
            yield from self._iter_items(content)
            return

        if EXTRACTIONS_KEY in content:
            items = content[EXTRACTIONS_KEY]
            if items is None:
                return
            if not isinstance(items, list):
                raise ParseError(
                    f"the '{EXTRACTIONS_KEY}' value must be a sequence, "
                    f"got {type(items).__name__}"
                )
            yield from self._iter_items(items)
            return

        yield from self._iter_categories(content)

    def _iter_items(self, items: list[Any]) -> Iterator[_Candidate]:
        for item in items:
            if isinstance(item, dict):
                if self._is_structured_record(item):
                    yield self._structured_candidate(item)
                else:
                    yield from self._keyed_candidates(item)
            elif isinstance(item, list):
                yield _Candidate(
                    None, None, raw=item, defect="record must be a mapping or a string"
                )
            else:
                yield _Candidate(
                    self.config.default_extraction_class, item, raw=item
                )

    def _iter_categories(self, mapping: dict[Any, Any]) -> Iterator[_Candidate]:
        for category, value in mapping.items():
            if self._is_suffixed(category):
                continue
            values = value if isinstance(value, list) else [value]
            for item in values:
                if isinstance(item, dict) and not self._is_structured_record(item):
                    yield _Candidate(
                        category,
                        None,
                        raw={category: item},
                        defect=f"entry under '{category}' has no text field",
                    )
                elif isinstance(item, dict):
                    candidate = self._structured_candidate(item)
                    if candidate.extraction_class is None:
                        candidate.extraction_class = category
                    yield candidate
                else:
                    yield _Candidate(category, item, raw={category: item})

    def _is_structured_record(self, item: dict[Any, Any]) -> bool:
        return any(key in item for key in (*_CLASS_KEYS, *_TEXT_KEYS))

    def _is_suffixed(self, key: Any) -> bool:
        name = str(key)
        return name.endswith(self.config.attribute_suffix) or name.endswith(
            self.config.index_suffix
        )

    def _structured_candidate(self, item: dict[Any, Any]) -> _Candidate:
        return _Candidate(
            extraction_class=next((item[k] for k in _CLASS_KEYS if k in item), None),
            extraction_text=next((item[k] for k in _TEXT_KEYS if k in item), None),
            attributes=item.get(_ATTRIBUTES_KEY),
            index=next((item[k] for k in _INDEX_KEYS if k in item), None),
            raw=item,
        )

    def _keyed_candidates(self, item: dict[Any, Any]) -> Iterator[_Candidate]:
        """Split a category-keyed record into one candidate per category key."""
        keys = [key for key in item if not self._is_suffixed(key)]
        if not keys:
            yield _Candidate(
                None, None, raw=item, defect="record has no category or text field"
            )
            return
        for key in keys:
            name = str(key)
            raw = {
                k: v
                for k, v in item.items()
                if k == key
                or str(k) in (
                    f"{name}{self.config.attribute_suffix}",
                    f"{name}{self.config.index_suffix}",
                )
            }
            yield _Candidate(
                extraction_class=name,
                extraction_text=item[key],
                attributes=item.get(f"{name}{self.config.attribute_suffix}"),
                index=item.get(f"{name}{self.config.index_suffix}"),
                raw=raw,
            )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _build_record(self, candidate: _Candidate, position: int) -> RawExtractionRecord:
        if candidate.defect:
            raise RecordDefectError(WarningReason.INVALID_RECORD.value, candidate.defect)
        extraction_class = self._validate_class(candidate.extraction_class)
        extraction_text = self._validate_text(candidate.extraction_text)
        attributes = self._validate_attributes(candidate.attributes)
        index = self._validate_index(candidate.index, position)
        return RawExtractionRecord(
            extraction_class=extraction_class,
            extraction_text=extraction_text,
            attributes=attributes,
            extraction_index=index,
        )

    def _validate_class(self, value: Any) -> str:
        if value is None or isinstance(value, dict | list):
            raise RecordDefectError(
                WarningReason.MISSING_CLASS.value, "record has no extraction class"
            )
        name = _scalar_to_str(value).strip()
        if not name:
            raise RecordDefectError(
                WarningReason.MISSING_CLASS.value, "record has an empty extraction class"
            )
        return name

    def _validate_text(self, value: Any) -> str:
        if isinstance(value, dict | list):
            raise RecordDefectError(
                WarningReason.INVALID_TEXT.value,
                f"extraction text must be a string or number, got {type(value).__name__}",
            )
        text = _scalar_to_str(value)
        if not text.strip():
            raise RecordDefectError(
                WarningReason.MISSING_TEXT.value, "record has no extraction text"
            )
        return text

    def _validate_attributes(self, value: Any) -> dict[str, str]:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise RecordDefectError(
                WarningReason.INVALID_ATTRIBUTES.value,
                f"attributes must be a mapping or null, got {type(value).__name__}",
            )
        reserved = sorted(str(k) for k in value if str(k) in RESERVED_ATTRIBUTE_KEYS)
        if reserved:
            raise RecordDefectError(
                WarningReason.RESERVED_ATTRIBUTE_KEY.value,
                f"attributes use reserved key(s): {', '.join(reserved)}",
            )
        return flatten_attributes(value)

    def _validate_index(self, value: Any, position: int) -> int:
        if value is None:
            return position
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise RecordDefectError(
                WarningReason.INVALID_INDEX.value,
                f"index must be a non-negative integer, got {value!r}",
            )
        return value
