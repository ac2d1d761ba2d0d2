"""Normalization policies for fuzzy alignment.

A policy turns the source text into a normalized string plus an offset map
(one original codepoint offset per normalized character), and turns an
extraction's text into the normalized query to look for. Any span of the
normalized source can then be mapped back onto the original text.

Policies:
- default: collapse whitespace, case-fold, strip punctuation around the query
- strict: collapse whitespace only
- loose: NFKC, case-fold, collapse whitespace, drop all punctuation
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class NormalizedText:
    """Normalized text with a map back to original codepoint offsets.

    Attributes:
        text: The normalized string
        offsets: offsets[i] is the original offset that produced text[i]
    """

    text: str
    offsets: tuple[int, ...]

    def original_span(self, start: int, end: int) -> tuple[int, int]:
        """Map a non-empty normalized span ``[start, end)`` to the original text."""
        return self.offsets[start], self.offsets[end - 1] + 1


@runtime_checkable
class NormalizationPolicy(Protocol):
    """Protocol implemented by all normalization policies."""

    name: str

    def normalize_source(self, text: str) -> NormalizedText:
        """Normalize source text, keeping the offset map."""
        ...

    def normalize_query(self, text: str) -> str:
        """Normalize extraction text for lookup in normalized source."""
        ...


def is_punctuation(char: str) -> bool:
    """Return True for Unicode punctuation and symbol characters."""
    return unicodedata.category(char)[0] in ("P", "S")


@dataclass(frozen=True)
class CharacterNormalizationPolicy:
    """Character-level normalization driven by a few switches.

    Each original character is transformed independently, so characters whose
    case-folded or NFKC form is longer than one codepoint still map back to
    the single original offset.
    """

    name: str
    casefold: bool = True
    collapse_whitespace: bool = True
    strip_query_punctuation: bool = True
    drop_punctuation: bool = False
    unicode_nfkc: bool = False

    def _transform(self, char: str) -> str:
        if self.unicode_nfkc:
            char = unicodedata.normalize("NFKC", char)
        if self.casefold:
            char = char.casefold()
        if self.drop_punctuation:
            char = "".join(c for c in char if not is_punctuation(c))
        return char

    def normalize_source(self, text: str) -> NormalizedText:
        chars: list[str] = []
        offsets: list[int] = []
        in_space = False
        for offset, char in enumerate(text):
            if self.collapse_whitespace and char.isspace():
                if not in_space:
                    chars.append(" ")
                    offsets.append(offset)
                in_space = True
                continue
            transformed = self._transform(char)
            if not transformed:
                continue
            in_space = False
            for out in transformed:
                if self.collapse_whitespace and out.isspace():
                    out = " "
                chars.append(out)
                offsets.append(offset)
        return NormalizedText("".join(chars), tuple(offsets))

    def normalize_query(self, text: str) -> str:
        normalized = self.normalize_source(text).text
        if self.strip_query_punctuation:
            start, end = 0, len(normalized)
            while start < end and (
                normalized[start].isspace() or is_punctuation(normalized[start])
            ):
                start += 1
            while end > start and (
                normalized[end - 1].isspace() or is_punctuation(normalized[end - 1])
            ):
                end -= 1
            return normalized[start:end]
        return normalized.strip()


DEFAULT_POLICY = CharacterNormalizationPolicy(name="default")

STRICT_POLICY = CharacterNormalizationPolicy(
    name="strict",
    casefold=False,
    strip_query_punctuation=False,
)

LOOSE_POLICY = CharacterNormalizationPolicy(
    name="loose",
    drop_punctuation=True,
    unicode_nfkc=True,
)

NORMALIZATION_POLICIES: dict[str, NormalizationPolicy] = {
    DEFAULT_POLICY.name: DEFAULT_POLICY,
    STRICT_POLICY.name: STRICT_POLICY,
    LOOSE_POLICY.name: LOOSE_POLICY,
}


def get_normalization_policy(name: str) -> NormalizationPolicy:
    """Look up a registered normalization policy by name.

    Raises:
        ValueError: If no policy is registered under the name
    """
    try:
        return NORMALIZATION_POLICIES[name]
    except KeyError as e:
        supported = ", ".join(sorted(NORMALIZATION_POLICIES))
        raise ValueError(
            f"Unknown normalization policy '{name}'. Supported: {supported}"
        ) from e
