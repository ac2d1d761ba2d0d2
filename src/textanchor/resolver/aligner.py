"""Locate extraction text inside the source document.

Alignment strategies, tried in order (first success wins):

1. Exact match at or after the tracker cursor
2. Exact match anywhere, leftmost unclaimed occurrence
3. Fuzzy match: steps 1 and 2 repeated on normalized text, optionally
   followed by a token-overlap window search
4. Unaligned: no interval

Exact steps are case-sensitive; only the fuzzy step applies the
normalization policy. Every match is claimed through the OccurrenceTracker,
and claims are respected by all strategies.
"""

from __future__ import annotations

import bisect
import logging
import math
import re
from collections import Counter
from collections.abc import Callable

from textanchor.models.document import AlignmentStatus, CharInterval, SourceDocument
from textanchor.resolver.normalization import NormalizationPolicy, NormalizedText
from textanchor.resolver.tracker import OccurrenceTracker

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"\S+")

SpanMapper = Callable[[int, int], tuple[int, int]]


def _identity_span(start: int, end: int) -> tuple[int, int]:
    return start, end


def normalize_token(token: str) -> str:
    """Light plural stemming: drop a trailing 's' from longer tokens.

    Example:
        >>> normalize_token("races"), normalize_token("glass"), normalize_token("bus")
        ('race', 'glass', 'bus')
    """
    if len(token) > 3 and token.endswith("s") and not token.endswith("ss"):
        return token[:-1]
    return token


class Aligner:
    """Aligns records against one document using one tracker.

    An Aligner belongs to a single resolution call. The normalized form of
    the document is computed on first use and reused for later records.
    """

    def __init__(
        self,
        document: SourceDocument,
        tracker: OccurrenceTracker,
        policy: NormalizationPolicy | None = None,
        token_overlap_threshold: float | None = None,
    ) -> None:
        """Initialize the aligner.

        Args:
            document: Source document to align against
            tracker: Occurrence tracker for this resolution pass
            policy: Normalization policy for fuzzy matching (None disables it)
            token_overlap_threshold: Minimum overlap ratio for the token-window
                fallback (None disables it)
        """
        self.document = document
        self.tracker = tracker
        self.policy = policy
        self.token_overlap_threshold = token_overlap_threshold
        self._normalized: NormalizedText | None = None
        self._tokens: list[tuple[int, int, str]] | None = None

    @property
    def normalized(self) -> NormalizedText:
        if self.policy is None:
            raise RuntimeError("fuzzy alignment is disabled")
        if self._normalized is None:
            self._normalized = self.policy.normalize_source(self.document.text)
        return self._normalized

    def align(self, extraction_text: str) -> tuple[CharInterval | None, AlignmentStatus]:
        """Find and claim the span for one extraction text.

        Args:
            extraction_text: Text emitted by the model

        Returns:
            Tuple of (interval or None, alignment status)
        """
        span = self._match_exact(extraction_text)
        status = AlignmentStatus.EXACT
        if span is None and self.policy is not None:
            span = self._match_normalized(extraction_text)
            if span is None and self.token_overlap_threshold is not None:
                span = self._match_token_window(extraction_text)
            status = AlignmentStatus.FUZZY

        if span is None:
            logger.debug(f"No alignment for {extraction_text!r}")
            return None, AlignmentStatus.UNALIGNED

        interval = CharInterval(start=span[0], end=span[1])
        self.tracker.advance(interval)
        logger.debug(
            f"Aligned {extraction_text!r} -> [{interval.start}, {interval.end}) "
            f"({status.value})"
        )
        return interval, status

    def _first_unclaimed(
        self,
        haystack: str,
        needle: str,
        start: int,
        to_original: SpanMapper,
    ) -> tuple[int, int] | None:
        position = haystack.find(needle, start)
        while position != -1:
            span = to_original(position, position + len(needle))
            if not self.tracker.is_claimed(*span):
                return span
            position = haystack.find(needle, position + 1)
        return None

    def _search(
        self,
        haystack: str,
        needle: str,
        cursor: int,
        to_original: SpanMapper,
    ) -> tuple[int, int] | None:
        """Leftmost unclaimed occurrence after the cursor, else anywhere."""
        span = self._first_unclaimed(haystack, needle, cursor, to_original)
        if span is None and cursor > 0:
            span = self._first_unclaimed(haystack, needle, 0, to_original)
        return span

    def _match_exact(self, extraction_text: str) -> tuple[int, int] | None:
        return self._search(
            self.document.text, extraction_text, self.tracker.cursor, _identity_span
        )

    def _match_normalized(self, extraction_text: str) -> tuple[int, int] | None:
        query = self.policy.normalize_query(extraction_text)
        if not query:
            return None
        normalized = self.normalized
        cursor = bisect.bisect_left(normalized.offsets, self.tracker.cursor)
        return self._search(normalized.text, query, cursor, normalized.original_span)

    def _source_tokens(self) -> list[tuple[int, int, str]]:
        if self._tokens is None:
            self._tokens = [
                (m.start(), m.end(), normalize_token(m.group()))
                for m in _TOKEN_RE.finditer(self.normalized.text)
            ]
        return self._tokens

    def _match_token_window(self, extraction_text: str) -> tuple[int, int] | None:
        """Best-scoring window of source tokens by multiset overlap.

        Windows span between n and 2n source tokens, where n is the number of
        query tokens. Among windows reaching the threshold, the highest ratio
        wins; ties go to the shortest window, then the leftmost.
        """
        query_tokens = [
            normalize_token(t) for t in self.policy.normalize_query(extraction_text).split()
        ]
        if not query_tokens:
            return None
        tokens = self._source_tokens()
        wanted = Counter(query_tokens)
        size = len(query_tokens)
        min_overlap = math.ceil(size * self.token_overlap_threshold)
        normalized = self.normalized

        best_ratio = 0.0
        best_span: tuple[int, int] | None = None
        for window_size in range(size, min(2 * size, len(tokens)) + 1):
            for first in range(len(tokens) - window_size + 1):
                last = first + window_size - 1
                window = Counter(token[2] for token in tokens[first : last + 1])
                overlap = sum((window & wanted).values())
                if overlap < min_overlap:
                    continue
                ratio = overlap / size
                if ratio <= best_ratio:
                    continue
                span = normalized.original_span(tokens[first][0], tokens[last][1])
                if self.tracker.is_claimed(*span):
                    continue
                best_ratio = ratio
                best_span = span
        return best_span
