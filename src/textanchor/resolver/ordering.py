"""Final ordering and per-class group indices."""

from __future__ import annotations

from collections import defaultdict

from textanchor.models.document import Extraction


def order_extractions(extractions: list[Extraction]) -> list[Extraction]:
    """Order extractions for an AnnotatedDocument and assign group indices.

    Aligned extractions are sorted by start offset (stable, so ties keep
    emission order) and unaligned extractions follow in emission order.
    ``group_index`` then counts up from 0 within each extraction class,
    following the final order.

    Args:
        extractions: Extractions in the order the model emitted them

    Returns:
        New list of extractions with group indices assigned
    """
    aligned = [e for e in extractions if e.char_interval is not None]
    unaligned = [e for e in extractions if e.char_interval is None]
    aligned.sort(key=lambda e: e.char_interval.start)

    counters: defaultdict[str, int] = defaultdict(int)
    ordered: list[Extraction] = []
    for extraction in aligned + unaligned:
        group_index = counters[extraction.extraction_class]
        counters[extraction.extraction_class] += 1
        ordered.append(extraction.model_copy(update={"group_index": group_index}))
    return ordered
