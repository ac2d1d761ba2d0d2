"""Structured dialects a model response can be written in.

Each dialect is a FormatStrategy value registered under its FormatType. The
parser never branches on the dialect itself; it asks the strategy to load
text and to say which fence tags belong to it. Adding a dialect means adding
an entry to FORMAT_STRATEGIES.

Usage:
    from textanchor.resolver.formats import extract_structured_content

    content = extract_structured_content(response, FormatType.YAML, True)
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import yaml

from textanchor.lib.errors import ParseError
from textanchor.models.config import FormatType

logger = logging.getLogger(__name__)

# ```json ... ```, ```yaml ... ``` or an untagged ``` ... ``` block
FENCE_RE = re.compile(
    r"```(?P<tag>[A-Za-z0-9_+-]*)[ \t]*\r?\n?(?P<body>.*?)```",
    re.DOTALL,
)


@dataclass(frozen=True)
class FormatStrategy:
    """How to recognise and load one structured dialect.

    Attributes:
        name: Dialect name used in log and error messages
        fence_tags: Lowercase fence tags that announce this dialect
        loads: Callable turning text into Python data
        syntax_errors: Exception types raised by loads for malformed text
        scan_embedded: Whether a well-formed block may be located inside prose
    """

    name: str
    fence_tags: frozenset[str]
    loads: Callable[[str], Any]
    syntax_errors: tuple[type[Exception], ...]
    scan_embedded: bool = False


def _find_embedded_json(text: str) -> Any | None:
    """Return the first well-formed JSON object or array embedded in text."""
    decoder = json.JSONDecoder()
    for match in re.finditer(r"[\[{]", text):
        try:
            value, _ = decoder.raw_decode(text, match.start())
        except json.JSONDecodeError:
            continue
        if isinstance(value, dict | list):
            return value
    return None


JSON_STRATEGY = FormatStrategy(
    name="json",
    fence_tags=frozenset({"json", "jsonc"}),
    loads=json.loads,
    syntax_errors=(json.JSONDecodeError,),
    scan_embedded=True,
)

YAML_STRATEGY = FormatStrategy(
    name="yaml",
    fence_tags=frozenset({"yaml", "yml"}),
    loads=yaml.safe_load,
    syntax_errors=(yaml.YAMLError,),
)

FORMAT_STRATEGIES: dict[FormatType, FormatStrategy] = {
    FormatType.JSON: JSON_STRATEGY,
    FormatType.YAML: YAML_STRATEGY,
}

_ALL_FENCE_TAGS = frozenset().union(*(s.fence_tags for s in FORMAT_STRATEGIES.values()))


def get_format_strategy(format_type: FormatType | str) -> FormatStrategy:
    """Look up the strategy for a format selector.

    Raises:
        ValueError: If the format is not registered
    """
    try:
        return FORMAT_STRATEGIES[FormatType(format_type)]
    except (KeyError, ValueError) as e:
        supported = ", ".join(f.value for f in FORMAT_STRATEGIES)
        raise ValueError(
            f"Unsupported format '{format_type}'. Supported: {supported}"
        ) from e


def _is_structured(value: Any) -> bool:
    return isinstance(value, dict | list)


def _load_fenced(response: str, strategy: FormatStrategy) -> Any:
    candidates = 0
    first_error: Exception | None = None
    for match in FENCE_RE.finditer(response):
        tag = match.group("tag").lower()
        if tag and tag not in strategy.fence_tags:
            if tag in _ALL_FENCE_TAGS:
                logger.debug(f"Skipping fenced block tagged '{tag}'")
                continue
            # Unknown tag: the "tag" is most likely the first word of the body.
            body = match.group(0)[3:-3]
        else:
            body = match.group("body")

        candidates += 1
        try:
            value = strategy.loads(body.strip())
        except strategy.syntax_errors as e:
            first_error = first_error or e
            continue
        if _is_structured(value):
            return value

    if candidates == 0:
        raise ParseError(
            f"no fenced {strategy.name} block found in response", response
        )
    if first_error is not None:
        raise ParseError(
            f"fenced block is not valid {strategy.name}: {first_error}", response
        ) from first_error
    raise ParseError(
        f"fenced block does not contain a {strategy.name} mapping or sequence",
        response,
    )


def _load_unfenced(response: str, strategy: FormatStrategy) -> Any:
    content = response.strip()
    if FENCE_RE.search(content):
        # Stray fence, possibly with prose around it.
        return _load_fenced(content, strategy)

    try:
        value = strategy.loads(content)
    except strategy.syntax_errors as e:
        if strategy.scan_embedded:
            embedded = _find_embedded_json(content)
            if embedded is not None:
                logger.debug("Using structured block embedded in surrounding prose")
                return embedded
        raise ParseError(f"response is not valid {strategy.name}: {e}", content) from e

    if _is_structured(value):
        return value
    raise ParseError(
        f"response does not contain a {strategy.name} mapping or sequence", content
    )


def extract_structured_content(
    response: str, format_type: FormatType | str, fence_output: bool
) -> Any:
    """Locate and load the structured block of a model response.

    Args:
        response: Raw model response text
        format_type: Dialect the response is written in
        fence_output: Whether the block is expected inside ``` fences

    Returns:
        The loaded mapping or sequence

    Raises:
        ParseError: If no well-formed structured block can be found
    """
    if not response or not response.strip():
        raise ParseError("response is empty")

    strategy = get_format_strategy(format_type)
    if fence_output:
        return _load_fenced(response, strategy)
    return _load_unfenced(response, strategy)
