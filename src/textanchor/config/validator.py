"""Validation helpers for textanchor configuration."""

from pydantic import ValidationError as PydanticValidationError


def flatten_pydantic_errors(exc: PydanticValidationError) -> list[str]:
    """Flatten a Pydantic ValidationError into readable messages.

    Args:
        exc: Pydantic ValidationError raised while building ResolverConfig

    Returns:
        One message per failing field, e.g.
        ``Field 'normalization': Input should be 'default', 'strict' or 'loose'
        (received: 'fuzzy')``
    """
    messages: list[str] = []

    for error in exc.errors():
        loc = error.get("loc", ())
        field_path = ".".join(str(part) for part in loc) if loc else "config"
        msg = error.get("msg", "Unknown error")

        if "input" in error and error.get("type") != "missing":
            messages.append(
                f"Field '{field_path}': {msg} (received: {error['input']!r})"
            )
        else:
            messages.append(f"Field '{field_path}': {msg}")

    return messages or ["Validation failed with unknown error"]
