"""CLI command for resolving a model response against a document.

Implements the 'textanchor resolve' command: reads the source document and
the raw model response from files, resolves them and prints the annotated
document and record warnings as JSON.
"""

import json
import sys
from pathlib import Path

import click

from textanchor.config.loader import load_resolver_config
from textanchor.lib.errors import ConfigError, FileNotFoundError, ParseError
from textanchor.lib.logging_config import get_logger, setup_logging
from textanchor.models.config import ConfigOverrides, FormatType
from textanchor.models.document import SourceDocument
from textanchor.resolver.normalization import NORMALIZATION_POLICIES
from textanchor.resolver.resolver import Resolver

logger = get_logger(__name__)


def _read_text(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise FileNotFoundError(path, f"Could not read {path}: {e}") from e


@click.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False))
@click.argument("response", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--format",
    "format_type",
    type=click.Choice([f.value for f in FormatType]),
    default=None,
    help="Dialect of the model response",
)
@click.option(
    "--fence/--no-fence",
    "fence_output",
    default=None,
    help="Whether the response is wrapped in ``` fences",
)
@click.option(
    "--normalization",
    type=click.Choice(sorted(NORMALIZATION_POLICIES)),
    default=None,
    help="Normalization policy for fuzzy alignment",
)
@click.option(
    "--no-fuzzy",
    is_flag=True,
    help="Disable fuzzy alignment (exact matches only)",
)
@click.option(
    "--document-id",
    default=None,
    help="Document identifier (defaults to the document file name)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to a textanchor YAML config file",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--quiet", "-q", is_flag=True, help="Only log warnings and errors")
def resolve(
    document: str,
    response: str,
    format_type: str | None,
    fence_output: bool | None,
    normalization: str | None,
    no_fuzzy: bool,
    document_id: str | None,
    config_path: str | None,
    verbose: bool,
    quiet: bool,
) -> None:
    """Anchor the extractions in RESPONSE to spans of DOCUMENT.

    DOCUMENT is a UTF-8 text file with the source text the model read.
    RESPONSE is a file with the model's raw answer.
    """
    setup_logging(verbose=verbose, quiet=quiet)

    overrides: dict[str, object] = {}
    if format_type is not None:
        overrides["format"] = format_type
    if fence_output is not None:
        overrides["fence_output"] = fence_output
    if normalization is not None:
        overrides["normalization"] = normalization
    if no_fuzzy:
        overrides["fuzzy_alignment"] = False

    try:
        config = load_resolver_config(
            project_dir=".",
            config_path=config_path,
            cli_config=ConfigOverrides(**overrides),
        )
        logger.debug(f"Resolver configuration: {config.model_dump(mode='json')}")

        source = SourceDocument(
            id=document_id or Path(document).stem,
            text=_read_text(document),
        )
        result = Resolver(config).resolve(source, _read_text(response))
    except (ConfigError, FileNotFoundError) as e:
        logger.error(f"Configuration error: {e}")
        click.echo(f"Configuration Error: {e}", err=True)
        sys.exit(2)
    except ParseError as e:
        logger.error(f"Parse error: {e}")
        click.echo(f"Parse Error: {e}", err=True)
        sys.exit(3)

    for warning in result.warnings:
        click.echo(f"Warning ({warning.reason.value}): {warning.message}", err=True)

    payload = {
        "document": result.document.to_dict(),
        "warnings": [w.model_dump(mode="json") for w in result.warnings],
    }
    click.echo(json.dumps(payload, ensure_ascii=False, indent=2))
