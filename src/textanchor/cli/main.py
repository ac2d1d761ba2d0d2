"""Command line entry point for textanchor."""

import click

from textanchor import __version__
from textanchor.cli.commands.resolve import resolve


@click.group()
@click.version_option(__version__, prog_name="textanchor")
def main() -> None:
    """textanchor - anchor LLM extractions to their source text."""


main.add_command(resolve)


if __name__ == "__main__":
    main()
