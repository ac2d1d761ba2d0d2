"""Command line interface for textanchor."""
