"""Configuration loading and management for textanchor.

Main components:
- ConfigLoader: Load and merge YAML config files and TEXTANCHOR_* variables
- load_resolver_config: One-call helper for the CLI
- Default configuration values
"""

from textanchor.config.loader import ConfigLoader, load_resolver_config

__all__ = [
    "ConfigLoader",
    "load_resolver_config",
]
