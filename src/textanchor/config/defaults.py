"""Default configuration values for textanchor."""

from typing import Any

# Resolver configuration defaults
DEFAULT_RESOLVER_CONFIG: dict[str, Any] = {
    "format": "json",
    "fence_output": True,
    "attribute_suffix": "_attributes",
    "index_suffix": "_index",
    "default_extraction_class": "text",
    "fuzzy_alignment": True,
    "normalization": "default",
    "token_overlap_threshold": None,
}

# Config file locations
USER_CONFIG_DIR = ".textanchor"
USER_CONFIG_NAMES = ("config.yml", "config.yaml")
PROJECT_CONFIG_NAMES = ("textanchor.yml", "textanchor.yaml")
