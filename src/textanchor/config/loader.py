"""Configuration loader for textanchor.

This module provides the ConfigLoader class for loading resolver settings
from YAML files and environment variables and merging them into a single
ResolverConfig.
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from textanchor.config.defaults import (
    DEFAULT_RESOLVER_CONFIG,
    PROJECT_CONFIG_NAMES,
    USER_CONFIG_DIR,
    USER_CONFIG_NAMES,
)
from textanchor.config.validator import flatten_pydantic_errors
from textanchor.lib.errors import ConfigError, FileNotFoundError
from textanchor.models.config import ConfigOverrides, ResolverConfig

logger = logging.getLogger(__name__)

# Environment variable to field name mapping
ENV_VAR_MAP = {
    "format": "TEXTANCHOR_FORMAT",
    "fence_output": "TEXTANCHOR_FENCE_OUTPUT",
    "attribute_suffix": "TEXTANCHOR_ATTRIBUTE_SUFFIX",
    "index_suffix": "TEXTANCHOR_INDEX_SUFFIX",
    "default_extraction_class": "TEXTANCHOR_DEFAULT_EXTRACTION_CLASS",
    "fuzzy_alignment": "TEXTANCHOR_FUZZY_ALIGNMENT",
    "normalization": "TEXTANCHOR_NORMALIZATION",
    "token_overlap_threshold": "TEXTANCHOR_TOKEN_OVERLAP_THRESHOLD",
}

_BOOL_FIELDS = ("fence_output", "fuzzy_alignment")
_FLOAT_FIELDS = ("token_overlap_threshold",)


def _parse_env_value(field_name: str, value: str) -> Any:
    """Parse environment variable value to appropriate type.

    Args:
        field_name: Name of the field (used to determine type)
        value: String value from environment variable

    Returns:
        Parsed value in correct type (bool, float, or str)

    Raises:
        ValueError: If value cannot be parsed
    """
    if field_name in _BOOL_FIELDS:
        return value.lower() in ("true", "1", "yes", "on")
    elif field_name in _FLOAT_FIELDS:
        return float(value)
    else:
        return value


def _get_env_value(field_name: str, env_vars: os._Environ[str] | dict[str, str]) -> Any | None:
    """Get environment variable value for a field.

    Args:
        field_name: Name of field to get
        env_vars: Environment variables mapping

    Returns:
        Parsed value or None if not set or unparseable
    """
    env_var_name = ENV_VAR_MAP.get(field_name)
    if not env_var_name or env_var_name not in env_vars:
        return None

    try:
        return _parse_env_value(field_name, env_vars[env_var_name])
    except ValueError:
        logger.warning(
            f"Ignoring {env_var_name}={env_vars[env_var_name]!r}: not a valid value"
        )
        return None


def _pick_config_file(config_dir: Path, names: tuple[str, ...]) -> Path | None:
    """Return the first existing config file, preferring earlier names."""
    existing = [config_dir / name for name in names if (config_dir / name).exists()]
    if not existing:
        return None
    if len(existing) > 1:
        logger.info(
            f"Both {existing[0]} and {existing[1]} exist. Using {existing[0]}."
        )
    return existing[0]


class ConfigLoader:
    """Loads and merges resolver configuration.

    This class handles:
    - Parsing YAML config files
    - Loading user configuration from ~/.textanchor/config.yml|yaml
    - Loading project configuration from textanchor.yml|yaml
    - Merging sources with proper precedence
    - Converting validation errors into human-readable messages
    """

    def __init__(self) -> None:
        """Initialize the ConfigLoader with empty caches."""
        self._user_config_loaded = False
        self._user_config: ConfigOverrides | None = None
        self._project_configs: dict[str, ConfigOverrides | None] = {}

    def parse_yaml(self, file_path: str) -> dict[str, Any]:
        """Parse a YAML file and return its contents as a dictionary.

        Args:
            file_path: Path to the YAML file to parse

        Returns:
            Dictionary containing parsed YAML content (empty if file is empty)

        Raises:
            FileNotFoundError: If the file does not exist
            ConfigError: If YAML parsing fails or the content is not a mapping
        """
        path = Path(file_path)

        try:
            with open(path, encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except OSError as e:
            raise FileNotFoundError(
                file_path,
                f"Configuration file not found at {file_path}. "
                f"Please ensure the file exists at this path.",
            ) from e
        except yaml.YAMLError as e:
            raise ConfigError(
                "yaml_parse",
                f"Failed to parse YAML file {file_path}: {str(e)}",
            ) from e

        if content is None:
            return {}
        if not isinstance(content, dict):
            raise ConfigError(
                "yaml_parse",
                f"Configuration file {file_path} must contain a mapping, "
                f"got {type(content).__name__}",
            )
        return content

    def load_config_file(self, file_path: str) -> ConfigOverrides:
        """Load and validate one configuration file.

        Args:
            file_path: Path to a YAML config file

        Returns:
            ConfigOverrides with the settings found in the file

        Raises:
            FileNotFoundError: If the file does not exist
            ConfigError: If parsing or validation fails
        """
        content = self.parse_yaml(file_path)
        try:
            return ConfigOverrides(**content)
        except PydanticValidationError as e:
            error_text = "\n".join(flatten_pydantic_errors(e))
            raise ConfigError(
                "config_validation",
                f"Invalid configuration in {file_path}:\n{error_text}",
            ) from e

    def load_user_config(self) -> ConfigOverrides | None:
        """Load user configuration from ~/.textanchor/config.yml|config.yaml.

        Results are cached after first load.

        Returns:
            ConfigOverrides instance, or None if no config file exists
        """
        if self._user_config_loaded:
            return self._user_config

        config_path = _pick_config_file(Path.home() / USER_CONFIG_DIR, USER_CONFIG_NAMES)
        result = self.load_config_file(str(config_path)) if config_path else None
        self._user_config = result
        self._user_config_loaded = True
        return result

    def load_project_config(self, project_dir: str) -> ConfigOverrides | None:
        """Load project configuration from textanchor.yml|textanchor.yaml.

        Results are cached per project_dir after first load.

        Args:
            project_dir: Path to project root directory

        Returns:
            ConfigOverrides instance, or None if no config file exists
        """
        if project_dir in self._project_configs:
            return self._project_configs[project_dir]

        config_path = _pick_config_file(Path(project_dir), PROJECT_CONFIG_NAMES)
        result = self.load_config_file(str(config_path)) if config_path else None
        self._project_configs[project_dir] = result
        return result

    def resolve_config(
        self,
        cli_config: ConfigOverrides | None = None,
        file_config: ConfigOverrides | None = None,
        project_config: ConfigOverrides | None = None,
        user_config: ConfigOverrides | None = None,
        defaults: dict[str, Any] | None = None,
    ) -> ResolverConfig:
        """Resolve resolver configuration with priority hierarchy.

        Configuration priority (highest to lowest):
        1. CLI flags (cli_config)
        2. Explicit --config file (file_config)
        3. Project config (textanchor.yml)
        4. User config (~/.textanchor/config.yml)
        5. Environment variables (TEXTANCHOR_* vars)
        6. Built-in defaults

        Returns:
            Resolved ResolverConfig

        Raises:
            ConfigError: If the merged configuration is invalid
        """
        defaults = DEFAULT_RESOLVER_CONFIG if defaults is None else defaults
        sources = [cli_config, file_config, project_config, user_config]
        resolved: dict[str, Any] = {}

        for field in ResolverConfig.model_fields:
            for source in sources:
                if source is not None and field in source.model_fields_set:
                    resolved[field] = getattr(source, field)
                    break
            else:
                if (env_value := _get_env_value(field, os.environ)) is not None:
                    resolved[field] = env_value
                elif field in defaults:
                    resolved[field] = defaults[field]

        try:
            return ResolverConfig(**resolved)
        except PydanticValidationError as e:
            error_text = "\n".join(flatten_pydantic_errors(e))
            raise ConfigError(
                "resolver_config", f"Invalid resolver configuration:\n{error_text}"
            ) from e


def load_resolver_config(
    project_dir: str = ".",
    config_path: str | None = None,
    cli_config: ConfigOverrides | None = None,
) -> ResolverConfig:
    """Load every configuration source and resolve one ResolverConfig.

    Args:
        project_dir: Directory searched for textanchor.yml|yaml
        config_path: Optional explicit config file
        cli_config: Optional overrides from CLI flags

    Returns:
        Resolved ResolverConfig
    """
    loader = ConfigLoader()
    file_config = loader.load_config_file(config_path) if config_path else None
    return loader.resolve_config(
        cli_config=cli_config,
        file_config=file_config,
        project_config=loader.load_project_config(project_dir),
        user_config=loader.load_user_config(),
    )
