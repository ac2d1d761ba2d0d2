"""Resolver configuration models.

ResolverConfig holds every tunable of a resolution pass. Values come from
built-in defaults, TEXTANCHOR_* environment variables, YAML config files and
CLI flags (see textanchor.config.loader for the precedence rules).
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FormatType(str, Enum):
    """Structured dialect the model was asked to answer in."""

    JSON = "json"
    YAML = "yaml"


def _validate_normalization(v: str | None) -> str | None:
    """Validate a normalization policy name against the registry."""
    from textanchor.resolver.normalization import get_normalization_policy

    if v is not None:
        get_normalization_policy(v)
    return v


class ResolverConfig(BaseModel):
    """Settings for parsing and aligning one model response."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    format: FormatType = Field(
        default=FormatType.JSON, description="Dialect of the model response"
    )
    fence_output: bool = Field(
        default=True,
        description="Whether the response is expected inside ``` fences",
    )
    attribute_suffix: str = Field(
        default="_attributes",
        description="Suffix of category-keyed attribute fields (person_attributes)",
    )
    index_suffix: str = Field(
        default="_index",
        description="Suffix of category-keyed index fields (person_index)",
    )
    default_extraction_class: str | None = Field(
        default="text",
        description="Class given to bare string records; None drops them",
    )
    fuzzy_alignment: bool = Field(
        default=True, description="Fall back to normalized matching"
    )
    normalization: str = Field(
        default="default", description="Registered normalization policy for fuzzy matching"
    )
    token_overlap_threshold: float | None = Field(
        default=None,
        description="Minimum token overlap ratio for the token-window fallback",
    )

    @field_validator("attribute_suffix", "index_suffix")
    @classmethod
    def validate_suffix(cls, v: str) -> str:
        """Validate suffixes are non-empty."""
        if not v:
            raise ValueError("suffix must be a non-empty string")
        return v

    @field_validator("default_extraction_class")
    @classmethod
    def validate_default_class(cls, v: str | None) -> str | None:
        """Validate the default class is not blank if provided."""
        if v is not None and not v.strip():
            raise ValueError("default_extraction_class must be non-empty if provided")
        return v

    @field_validator("normalization")
    @classmethod
    def validate_normalization(cls, v: str) -> str:
        """Validate the policy is registered."""
        return _validate_normalization(v)

    @field_validator("token_overlap_threshold")
    @classmethod
    def validate_threshold(cls, v: float | None) -> float | None:
        """Validate the threshold lies in (0, 1]."""
        if v is not None and not (0.0 < v <= 1.0):
            raise ValueError("token_overlap_threshold must be in (0.0, 1.0]")
        return v


class ConfigOverrides(BaseModel):
    """Partially specified ResolverConfig, as read from one config source.

    Every field is optional so that sources can be layered; unset fields fall
    through to the next source.
    """

    model_config = ConfigDict(extra="forbid")

    format: FormatType | None = None
    fence_output: bool | None = None
    attribute_suffix: str | None = None
    index_suffix: str | None = None
    default_extraction_class: str | None = None
    fuzzy_alignment: bool | None = None
    normalization: str | None = None
    token_overlap_threshold: float | None = None

    @field_validator("normalization")
    @classmethod
    def validate_normalization(cls, v: str | None) -> str | None:
        """Validate the policy is registered."""
        return _validate_normalization(v)
