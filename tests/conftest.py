"""Pytest configuration and shared fixtures for textanchor tests."""

import os
import shutil
import tempfile
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest

from textanchor.models.config import FormatType, ResolverConfig
from textanchor.models.document import SourceDocument


@pytest.fixture
def temp_dir() -> Generator[Path]:
    """Create a temporary directory for test file operations.

    Yields:
        Path to temporary directory

    Cleanup:
        Automatically removes directory after test
    """
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> Generator[dict[str, str]]:
    """Provide an environment without TEXTANCHOR_* variables.

    Yields:
        Dictionary of original environment variables

    Cleanup:
        Restores original environment after test
    """
    original_env = os.environ.copy()
    for name in list(os.environ):
        if name.startswith("TEXTANCHOR_"):
            monkeypatch.delenv(name)
    yield original_env
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def alice_document() -> SourceDocument:
    """Short English document with a repeated name."""
    return SourceDocument(id="alice", text="Alice met Bob. Alice left.")


@pytest.fixture
def chinese_document() -> SourceDocument:
    """Chinese document to check codepoint-based offsets."""
    return SourceDocument(id="hongloumeng", text="林黛玉进了荣国府，见到了贾宝玉。")


@pytest.fixture
def json_config() -> ResolverConfig:
    """Fenced JSON configuration (the defaults)."""
    return ResolverConfig()


@pytest.fixture
def yaml_config() -> ResolverConfig:
    """Fenced YAML configuration."""
    return ResolverConfig(format=FormatType.YAML)


@pytest.fixture
def unfenced_config() -> ResolverConfig:
    """Unfenced JSON configuration."""
    return ResolverConfig(fence_output=False)


# Configure pytest
def pytest_configure(config: Any) -> None:
    """Configure pytest with marker options."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests",
    )
    config.addinivalue_line(
        "markers",
        "unit: marks tests as unit tests",
    )
