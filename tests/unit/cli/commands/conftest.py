"""Shared fixtures for CLI command tests."""

from collections.abc import Generator
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_home(temp_dir: Path, monkeypatch: Any, isolated_env: dict[str, str]) -> Path:
    """Point HOME at an empty directory so no user config is picked up."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture
def mock_setup_logging() -> Generator[MagicMock]:
    """Keep CLI invocations from installing stderr handlers."""
    with patch("textanchor.cli.commands.resolve.setup_logging") as mock:
        yield mock
