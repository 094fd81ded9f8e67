"""Shared test fixtures."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure the src directory is on the path so realm processes can import it too.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from scriptbox import Sandbox, SandboxConfig  # noqa: E402


@pytest.fixture
def fast_config() -> SandboxConfig:
    """Short deadlines so timeout tests stay quick."""
    return SandboxConfig(default_deadline=1.0, max_deadline=3.0, admission_timeout=30.0)


@pytest.fixture
def sandbox(fast_config: SandboxConfig) -> Sandbox:
    return Sandbox(fast_config)
