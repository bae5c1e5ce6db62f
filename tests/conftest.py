"""
Shared pytest fixtures and configuration for parcelspine tests.

This module provides:
- Isolated creator registries so tests never share registrations
- Default decoder settings independent of the environment's cache
- structlog reset between tests
"""

import sys
from pathlib import Path
from typing import Generator

import pytest
import structlog

# Ensure parcelspine package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from parcelspine.core.settings import DecoderSettings, get_settings
from parcelspine.parcel.creators import CreatorRegistry, build_registry


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark all tests without explicit markers as unit tests."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration", "slow"}):
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def registry() -> CreatorRegistry:
    """A fresh registry holding only the built-in creators."""
    return build_registry()


@pytest.fixture
def settings() -> DecoderSettings:
    """Default, non-strict decoder settings."""
    return DecoderSettings(strict_magic=False, verify_bundle_length=False)


@pytest.fixture(autouse=True)
def reset_logging_and_settings() -> Generator[None, None, None]:
    """Undo logging configuration and settings caching after each test."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
    get_settings.cache_clear()
