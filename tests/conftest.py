"""Shared pytest fixtures for pagetheme tests."""

import json
from pathlib import Path

import pytest

from pagetheme.specs import PageOverrides, Theme


def load_theme_fixture(name: str) -> dict:
    """Load a theme row from tests/fixtures/themes/<name>.json."""
    path = Path(__file__).parent / "fixtures" / "themes" / f"{name}.json"
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def cyberpunk_row() -> dict:
    """Cyberpunk Neon theme row with every token group populated."""
    return load_theme_fixture("cyberpunk_neon")


@pytest.fixture
def cyberpunk_theme(cyberpunk_row: dict) -> Theme:
    return Theme.from_row(cyberpunk_row)


@pytest.fixture
def aurora_theme() -> Theme:
    """Theme whose token groups are stored as JSON text, some blank."""
    return Theme.from_row(load_theme_fixture("aurora_borealis"))


@pytest.fixture
def legacy_theme() -> Theme:
    """Theme carrying only legacy flat fields."""
    return Theme.from_row(load_theme_fixture("legacy_only"))


@pytest.fixture
def no_overrides() -> PageOverrides:
    return PageOverrides()
