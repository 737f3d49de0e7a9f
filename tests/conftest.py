"""Pytest configuration and shared fixtures."""

import itertools

import pytest
from factories import FakeImageFetcher, ingredient, recipe_record

from cookbookconverter.config import Settings

# =============================================================================
# Pytest Configuration
# =============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow running")


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def sequential_ids():
    """Deterministic id factory: ID-1, ID-2, ..."""
    counter = itertools.count(1)
    return lambda: f"ID-{next(counter)}"


@pytest.fixture
def fake_fetcher():
    """Image fetcher answering 200 for every URL."""
    return FakeImageFetcher()


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at temporary input/output directories."""
    input_dir = tmp_path / "input"
    input_dir.mkdir()
    return Settings(
        _env_file=None,
        input_dir=input_dir,
        output_dir=tmp_path / "output",
        images_dir=tmp_path / "images",
        image_concurrency=2,
    )


@pytest.fixture
def soup_record():
    """Recipe with one untitled group, one ingredient and one step."""
    return recipe_record(
        recipe_id="soup",
        title="Soup",
        ingredient_lists=[{"title": None, "ingredients": [ingredient("Salt", 1, "Prise(n)")]}],
        instructions=[{"id": "s1", "title": None, "text": "Stir"}],
    )
