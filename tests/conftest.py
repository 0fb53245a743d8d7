"""Pytest configuration and shared fixtures for the promptmark test suite.

This module provides shared fixtures, test configuration, and utilities
that are used across the entire test suite.
"""

import os
from pathlib import Path

import pytest
from hypothesis import Phase, Verbosity, settings

from promptmark.context import RenderContext

# Register custom Hypothesis profiles
settings.register_profile("ci", max_examples=100, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=20)
settings.register_profile(
    "debug", max_examples=10, verbosity=Verbosity.verbose, phases=[Phase.explicit, Phase.reuse, Phase.generate]
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "dev"))


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interaction tests")
    config.addinivalue_line("markers", "cli: Tests related to command-line interface")
    config.addinivalue_line("markers", "slow: Slow tests that may take several seconds")


@pytest.fixture
def context() -> RenderContext:
    """Provide a fresh context with chat collection disabled."""
    return RenderContext(chat=False)


@pytest.fixture
def prompt_dir(tmp_path: Path) -> Path:
    """Provide a directory holding a small prompt project.

    Layout::

        main.poml          includes parts/intro.poml
        parts/intro.poml   a role
        data/users.csv     two records
        data/users.json    the same records as JSON
        notes.txt          plain text

    """
    (tmp_path / "parts").mkdir()
    (tmp_path / "data").mkdir()
    (tmp_path / "parts" / "intro.poml").write_text("<role>Librarian</role>", encoding="utf-8")
    (tmp_path / "main.poml").write_text(
        '<poml><include src="parts/intro.poml"/><task>Catalog {{count}} books</task></poml>', encoding="utf-8"
    )
    (tmp_path / "data" / "users.csv").write_text("name,age\nAda,36\nAlan,41\n", encoding="utf-8")
    (tmp_path / "data" / "users.json").write_text(
        '[{"name": "Ada", "age": 36}, {"name": "Alan", "age": 41}]', encoding="utf-8"
    )
    (tmp_path / "notes.txt").write_text("Remember the milk.", encoding="utf-8")
    return tmp_path
