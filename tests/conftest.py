"""Shared test fixtures for depscope tests."""

from pathlib import Path

import pytest

from depscope.config import AnalyzerOptions


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


def write_files(root: Path, files: dict) -> Path:
    """Create ``files`` (relative path -> text) under root."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def make_project(tmp_path):
    """Factory writing a small on-disk project and returning its root."""

    def _make(files: dict) -> Path:
        root = tmp_path / "project"
        root.mkdir(exist_ok=True)
        return write_files(root, files)

    return _make


@pytest.fixture
def options():
    """Deterministic options: two workers, no analysis cache."""
    return AnalyzerOptions(concurrency=2, analysis_cache_enabled=False)


@pytest.fixture
def cyclic_project(make_project):
    """a.ts <-> b.ts, plus c.ts importing a package and a missing file."""
    return make_project(
        {
            "src/a.ts": "import { b } from './b';\nexport const a = 1;\n",
            "src/b.ts": "import { a } from './a';\nexport const b = 2;\n",
            "src/c.ts": "import React from 'react';\nimport { x } from './missing';\n",
        }
    )
