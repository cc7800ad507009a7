"""Shared test fixtures for sync-loop."""

from __future__ import annotations

from pathlib import Path

import pytest

from sync_loop.types import StackDefinition


@pytest.fixture
def python_stack() -> StackDefinition:
    return StackDefinition(
        name="api",
        languages=("Python",),
        frameworks=("FastAPI",),
        test_runner="pytest",
        type_checker="mypy",
        linter="ruff check .",
        path="api",
    )


@pytest.fixture
def node_stack() -> StackDefinition:
    return StackDefinition(
        name="web",
        languages=("TypeScript", "JavaScript"),
        frameworks=("React", "Vite"),
        test_runner="pnpm test",
        type_checker="tsc --noEmit",
        linter="pnpm lint",
        package_manager="pnpm",
        path="web",
    )


@pytest.fixture
def project(tmp_path: Path) -> Path:
    """An empty project root."""
    root = tmp_path / "project"
    root.mkdir()
    return root
