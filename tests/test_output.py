"""Tests for guarded file writes."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from sync_loop.output import format_write_result, render_frontmatter, write_output
from sync_loop.types import InitOptions, WriteResult, WriteStatus

NESTED = "docs/deep/file.md"


def _existing(project: Path, content: str = "original") -> Path:
    target = project / NESTED
    target.parent.mkdir(parents=True)
    target.write_text(content, encoding="utf-8")
    return target


class TestWriteOutput:
    def test_creates_file_and_parents(self, project: Path) -> None:
        result = write_output(project, NESTED, "hello", InitOptions())

        assert result == WriteResult(NESTED, WriteStatus.CREATED)
        assert (project / NESTED).read_text(encoding="utf-8") == "hello"

    def test_dry_run_on_missing_file_creates_nothing(self, project: Path) -> None:
        result = write_output(project, NESTED, "hello", InitOptions(dry_run=True))

        assert result.status == WriteStatus.WOULD_CREATE
        assert not (project / "docs").exists()

    def test_dry_run_on_existing_file_leaves_it(self, project: Path) -> None:
        target = _existing(project)

        result = write_output(project, NESTED, "new", InitOptions(dry_run=True))

        assert result.status == WriteStatus.WOULD_OVERWRITE
        assert target.read_text(encoding="utf-8") == "original"

    @pytest.mark.parametrize("dry_run", [False, True])
    def test_existing_file_without_overwrite_is_skipped(self, project: Path, dry_run: bool) -> None:
        target = _existing(project)

        result = write_output(project, NESTED, "new", InitOptions(dry_run=dry_run, overwrite=False))

        assert result.status == WriteStatus.SKIPPED
        assert target.read_text(encoding="utf-8") == "original"

    def test_existing_file_is_overwritten(self, project: Path) -> None:
        target = _existing(project)

        result = write_output(project, NESTED, "new", InitOptions())

        assert result.status == WriteStatus.OVERWRITTEN
        assert target.read_text(encoding="utf-8") == "new"

    def test_effective_write_is_logged(
        self, project: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="sync_loop.output"):
            write_output(project, NESTED, "hello", InitOptions())
            write_output(project, "other.md", "hello", InitOptions(dry_run=True))

        records = [r for r in caplog.records if r.name == "sync_loop.output"]
        assert len(records) == 1
        assert getattr(records[0], "path") == NESTED
        assert getattr(records[0], "status") == "created"


class TestFormatWriteResult:
    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            (WriteStatus.CREATED, "AGENTS.md"),
            (WriteStatus.OVERWRITTEN, "AGENTS.md"),
            (WriteStatus.SKIPPED, "AGENTS.md (skipped: exists)"),
            (WriteStatus.WOULD_CREATE, "AGENTS.md (dry-run)"),
            (WriteStatus.WOULD_OVERWRITE, "AGENTS.md (dry-run)"),
        ],
    )
    def test_formats(self, status: WriteStatus, expected: str) -> None:
        assert format_write_result(WriteResult("AGENTS.md", status)) == expected


class TestRenderFrontmatter:
    def test_layout_rules(self) -> None:
        rendered = render_frontmatter(
            {"description": "Stage 2 checks", "alwaysApply": True, "paths": ("src/**", "lib/**")}
        )

        assert rendered == (
            "---\n"
            'description: "Stage 2 checks"\n'
            "alwaysApply: true\n"
            "paths:\n"
            '  - "src/**"\n'
            '  - "lib/**"\n'
            "---"
        )

    def test_false_is_unquoted(self) -> None:
        assert render_frontmatter({"alwaysApply": False}) == "---\nalwaysApply: false\n---"
