"""Tests for per-platform artifact generation."""

from __future__ import annotations

from pathlib import Path

from sync_loop.generator import generate_platform_files
from sync_loop.types import InitOptions, Platform, StackDefinition


def _files(root: Path) -> set[str]:
    return {path.relative_to(root).as_posix() for path in root.rglob("*") if path.is_file()}


class TestCursor:
    def test_writes_rules_summary_and_skill(
        self, project: Path, python_stack: StackDefinition
    ) -> None:
        lines = generate_platform_files(project, Platform.CURSOR, [python_stack], InitOptions())

        assert len(lines) == 12
        assert all(line.startswith("  ") for line in lines)
        assert "  .cursor/rules/02-feedback.md" in lines
        assert "  .cursor/rules/00-protocol.md" in lines
        assert "  .cursor/skills/diagnose-failure/SKILL.md" in lines
        assert all(path.startswith(".cursor/") for path in _files(project))

    def test_rule_has_frontmatter_links_and_commands(
        self, project: Path, python_stack: StackDefinition
    ) -> None:
        generate_platform_files(project, "cursor", [python_stack], InitOptions())

        text = (project / ".cursor/rules/02-feedback.md").read_text(encoding="utf-8")

        assert text.startswith(
            "---\n"
            'description: "Failure diagnosis, patch protocol, micro-loop, branch pruning"\n'
            "alwaysApply: true\n"
            "---\n\n# Feedback Loop"
        )
        assert "`pytest {path}`" in text
        assert "(01-reasoning-kernel.md)" in text
        assert "(03-validate-env.md#gates)" in text

    def test_summary_frontmatter(self, project: Path, python_stack: StackDefinition) -> None:
        generate_platform_files(project, Platform.CURSOR, [python_stack], InitOptions())

        text = (project / ".cursor/rules/00-protocol.md").read_text(encoding="utf-8")

        assert text.startswith(
            '---\ndescription: "SyncLoop protocol summary and guardrails"\nalwaysApply: true\n---\n\n'
        )
        assert "{test command}" not in text


class TestAgentCapablePlatforms:
    def test_claude_agents_are_stack_substituted(
        self, project: Path, python_stack: StackDefinition
    ) -> None:
        lines = generate_platform_files(project, Platform.CLAUDE, [python_stack], InitOptions())

        assert "  CLAUDE.md" in lines
        assert "  .claude/agents/SyncLoop-Architect.md" in lines
        agent = (project / ".claude/agents/SyncLoop.md").read_text(encoding="utf-8")
        assert "`mypy`, `ruff check .`, `pytest`" in agent
        rule = (project / ".claude/rules/code-patterns.md").read_text(encoding="utf-8")
        assert rule.startswith('---\npaths:\n  - "src/**"\n  - "app/**"\n  - "lib/**"\n---\n\n')
        assert "(../../AGENTS.md)" in rule

    def test_copilot_agents_and_skill(self, project: Path, python_stack: StackDefinition) -> None:
        generate_platform_files(project, Platform.COPILOT, [python_stack], InitOptions())

        files = _files(project)
        assert ".github/copilot-instructions.md" in files
        assert ".github/agents/SyncLoop-Fixer.agent.md" in files
        assert ".github/skills/diagnose-failure/SKILL.md" in files
        assert len([f for f in files if f.startswith(".github/instructions/")]) == 10

    def test_codex_has_no_rule_documents(self, project: Path, python_stack: StackDefinition) -> None:
        lines = generate_platform_files(project, Platform.CODEX, [python_stack], InitOptions())

        assert [line.strip() for line in lines] == [
            "CODEX.md",
            ".codex/agents/default.toml",
            ".codex/agents/architect.toml",
            ".codex/agents/fixer.toml",
            ".agents/skills/diagnose-failure/SKILL.md",
            ".codex/config.toml",
        ]
        config = (project / ".codex/config.toml").read_text(encoding="utf-8")
        assert "[agents.architect]" in config


class TestWritePolicy:
    def test_dry_run_writes_nothing(self, project: Path, python_stack: StackDefinition) -> None:
        lines = generate_platform_files(
            project, Platform.COPILOT, [python_stack], InitOptions(dry_run=True)
        )

        assert lines
        assert all(line.endswith("(dry-run)") for line in lines)
        assert _files(project) == set()

    def test_no_overwrite_keeps_edited_rule(
        self, project: Path, python_stack: StackDefinition
    ) -> None:
        edited = project / ".cursor/rules/06-glossary.md"
        edited.parent.mkdir(parents=True)
        edited.write_text("team notes", encoding="utf-8")

        lines = generate_platform_files(
            project, Platform.CURSOR, [python_stack], InitOptions(overwrite=False)
        )

        assert "  .cursor/rules/06-glossary.md (skipped: exists)" in lines
        assert edited.read_text(encoding="utf-8") == "team notes"
