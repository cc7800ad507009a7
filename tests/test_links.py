"""Tests for markdown link relocation."""

from __future__ import annotations

import pytest

from sync_loop.links import (
    is_external_link,
    relative_link,
    resolve_canonical,
    rewrite_canonical_links,
    rewrite_markdown_links,
    rewrite_resource_links,
    split_hash,
)
from sync_loop.platforms import CLAUDE, CODEX, COPILOT, CURSOR
from sync_loop.templates import read_template


def _shout(link: str) -> str:
    return link.upper()


class TestRewriteMarkdownLinks:
    def test_every_inline_link_is_transformed(self) -> None:
        text = "See [a](one.md) and [b](two.md#x)."
        assert rewrite_markdown_links(text, _shout) == "See [a](ONE.MD) and [b](TWO.MD#X)."

    def test_fenced_content_is_untouched(self) -> None:
        text = "[a](one.md)\n```md\n[b](two.md)\n```\n[c](three.md)"
        assert rewrite_markdown_links(text, _shout) == (
            "[a](ONE.MD)\n```md\n[b](two.md)\n```\n[c](THREE.MD)"
        )

    def test_indented_fence_marker_toggles(self) -> None:
        text = "  ```\n[b](two.md)\n  ```\n[c](three.md)"
        assert rewrite_markdown_links(text, _shout) == "  ```\n[b](two.md)\n  ```\n[c](THREE.MD)"

    def test_unterminated_fence_runs_to_end(self) -> None:
        text = "[a](one.md)\n```\n[b](two.md)\n[c](three.md)"
        assert rewrite_markdown_links(text, _shout) == "[a](ONE.MD)\n```\n[b](two.md)\n[c](three.md)"


class TestHelpers:
    @pytest.mark.parametrize(
        "link",
        ["https://example.com", "HTTP://EXAMPLE.COM", "mailto:team@example.com", "#anchor"],
    )
    def test_external_links(self, link: str) -> None:
        assert is_external_link(link)

    def test_relative_link_is_not_external(self) -> None:
        assert not is_external_link("../patterns.md")

    def test_split_hash(self) -> None:
        assert split_hash("validate-env.md#gates") == ("validate-env.md", "#gates")
        assert split_hash("validate-env.md") == ("validate-env.md", "")

    def test_resolve_canonical_from_nested_document(self) -> None:
        source = ".agent-loop/patterns/code-patterns.md"
        assert resolve_canonical("../patterns.md", source) == ".agent-loop/patterns.md"
        assert resolve_canonical("./testing-guide.md", source) == (
            ".agent-loop/patterns/testing-guide.md"
        )

    def test_resolve_canonical_maps_legacy_entrypoint_references(self) -> None:
        assert resolve_canonical("../AGENTS.md", ".agent-loop/patterns/code-patterns.md") == "AGENTS.md"
        assert resolve_canonical("../AGENTS.md", ".agent-loop/feedback.md") == "AGENTS.md"

    def test_relative_link(self) -> None:
        assert relative_link(".claude/rules/feedback.md", "AGENTS.md") == "../../AGENTS.md"
        assert relative_link(".cursor/rules/02-feedback.md", ".cursor/rules/05-patterns.md") == (
            "05-patterns.md"
        )
        assert relative_link("AGENTS.md", "AGENTS.md") == "AGENTS.md"


class TestRewriteCanonicalLinks:
    def test_flattened_cursor_rules(self) -> None:
        body = read_template("wiring/feedback.md")

        rewritten = rewrite_canonical_links(body, "feedback", CURSOR)

        assert "[Reasoning kernel](01-reasoning-kernel.md)" in rewritten
        assert "[Stage 1 gates](03-validate-env.md#gates)" in rewritten
        assert "[Learned patterns](05-patterns.md#learned-patterns)" in rewritten

    def test_nested_source_into_claude_rules(self) -> None:
        body = read_template("wiring/code-patterns.md")

        rewritten = rewrite_canonical_links(body, "code-patterns", CLAUDE)

        assert "[Pattern registry](patterns.md)" in rewritten
        assert "[Testing guide](testing-guide.md)" in rewritten
        assert "[Stage 1 gates](validate-env.md#gates)" in rewritten
        assert "[Project entrypoint](../../AGENTS.md)" in rewritten

    def test_copilot_instruction_names(self) -> None:
        body = read_template("wiring/code-patterns.md")

        rewritten = rewrite_canonical_links(body, "code-patterns", COPILOT)

        assert "[Pattern registry](patterns.instructions.md)" in rewritten
        assert "[Testing guide](testing-guide.instructions.md)" in rewritten

    def test_unmapped_platform_points_back_at_canonical_tree(self) -> None:
        text = "[kernel](reasoning-kernel.md) and [home](../AGENTS.md)"

        rewritten = rewrite_canonical_links(text, "feedback", CODEX)

        assert rewritten == "[kernel](reasoning-kernel.md) and [home](../AGENTS.md)"

    def test_unknown_and_external_targets_unchanged(self) -> None:
        text = "[site](https://example.com) [top](#top) [x](notes/unknown.md)"
        assert rewrite_canonical_links(text, "feedback", CURSOR) == text

    def test_same_input_same_output(self) -> None:
        body = read_template("wiring/patterns.md")
        assert rewrite_canonical_links(body, "patterns", CURSOR) == rewrite_canonical_links(
            body, "patterns", CURSOR
        )


class TestRewriteResourceLinks:
    def test_canonical_document_links_become_uris(self) -> None:
        text = read_template(".agent-loop/reasoning-kernel.md")

        rewritten = rewrite_resource_links(text, ".agent-loop/reasoning-kernel.md")

        assert "[patterns.md](syncloop://docs/patterns)" in rewritten
        assert "[validate-env.md](syncloop://docs/validate-env#gates)" in rewritten
        assert "(syncloop://docs/refactoring-workflow)" in rewritten
        assert "[protocol overview](syncloop://docs/overview)" in rewritten
        assert "[project entrypoint](syncloop://docs/agents-md)" in rewritten
        assert "[feedback](feedback.md) is literal text" in rewritten

    def test_unindexed_paths_are_left_alone(self) -> None:
        text = read_template("AGENTS.md")

        rewritten = rewrite_resource_links(text, "AGENTS.md")

        assert "[docs/backlog/index.md](docs/backlog/index.md)" in rewritten
        assert "[Glossary](syncloop://docs/glossary)" in rewritten
