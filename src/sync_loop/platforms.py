"""Static document and platform tables.

Every table here is built once at import time and exposed read-only. Adding a
platform means adding a ``PlatformDescriptor``; the generator has no
per-platform branches.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Union

from sync_loop.types import Platform

FrontmatterValue = Union[str, bool, tuple[str, ...]]

ENTRYPOINT_PATH = "AGENTS.md"
BACKLOG_INDEX_PATH = "docs/backlog/index.md"
OVERVIEW_PATH = ".agent-loop/README.md"


@dataclass(frozen=True)
class SourceFile:
    """A canonical document id and its path under the template tree."""

    id: str
    path: str


SOURCE_FILES: tuple[SourceFile, ...] = (
    SourceFile("reasoning-kernel", ".agent-loop/reasoning-kernel.md"),
    SourceFile("feedback", ".agent-loop/feedback.md"),
    SourceFile("validate-env", ".agent-loop/validate-env.md"),
    SourceFile("validate-n", ".agent-loop/validate-n.md"),
    SourceFile("patterns", ".agent-loop/patterns.md"),
    SourceFile("glossary", ".agent-loop/glossary.md"),
    SourceFile("code-patterns", ".agent-loop/patterns/code-patterns.md"),
    SourceFile("testing-guide", ".agent-loop/patterns/testing-guide.md"),
    SourceFile("refactoring-workflow", ".agent-loop/patterns/refactoring-workflow.md"),
    SourceFile("api-standards", ".agent-loop/patterns/api-standards.md"),
)

WRAPPER_FILES: Mapping[str, str] = MappingProxyType(
    {source.id: f"wiring/{source.id}.md" for source in SOURCE_FILES}
)

_SOURCE_PATHS: Mapping[str, str] = MappingProxyType(
    {source.id: source.path for source in SOURCE_FILES}
)

# Documents that live at a fixed location regardless of platform.
FIXED_LOCATIONS: Mapping[str, str] = MappingProxyType(
    {
        "agents-md": ENTRYPOINT_PATH,
        "overview": OVERVIEW_PATH,
        **_SOURCE_PATHS,
    }
)

# Reverse index: canonical path -> document id.
CANONICAL_INDEX: Mapping[str, str] = MappingProxyType(
    {path: doc_id for doc_id, path in FIXED_LOCATIONS.items()}
)


def source_path(doc_id: str) -> str | None:
    """Canonical path of a document id, or ``None`` when unknown."""
    return _SOURCE_PATHS.get(doc_id)


def fixed_location(doc_id: str) -> str | None:
    return FIXED_LOCATIONS.get(doc_id)


@dataclass(frozen=True)
class PlatformFileConfig:
    """Where one document lands for a platform and its front matter."""

    target: str
    frontmatter: Mapping[str, FrontmatterValue]


PlatformConfig = Mapping[str, PlatformFileConfig]


def _config(entries: dict[str, tuple[str, dict[str, FrontmatterValue]]]) -> PlatformConfig:
    return MappingProxyType(
        {
            doc_id: PlatformFileConfig(target=target, frontmatter=MappingProxyType(fm))
            for doc_id, (target, fm) in entries.items()
        }
    )


_ALL = "**/*"
_CODE_GLOB = "{src,app,lib}/**/*.{ts,py,js,jsx,tsx}"
_TEST_GLOB = "{tests,test,__tests__}/**/*"
_API_GLOB = "{routes,routers,controllers,api}/**/*"

COPILOT: PlatformConfig = _config(
    {
        "reasoning-kernel": (
            ".github/instructions/reasoning-kernel.instructions.md",
            {"name": "SyncLoop: Reasoning Kernel", "description": "7-stage agent reasoning loop with context clearage", "applyTo": _ALL},
        ),
        "feedback": (
            ".github/instructions/feedback.instructions.md",
            {"name": "SyncLoop: Feedback Loop", "description": "Failure diagnosis, patch protocol, branch pruning", "applyTo": _ALL},
        ),
        "validate-env": (
            ".github/instructions/validate-env.instructions.md",
            {"name": "SyncLoop: Validate Environment", "description": "NFR gates: types, tests, layers, complexity", "applyTo": _ALL},
        ),
        "validate-n": (
            ".github/instructions/validate-n.instructions.md",
            {"name": "SyncLoop: Validate Neighbors", "description": "Shape, boundary, bridge checks", "applyTo": _ALL},
        ),
        "patterns": (
            ".github/instructions/patterns.instructions.md",
            {"name": "SyncLoop: Pattern Registry", "description": "Pattern routing and learned patterns", "applyTo": _ALL},
        ),
        "glossary": (
            ".github/instructions/glossary.instructions.md",
            {"name": "SyncLoop: Glossary", "description": "Canonical terminology", "applyTo": _ALL},
        ),
        "code-patterns": (
            ".github/instructions/code-patterns.instructions.md",
            {"name": "SyncLoop: Code Patterns", "description": "P1-P11 implementation patterns", "applyTo": _CODE_GLOB},
        ),
        "testing-guide": (
            ".github/instructions/testing-guide.instructions.md",
            {"name": "SyncLoop: Testing Guide", "description": "Test patterns and strategies", "applyTo": _TEST_GLOB},
        ),
        "refactoring-workflow": (
            ".github/instructions/refactoring-workflow.instructions.md",
            {"name": "SyncLoop: Refactoring Workflow", "description": "4-phase refactoring checklist", "applyTo": _ALL},
        ),
        "api-standards": (
            ".github/instructions/api-standards.instructions.md",
            {"name": "SyncLoop: API Standards", "description": "Boundary contracts and API conventions", "applyTo": _API_GLOB},
        ),
    }
)

CURSOR: PlatformConfig = _config(
    {
        "reasoning-kernel": (
            ".cursor/rules/01-reasoning-kernel.md",
            {"description": "7-stage agent reasoning loop with context clearage and transitions", "alwaysApply": True},
        ),
        "feedback": (
            ".cursor/rules/02-feedback.md",
            {"description": "Failure diagnosis, patch protocol, micro-loop, branch pruning", "alwaysApply": True},
        ),
        "validate-env": (
            ".cursor/rules/03-validate-env.md",
            {"description": "Stage 1 NFR gates: types, tests, layers, complexity, debug hygiene", "alwaysApply": True},
        ),
        "validate-n": (
            ".cursor/rules/04-validate-n.md",
            {"description": "Stage 2 checks: shapes, boundaries, bridges", "alwaysApply": True},
        ),
        "patterns": (
            ".cursor/rules/05-patterns.md",
            {"description": "Pattern routing index and learned patterns", "alwaysApply": True},
        ),
        "glossary": (
            ".cursor/rules/06-glossary.md",
            {"description": "Canonical domain terminology and naming rules", "alwaysApply": True},
        ),
        "code-patterns": (
            ".cursor/rules/07-code-patterns.md",
            {"description": "P1-P11 implementation patterns for layered code", "globs": _CODE_GLOB},
        ),
        "testing-guide": (
            ".cursor/rules/08-testing-guide.md",
            {"description": "Test patterns, fixtures, mocks, strategies", "globs": _TEST_GLOB},
        ),
        "refactoring-workflow": (
            ".cursor/rules/09-refactoring-workflow.md",
            {"description": "4-phase refactoring checklist for safe restructuring", "alwaysApply": False},
        ),
        "api-standards": (
            ".cursor/rules/10-api-standards.md",
            {"description": "Boundary contracts, typed models, error envelopes", "globs": _API_GLOB},
        ),
    }
)

CLAUDE: PlatformConfig = _config(
    {
        "reasoning-kernel": (".claude/rules/reasoning-kernel.md", {"paths": (_ALL,)}),
        "feedback": (".claude/rules/feedback.md", {"paths": (_ALL,)}),
        "validate-env": (".claude/rules/validate-env.md", {"paths": (_ALL,)}),
        "validate-n": (".claude/rules/validate-n.md", {"paths": (_ALL,)}),
        "patterns": (".claude/rules/patterns.md", {"paths": (_ALL,)}),
        "glossary": (".claude/rules/glossary.md", {"paths": (_ALL,)}),
        "code-patterns": (".claude/rules/code-patterns.md", {"paths": ("src/**", "app/**", "lib/**")}),
        "testing-guide": (".claude/rules/testing-guide.md", {"paths": ("tests/**", "test/**", "__tests__/**")}),
        "refactoring-workflow": (".claude/rules/refactoring-workflow.md", {"paths": (_ALL,)}),
        "api-standards": (".claude/rules/api-standards.md", {"paths": ("**/routes/**", "**/api/**", "**/controllers/**")}),
    }
)

# Codex reads AGENTS.md and CODEX.md directly; it has no per-document rules.
CODEX: PlatformConfig = _config({})


@dataclass(frozen=True)
class AuxiliaryFile:
    """A template written verbatim (after stack substitution) to a fixed target."""

    template: str
    target: str


SKILL_TEMPLATE = "wiring/skills-diagnose-failure.md"
SUMMARY_TEMPLATE = "protocol-summary.md"


@dataclass(frozen=True)
class PlatformDescriptor:
    """Everything the generator needs to render one platform."""

    platform: Platform
    documents: PlatformConfig
    summary_target: str
    summary_frontmatter: Mapping[str, FrontmatterValue] | None = None
    agent_capable: bool = False
    agent_files: tuple[AuxiliaryFile, ...] = ()
    skill_target: str | None = None
    extra_files: tuple[AuxiliaryFile, ...] = ()


PLATFORMS: Mapping[Platform, PlatformDescriptor] = MappingProxyType(
    {
        Platform.COPILOT: PlatformDescriptor(
            platform=Platform.COPILOT,
            documents=COPILOT,
            summary_target=".github/copilot-instructions.md",
            agent_capable=True,
            agent_files=(
                AuxiliaryFile("wiring/agents-github.md", ".github/agents/SyncLoop.agent.md"),
                AuxiliaryFile("wiring/agents-github-architect.md", ".github/agents/SyncLoop-Architect.agent.md"),
                AuxiliaryFile("wiring/agents-github-fixer.md", ".github/agents/SyncLoop-Fixer.agent.md"),
            ),
            skill_target=".github/skills/diagnose-failure/SKILL.md",
        ),
        Platform.CURSOR: PlatformDescriptor(
            platform=Platform.CURSOR,
            documents=CURSOR,
            summary_target=".cursor/rules/00-protocol.md",
            summary_frontmatter=MappingProxyType(
                {"description": "SyncLoop protocol summary and guardrails", "alwaysApply": True}
            ),
            skill_target=".cursor/skills/diagnose-failure/SKILL.md",
        ),
        Platform.CLAUDE: PlatformDescriptor(
            platform=Platform.CLAUDE,
            documents=CLAUDE,
            summary_target="CLAUDE.md",
            agent_capable=True,
            agent_files=(
                AuxiliaryFile("wiring/agents-claude.md", ".claude/agents/SyncLoop.md"),
                AuxiliaryFile("wiring/agents-claude-architect.md", ".claude/agents/SyncLoop-Architect.md"),
                AuxiliaryFile("wiring/agents-claude-fixer.md", ".claude/agents/SyncLoop-Fixer.md"),
            ),
            skill_target=".claude/skills/diagnose-failure/SKILL.md",
        ),
        Platform.CODEX: PlatformDescriptor(
            platform=Platform.CODEX,
            documents=CODEX,
            summary_target="CODEX.md",
            agent_capable=True,
            agent_files=(
                AuxiliaryFile("wiring/codex-agent-default.toml", ".codex/agents/default.toml"),
                AuxiliaryFile("wiring/codex-agent-architect.toml", ".codex/agents/architect.toml"),
                AuxiliaryFile("wiring/codex-agent-fixer.toml", ".codex/agents/fixer.toml"),
            ),
            skill_target=".agents/skills/diagnose-failure/SKILL.md",
            extra_files=(AuxiliaryFile("wiring/codex-config.toml", ".codex/config.toml"),),
        ),
    }
)


def get_descriptor(platform: Platform | str) -> PlatformDescriptor:
    return PLATFORMS[Platform(platform)]
