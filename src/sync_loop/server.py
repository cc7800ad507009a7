"""sync-loop MCP server: protocol docs as resources, init as a tool."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from mcp.types import (
    GetPromptResult,
    Prompt,
    PromptMessage,
    Resource,
    TextContent,
    Tool,
)
from pydantic import AnyUrl

from sync_loop.config import SyncLoopConfig
from sync_loop.links import RESOURCE_URI_PREFIX, rewrite_resource_links
from sync_loop.placeholders import format_stacks
from sync_loop.scaffold import VALID_TARGETS, init, parse_target
from sync_loop.templates import read_template
from sync_loop.types import InitOptions, InitTarget, StackDefinition

logger = logging.getLogger(__name__)

MARKDOWN_MIME = "text/markdown"

server = Server("sync_loop")

_config: SyncLoopConfig | None = None


def _get_config() -> SyncLoopConfig:
    assert _config is not None, "Server not initialized"
    return _config


@dataclass(frozen=True)
class DocEntry:
    path: str
    name: str
    description: str


DOCS: dict[str, DocEntry] = {
    "overview": DocEntry(
        ".agent-loop/README.md",
        "Protocol Overview",
        "SyncLoop file index and framework overview",
    ),
    "agents-md": DocEntry(
        "AGENTS.md",
        "AGENTS.md Template",
        "Root entrypoint template for AI agents - project identity, protocol, guardrails",
    ),
    "protocol-summary": DocEntry(
        "protocol-summary.md",
        "Protocol Summary",
        "Condensed 7-stage reasoning loop overview",
    ),
    "reasoning-kernel": DocEntry(
        ".agent-loop/reasoning-kernel.md",
        "Reasoning Kernel",
        "Core 7-stage loop, transition map, context clearage, micro/macro classification",
    ),
    "feedback": DocEntry(
        ".agent-loop/feedback.md",
        "Feedback Loop",
        "Failure diagnosis, patch protocol, micro-loop, branch pruning, learning persistence",
    ),
    "validate-env": DocEntry(
        ".agent-loop/validate-env.md",
        "Validate Environment (Stage 1)",
        "NFR gates: type safety, tests, layer integrity, complexity, debug hygiene",
    ),
    "validate-n": DocEntry(
        ".agent-loop/validate-n.md",
        "Validate Neighbors (Stage 2)",
        "Shape compatibility, boundary integrity, bridge contracts",
    ),
    "patterns": DocEntry(
        ".agent-loop/patterns.md",
        "Pattern Registry",
        "Pattern routing index, architecture baseline, learned patterns, pruning records",
    ),
    "glossary": DocEntry(
        ".agent-loop/glossary.md",
        "Domain Glossary",
        "Canonical terminology, naming rules, deprecated aliases",
    ),
    "code-patterns": DocEntry(
        ".agent-loop/patterns/code-patterns.md",
        "Code Patterns (P1-P11)",
        "Port/adapter, domain modules, tasks, routes, DI, config, types, error handling",
    ),
    "testing-guide": DocEntry(
        ".agent-loop/patterns/testing-guide.md",
        "Testing Guide (R2)",
        "Test pyramid, fixtures, factories, mocks, parametrized tests, naming",
    ),
    "refactoring-workflow": DocEntry(
        ".agent-loop/patterns/refactoring-workflow.md",
        "Refactoring Workflow (R1)",
        "4-phase checklist for safe file moves and module restructuring",
    ),
    "api-standards": DocEntry(
        ".agent-loop/patterns/api-standards.md",
        "API Standards (R3)",
        "Boundary contracts, typed models, error envelopes, versioning strategy",
    ),
}

PROMPTS: dict[str, tuple[str, str, str]] = {
    # name -> (template, listing description, result description)
    "bootstrap": (
        "bootstrap-prompt.md",
        "Bootstrap prompt - wire SyncLoop protocol to an existing project by scanning its codebase",
        "Scan the project codebase and wire SyncLoop protocol references to real project structure",
    ),
    "protocol": (
        "protocol-summary.md",
        "SyncLoop reasoning protocol summary - inject as system context for any AI coding task",
        "The SyncLoop 7-stage reasoning protocol for self-correcting agent behavior",
    ),
}

_STACK_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "name": {"type": "string", "description": "Stack/layer name (for example: backend, frontend, worker)"},
        "languages": {"type": "array", "items": {"type": "string"}},
        "frameworks": {"type": "array", "items": {"type": "string"}},
        "testRunner": {"type": "string", "description": "Test runner command"},
        "typeChecker": {"type": "string", "description": "Type checker command"},
        "linter": {"type": "string", "description": "Lint/format command"},
        "packageManager": {"type": "string", "description": "Package manager name"},
        "path": {"type": "string", "description": "Root directory of this stack relative to project root"},
    },
    "required": ["name", "languages", "frameworks"],
}

TOOLS: list[Tool] = [
    Tool(
        name="init",
        description=(
            "Scaffold SyncLoop protocol files into a project. If target is not explicitly "
            "provided, default to all. If stacks are not provided, auto-detect them by "
            "scanning the repository."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "projectPath": {
                    "type": "string",
                    "description": "Project root path. Defaults to current working directory.",
                },
                "target": {
                    "description": (
                        f"Platform id, comma-separated ids or a list of ids. One of: {', '.join(VALID_TARGETS)}"
                    ),
                    "anyOf": [
                        {"type": "string"},
                        {"type": "array", "items": {"type": "string"}},
                    ],
                },
                "stacks": {
                    "type": "array",
                    "items": _STACK_SCHEMA,
                    "description": "Optional stack definitions. Auto-detected when omitted.",
                },
                "dryRun": {
                    "type": "boolean",
                    "default": False,
                    "description": "Preview file writes without modifying files.",
                },
                "overwrite": {
                    "type": "boolean",
                    "default": True,
                    "description": "Overwrite existing generated files.",
                },
            },
            "required": [],
        },
    ),
]


def _resource_uri(doc_id: str) -> str:
    return f"{RESOURCE_URI_PREFIX}{doc_id}"


def read_doc(doc_id: str) -> str:
    """Template text for a document with inter-document links as resource URIs."""
    doc = DOCS[doc_id]
    return rewrite_resource_links(read_template(doc.path), doc.path)


@server.list_resources()  # type: ignore[untyped-decorator,no-untyped-call]
async def list_resources() -> list[Resource]:
    return [
        Resource(
            uri=AnyUrl(_resource_uri(doc_id)),
            name=doc.name,
            description=doc.description,
            mimeType=MARKDOWN_MIME,
        )
        for doc_id, doc in DOCS.items()
    ]


@server.read_resource()  # type: ignore[untyped-decorator,no-untyped-call]
async def read_resource(uri: AnyUrl) -> Iterable[ReadResourceContents]:
    raw = str(uri)
    doc_id = raw[len(RESOURCE_URI_PREFIX):] if raw.startswith(RESOURCE_URI_PREFIX) else ""
    if doc_id not in DOCS:
        raise ValueError(f"Unknown resource: {raw}")
    return [ReadResourceContents(content=read_doc(doc_id), mime_type=MARKDOWN_MIME)]


@server.list_prompts()  # type: ignore[untyped-decorator,no-untyped-call]
async def list_prompts() -> list[Prompt]:
    return [Prompt(name=name, description=listing) for name, (_t, listing, _d) in PROMPTS.items()]


@server.get_prompt()  # type: ignore[untyped-decorator,no-untyped-call]
async def get_prompt(name: str, arguments: dict[str, str] | None) -> GetPromptResult:
    del arguments
    if name not in PROMPTS:
        raise ValueError(f"Unknown prompt: {name}")
    template, _listing, description = PROMPTS[name]
    return GetPromptResult(
        description=description,
        messages=[
            PromptMessage(
                role="user",
                content=TextContent(type="text", text=read_template(template)),
            )
        ],
    )


@server.list_tools()  # type: ignore[untyped-decorator,no-untyped-call]
async def list_tools() -> list[Tool]:
    """Return all available tools."""
    return TOOLS


def _coerce_target(raw: Any, default: InitTarget) -> InitTarget:
    if raw is None or raw == "":
        return default
    if isinstance(raw, str):
        return parse_target(raw)
    if isinstance(raw, list):
        return [str(item).strip() for item in raw]
    raise ValueError(f"Invalid target: {raw!r}")


def _handle_init(config: SyncLoopConfig, args: dict[str, Any]) -> list[str]:
    """Run init and render the response blocks."""
    default_root = config.project_dir or Path(os.getcwd())
    project_path = Path(args.get("projectPath") or default_root).resolve()
    target = _coerce_target(args.get("target"), config.target)
    stacks = [StackDefinition.from_dict(item) for item in args.get("stacks") or []]
    options = InitOptions(
        dry_run=bool(args.get("dryRun", False)),
        overwrite=bool(args.get("overwrite", config.overwrite)),
    )

    result = init(project_path, target, stacks, options)
    label = target if isinstance(target, str) else ", ".join(target)
    results_text = "\n".join(result.results)

    return [
        f"SyncLoop initialized for {label}:\n\n{results_text}",
        f"\n---\n\n## Options\n- dryRun: {str(options.dry_run).lower()}\n- overwrite: {str(options.overwrite).lower()}",
        f"\n---\n\n## Detected stacks\n{format_stacks(result.stacks)}",
        (
            "\n---\n\n**IMPORTANT: Now scan the codebase and wire the generated SyncLoop files "
            f"to this project.**\n\n{read_template('bootstrap-prompt.md')}"
        ),
        f"\n---\n\n## Machine-readable result\n```json\n{json.dumps(result.to_dict(), indent=2)}\n```",
    ]


@server.call_tool()  # type: ignore[untyped-decorator]
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Dispatch tool calls."""
    logger.info("Tool invocation", extra={"tool_name": name, "tool_args": arguments})
    if name != "init":
        return [TextContent(type="text", text=f"Unknown tool: {name}")]

    try:
        blocks = _handle_init(_get_config(), arguments or {})
    except Exception:
        logger.exception(
            "Tool execution failed",
            extra={"tool_name": name, "tool_args": arguments},
        )
        raise

    logger.info("Tool execution completed", extra={"tool_name": name, "blocks": len(blocks)})
    return [TextContent(type="text", text=block) for block in blocks]


def init_server(config: SyncLoopConfig | None = None) -> None:
    """Load configuration. Called from main() or tests."""
    global _config
    _config = config if config is not None else SyncLoopConfig.from_env()


async def main() -> None:
    """Start the sync-loop server on stdio."""
    init_server()
    logger.info("Starting sync-loop MCP server")
    async with stdio_server() as (read_stream, write_stream):
        initialization_options = server.create_initialization_options()
        await server.run(read_stream, write_stream, initialization_options)
