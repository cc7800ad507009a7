"""Command-line entrypoint: ``sync-loop`` serves MCP, ``sync-loop init`` scaffolds."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from sync_loop.config import SyncLoopConfig
from sync_loop.detect import detect_stacks
from sync_loop.logging_utils import configure_logging, install_global_exception_hooks
from sync_loop.scaffold import VALID_TARGETS, init, parse_target, resolve_platforms
from sync_loop.types import InitOptions, InitResult, StackDefinition

logger = logging.getLogger(__name__)

DRY_RUN_FOOTER = "Dry run complete. No files were modified."
DONE_FOOTER = "Done. Run the bootstrap prompt to wire to your project."

_EPILOG = """\
Init targets:
  copilot   .agent-loop/ + .github/instructions/ + copilot-instructions.md
  cursor    .agent-loop/ + .cursor/rules/ with frontmatter
  claude    .agent-loop/ + CLAUDE.md + .claude/rules/
  codex     .agent-loop/ + CODEX.md + .codex/ agent roles
  all       All of the above (default)

MCP configuration (add to your client settings):

  {"mcpServers": {"sync_loop": {"command": "sync-loop"}}}

Resources: protocol docs on demand. Tools: init. Prompts: bootstrap, protocol.
"""


def _run_server() -> None:
    from sync_loop.server import main as serve

    asyncio.run(serve())


@dataclass
class CliDeps:
    """Collaborators replaced in tests."""

    detect_stacks_fn: Callable[[Path], list[StackDefinition]] = detect_stacks
    init_fn: Callable[..., InitResult] = init
    run_server_fn: Callable[[], None] = _run_server
    load_config_fn: Callable[[], SyncLoopConfig] = SyncLoopConfig.from_env


def _build_arg_parser(config: SyncLoopConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sync-loop",
        description="sync-loop - MCP server + CLI for the SyncLoop agent reasoning protocol",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(dest="command")

    init_parser = subparsers.add_parser("init", help="Scaffold files into the project")
    init_parser.add_argument("project_path", nargs="?", default=None)
    init_parser.add_argument(
        "--target",
        default=None,
        help=f"One of: {', '.join(VALID_TARGETS)} (comma-separated for several)",
    )
    init_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Preview writes without modifying files",
    )
    init_parser.add_argument(
        "--overwrite",
        dest="overwrite",
        action="store_true",
        default=config.overwrite,
        help="Overwrite existing generated files",
    )
    init_parser.add_argument(
        "--no-overwrite",
        dest="overwrite",
        action="store_false",
        help="Do not overwrite existing generated files",
    )
    return parser


def _describe_stack(stack: StackDefinition) -> str:
    location = f" ({stack.path})" if stack.path else ""
    return f"- {stack.name}{location}: {', '.join(stack.languages)} | {', '.join(stack.frameworks)}"


def _run_init(args: argparse.Namespace, config: SyncLoopConfig, deps: CliDeps) -> int:
    raw_target = args.target if args.target is not None else config.target
    target = parse_target(raw_target) if isinstance(raw_target, str) else raw_target
    label = target if isinstance(target, str) else ", ".join(target)

    try:
        resolve_platforms(target)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    project_path = Path(args.project_path or config.project_dir or Path.cwd())
    options = InitOptions(dry_run=args.dry_run, overwrite=args.overwrite)

    try:
        stacks = deps.detect_stacks_fn(project_path)
        result = deps.init_fn(project_path, target, stacks, options)
    except (OSError, ValueError) as exc:
        logger.exception("Init command failed", extra={"project_path": str(project_path)})
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    lines = [
        f"SyncLoop initialized for {label}:",
        "",
        *result.results,
        "",
        "Detected stacks:",
        *(_describe_stack(stack) for stack in result.stacks),
        "",
        DRY_RUN_FOOTER if options.dry_run else DONE_FOOTER,
    ]
    print("\n".join(lines))
    return 0


def main(argv: Sequence[str] | None = None, deps: CliDeps | None = None) -> int:
    deps = deps or CliDeps()
    try:
        config = deps.load_config_fn()
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    parser = _build_arg_parser(config)
    args = parser.parse_args(argv)

    if args.command == "init":
        return _run_init(args, config, deps)

    deps.run_server_fn()
    return 0


def run() -> None:
    """Console script entry: configure logging, then dispatch."""
    log_path = configure_logging()
    install_global_exception_hooks()
    logger.info("Logging initialized", extra={"log_path": str(log_path)})
    sys.exit(main())
