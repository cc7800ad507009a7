"""Top-level scaffolding of SyncLoop files into a project."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Sequence
from pathlib import Path

from sync_loop.detect import detect_stacks
from sync_loop.generator import generate_platform_files
from sync_loop.output import format_write_result, write_output
from sync_loop.placeholders import apply_stacks
from sync_loop.platforms import BACKLOG_INDEX_PATH, ENTRYPOINT_PATH, SOURCE_FILES
from sync_loop.templates import CANONICAL_DIR_NAME, canonical_root, read_template
from sync_loop.types import (
    ALL_PLATFORMS,
    InitOptions,
    InitResult,
    InitTarget,
    Platform,
    StackDefinition,
)

logger = logging.getLogger(__name__)

ALL_TARGET = "all"
VALID_TARGETS: tuple[str, ...] = tuple(p.value for p in ALL_PLATFORMS) + (ALL_TARGET,)


class InvalidTargetError(ValueError):
    """Raised when a target selector names an unknown platform."""

    def __init__(self, target: object) -> None:
        self.target = target
        super().__init__(f'Unknown target "{target}". Use one of: {", ".join(VALID_TARGETS)}')


def parse_target(value: str) -> InitTarget:
    """Parse a ``"all"`` / ``"id"`` / ``"id1,id2"`` selector without validating it."""
    if value.strip() == ALL_TARGET:
        return ALL_TARGET
    parts = list(dict.fromkeys(part.strip() for part in value.split(",") if part.strip()))
    if len(parts) == 1:
        return parts[0]
    return parts


def _as_platform(value: object) -> Platform:
    try:
        return Platform(value)
    except ValueError:
        raise InvalidTargetError(getattr(value, "value", value)) from None


def resolve_platforms(target: InitTarget | Platform | Sequence[str]) -> list[Platform]:
    """Validate a target selector and expand it into an ordered platform list."""
    if isinstance(target, str):
        if target == ALL_TARGET:
            return list(ALL_PLATFORMS)
        return [_as_platform(target)]
    # Validate every element before returning anything.
    return [_as_platform(item) for item in target]


def _normalize_target(target: InitTarget | Platform | Sequence[str]) -> InitTarget:
    if isinstance(target, Platform):
        return target.value
    if isinstance(target, str):
        return target
    return [Platform(item).value for item in target]


def _copy_missing_files(source: Path, destination: Path) -> None:
    for src in sorted(source.rglob("*")):
        if src.is_dir():
            continue
        dst = destination / src.relative_to(source)
        if dst.exists():
            continue
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, dst)


def copy_canonical_tree(root: Path, overwrite: bool) -> None:
    """Copy the canonical document tree into ``root``.

    With ``overwrite`` off, existing files and directories at the destination
    are left as they are, metadata included.
    """
    destination = root / CANONICAL_DIR_NAME
    if overwrite:
        shutil.copytree(canonical_root(), destination, dirs_exist_ok=True)
    else:
        _copy_missing_files(canonical_root(), destination)


def _apply_stacks_in_place(
    root: Path,
    stacks: Sequence[StackDefinition],
    preserved: set[str],
) -> None:
    for source in SOURCE_FILES:
        if source.path in preserved:
            continue
        dest = root / source.path
        try:
            current = dest.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("Canonical document missing after copy", extra={"path": source.path})
            continue
        updated = apply_stacks(current, stacks)
        if updated != current:
            dest.write_text(updated, encoding="utf-8")


def init(
    project_root: str | Path,
    target: InitTarget | Platform | Sequence[str] = ALL_TARGET,
    stacks: Sequence[StackDefinition] = (),
    options: InitOptions | None = None,
) -> InitResult:
    """Scaffold the canonical tree, entrypoint, backlog and platform files.

    Raises ``InvalidTargetError`` before touching the filesystem when any
    requested platform is unknown.
    """
    options = options or InitOptions()
    root = Path(project_root).resolve()
    effective_stacks = tuple(stacks) if stacks else tuple(detect_stacks(root))
    platforms = resolve_platforms(target)

    logger.info(
        "Init started",
        extra={
            "project_path": str(root),
            "platforms": [p.value for p in platforms],
            "dry_run": options.dry_run,
            "overwrite": options.overwrite,
        },
    )

    results: list[str] = []

    if not options.dry_run:
        preserved: set[str] = set()
        if not options.overwrite:
            preserved = {s.path for s in SOURCE_FILES if (root / s.path).exists()}
        copy_canonical_tree(root, options.overwrite)
        _apply_stacks_in_place(root, effective_stacks, preserved)

    dry_note = ", dry-run" if options.dry_run else ""
    results.append(f"{CANONICAL_DIR_NAME}/ (canonical source{dry_note})")

    entrypoint = apply_stacks(read_template("AGENTS.md"), effective_stacks)
    entry_result = write_output(root, ENTRYPOINT_PATH, entrypoint, options)
    results.append(f"{ENTRYPOINT_PATH} (cross-platform entrypoint: {format_write_result(entry_result)})")

    # First write wins for the backlog, whatever the caller asked for.
    backlog_options = InitOptions(dry_run=options.dry_run, overwrite=False)
    backlog_result = write_output(root, BACKLOG_INDEX_PATH, read_template("backlog-index.md"), backlog_options)
    results.append(f"{BACKLOG_INDEX_PATH} ({format_write_result(backlog_result)})")

    for platform in platforms:
        results.append(f"\n[{platform.value}]")
        results.extend(generate_platform_files(root, platform, effective_stacks, options))

    return InitResult(
        project_path=str(root),
        target=_normalize_target(target),
        dry_run=options.dry_run,
        overwrite=options.overwrite,
        stacks=effective_stacks,
        results=results,
    )
