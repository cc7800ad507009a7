"""Guarded file writes with dry-run and overwrite semantics."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from sync_loop.platforms import FrontmatterValue
from sync_loop.types import InitOptions, WriteResult, WriteStatus

logger = logging.getLogger(__name__)


def write_output(
    root: Path,
    relative_path: str,
    content: str,
    options: InitOptions,
) -> WriteResult:
    """Write ``content`` under ``root`` unless dry-run or overwrite forbid it.

    Dry-run never touches the filesystem; parents are created before writing.
    """
    full_path = root / relative_path
    exists = full_path.exists()

    if exists and not options.overwrite:
        return WriteResult(path=relative_path, status=WriteStatus.SKIPPED)

    if options.dry_run:
        status = WriteStatus.WOULD_OVERWRITE if exists else WriteStatus.WOULD_CREATE
        return WriteResult(path=relative_path, status=status)

    full_path.parent.mkdir(parents=True, exist_ok=True)
    full_path.write_text(content, encoding="utf-8")
    status = WriteStatus.OVERWRITTEN if exists else WriteStatus.CREATED
    logger.info("Wrote file", extra={"path": relative_path, "status": status.value})
    return WriteResult(path=relative_path, status=status)


def format_write_result(result: WriteResult) -> str:
    if result.status == WriteStatus.SKIPPED:
        return f"{result.path} (skipped: exists)"
    if result.status in (WriteStatus.WOULD_CREATE, WriteStatus.WOULD_OVERWRITE):
        return f"{result.path} (dry-run)"
    return result.path


def render_frontmatter(fields: Mapping[str, FrontmatterValue]) -> str:
    """Render YAML front matter: lists as bullets, booleans bare, rest quoted."""
    lines = ["---"]
    for key, value in fields.items():
        if isinstance(value, (list, tuple)):
            lines.append(f"{key}:")
            lines.extend(f'  - "{item}"' for item in value)
        elif isinstance(value, bool):
            lines.append(f"{key}: {'true' if value else 'false'}")
        else:
            lines.append(f'{key}: "{value}"')
    lines.append("---")
    return "\n".join(lines)
