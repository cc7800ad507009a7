"""Per-platform artifact generation."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from sync_loop.links import rewrite_canonical_links
from sync_loop.output import format_write_result, render_frontmatter, write_output
from sync_loop.placeholders import apply_stacks
from sync_loop.platforms import (
    SKILL_TEMPLATE,
    SOURCE_FILES,
    SUMMARY_TEMPLATE,
    WRAPPER_FILES,
    AuxiliaryFile,
    get_descriptor,
)
from sync_loop.templates import read_template
from sync_loop.types import InitOptions, Platform, StackDefinition

logger = logging.getLogger(__name__)

RESULT_INDENT = "  "


def _with_frontmatter(frontmatter: str, body: str) -> str:
    return f"{frontmatter}\n\n{body}"


def generate_platform_files(
    project_root: Path,
    platform: Platform | str,
    stacks: Sequence[StackDefinition],
    options: InitOptions,
) -> list[str]:
    """Render and write every artifact for one platform.

    Returns one indented result line per write. Only paths owned by
    ``platform`` are touched.
    """
    descriptor = get_descriptor(platform)
    results: list[str] = []

    def emit(relative_path: str, content: str) -> None:
        result = write_output(project_root, relative_path, content, options)
        results.append(RESULT_INDENT + format_write_result(result))

    for source in SOURCE_FILES:
        entry = descriptor.documents.get(source.id)
        wrapper = WRAPPER_FILES.get(source.id)
        if entry is None or wrapper is None:
            continue
        body = apply_stacks(read_template(wrapper), stacks)
        body = rewrite_canonical_links(body, source.id, descriptor.documents)
        emit(entry.target, _with_frontmatter(render_frontmatter(entry.frontmatter), body))

    summary = apply_stacks(read_template(SUMMARY_TEMPLATE), stacks)
    if descriptor.summary_frontmatter is not None:
        summary = _with_frontmatter(render_frontmatter(descriptor.summary_frontmatter), summary)
    emit(descriptor.summary_target, summary)

    auxiliary: list[AuxiliaryFile] = []
    if descriptor.agent_capable:
        auxiliary.extend(descriptor.agent_files)
    if descriptor.skill_target is not None:
        auxiliary.append(AuxiliaryFile(SKILL_TEMPLATE, descriptor.skill_target))
    auxiliary.extend(descriptor.extra_files)

    for item in auxiliary:
        emit(item.target, apply_stacks(read_template(item.template), stacks))

    logger.info(
        "Generated platform files",
        extra={"platform": descriptor.platform.value, "files": len(results)},
    )
    return results
