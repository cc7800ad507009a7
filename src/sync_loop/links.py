"""Markdown link relocation.

Canonical documents live in a nested tree (``.agent-loop/patterns/...``) but
each platform receives them as one flat directory, so relative links between
documents have to be recomputed per platform. Everything here is a pure text
transform: no filesystem access.
"""

from __future__ import annotations

import posixpath
import re
from collections.abc import Callable

from sync_loop.platforms import CANONICAL_INDEX, PlatformConfig, fixed_location, source_path

FENCE_MARKER = "```"
RESOURCE_URI_PREFIX = "syncloop://docs/"

_LINK_RE = re.compile(r"\]\(([^)]+)\)")
_EXTERNAL_RE = re.compile(r"^([a-z][a-z0-9+.-]*:|#)", re.IGNORECASE)

# Parent-relative references that older templates used for root documents.
_LEGACY_ALIASES: dict[str, str] = {
    "../AGENTS.md": "AGENTS.md",
    ".agent-loop/AGENTS.md": "AGENTS.md",
    "../README.md": "README.md",
    ".agent-loop/patterns": ".agent-loop/patterns.md",
}


def is_external_link(link: str) -> bool:
    """True for URL schemes (``https:``, ``mailto:``) and in-page anchors."""
    return bool(_EXTERNAL_RE.match(link))


def split_hash(link: str) -> tuple[str, str]:
    idx = link.find("#")
    if idx == -1:
        return link, ""
    return link[:idx], link[idx:]


def path_dir(value: str) -> str:
    directory = posixpath.dirname(value)
    return "" if directory == "." else directory


def rewrite_markdown_links(text: str, transform: Callable[[str], str]) -> str:
    """Apply ``transform`` to every inline link target outside fenced blocks.

    An unterminated fence stays open to the end of the input.
    """
    in_fence = False
    lines = text.split("\n")
    for idx, line in enumerate(lines):
        if line.lstrip().startswith(FENCE_MARKER):
            in_fence = not in_fence
            continue
        if in_fence:
            continue
        lines[idx] = _LINK_RE.sub(lambda match: f"]({transform(match.group(1))})", line)
    return "\n".join(lines)


def resolve_canonical(link_path: str, source: str) -> str:
    """Resolve a link path against the source document's directory."""
    joined = posixpath.join(path_dir(source) or ".", link_path)
    canonical = posixpath.normpath(joined)
    if canonical.startswith("./"):
        canonical = canonical[2:]
    return _LEGACY_ALIASES.get(canonical, canonical)


def _lookup(link: str, source: str) -> tuple[str, str] | None:
    """Map a link to ``(doc_id, hash)`` when it points at a known document."""
    if is_external_link(link):
        return None
    path_part, hash_part = split_hash(link)
    if not path_part:
        return None
    doc_id = CANONICAL_INDEX.get(resolve_canonical(path_part, source))
    if doc_id is None:
        return None
    return doc_id, hash_part


def relative_link(from_file: str, to_file: str) -> str:
    """Relative POSIX path from ``from_file``'s directory to ``to_file``."""
    start = path_dir(from_file) or "."
    relative = posixpath.relpath(to_file, start)
    if relative in ("", "."):
        return posixpath.basename(to_file)
    return relative


def _platform_location(doc_id: str, config: PlatformConfig) -> str | None:
    entry = config.get(doc_id)
    if entry is not None:
        return entry.target
    return fixed_location(doc_id)


def rewrite_canonical_links(text: str, source_doc_id: str, config: PlatformConfig) -> str:
    """Rewrite links in a document that is being relocated for one platform.

    Links are resolved as if the text sat at the canonical location of
    ``source_doc_id`` and re-targeted relative to where that document lands
    under ``config``. Unknown targets are left untouched.
    """
    source = source_path(source_doc_id) or fixed_location(source_doc_id) or ""
    current = _platform_location(source_doc_id, config) or source

    def transform(link: str) -> str:
        found = _lookup(link, source)
        if found is None:
            return link
        doc_id, hash_part = found
        destination = _platform_location(doc_id, config)
        if destination is None:
            return link
        return relative_link(current, destination) + hash_part

    return rewrite_markdown_links(text, transform)


def rewrite_resource_links(text: str, source: str) -> str:
    """Rewrite links between known documents to ``syncloop://docs/<id>`` URIs."""

    def transform(link: str) -> str:
        found = _lookup(link, source)
        if found is None:
            return link
        doc_id, hash_part = found
        return f"{RESOURCE_URI_PREFIX}{doc_id}{hash_part}"

    return rewrite_markdown_links(text, transform)
