"""Access to the template tree shipped inside the package."""

from __future__ import annotations

from pathlib import Path

TEMPLATE_DIR = Path(__file__).parent / "template"
CANONICAL_DIR_NAME = ".agent-loop"


def read_template(relative_path: str) -> str:
    """Read a template file by its POSIX path relative to the template root."""
    return (TEMPLATE_DIR / relative_path).read_text(encoding="utf-8")


def canonical_root() -> Path:
    return TEMPLATE_DIR / CANONICAL_DIR_NAME
