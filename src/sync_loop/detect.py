"""Technology stack detection for a project tree.

The project root and each of its immediate, non-hidden subdirectories are
probed independently. A Node probe reads ``package.json``; a Python probe
scans ``pyproject.toml`` / ``requirements.txt`` for known keywords. Detection
never fails: unreadable or malformed inputs count as absent.
"""

from __future__ import annotations

import json
import logging
import posixpath
from pathlib import Path
from typing import Any

from sync_loop.types import StackDefinition

logger = logging.getLogger(__name__)

IGNORED_DIRS = frozenset({"node_modules", "__pycache__"})

# Checked in order; the first lockfile present wins.
_LOCKFILES: tuple[tuple[str, str], ...] = (
    ("pnpm-lock.yaml", "pnpm"),
    ("yarn.lock", "yarn"),
    ("package-lock.json", "npm"),
    ("uv.lock", "uv"),
)

NODE_FRAMEWORKS: tuple[tuple[str, str], ...] = (
    ("next", "Next.js"),
    ("react", "React"),
    ("vite", "Vite"),
    ("vue", "Vue"),
    ("svelte", "Svelte"),
    ("tailwindcss", "TailwindCSS"),
    ("express", "Express"),
    ("fastify", "Fastify"),
    ("@nestjs/core", "NestJS"),
    ("@modelcontextprotocol/sdk", "MCP SDK"),
    ("@tanstack/react-query", "TanStack Query"),
    ("zustand", "Zustand"),
)

PYTHON_FRAMEWORKS: tuple[tuple[str, str], ...] = (
    ("fastapi", "FastAPI"),
    ("django", "Django"),
    ("flask", "Flask"),
    ("langgraph", "LangGraph"),
    ("pydantic", "Pydantic"),
)

FALLBACK_STACK = StackDefinition(
    name="app",
    languages=("Unknown",),
    frameworks=("Unknown",),
)


def _read_manifest(path: Path) -> dict[str, Any]:
    """Parse package.json; anything unreadable is treated as an empty manifest."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.debug("Ignoring unreadable manifest %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _read_lower(path: Path) -> str:
    if not path.is_file():
        return ""
    try:
        return path.read_text(encoding="utf-8").lower()
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Ignoring unreadable dependency file %s: %s", path, exc)
        return ""


def detect_package_manager(stack_root: Path) -> str:
    for lockfile, manager in _LOCKFILES:
        if (stack_root / lockfile).exists():
            return manager
    return "npm"


def run_command_prefix(package_manager: str) -> str:
    if package_manager == "npm":
        return "npm run"
    if package_manager in ("pnpm", "yarn"):
        return package_manager
    return f"{package_manager} run"


def _stack_name(relative_path: str) -> str:
    return posixpath.basename(relative_path) if relative_path else "app"


def detect_node_stack(project_root: Path, relative_path: str = "") -> StackDefinition | None:
    stack_root = project_root / relative_path if relative_path else project_root
    manifest_path = stack_root / "package.json"
    if not manifest_path.exists():
        return None

    manifest = _read_manifest(manifest_path)
    scripts = _mapping(manifest.get("scripts"))
    deps = {
        **_mapping(manifest.get("dependencies")),
        **_mapping(manifest.get("devDependencies")),
    }

    package_manager = detect_package_manager(stack_root)
    prefix = run_command_prefix(package_manager)
    frameworks = [label for dep, label in NODE_FRAMEWORKS if deps.get(dep)]
    uses_typescript = bool(deps.get("typescript")) or (stack_root / "tsconfig.json").exists()

    if scripts.get("typecheck"):
        type_checker: str | None = f"{prefix} typecheck"
    elif uses_typescript:
        type_checker = "tsc --noEmit"
    else:
        type_checker = None

    return StackDefinition(
        name=_stack_name(relative_path),
        languages=("TypeScript", "JavaScript") if uses_typescript else ("JavaScript",),
        frameworks=tuple(frameworks) or ("Node.js",),
        test_runner=f"{prefix} test" if scripts.get("test") else None,
        type_checker=type_checker,
        linter=f"{prefix} lint" if scripts.get("lint") else None,
        package_manager=package_manager,
        path=relative_path or None,
    )


def detect_python_stack(project_root: Path, relative_path: str = "") -> StackDefinition | None:
    stack_root = project_root / relative_path if relative_path else project_root
    pyproject = stack_root / "pyproject.toml"
    requirements = stack_root / "requirements.txt"
    if not pyproject.exists() and not requirements.exists():
        return None

    merged = f"{_read_lower(pyproject)}\n{_read_lower(requirements)}"
    frameworks = [label for keyword, label in PYTHON_FRAMEWORKS if keyword in merged]

    if "pyright" in merged:
        type_checker: str | None = "pyright"
    elif "mypy" in merged:
        type_checker = "mypy"
    else:
        type_checker = None

    return StackDefinition(
        name=_stack_name(relative_path),
        languages=("Python",),
        frameworks=tuple(frameworks) or ("Python",),
        test_runner="pytest" if "pytest" in merged else None,
        type_checker=type_checker,
        linter="ruff check ." if "ruff" in merged else None,
        path=relative_path or None,
    )


PROBES = (detect_node_stack, detect_python_stack)


def _candidate_roots(root: Path) -> list[str]:
    candidates = [""]
    try:
        entries = sorted(root.iterdir(), key=lambda entry: entry.name)
    except OSError as exc:
        logger.debug("Cannot list project root %s: %s", root, exc)
        return candidates

    for entry in entries:
        if entry.name.startswith(".") or entry.name in IGNORED_DIRS:
            continue
        try:
            if not entry.is_dir():
                continue
        except OSError:
            continue
        candidates.append(entry.name)
    return candidates


def dedupe_stacks(stacks: list[StackDefinition]) -> list[StackDefinition]:
    """Keep the first stack for each uniqueness key, preserving order."""
    seen: set[tuple[str, str, str]] = set()
    unique: list[StackDefinition] = []
    for stack in stacks:
        if stack.key in seen:
            logger.warning(
                "Dropping duplicate stack",
                extra={"stack_name": stack.name, "stack_path": stack.path or ""},
            )
            continue
        seen.add(stack.key)
        unique.append(stack)
    return unique


def detect_stacks(project_root: str | Path) -> list[StackDefinition]:
    """Infer technology stacks for a project; never returns an empty list."""
    root = Path(project_root).resolve()
    found: list[StackDefinition] = []
    for relative_path in _candidate_roots(root):
        for probe in PROBES:
            try:
                stack = probe(root, relative_path)
            except OSError as exc:
                logger.debug(
                    "Stack probe failed",
                    extra={"probe": probe.__name__, "stack_path": relative_path, "error": str(exc)},
                )
                continue
            if stack is not None:
                found.append(stack)

    stacks = dedupe_stacks(found)
    if not stacks:
        logger.info("No stacks detected; using fallback", extra={"project_path": str(root)})
        return [FALLBACK_STACK]

    logger.info(
        "Detected stacks",
        extra={"project_path": str(root), "stacks": [stack.name for stack in stacks]},
    )
    return stacks
