"""Core type definitions for sync-loop."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class Platform(str, Enum):
    """Assistant ecosystems that scaffolded files are generated for."""

    COPILOT = "copilot"
    CURSOR = "cursor"
    CLAUDE = "claude"
    CODEX = "codex"


ALL_PLATFORMS: tuple[Platform, ...] = tuple(Platform)

# A single platform id, the "all" sentinel, or an explicit list of ids.
InitTarget = Union[str, list[str]]


class WriteStatus(str, Enum):
    """Outcome of a single guarded file write."""

    SKIPPED = "skipped"
    WOULD_CREATE = "would-create"
    WOULD_OVERWRITE = "would-overwrite"
    CREATED = "created"
    OVERWRITTEN = "overwritten"


_OPTIONAL_FIELDS: tuple[tuple[str, str], ...] = (
    ("test_runner", "testRunner"),
    ("type_checker", "typeChecker"),
    ("linter", "linter"),
    ("package_manager", "packageManager"),
    ("path", "path"),
)


def _string_list(data: Mapping[str, Any], key: str, stack_name: str) -> tuple[str, ...]:
    raw = data.get(key)
    if raw is None:
        return ()
    if not isinstance(raw, (list, tuple)):
        raise ValueError(f"Stack '{stack_name}': {key} must be a list of strings")
    return tuple(str(item) for item in raw)


@dataclass(frozen=True)
class StackDefinition:
    """One detected or declared technology unit.

    ``path`` is the stack root relative to the project root; ``None`` means
    the project root itself.
    """

    name: str
    languages: tuple[str, ...]
    frameworks: tuple[str, ...] = ()
    test_runner: str | None = None
    type_checker: str | None = None
    linter: str | None = None
    package_manager: str | None = None
    path: str | None = None

    @property
    def key(self) -> tuple[str, str, str]:
        """Uniqueness key used to collapse duplicate detections."""
        return (self.name, self.path or "", ",".join(self.languages))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase shape used by tool inputs and outputs."""
        data: dict[str, Any] = {
            "name": self.name,
            "languages": list(self.languages),
            "frameworks": list(self.frameworks),
        }
        for attr, key in _OPTIONAL_FIELDS:
            value = getattr(self, attr)
            if value:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StackDefinition:
        """Build from a camelCase or snake_case mapping."""
        name = str(data.get("name") or "").strip()
        if not name:
            raise ValueError("Stack definition requires a non-empty name")

        languages = _string_list(data, "languages", name)
        if not languages:
            raise ValueError(f"Stack '{name}' requires at least one language")

        frameworks = _string_list(data, "frameworks", name)
        optional: dict[str, str | None] = {}
        for attr, key in _OPTIONAL_FIELDS:
            raw = data.get(key, data.get(attr))
            optional[attr] = str(raw) if raw else None

        return cls(name=name, languages=languages, frameworks=frameworks, **optional)


@dataclass(frozen=True)
class WriteResult:
    """Outcome of one Output Writer call."""

    path: str
    status: WriteStatus


@dataclass(frozen=True)
class InitOptions:
    """Write policy shared by every step of one init run."""

    dry_run: bool = False
    overwrite: bool = True


@dataclass(frozen=True)
class InitResult:
    """Aggregate return value of one orchestration run."""

    project_path: str
    target: InitTarget
    dry_run: bool
    overwrite: bool
    stacks: tuple[StackDefinition, ...] = ()
    results: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "projectPath": self.project_path,
            "target": self.target,
            "dryRun": self.dry_run,
            "overwrite": self.overwrite,
            "stacks": [stack.to_dict() for stack in self.stacks],
            "results": list(self.results),
        }
