"""Configuration management for sync-loop."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from sync_loop.scaffold import VALID_TARGETS, parse_target, resolve_platforms
from sync_loop.types import InitTarget

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


def _env_bool(name: str, *, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ValueError(f"{name} must be one of: {', '.join(_TRUTHY + _FALSY)}")


@dataclass(frozen=True)
class SyncLoopConfig:
    """Immutable defaults loaded from environment variables.

    Environment variables:
        SYNC_LOOP_TARGET: Default target selector (default: "all")
        SYNC_LOOP_OVERWRITE: Overwrite generated files by default (default: true)
        SYNC_LOOP_PROJECT_DIR: Default project root for the server tool (optional)
    """

    target: InitTarget
    overwrite: bool
    project_dir: Path | None

    @classmethod
    def from_env(cls) -> SyncLoopConfig:
        """Construct SyncLoopConfig from environment variables."""
        raw_target = os.environ.get("SYNC_LOOP_TARGET", "").strip() or "all"
        target = parse_target(raw_target)
        try:
            resolve_platforms(target)
        except ValueError:
            raise ValueError(
                f"Invalid SYNC_LOOP_TARGET: '{raw_target}'. "
                f"Must be one of: {', '.join(VALID_TARGETS)}."
            ) from None

        overwrite = _env_bool("SYNC_LOOP_OVERWRITE", default=True)

        project_dir_raw = os.environ.get("SYNC_LOOP_PROJECT_DIR", "").strip()
        project_dir = Path(project_dir_raw) if project_dir_raw else None

        return cls(target=target, overwrite=overwrite, project_dir=project_dir)
