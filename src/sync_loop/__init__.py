"""sync-loop: scaffold the SyncLoop agent reasoning protocol into projects."""

from sync_loop.detect import detect_stacks
from sync_loop.scaffold import InvalidTargetError, init, parse_target
from sync_loop.types import InitOptions, InitResult, Platform, StackDefinition

__version__ = "0.1.0"

__all__ = [
    "InitOptions",
    "InitResult",
    "InvalidTargetError",
    "Platform",
    "StackDefinition",
    "detect_stacks",
    "init",
    "parse_target",
]
