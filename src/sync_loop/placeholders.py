"""Stack-aware placeholder substitution for template documents.

Templates carry bracketed tokens such as ``{test command}`` plus a stack
summary table. Substitution is a single pass: the table first, then the
tokens, so a token value can never be mistaken for table text.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from sync_loop.types import StackDefinition

COMMAND_SEPARATOR = " && "

TYPECHECK_PLACEHOLDER = "{typecheck command}"
LINT_PLACEHOLDER = "{lint command}"
TEST_PLACEHOLDER = "{test command}"
TARGETED_TEST_PLACEHOLDER = "{targeted test command}"
INSTALL_PLACEHOLDER = "{install command}"

TABLE_HEADER = "| Stack | Languages | Frameworks |\n|-------|-----------|------------|"

_LEGACY_TABLE_RE = re.compile(
    r"\| Layer \| Stack \|\r?\n"
    r"\|[-|]+\|\r?\n"
    r"\| Backend \|[^\r\n]*\|\r?\n"
    r"\| Frontend \|[^\r\n]*\|\r?\n"
    r"\| Infra \|[^\r\n]*\|"
)
_GENERATED_TABLE_RE = re.compile(
    r"\| Stack \| Languages \| Frameworks \|\r?\n"
    r"\|[-|]+\|"
    r"(?:\r?\n\|[^\r\n]*\|)+"
)


def render_stack_table(stacks: Sequence[StackDefinition]) -> str:
    rows = []
    for stack in stacks:
        label = f"{stack.name} (`{stack.path}`)" if stack.path else stack.name
        rows.append(
            f"| {label} | {', '.join(stack.languages)} | {', '.join(stack.frameworks)} |"
        )
    return TABLE_HEADER + "\n" + "\n".join(rows)


def _present(values: Sequence[str | None]) -> list[str]:
    return [value for value in values if value]


def build_replacements(stacks: Sequence[StackDefinition]) -> dict[str, str]:
    """Token -> value for every placeholder that has contributing data."""
    test_runners = _present([stack.test_runner for stack in stacks])
    type_checkers = _present([stack.type_checker for stack in stacks])
    linters = _present([stack.linter for stack in stacks])
    package_managers = list(dict.fromkeys(_present([stack.package_manager for stack in stacks])))

    replacements: dict[str, str] = {}
    if type_checkers:
        replacements[TYPECHECK_PLACEHOLDER] = COMMAND_SEPARATOR.join(type_checkers)
    if linters:
        replacements[LINT_PLACEHOLDER] = COMMAND_SEPARATOR.join(linters)
    if test_runners:
        replacements[TEST_PLACEHOLDER] = COMMAND_SEPARATOR.join(test_runners)
        replacements[TARGETED_TEST_PLACEHOLDER] = f"{test_runners[0]} {{path}}"
    if package_managers:
        replacements[INSTALL_PLACEHOLDER] = COMMAND_SEPARATOR.join(
            f"{manager} install" for manager in package_managers
        )
    return replacements


def apply_stacks(text: str, stacks: Sequence[StackDefinition]) -> str:
    """Substitute the stack table and command placeholders.

    Returns ``text`` itself when ``stacks`` is empty. Placeholders without
    contributing data are left in place.
    """
    if not stacks:
        return text

    table = render_stack_table(stacks)
    # Callable replacement keeps backslashes in stack names literal.
    result = _LEGACY_TABLE_RE.sub(lambda _match: table, text, count=1)
    result = _GENERATED_TABLE_RE.sub(lambda _match: table, result, count=1)

    for placeholder, value in build_replacements(stacks).items():
        result = result.replace(placeholder, value)
    return result


def format_stacks(stacks: Sequence[StackDefinition]) -> str:
    """Markdown summary of stacks, one ``###`` section per stack."""
    sections = []
    for stack in stacks:
        heading = f"\n### {stack.name} ({stack.path})" if stack.path else f"\n### {stack.name}"
        lines = [
            heading,
            f"- Languages: {', '.join(stack.languages)}",
            f"- Frameworks: {', '.join(stack.frameworks)}",
        ]
        if stack.test_runner:
            lines.append(f"- Test runner: {stack.test_runner}")
        if stack.type_checker:
            lines.append(f"- Type checker: {stack.type_checker}")
        if stack.linter:
            lines.append(f"- Linter: {stack.linter}")
        if stack.package_manager:
            lines.append(f"- Package manager: {stack.package_manager}")
        sections.append("\n".join(lines))
    return "\n".join(sections)
