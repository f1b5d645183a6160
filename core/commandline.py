"""Render an Invocation as a single command string for a secondary shell."""

from __future__ import annotations

from typing import List

from core.errors import BoundaryTextViolation
from core.escape import escape, escape_command_name, join
from core.invocation import EnvName, Invocation, decompose, require_text
from utils.constants import ENV_NAME_RE


def _env_name(name: EnvName) -> str:
    text = require_text(name, "environment name")
    if not ENV_NAME_RE.fullmatch(text):
        raise BoundaryTextViolation("environment name", name)
    return text


def build_commandline(invocation: Invocation) -> str:
    """Compose env exports, env unsets, a ``cd`` and the escaped argv.

    Raises BoundaryTextViolation when any component is not valid text.
    """
    parts = decompose(invocation)

    exports = sorted(
        (_env_name(name), escape(require_text(value, "environment value")))
        for name, value in parts.env.to_set.items()
    )
    unsets = sorted(_env_name(name) for name in parts.env.to_unset)

    segments: List[str] = []
    if exports:
        segments.append(" ".join(f"export {name}={value};" for name, value in exports))
    if unsets:
        segments.append(" ".join(f"unset {name};" for name in unsets))
    if parts.cwd is not None:
        segments.append(f"cd {escape(require_text(parts.cwd, 'working directory'))};")

    exec_part = escape_command_name(require_text(parts.program, "program"))
    if parts.args:
        exec_part = f"{exec_part} {join(require_text(a, 'argument') for a in parts.args)}"
    segments.append(exec_part)
    return " ".join(segments)
