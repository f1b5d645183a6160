"""Shell-safe quoting of single tokens and token lists."""

from __future__ import annotations

import shlex
from typing import Iterable

from utils.constants import ASSIGNMENT_WORD_RE, SHELL_RESERVED_WORDS


def escape(token: str) -> str:
    """Quote ``token`` so a POSIX shell parses it back as exactly one word.

    The empty string becomes ``''``; tokens made of safe characters only are
    returned unchanged; anything else is single-quoted.
    """
    return shlex.quote(token)


def escape_command_name(token: str) -> str:
    """Like escape(), for the word in command position.

    A bare ``NAME=value`` or reserved word there would be read as an
    assignment or as shell syntax instead of the program to run.
    """
    quoted = escape(token)
    if quoted == token and (ASSIGNMENT_WORD_RE.match(token) or token in SHELL_RESERVED_WORDS):
        # unchanged by shlex means safe characters only, so no embedded quotes
        return f"'{token}'"
    return quoted


def join(tokens: Iterable[str]) -> str:
    return " ".join(escape(t) for t in tokens)
