"""Global fixtures for the command-ext test suite."""

import shutil
import subprocess
import sys
from typing import List

import pytest

from core.invocation import Invocation


requires_sh = pytest.mark.skipif(shutil.which("sh") is None, reason="POSIX sh not available")
requires_bash = pytest.mark.skipif(shutil.which("bash") is None, reason="bash not available")


def shell_words(words_source: str) -> List[str]:
    """Let a real /bin/sh word-split ``words_source`` and report the words."""
    completed = subprocess.run(
        ["sh", "-c", f"printf '%s\\036' {words_source}"],
        capture_output=True,
        check=True,
    )
    return completed.stdout.decode("utf-8").split("\x1e")[:-1]


def python_invocation(code: str, *args: str) -> Invocation:
    """Invocation running a small Python snippet, portable across platforms."""
    return Invocation(program=sys.executable, args=["-c", code, *args])


@pytest.fixture
def py():
    return python_invocation
