"""Synchronous execution of an Invocation with typed outcome classification."""

from __future__ import annotations

import logging
import os
import subprocess
from dataclasses import dataclass
from functools import cached_property
from signal import Signals
from typing import Dict, Mapping, Optional

from core.errors import ExecutionError, NonUtf8OutputError, StatusError
from core.invocation import CommandText, Invocation, lossy_text, normalized_env

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExitStatus:
    """Exit code, or the terminating signal when the child was killed."""

    code: Optional[int] = None
    signal: Optional[int] = None

    @classmethod
    def from_returncode(cls, returncode: int) -> "ExitStatus":
        # subprocess reports death-by-signal as a negative return code.
        if returncode < 0:
            return cls(signal=-returncode)
        return cls(code=returncode)

    @property
    def success(self) -> bool:
        return self.code == 0

    def __str__(self) -> str:
        if self.signal is not None:
            try:
                name = Signals(self.signal).name
            except ValueError:
                return f"signal: {self.signal}"
            return f"signal: {self.signal} ({name})"
        return f"exit status: {self.code}"


@dataclass(frozen=True)
class Outcome:
    """Captured result of a finished process. Decoding happens on access."""

    command: CommandText
    status: ExitStatus
    stdout_bytes: bytes
    stderr_bytes: bytes

    @property
    def success(self) -> bool:
        return self.status.success

    def _decode(self, data: bytes) -> str:
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise NonUtf8OutputError(self.command) from exc

    @cached_property
    def stdout(self) -> str:
        return self._decode(self.stdout_bytes)

    @cached_property
    def stderr(self) -> str:
        return self._decode(self.stderr_bytes)

    @property
    def stdout_lossy(self) -> str:
        return self.stdout_bytes.decode("utf-8", errors="replace")

    @property
    def stderr_lossy(self) -> str:
        return self.stderr_bytes.decode("utf-8", errors="replace")

    def check_status(self) -> "Outcome":
        if not self.status.success:
            raise StatusError(self.command, self.status)
        return self


def child_env(invocation: Invocation, base: Optional[Mapping[str, str]] = None) -> Optional[Dict[str, str]]:
    """Parent environment with the invocation's delta applied.

    Returns None when there is no delta so the child simply inherits.
    """
    if not invocation.env:
        return None
    env = dict(os.environ if base is None else base)
    for name, raw_value in normalized_env(invocation.env).items():
        if raw_value is None:
            env.pop(name, None)
        else:
            env[name] = os.fsdecode(raw_value)
    return env


def _run(invocation: Invocation, *, capture: bool) -> subprocess.CompletedProcess:
    logger.debug("Executing `%s`", CommandText.from_invocation(invocation))
    streams = {}
    if capture:
        streams = {"stdin": subprocess.DEVNULL, "stdout": subprocess.PIPE, "stderr": subprocess.PIPE}
    try:
        return subprocess.run(
            invocation.argv(),
            cwd=invocation.cwd,
            env=child_env(invocation),
            check=False,
            **streams,
        )
    except (OSError, ValueError) as exc:
        # ValueError: embedded NUL in argv/env, rejected before exec.
        program = lossy_text(invocation.program)
        logger.warning("Failed to execute `%s`: %s", program, exc)
        raise ExecutionError(program) from exc


def _status_error(invocation: Invocation, status: ExitStatus) -> StatusError:
    err = StatusError(CommandText.from_invocation(invocation), status)
    logger.warning("%s", err)
    return err


def check(invocation: Invocation) -> ExitStatus:
    """Run with inherited stdio and return the exit status."""
    completed = _run(invocation, capture=False)
    return ExitStatus.from_returncode(completed.returncode)


def check_status(invocation: Invocation) -> None:
    status = check(invocation)
    if not status.success:
        raise _status_error(invocation, status)


def check_output(invocation: Invocation) -> str:
    """Run, capture output and return stdout decoded as UTF-8, untrimmed.

    On a failed status the captured stderr goes to the log before the
    StatusError is raised.
    """
    completed = _run(invocation, capture=True)
    status = ExitStatus.from_returncode(completed.returncode)
    if not status.success:
        stderr = (completed.stderr or b"").decode("utf-8", errors="replace")
        logger.warning("stderr of `%s`:\n%s", lossy_text(invocation.program), stderr)
        raise _status_error(invocation, status)
    try:
        return (completed.stdout or b"").decode("utf-8")
    except UnicodeDecodeError as exc:
        raise NonUtf8OutputError(CommandText.from_invocation(invocation)) from exc


def check_full_output(invocation: Invocation) -> Outcome:
    """Run, capture everything, and return it without judging the status."""
    completed = _run(invocation, capture=True)
    return Outcome(
        command=CommandText.from_invocation(invocation),
        status=ExitStatus.from_returncode(completed.returncode),
        stdout_bytes=completed.stdout or b"",
        stderr_bytes=completed.stderr or b"",
    )
