"""Error taxonomy for invocation checks and command-line composition."""

from __future__ import annotations

from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from core.execution import ExitStatus
    from core.invocation import CommandText


class CommandError(Exception):
    """Base class for every failure raised by this package."""


class ExecutionError(CommandError):
    """The OS could not start the process."""

    def __init__(self, program: str):
        self.program = str(program)
        super().__init__(f"Failed to execute `{self.program}`")


class StatusError(CommandError):
    """The process ran and exited with a non-success status."""

    def __init__(self, command: "CommandText", status: "ExitStatus"):
        self.command = command
        self.status = status
        super().__init__(f"Command `{command}` exited unsuccessfully ({status})")


class NonUtf8OutputError(CommandError):
    def __init__(self, command: "CommandText"):
        self.command = command
        super().__init__(f"Command `{command}` returned non-utf8 output")


class BoundaryTextViolation(CommandError):
    """A component cannot be carried as text into a composed shell command.

    Fatal: nothing in this package catches it, because the composed string is
    the only channel for that data.
    """

    def __init__(self, what: str, value: object):
        self.what = str(what)
        self.value = value
        super().__init__(f"Can't send {self.what} across the shell boundary as text: {value!r}")


CHECK_STATUS_ERRORS = (ExecutionError, StatusError)
CHECK_OUTPUT_ERRORS = (ExecutionError, StatusError, NonUtf8OutputError)

CheckStatusError = Union[ExecutionError, StatusError]
CheckOutputError = Union[ExecutionError, StatusError, NonUtf8OutputError]
