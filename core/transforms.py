"""Invocation rewriters: sudo, ssh and shell redirection wrappers.

Each function returns a new Invocation and leaves its input untouched, so the
wrappers compose (e.g. ``redirect(escalate_root(inv), path)``).
"""

from __future__ import annotations

import ipaddress
import logging
from typing import Union

from core.commandline import build_commandline
from core.escape import escape
from core.invocation import Component, CommandText, Invocation, require_text
from utils.constants import (
    REDIRECT_OPERATOR,
    SHELL_BIN,
    SHELL_COMMAND_FLAG,
    SSH_BIN,
    SSH_IDENTITY_FLAG,
    SUDO_BIN,
    SUDO_USER_FLAG,
)

logger = logging.getLogger(__name__)


def _escalated(invocation: Invocation, sudo_bin: str, selector: list) -> Invocation:
    # sudo gets argv natively, so nothing is quoted; cwd and env carry over as-is.
    new = Invocation(
        program=sudo_bin,
        args=[*selector, invocation.program, *invocation.args],
        cwd=invocation.cwd,
        env=dict(invocation.env),
    )
    logger.debug("Escalated `%s`", CommandText.from_invocation(new))
    return new


def escalate_root(invocation: Invocation, *, sudo_bin: str = SUDO_BIN) -> Invocation:
    return _escalated(invocation, sudo_bin, [])


def escalate_as(invocation: Invocation, user: str, *, sudo_bin: str = SUDO_BIN) -> Invocation:
    """Run ``invocation`` as ``user`` through ``sudo -u``."""
    user = str(user or "").strip()
    if not user:
        raise ValueError("user must be a non-empty name")
    return _escalated(invocation, sudo_bin, [SUDO_USER_FLAG, user])


def run_on_remote(
    invocation: Invocation,
    user: str,
    host: Union[ipaddress.IPv4Address, str],
    identity_file: Component,
    *,
    ssh_bin: str = SSH_BIN,
) -> Invocation:
    """Flatten ``invocation`` into one command string executed over ssh.

    Program, args, cwd and env all travel inside that string, since only the
    remote shell can apply them.
    """
    address = host if isinstance(host, ipaddress.IPv4Address) else ipaddress.IPv4Address(str(host).strip())
    command = build_commandline(invocation)
    new = Invocation(
        program=ssh_bin,
        args=[SSH_IDENTITY_FLAG, identity_file, f"{user}@{address}", command],
    )
    logger.debug("Remote command for %s@%s: %s", user, address, command)
    return new


def redirect(invocation: Invocation, destination: Component, *, shell_bin: str = SHELL_BIN) -> Invocation:
    """Run ``invocation`` under a shell with stdout written to ``destination``."""
    target = escape(require_text(destination, "redirect destination"))
    command = f"{build_commandline(invocation)} {REDIRECT_OPERATOR}{target}"
    new = Invocation(program=shell_bin, args=[SHELL_COMMAND_FLAG, command])
    logger.debug("Redirected command: %s", command)
    return new
