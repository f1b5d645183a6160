"""Build and run an Invocation described by a YAML recipe."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from core.execution import check, check_full_output, check_output, check_status
from core.invocation import Invocation
from core.transforms import escalate_as, escalate_root, redirect, run_on_remote
from utils.constants import CHECK_MODES, DEFAULT_CHECK_MODE, SHELL_BIN, SSH_BIN, SUDO_BIN

logger = logging.getLogger(__name__)

TRANSFORM_KINDS = ("escalate", "remote", "redirect")


@dataclass
class ToolConfig:
    sudo: str = SUDO_BIN
    ssh: str = SSH_BIN
    shell: str = SHELL_BIN

    @classmethod
    def from_config(cls, config: Optional[dict]) -> "ToolConfig":
        cfg = (config or {}).get("tools")
        cfg = cfg if isinstance(cfg, dict) else {}
        return cls(
            sudo=str(cfg.get("sudo", SUDO_BIN)).strip() or SUDO_BIN,
            ssh=str(cfg.get("ssh", SSH_BIN)).strip() or SSH_BIN,
            shell=str(cfg.get("shell", SHELL_BIN)).strip() or SHELL_BIN,
        )


def invocation_from_config(config: dict) -> Invocation:
    section = config.get("invocation")
    if not isinstance(section, dict):
        raise ValueError("invocation section is required")

    program = str(section.get("program") or "").strip()
    if not program:
        raise ValueError("invocation.program is required")

    raw_args = section.get("args", [])
    if raw_args is None:
        raw_args = []
    if not isinstance(raw_args, list):
        raise ValueError("invocation.args must be a list")

    invocation = Invocation(program=program, args=[str(a) for a in raw_args])

    cwd = section.get("cwd")
    if cwd is not None and str(cwd).strip():
        invocation.current_dir(str(Path(str(cwd)).expanduser()))

    raw_env = section.get("env", {})
    if raw_env is None:
        raw_env = {}
    if not isinstance(raw_env, dict):
        raise ValueError("invocation.env must be a mapping")
    for name, value in raw_env.items():
        if value is None:
            invocation.remove_env(str(name))
        else:
            invocation.set_env(str(name), str(value))
    return invocation


def _parse_transform(entry: Any) -> Tuple[str, Dict[str, Any]]:
    if isinstance(entry, str):
        return entry.strip().lower(), {}
    if isinstance(entry, dict) and len(entry) == 1:
        kind, options = next(iter(entry.items()))
        options = options if isinstance(options, dict) else {}
        return str(kind).strip().lower(), options
    raise ValueError(f"invalid transform entry: {entry!r}")


def _require_option(kind: str, options: Dict[str, Any], key: str) -> str:
    value = str(options.get(key) or "").strip()
    if not value:
        raise ValueError(f"transform {kind} requires '{key}'")
    return value


def apply_transforms(invocation: Invocation, transforms: Optional[List[Any]], tools: ToolConfig) -> Invocation:
    """Apply recipe transforms in order, each wrapping the previous result."""
    if transforms is None:
        return invocation
    if not isinstance(transforms, list):
        raise ValueError("transforms must be a list")

    current = invocation
    for entry in transforms:
        kind, options = _parse_transform(entry)
        if kind == "escalate":
            user = str(options.get("user") or "").strip()
            if user:
                current = escalate_as(current, user, sudo_bin=tools.sudo)
            else:
                current = escalate_root(current, sudo_bin=tools.sudo)
        elif kind == "remote":
            identity_file = Path(_require_option(kind, options, "identity_file")).expanduser()
            current = run_on_remote(
                current,
                _require_option(kind, options, "user"),
                _require_option(kind, options, "host"),
                str(identity_file),
                ssh_bin=tools.ssh,
            )
        elif kind == "redirect":
            path = Path(_require_option(kind, options, "path")).expanduser()
            current = redirect(current, str(path), shell_bin=tools.shell)
        else:
            raise ValueError(f"unknown transform '{kind}' (expected one of: {', '.join(TRANSFORM_KINDS)})")
        logger.debug("Applied transform %s", kind)
    return current


def resolve_check_mode(config: dict, override: Optional[str] = None) -> str:
    mode = str(override or config.get("check") or DEFAULT_CHECK_MODE).strip().lower()
    if mode not in CHECK_MODES:
        raise ValueError(f"check must be one of: {', '.join(CHECK_MODES)}")
    return mode


def build_recipe(config: dict) -> Invocation:
    tools = ToolConfig.from_config(config)
    return apply_transforms(invocation_from_config(config), config.get("transforms"), tools)


def run_recipe(config: dict, check_mode: Optional[str] = None) -> Tuple[str, Any]:
    """Build the recipe invocation and run it with the selected check.

    Returns ``(mode, result)`` where result is an ExitStatus (``check``), None
    (``status``), the decoded stdout (``output``) or an Outcome (``full``).
    """
    mode = resolve_check_mode(config, check_mode)
    invocation = build_recipe(config)
    if mode == "check":
        return mode, check(invocation)
    if mode == "status":
        return mode, check_status(invocation)
    if mode == "output":
        return mode, check_output(invocation)
    return mode, check_full_output(invocation)
