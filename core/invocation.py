"""Structured process invocation and its decomposition."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple, Union

from core.errors import BoundaryTextViolation

Component = Union[str, bytes, "os.PathLike[str]", "os.PathLike[bytes]"]
EnvName = Union[str, bytes]


@dataclass
class Invocation:
    """A program to run: argv, optional working directory and env changes.

    ``env`` maps a variable name to the value to set, or to ``None`` when the
    variable must be removed from the child environment.
    """

    program: Component
    args: List[Component] = field(default_factory=list)
    cwd: Optional[Component] = None
    env: Dict[str, Optional[Component]] = field(default_factory=dict)

    def __post_init__(self):
        self.env = normalized_env(self.env)

    def arg(self, value: Component) -> "Invocation":
        self.args.append(value)
        return self

    def add_args(self, values: Iterable[Component]) -> "Invocation":
        self.args.extend(values)
        return self

    def current_dir(self, path: Component) -> "Invocation":
        self.cwd = path
        return self

    def set_env(self, name: EnvName, value: Component) -> "Invocation":
        name = os.fsdecode(name)
        self.env.pop(name, None)
        self.env[name] = value
        return self

    def set_envs(self, values: Mapping[EnvName, Component]) -> "Invocation":
        for name, value in values.items():
            self.set_env(name, value)
        return self

    def remove_env(self, name: EnvName) -> "Invocation":
        name = os.fsdecode(name)
        self.env.pop(name, None)
        self.env[name] = None
        return self

    def copy(self) -> "Invocation":
        return Invocation(
            program=self.program,
            args=list(self.args),
            cwd=self.cwd,
            env=dict(self.env),
        )

    def argv(self) -> List[Component]:
        return [self.program, *self.args]


def normalized_env(env: Mapping[EnvName, Optional[Component]]) -> Dict[str, Optional[Component]]:
    """Key env changes by their ``os.fsdecode`` name; a later entry for the same name wins."""
    out: Dict[str, Optional[Component]] = {}
    for raw_name, value in env.items():
        name = os.fsdecode(raw_name)
        out.pop(name, None)
        out[name] = value
    return out


@dataclass(frozen=True)
class EnvDelta:
    to_set: Dict[str, Component]
    to_unset: Set[str]


@dataclass(frozen=True)
class Decomposed:
    program: Component
    args: Tuple[Component, ...]
    cwd: Optional[Component]
    env: EnvDelta


def decompose(invocation: Invocation) -> Decomposed:
    """Split an invocation into program, args, cwd and the partitioned env delta."""
    to_set: Dict[str, Component] = {}
    to_unset: Set[str] = set()
    for name, value in normalized_env(invocation.env).items():
        if value is None:
            to_unset.add(name)
        else:
            to_set[name] = value
    return Decomposed(
        program=invocation.program,
        args=tuple(invocation.args),
        cwd=invocation.cwd,
        env=EnvDelta(to_set=to_set, to_unset=to_unset),
    )


def lossy_text(value: Component) -> str:
    """Render any component as text, replacing undecodable bytes."""
    raw = os.fspath(value)
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    try:
        encoded = raw.encode("utf-8", errors="surrogateescape")
    except UnicodeEncodeError:
        encoded = raw.encode("utf-8", errors="replace")
    return encoded.decode("utf-8", errors="replace")


def require_text(value: Component, what: str) -> str:
    """Return ``value`` as valid UTF-8 text or raise BoundaryTextViolation.

    Strings carrying lone surrogates (``os.fsdecode`` of undecodable bytes) and
    NUL characters count as non-text: a shell string cannot hold them.
    """
    raw = os.fspath(value)
    if isinstance(raw, bytes):
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise BoundaryTextViolation(what, value) from exc
    else:
        try:
            raw.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise BoundaryTextViolation(what, value) from exc
        text = raw
    if "\x00" in text:
        raise BoundaryTextViolation(what, value)
    return text


@dataclass(frozen=True)
class CommandText:
    """Detached copy of an invocation's program and args, for messages only."""

    program: str
    args: Tuple[str, ...] = ()

    @classmethod
    def from_invocation(cls, invocation: Invocation) -> "CommandText":
        return cls(
            program=lossy_text(invocation.program),
            args=tuple(lossy_text(a) for a in invocation.args),
        )

    def __str__(self) -> str:
        if not self.args:
            return self.program
        return f"{self.program} {' '.join(self.args)}"
