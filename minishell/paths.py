"""Resolving command names against PATH."""

from __future__ import annotations

import os

from .environment import Environment
from .model import is_builtin


def get_path(env: Environment) -> list[str] | None:
    """Return the non-empty directories of PATH, or None if PATH is unset."""
    for entry in env.entries:
        if entry.startswith("PATH="):
            return [part for part in entry[len("PATH="):].split(":") if part]
    return None


def find_in_path(directories: list[str], name: str) -> str | None:
    """Return the first existing directory/name, or None."""
    if is_builtin(name):
        return None
    for directory in directories:
        candidate = f"{directory}/{name}"
        if os.access(candidate, os.F_OK):
            return candidate
    return None


def is_relative_or_absolute(name: str) -> bool:
    """Return True if *name* is written as a path rather than a bare name."""
    return name.startswith(("/", "./", "../", "~/"))


def resolve_command(name: str, env: Environment) -> str | None:
    """Return the path a command name refers to, or None if not found."""
    if is_builtin(name):
        return name
    if is_relative_or_absolute(name) and os.access(name, os.F_OK):
        return name
    directories = get_path(env)
    if directories is not None:
        return find_in_path(directories, name)
    if os.access(name, os.F_OK):
        return name
    return None