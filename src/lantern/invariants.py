"""Invariant markers."""

from __future__ import annotations

from typing import NoReturn, TypeVar

from lantern.exceptions import NeverThrown

T = TypeVar("T")


def _format_env(env: dict[str, object]) -> str:
    if not env:
        return ""
    parts = ", ".join(f"{key}={env[key]!r}" for key in sorted(env))
    return f" ({parts})"


def never(reason: str = "", **env: object) -> NoReturn:
    """Mark a code path as intentionally unreachable.

    The optional env payload is attached to the exception and rendered into
    its message for diagnostics.
    """
    message = (reason or "never() marker reached") + _format_env(env)
    raise NeverThrown(message, env=env)


def require_not_none(value: T | None, *, reason: str = "", **env: object) -> T:
    if value is None:
        never(reason or "required value is None", **env)
    return value
