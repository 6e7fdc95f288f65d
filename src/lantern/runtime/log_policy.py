from __future__ import annotations

import logging
import os
import sys

LOG_LEVEL_ENV = "LANTERN_LOG_LEVEL"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def resolve_level(value: str | int | None) -> int:
    if value is None:
        value = os.environ.get(LOG_LEVEL_ENV)
    if value is None or value == "":
        return logging.WARNING
    if isinstance(value, int):
        return value
    try:
        return int(value)
    except (TypeError, ValueError):
        pass
    return logging.getLevelNamesMapping().get(value.strip().upper(), logging.WARNING)


def configure_logging(level: str | int | None = None, *, force: bool = False) -> None:
    """Send log records to stderr so stdout stays machine readable."""
    logging.basicConfig(
        level=resolve_level(level),
        format=_LOG_FORMAT,
        stream=sys.stderr,
        force=force,
    )
