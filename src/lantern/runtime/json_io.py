from __future__ import annotations

import json
from pathlib import Path
from typing import Mapping


def load_json_object_path(path: Path, *, encoding: str = "utf-8") -> dict[str, object]:
    """Read `path` as a JSON object; {} when it cannot be read as one."""
    try:
        text = path.read_text(encoding=encoding)
    except (OSError, UnicodeError):
        return {}
    return load_json_object_text(text) or {}


def load_json_object_text(text: str | bytes) -> dict[str, object] | None:
    """Parse `text` as a JSON object; None when it is not one."""
    try:
        payload = json.loads(text)
    except (TypeError, ValueError, UnicodeError):
        return None
    if not isinstance(payload, Mapping):
        return None
    return dict(payload)


def dump_json_pretty(payload: object) -> str:
    return json.dumps(payload, indent=2, sort_keys=False)


def dump_json_compact(payload: object) -> str:
    # Nested finders travel as JSON strings; keep them byte-stable.
    return json.dumps(payload, separators=(",", ":"), sort_keys=True)
