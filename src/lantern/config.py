from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from pathlib import Path
from typing import TypeAlias
import tomllib

DEFAULT_CONFIG_NAME = "lantern.toml"
DEFAULT_FRAME_INTERVAL_MS = 16

TomlScalar: TypeAlias = str | int | float | bool | None | date | datetime | time
TomlValue: TypeAlias = TomlScalar | list["TomlValue"] | dict[str, "TomlValue"]
TomlTable: TypeAlias = dict[str, TomlValue]


def _load_toml(path: Path) -> TomlTable:
    # A missing or unparsable file behaves like an empty one.
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeError, tomllib.TOMLDecodeError):
        return {}


def load_config(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    if config_path is None:
        base = root if root is not None else Path.cwd()
        config_path = base / DEFAULT_CONFIG_NAME
    return _load_toml(config_path)


def extension_defaults(
    root: Path | None = None, config_path: Path | None = None
) -> TomlTable:
    data = load_config(root=root, config_path=config_path)
    section = data.get("extension", {})
    return section if isinstance(section, dict) else {}


def _as_bool(value: TomlValue, *, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return default


def _as_optional_ms(value: TomlValue) -> int | None:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return None
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return None
    return parsed if parsed >= 0 else None


def merge_payload(payload: TomlTable, defaults: TomlTable) -> TomlTable:
    merged = dict(defaults)
    for key, value in payload.items():
        if value is None:
            continue
        merged[key] = value
    return merged


@dataclass(frozen=True)
class ExtensionConfig:
    frame_sync: bool = True
    silence_errors: bool = False
    default_timeout_ms: int | None = None
    frame_interval_ms: int = DEFAULT_FRAME_INTERVAL_MS

    @classmethod
    def from_table(cls, section: TomlTable | None) -> "ExtensionConfig":
        if not isinstance(section, dict):
            return cls()
        interval = _as_optional_ms(section.get("frame_interval_ms"))
        return cls(
            frame_sync=_as_bool(section.get("frame_sync"), default=True),
            silence_errors=_as_bool(section.get("silence_errors"), default=False),
            default_timeout_ms=_as_optional_ms(section.get("default_timeout_ms")),
            frame_interval_ms=interval or DEFAULT_FRAME_INTERVAL_MS,
        )

    @property
    def frame_interval_s(self) -> float:
        return self.frame_interval_ms / 1000.0


def load_extension_config(
    root: Path | None = None,
    config_path: Path | None = None,
    *,
    overrides: TomlTable | None = None,
) -> ExtensionConfig:
    section = extension_defaults(root=root, config_path=config_path)
    return ExtensionConfig.from_table(merge_payload(overrides or {}, section))
