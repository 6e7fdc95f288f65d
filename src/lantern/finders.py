"""Finder specifications.

A finder is pure data describing how to locate nodes. Each variant carries a
`finder_type` tag; decoding and resolution both dispatch on that tag. On the
wire a finder is flattened into the command mapping, with nested finders
(`of`, `matching`) carried as JSON-encoded strings.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from lantern.json_types import WireMap
from lantern.runtime.json_io import dump_json_compact, load_json_object_text

FINDER_TYPE_KEY = "finderType"


def wire_bool(value: bool) -> str:
    return "true" if value else "false"


class SerializableFinder(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    finder_type: ClassVar[str] = ""

    def serialize(self) -> WireMap:
        return {FINDER_TYPE_KEY: self.finder_type}

    def describe(self) -> str:
        return self.finder_type


class ByValueKey(SerializableFinder):
    finder_type: ClassVar[str] = "ByValueKey"

    key_value_string: str = Field(alias="keyValueString")
    key_value_type: Literal["String", "int"] = Field(alias="keyValueType")

    @model_validator(mode="after")
    def _check_int_key(self) -> "ByValueKey":
        if self.key_value_type == "int":
            try:
                int(self.key_value_string)
            except ValueError as exc:
                raise ValueError(
                    f"keyValueString {self.key_value_string!r} is not an int"
                ) from exc
        return self

    @property
    def key(self) -> str | int:
        if self.key_value_type == "int":
            return int(self.key_value_string)
        return self.key_value_string

    def serialize(self) -> WireMap:
        return {
            **super().serialize(),
            "keyValueString": self.key_value_string,
            "keyValueType": self.key_value_type,
        }

    def describe(self) -> str:
        return f"ByValueKey({self.key!r})"


class ByText(SerializableFinder):
    finder_type: ClassVar[str] = "ByText"

    text: str

    def serialize(self) -> WireMap:
        return {**super().serialize(), "text": self.text}

    def describe(self) -> str:
        return f"ByText({self.text!r})"


class ByType(SerializableFinder):
    finder_type: ClassVar[str] = "ByType"

    type_name: str = Field(alias="type")

    def serialize(self) -> WireMap:
        return {**super().serialize(), "type": self.type_name}

    def describe(self) -> str:
        return f"ByType({self.type_name})"


class ByTooltipMessage(SerializableFinder):
    finder_type: ClassVar[str] = "ByTooltipMessage"

    text: str

    def serialize(self) -> WireMap:
        return {**super().serialize(), "text": self.text}

    def describe(self) -> str:
        return f"ByTooltipMessage({self.text!r})"


class BySemanticsLabel(SerializableFinder):
    finder_type: ClassVar[str] = "BySemanticsLabel"

    label: str
    is_regexp: bool = Field(default=False, alias="isRegExp")

    @model_validator(mode="after")
    def _check_pattern(self) -> "BySemanticsLabel":
        if self.is_regexp:
            try:
                re.compile(self.label)
            except re.error as exc:
                raise ValueError(f"invalid semantics label pattern: {exc}") from exc
        return self

    def label_matches(self, candidate: str | None) -> bool:
        if candidate is None:
            return False
        if self.is_regexp:
            return re.search(self.label, candidate) is not None
        return candidate == self.label

    def serialize(self) -> WireMap:
        payload = {**super().serialize(), "label": self.label}
        if self.is_regexp:
            payload["isRegExp"] = wire_bool(True)
        return payload

    def describe(self) -> str:
        suffix = ", regexp" if self.is_regexp else ""
        return f"BySemanticsLabel({self.label!r}{suffix})"


class _RelationalFinder(SerializableFinder):
    of: SerializableFinder
    matching: SerializableFinder
    match_root: bool = Field(default=False, alias="matchRoot")

    @field_validator("of", "matching", mode="before")
    @classmethod
    def _decode_nested(cls, value: object) -> SerializableFinder:
        return finder_from_wire(value)

    def serialize(self) -> WireMap:
        return {
            **super().serialize(),
            "of": dump_json_compact(self.of.serialize()),
            "matching": dump_json_compact(self.matching.serialize()),
            "matchRoot": wire_bool(self.match_root),
        }

    def describe(self) -> str:
        return (
            f"{self.finder_type}(of: {self.of.describe()}, "
            f"matching: {self.matching.describe()}, "
            f"matchRoot: {wire_bool(self.match_root)})"
        )


class Ancestor(_RelationalFinder):
    finder_type: ClassVar[str] = "Ancestor"


class Descendant(_RelationalFinder):
    finder_type: ClassVar[str] = "Descendant"


FINDER_MODELS: dict[str, type[SerializableFinder]] = {
    model.finder_type: model
    for model in (
        Ancestor,
        BySemanticsLabel,
        ByText,
        ByTooltipMessage,
        ByType,
        ByValueKey,
        Descendant,
    )
}


def finder_from_wire(raw: object) -> SerializableFinder:
    """Decode a finder from its flat wire mapping (or JSON text of one).

    Raises ValueError (pydantic's ValidationError included) on bad input.
    """
    if isinstance(raw, SerializableFinder):
        return raw
    if isinstance(raw, (str, bytes)):
        parsed = load_json_object_text(raw)
        if parsed is None:
            raise ValueError(f"nested finder is not a JSON object: {raw!r}")
        raw = parsed
    if not isinstance(raw, Mapping):
        raise ValueError(f"finder must be a mapping, got {type(raw).__name__}")
    tag = raw.get(FINDER_TYPE_KEY)
    if tag is None:
        raise ValueError(f"missing {FINDER_TYPE_KEY}")
    model = FINDER_MODELS.get(str(tag))
    if model is None:
        raise ValueError(f"Unsupported search specification type {tag}")
    return model.model_validate(raw)


def by_key(key: str | int) -> ByValueKey:
    if isinstance(key, bool) or not isinstance(key, (str, int)):
        raise TypeError(f"value keys must be str or int, got {type(key).__name__}")
    key_type = "int" if isinstance(key, int) else "String"
    return ByValueKey(key_value_string=str(key), key_value_type=key_type)


def by_text(text: str) -> ByText:
    return ByText(text=text)


def by_type(type_name: str) -> ByType:
    return ByType(type_name=type_name)


def by_tooltip(message: str) -> ByTooltipMessage:
    return ByTooltipMessage(text=message)


def by_semantics_label(label: str, *, is_regexp: bool = False) -> BySemanticsLabel:
    return BySemanticsLabel(label=label, is_regexp=is_regexp)


def ancestor(
    *, of: SerializableFinder, matching: SerializableFinder, match_root: bool = False
) -> Ancestor:
    return Ancestor(of=of, matching=matching, match_root=match_root)


def descendant(
    *, of: SerializableFinder, matching: SerializableFinder, match_root: bool = False
) -> Descendant:
    return Descendant(of=of, matching=matching, match_root=match_root)
