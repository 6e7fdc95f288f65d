from __future__ import annotations

from typing import ClassVar, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from lantern.commands import command_ids
from lantern.finders import SerializableFinder, finder_from_wire, wire_bool
from lantern.json_types import JSONObject, WireMap
from lantern.tree import OffsetType

COMMAND_KEY = "command"

DiagnosticsType = Literal["widget", "renderObject"]


class Command(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    kind: ClassVar[str] = ""

    def serialize(self) -> WireMap:
        return {COMMAND_KEY: self.kind}


class CommandWithTimeout(Command):
    timeout_ms: int | None = Field(default=None, alias="timeout", ge=0)

    def serialize(self) -> WireMap:
        payload = super().serialize()
        if self.timeout_ms is not None:
            payload["timeout"] = str(self.timeout_ms)
        return payload


class FinderCommand(CommandWithTimeout):
    finder: SerializableFinder

    @field_validator("finder", mode="before")
    @classmethod
    def _decode_finder(cls, value: object) -> SerializableFinder:
        return finder_from_wire(value)

    def serialize(self) -> WireMap:
        return {**super().serialize(), **self.finder.serialize()}


class WaitUntilNoTransientCallbacks(Command):
    kind: ClassVar[str] = command_ids.WAIT_UNTIL_NO_TRANSIENT_CALLBACKS_COMMAND


class WaitUntilFrameSync(Command):
    kind: ClassVar[str] = command_ids.WAIT_UNTIL_FRAME_SYNC_COMMAND


class GetHealth(Command):
    kind: ClassVar[str] = command_ids.GET_HEALTH_COMMAND


class GetRenderTree(Command):
    kind: ClassVar[str] = command_ids.GET_RENDER_TREE_COMMAND


class RequestData(Command):
    kind: ClassVar[str] = command_ids.REQUEST_DATA_COMMAND

    message: str

    def serialize(self) -> WireMap:
        return {**super().serialize(), "message": self.message}


class SetFrameSync(Command):
    kind: ClassVar[str] = command_ids.SET_FRAME_SYNC_COMMAND

    enabled: bool

    def serialize(self) -> WireMap:
        return {**super().serialize(), "enabled": wire_bool(self.enabled)}


class GetSemanticsId(FinderCommand):
    kind: ClassVar[str] = command_ids.GET_SEMANTICS_ID_COMMAND


class GetText(FinderCommand):
    kind: ClassVar[str] = command_ids.GET_TEXT_COMMAND


class WaitFor(FinderCommand):
    kind: ClassVar[str] = command_ids.WAIT_FOR_COMMAND


class WaitForAbsent(FinderCommand):
    kind: ClassVar[str] = command_ids.WAIT_FOR_ABSENT_COMMAND


class GetOffset(FinderCommand):
    kind: ClassVar[str] = command_ids.GET_OFFSET_COMMAND

    offset_type: OffsetType = Field(alias="offsetType")

    def serialize(self) -> WireMap:
        return {**super().serialize(), "offsetType": self.offset_type}


class GetDiagnosticsTree(FinderCommand):
    kind: ClassVar[str] = command_ids.GET_DIAGNOSTICS_TREE_COMMAND

    tree_type: DiagnosticsType = Field(
        validation_alias=AliasChoices("treeType", "diagnosticsType", "tree_type"),
    )
    subtree_depth: int = Field(default=0, ge=0, alias="subtreeDepth")
    include_properties: bool = Field(default=True, alias="includeProperties")

    def serialize(self) -> WireMap:
        return {
            **super().serialize(),
            "treeType": self.tree_type,
            "subtreeDepth": str(self.subtree_depth),
            "includeProperties": wire_bool(self.include_properties),
        }


COMMAND_MODELS: dict[str, type[Command]] = {
    model.kind: model
    for model in (
        GetDiagnosticsTree,
        GetHealth,
        GetOffset,
        GetRenderTree,
        GetSemanticsId,
        GetText,
        RequestData,
        SetFrameSync,
        WaitFor,
        WaitForAbsent,
        WaitUntilFrameSync,
        WaitUntilNoTransientCallbacks,
    )
}


class CommandResult(BaseModel):
    def to_payload(self) -> JSONObject:
        return self.model_dump()


class GetSemanticsIdResult(CommandResult):
    id: int


class GetOffsetResult(CommandResult):
    dx: float
    dy: float


class GetTextResult(CommandResult):
    text: str


class RequestDataResult(CommandResult):
    message: str


class HealthResult(CommandResult):
    status: Literal["ok", "bad"] = "ok"


class RenderTreeResult(CommandResult):
    tree: str
