from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from lantern.diagnostics import render_tree_text, serialize_payload
from lantern.exceptions import (
    ElementStillPresent,
    MissingSemantics,
    NoMatchingElement,
    UnsupportedElement,
)
from lantern.invariants import never
from lantern.json_types import JSONValue
from lantern.schema import (
    Command,
    GetDiagnosticsTree,
    GetOffset,
    GetOffsetResult,
    GetSemanticsId,
    GetSemanticsIdResult,
    GetText,
    GetTextResult,
    HealthResult,
    RenderTreeResult,
    RequestData,
    RequestDataResult,
    SetFrameSync,
    WaitFor,
    WaitForAbsent,
)

if TYPE_CHECKING:
    from lantern.extension import DriverExtension

_C = TypeVar("_C", bound=Command)


def _expect(command: Command, model: type[_C]) -> _C:
    if not isinstance(command, model):
        never(
            "handler received the wrong command model",
            expected=model.__name__,
            actual=type(command).__name__,
        )
    return command


async def wait_until_no_transient_callbacks(
    extension: DriverExtension, command: Command
) -> JSONValue:
    await extension.synchronizer.wait_until_no_transient_callbacks()
    return None


async def wait_until_frame_sync(extension: DriverExtension, command: Command) -> JSONValue:
    await extension.synchronizer.wait_until_idle()
    return None


async def request_data(extension: DriverExtension, command: Command) -> JSONValue:
    request = _expect(command, RequestData)
    message = await extension.request_data(request.message)
    return RequestDataResult(message=message).to_payload()


async def get_semantics_id(extension: DriverExtension, command: Command) -> JSONValue:
    request = _expect(command, GetSemanticsId)
    node = await extension.find_single(request)
    if extension.tree.semantics_enabled:
        # The id belongs to the nearest node that owns semantics.
        current = node
        while current is not None:
            if current.semantics_id is not None:
                return GetSemanticsIdResult(id=current.semantics_id).to_payload()
            current = extension.tree.parent(current)
    raise MissingSemantics(request.finder.describe())


async def get_offset(extension: DriverExtension, command: Command) -> JSONValue:
    request = _expect(command, GetOffset)
    node = await extension.find_single(request)
    if node.rect is None:
        raise UnsupportedElement(
            f"{node.diagnostics_description()} has not been laid out"
        )
    dx, dy = node.rect.offset(request.offset_type)
    return GetOffsetResult(dx=dx, dy=dy).to_payload()


async def get_text(extension: DriverExtension, command: Command) -> JSONValue:
    request = _expect(command, GetText)
    node = await extension.find_single(request)
    if node.text is None:
        raise UnsupportedElement(
            f"Unsupported element type: {node.type_name} does not hold text"
        )
    return GetTextResult(text=node.text).to_payload()


async def get_diagnostics_tree(extension: DriverExtension, command: Command) -> JSONValue:
    request = _expect(command, GetDiagnosticsTree)
    node = await extension.find_single(request)
    return serialize_payload(
        node,
        request.tree_type,
        request.subtree_depth,
        request.include_properties,
    )


async def get_health(extension: DriverExtension, command: Command) -> JSONValue:
    return HealthResult().to_payload()


async def get_render_tree(extension: DriverExtension, command: Command) -> JSONValue:
    root = extension.tree.root()
    render_root = root.nearest_render_object() if root is not None else None
    return RenderTreeResult(tree=render_tree_text(render_root)).to_payload()


async def wait_for(extension: DriverExtension, command: Command) -> JSONValue:
    request = _expect(command, WaitFor)
    nodes = await extension.find_nodes(request)
    # Presence is all that is asked for; several matches are fine.
    if not nodes:
        raise NoMatchingElement(request.finder.describe())
    return None


async def wait_for_absent(extension: DriverExtension, command: Command) -> JSONValue:
    request = _expect(command, WaitForAbsent)
    nodes = await extension.find_nodes(request, absent=True)
    if nodes:
        timeout_ms = request.timeout_ms
        if timeout_ms is None:
            timeout_ms = extension.config.default_timeout_ms or 0
        raise ElementStillPresent(request.finder.describe(), timeout_ms=timeout_ms)
    return None


async def set_frame_sync(extension: DriverExtension, command: Command) -> JSONValue:
    request = _expect(command, SetFrameSync)
    extension.frame_sync = request.enabled
    return None
