from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from lantern.commands import command_ids
from lantern.json_types import JSONValue

if TYPE_CHECKING:
    from lantern.extension import DriverExtension
    from lantern.schema import Command

DirectExecutor = Callable[["DriverExtension", "Command"], Awaitable[JSONValue]]


def _handler_executor(name: str) -> DirectExecutor:
    async def _executor(extension: "DriverExtension", command: "Command") -> JSONValue:
        from lantern import handlers

        candidate = getattr(handlers, name)
        return await candidate(extension, command)

    return _executor


_UNORDERED_DIRECT_EXECUTORS: dict[str, DirectExecutor] = {
    command_ids.WAIT_UNTIL_NO_TRANSIENT_CALLBACKS_COMMAND: _handler_executor(
        "wait_until_no_transient_callbacks"
    ),
    command_ids.WAIT_UNTIL_FRAME_SYNC_COMMAND: _handler_executor("wait_until_frame_sync"),
    command_ids.REQUEST_DATA_COMMAND: _handler_executor("request_data"),
    command_ids.GET_SEMANTICS_ID_COMMAND: _handler_executor("get_semantics_id"),
    command_ids.GET_OFFSET_COMMAND: _handler_executor("get_offset"),
    command_ids.GET_TEXT_COMMAND: _handler_executor("get_text"),
    command_ids.GET_DIAGNOSTICS_TREE_COMMAND: _handler_executor("get_diagnostics_tree"),
    command_ids.GET_HEALTH_COMMAND: _handler_executor("get_health"),
    command_ids.GET_RENDER_TREE_COMMAND: _handler_executor("get_render_tree"),
    command_ids.WAIT_FOR_COMMAND: _handler_executor("wait_for"),
    command_ids.WAIT_FOR_ABSENT_COMMAND: _handler_executor("wait_for_absent"),
    command_ids.SET_FRAME_SYNC_COMMAND: _handler_executor("set_frame_sync"),
}


def direct_executor_registry() -> dict[str, DirectExecutor]:
    return {
        command: _UNORDERED_DIRECT_EXECUTORS[command]
        for command in command_ids.COMMAND_IDS
        if command in _UNORDERED_DIRECT_EXECUTORS
    }


DIRECT_EXECUTOR_REGISTRY: dict[str, DirectExecutor] = direct_executor_registry()


def missing_command_ids() -> tuple[str, ...]:
    missing = [
        command
        for command in command_ids.COMMAND_IDS
        if command not in DIRECT_EXECUTOR_REGISTRY
    ]
    return tuple(missing)


def extra_direct_command_ids() -> tuple[str, ...]:
    # Sort key is lexical command-kind text for deterministic diagnostics.
    return tuple(
        sorted(
            command
            for command in _UNORDERED_DIRECT_EXECUTORS
            if command not in command_ids.COMMAND_IDS
        )
    )


def is_registry_complete() -> bool:
    return not missing_command_ids() and not extra_direct_command_ids()


def direct_executor(command: str) -> DirectExecutor | None:
    return DIRECT_EXECUTOR_REGISTRY.get(command)
