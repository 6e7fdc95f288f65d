"""LSP transport for the driver extension.

Each command kind is exposed as `workspace/executeCommand` id `lantern.<kind>`;
`lantern.call` takes the raw wire mapping as-is. Responses are the encoded
envelopes produced by `DriverExtension.call`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from lsprotocol.types import LogMessageParams, MessageType
from pygls.lsp.server import LanguageServer

from lantern import __version__
from lantern.commands.command_ids import COMMAND_IDS
from lantern.config import DEFAULT_FRAME_INTERVAL_MS
from lantern.extension import DriverExtension
from lantern.invariants import require_not_none
from lantern.json_types import JSONObject
from lantern.scheduler import FrameScheduler
from lantern.schema import COMMAND_KEY

logger = logging.getLogger(__name__)

server = LanguageServer("lantern", __version__)
CALL_COMMAND = "lantern.call"

ServerCommand = Callable[[LanguageServer, "dict | None"], Awaitable[JSONObject]]


@dataclass
class _ServerBinding:
    extension: DriverExtension | None = None
    frame_interval_s: float = DEFAULT_FRAME_INTERVAL_MS / 1000.0
    ticker: asyncio.Task[None] | None = None


_BINDING = _ServerBinding()


def bind(extension: DriverExtension, *, frame_interval_s: float | None = None) -> None:
    """Attach the extension that every command of this server dispatches to."""
    _BINDING.extension = extension
    _BINDING.frame_interval_s = (
        frame_interval_s
        if frame_interval_s is not None
        else extension.config.frame_interval_s
    )
    _BINDING.ticker = None


def unbind() -> None:
    if _BINDING.ticker is not None and not _BINDING.ticker.done():
        _BINDING.ticker.cancel()
    _BINDING.extension = None
    _BINDING.ticker = None


def _require_extension() -> DriverExtension:
    return require_not_none(
        _BINDING.extension, reason="no driver extension bound to the server"
    )


def _ensure_ticker(extension: DriverExtension) -> None:
    scheduler = extension.scheduler
    if not isinstance(scheduler, FrameScheduler):
        # Application-owned schedulers run their own frames.
        return
    if _BINDING.ticker is not None and not _BINDING.ticker.done():
        return
    _BINDING.ticker = asyncio.get_running_loop().create_task(
        scheduler.run(_BINDING.frame_interval_s)
    )


async def _dispatch(ls: LanguageServer, payload: object) -> JSONObject:
    extension = _require_extension()
    _ensure_ticker(extension)
    response = await extension.call(payload)
    if response.get("isError"):
        ls.window_log_message(
            LogMessageParams(type=MessageType.Error, message=str(response["response"]))
        )
    return response


@server.command(CALL_COMMAND)
async def execute_call(ls: LanguageServer, payload: dict | None = None) -> JSONObject:
    return await _dispatch(ls, payload)


def _kind_command(kind: str) -> ServerCommand:
    async def _execute(ls: LanguageServer, payload: dict | None = None) -> JSONObject:
        merged = {**(payload or {}), COMMAND_KEY: kind}
        return await _dispatch(ls, merged)

    _execute.__name__ = f"execute_{kind}"
    return _execute


KIND_COMMANDS: dict[str, ServerCommand] = {}
for _kind in COMMAND_IDS:
    KIND_COMMANDS[f"lantern.{_kind}"] = server.command(f"lantern.{_kind}")(
        _kind_command(_kind)
    )


def start(start_fn: Callable[[], None] | None = None) -> None:
    """Start the language server over stdio."""
    logger.info("lantern server %s starting", __version__)
    (start_fn or server.start_io)()
