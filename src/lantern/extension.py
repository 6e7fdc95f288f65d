"""Command dispatcher: the entry point the transport calls."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable

from lantern.commands.command_envelope import ResponseEnvelope
from lantern.commands.direct_dispatch import direct_executor
from lantern.commands.payload_codec import decode_command, encode_response
from lantern.config import ExtensionConfig
from lantern.deadline_clock import Deadline
from lantern.exceptions import LanternError, RequestHandlerMissing, UnknownCommand
from lantern.json_types import JSONObject
from lantern.resolver import FinderResolver
from lantern.scheduler import Scheduler
from lantern.schema import CommandWithTimeout, FinderCommand
from lantern.synchronizer import QuiescenceSynchronizer
from lantern.tree import Node, TreeAccessor

logger = logging.getLogger(__name__)

RequestDataHandler = Callable[[str], Awaitable[str] | str]


class DriverExtension:
    """Dispatches driver commands against a live tree and its scheduler.

    `call()` always produces exactly one response envelope; no failure inside
    decoding or a handler escapes it.
    """

    def __init__(
        self,
        tree: TreeAccessor,
        scheduler: Scheduler,
        *,
        data_handler: RequestDataHandler | None = None,
        config: ExtensionConfig | None = None,
    ) -> None:
        self.config = config or ExtensionConfig()
        self.tree = tree
        self.scheduler = scheduler
        self.synchronizer = QuiescenceSynchronizer(scheduler)
        self.resolver = FinderResolver(tree)
        self.frame_sync = self.config.frame_sync
        self._data_handler = data_handler

    async def call(self, raw: object) -> JSONObject:
        kind = "<undecoded>"
        try:
            command = decode_command(raw)
            kind = command.kind
            executor = direct_executor(kind)
            if executor is None:
                raise UnknownCommand(kind)
            logger.debug("dispatching %s", kind)
            payload = await executor(self, command)
            envelope = ResponseEnvelope.success(payload)
        except LanternError as exc:
            envelope = self._failure(kind, str(exc), exc)
        except Exception as exc:
            envelope = self._failure(kind, f"{type(exc).__name__}: {exc}", exc)
        return encode_response(envelope)

    def _failure(self, kind: str, message: str, exc: Exception) -> ResponseEnvelope:
        if not self.config.silence_errors:
            logger.error(
                "%s failed: %s",
                kind,
                message,
                exc_info=not isinstance(exc, LanternError),
            )
        return ResponseEnvelope.failure(message)

    def deadline_for(self, command: CommandWithTimeout) -> Deadline | None:
        timeout_ms = command.timeout_ms
        if timeout_ms is None:
            timeout_ms = self.config.default_timeout_ms
        if timeout_ms is None:
            return None
        return Deadline.from_timeout_ms(self.scheduler.clock, timeout_ms)

    async def find_nodes(self, command: FinderCommand, *, absent: bool = False) -> list[Node]:
        deadline = self.deadline_for(command)
        if self.frame_sync:
            # The command timeout bounds this wait too.
            await self.synchronizer.wait_until_no_transient_callbacks(deadline)
        return await self.resolver.poll(
            command.finder,
            synchronizer=self.synchronizer,
            deadline=deadline,
            absent=absent,
        )

    async def find_single(self, command: FinderCommand) -> Node:
        nodes = await self.find_nodes(command)
        return self.resolver.require_single(command.finder, nodes)

    async def request_data(self, message: str) -> str:
        if self._data_handler is None:
            raise RequestHandlerMissing()
        result = self._data_handler(message)
        if inspect.isawaitable(result):
            result = await result
        return str(result)
