from __future__ import annotations

import asyncio
import os
from collections.abc import Coroutine, Iterator
from contextlib import contextmanager
from typing import TypeVar

from lantern.config import ExtensionConfig
from lantern.extension import DriverExtension, RequestDataHandler
from lantern.schema import Command
from lantern.scheduler import FrameScheduler
from lantern.tree import LiveTree, Node, Rect, RenderNode

T = TypeVar("T")


def run_without_suspending(coro: Coroutine[object, object, T]) -> T:
    """Step `coro` once and return its result; fail if it had to suspend."""
    try:
        coro.send(None)
    except StopIteration as stop:
        return stop.value
    coro.close()
    raise AssertionError("coroutine suspended instead of completing synchronously")


async def idle(turns: int = 10) -> None:
    for _ in range(turns):
        await asyncio.sleep(0)


def build_extension(
    tree: LiveTree,
    scheduler: FrameScheduler,
    *,
    data_handler: RequestDataHandler | None = None,
    **config: object,
) -> DriverExtension:
    return DriverExtension(
        tree,
        scheduler,
        data_handler=data_handler,
        config=ExtensionConfig(**config),
    )


def dispatch(extension: DriverExtension, command: Command) -> dict[str, object]:
    return asyncio.run(extension.call(command.serialize()))


def ancestor_tree() -> LiveTree:
    """A 100x100 'parent' centered in 800x600 holding two 25x25 children in a row."""
    return LiveTree(
        Node(
            "MaterialApp",
            rect=Rect(0, 0, 800, 600),
            children=[
                Node(
                    "Center",
                    rect=Rect(0, 0, 800, 600),
                    children=[
                        Node(
                            "Container",
                            key="parent",
                            rect=Rect(350, 250, 100, 100),
                            children=[
                                Node(
                                    "Row",
                                    rect=Rect(350, 287.5, 100, 25),
                                    children=[
                                        Node(
                                            "Container",
                                            key="leftchild",
                                            rect=Rect(350, 287.5, 25, 25),
                                        ),
                                        Node(
                                            "Container",
                                            key="righttchild",
                                            rect=Rect(375, 287.5, 25, 25),
                                        ),
                                    ],
                                ),
                            ],
                        ),
                    ],
                ),
            ],
        )
    )


def column_tree() -> LiveTree:
    """Three text nodes 'Hello1'..'Hello3' keyed 'text1'..'text3' under 'column'."""
    return LiveTree(
        Node(
            "MaterialApp",
            children=[
                Node(
                    "Column",
                    key="column",
                    children=[
                        Node("Text", key=f"text{index}", text=f"Hello{index}")
                        for index in (1, 2, 3)
                    ],
                ),
            ],
        )
    )


def hello_text_tree() -> LiveTree:
    """A 'Hello World' text whose render object is a paragraph with one text span."""
    paragraph = RenderNode(
        "RenderParagraph#1f2e3 relayoutBoundary=up1",
        properties={"textAlign": "start", "softWrap": True, "maxLines": None},
        children=[RenderNode("TextSpan", properties={"text": "Hello World"})],
    )
    return LiveTree(
        Node(
            "Directionality",
            properties={"textDirection": "ltr"},
            children=[
                Node(
                    "Center",
                    properties={"widthFactor": 1.0},
                    children=[
                        Node(
                            "Text",
                            key="Text",
                            text="Hello World",
                            properties={"maxLines": 2},
                            children=[Node("RichText", render_object=paragraph)],
                        ),
                    ],
                ),
            ],
        )
    )


@contextmanager
def env_scope(values: dict[str, str | None]) -> Iterator[None]:
    """Temporarily set (or unset, for None) environment variables."""
    previous = {key: os.environ.get(key) for key in values}
    try:
        for key, value in values.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
        yield
    finally:
        for key, value in previous.items():
            if value is None:
                os.environ.pop(key, None)
            else:
                os.environ[key] = value
