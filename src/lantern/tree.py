"""Live element tree observed by the extension.

The application owns the tree and mutates it between frames. The extension
only reads it through `TreeAccessor`. `Node`, `RenderNode` and `LiveTree` are
the in-process reference implementation used by tests and by the CLI when a
tree is loaded from a JSON snapshot.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Protocol, TypeAlias

from lantern.exceptions import SnapshotError
from lantern.invariants import never
from lantern.runtime.json_io import load_json_object_path

OffsetType: TypeAlias = Literal["topLeft", "topRight", "bottomLeft", "bottomRight", "center"]
KeyValue: TypeAlias = str | int


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def offset(self, offset_type: OffsetType) -> tuple[float, float]:
        if offset_type == "topLeft":
            return (self.left, self.top)
        if offset_type == "topRight":
            return (self.right, self.top)
        if offset_type == "bottomLeft":
            return (self.left, self.bottom)
        if offset_type == "bottomRight":
            return (self.right, self.bottom)
        if offset_type == "center":
            return (self.left + self.width / 2, self.top + self.height / 2)
        never("unknown offset type", offset_type=offset_type)


@dataclass(eq=False)
class RenderNode:
    """A node of the physical (paint) tree."""

    description: str
    properties: dict[str, object] = field(default_factory=dict)
    children: list["RenderNode"] = field(default_factory=list)

    def diagnostics_description(self) -> str:
        return self.description

    def diagnostics_runtime_type(self) -> str | None:
        return None

    def diagnostics_properties(self) -> list[tuple[str, object]]:
        return list(self.properties.items())

    def diagnostics_children(self) -> tuple["RenderNode", ...]:
        return tuple(self.children)


@dataclass(eq=False)
class Node:
    """A node of the logical (widget) tree.

    Nodes compare by identity: two structurally equal nodes are still two
    separate matches.
    """

    type_name: str
    key: KeyValue | None = None
    text: str | None = None
    tooltip: str | None = None
    semantics_label: str | None = None
    semantics_id: int | None = None
    rect: Rect | None = None
    properties: dict[str, object] = field(default_factory=dict)
    children: list["Node"] = field(default_factory=list)
    render_object: RenderNode | None = None
    parent: "Node | None" = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        for child in self.children:
            child.parent = self

    def append(self, child: "Node") -> "Node":
        child.parent = self
        self.children.append(child)
        return child

    def remove(self, child: "Node") -> None:
        self.children.remove(child)
        child.parent = None

    def diagnostics_description(self) -> str:
        if self.key is None:
            return self.type_name
        return f"{self.type_name}-[<{self.key!r}>]"

    def diagnostics_runtime_type(self) -> str | None:
        return self.type_name

    def diagnostics_properties(self) -> list[tuple[str, object]]:
        entries: list[tuple[str, object]] = []
        if self.text is not None and "data" not in self.properties:
            entries.append(("data", self.text))
        entries.extend(self.properties.items())
        return entries

    def diagnostics_children(self) -> tuple["Node", ...]:
        return tuple(self.children)

    def nearest_render_object(self) -> RenderNode | None:
        """Return this node's render object, or the first one found below it."""
        if self.render_object is not None:
            return self.render_object
        for child in self.children:
            found = child.nearest_render_object()
            if found is not None:
                return found
        return None


class TreeAccessor(Protocol):
    semantics_enabled: bool

    def root(self) -> Node | None:
        """Return the current root; a fresh reference on every call."""

    def parent(self, node: Node) -> Node | None:
        ...

    def children(self, node: Node) -> tuple[Node, ...]:
        ...

    def descendants(self, scope: Node, *, include_self: bool) -> Iterator[Node]:
        ...


class LiveTree:
    """Reference `TreeAccessor` over `Node` objects."""

    def __init__(self, root: Node | None = None, *, semantics_enabled: bool = True) -> None:
        self._root = root
        self.semantics_enabled = semantics_enabled

    def root(self) -> Node | None:
        return self._root

    def replace_root(self, root: Node | None) -> None:
        self._root = root

    def parent(self, node: Node) -> Node | None:
        return node.parent

    def children(self, node: Node) -> tuple[Node, ...]:
        # Copy so a walk is unaffected by children added or removed mid-walk.
        return tuple(node.children)

    def descendants(self, scope: Node, *, include_self: bool) -> Iterator[Node]:
        """Depth-first pre-order walk of the subtree rooted at `scope`."""
        if include_self:
            yield scope
        stack = list(reversed(self.children(scope)))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(self.children(node)))


def _optional_str(payload: Mapping[str, object], name: str) -> str | None:
    value = payload.get(name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise SnapshotError(f"snapshot field {name!r} must be a string")
    return value


def _rect_from_payload(raw: object) -> Rect | None:
    if raw is None:
        return None
    if not isinstance(raw, list) or len(raw) != 4:
        raise SnapshotError("snapshot field 'rect' must be [left, top, width, height]")
    try:
        left, top, width, height = (float(part) for part in raw)
    except (TypeError, ValueError) as exc:
        raise SnapshotError(f"snapshot rect is not numeric: {raw!r}") from exc
    return Rect(left=left, top=top, width=width, height=height)


def _properties_from_payload(raw: object) -> dict[str, object]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise SnapshotError("snapshot field 'properties' must be an object")
    return {str(name): value for name, value in raw.items()}


def _children_payload(payload: Mapping[str, object]) -> list[Mapping[str, object]]:
    raw = payload.get("children") or []
    if not isinstance(raw, list) or not all(isinstance(item, Mapping) for item in raw):
        raise SnapshotError("snapshot field 'children' must be a list of objects")
    return raw


def render_node_from_payload(payload: Mapping[str, object]) -> RenderNode:
    description = payload.get("description")
    if not isinstance(description, str) or not description:
        raise SnapshotError("render object requires a 'description'")
    return RenderNode(
        description=description,
        properties=_properties_from_payload(payload.get("properties")),
        children=[render_node_from_payload(item) for item in _children_payload(payload)],
    )


def node_from_payload(payload: Mapping[str, object]) -> Node:
    type_name = payload.get("type")
    if not isinstance(type_name, str) or not type_name:
        raise SnapshotError("snapshot node requires a 'type'")
    key = payload.get("key")
    if key is not None and (isinstance(key, bool) or not isinstance(key, (str, int))):
        raise SnapshotError(f"snapshot key must be a string or integer: {key!r}")
    semantics_id = payload.get("semanticsId")
    if semantics_id is not None and (
        isinstance(semantics_id, bool) or not isinstance(semantics_id, int)
    ):
        raise SnapshotError(f"snapshot semanticsId must be an integer: {semantics_id!r}")
    render_payload = payload.get("renderObject")
    if render_payload is not None and not isinstance(render_payload, Mapping):
        raise SnapshotError("snapshot field 'renderObject' must be an object")
    return Node(
        type_name=type_name,
        key=key,
        text=_optional_str(payload, "text"),
        tooltip=_optional_str(payload, "tooltip"),
        semantics_label=_optional_str(payload, "semanticsLabel"),
        semantics_id=semantics_id,
        rect=_rect_from_payload(payload.get("rect")),
        properties=_properties_from_payload(payload.get("properties")),
        children=[node_from_payload(item) for item in _children_payload(payload)],
        render_object=(
            render_node_from_payload(render_payload) if render_payload is not None else None
        ),
    )


def tree_from_payload(payload: Mapping[str, object]) -> LiveTree:
    root_payload = payload.get("root")
    if not isinstance(root_payload, Mapping):
        raise SnapshotError("snapshot requires a 'root' object")
    semantics_enabled = payload.get("semanticsEnabled", True)
    if not isinstance(semantics_enabled, bool):
        raise SnapshotError("snapshot field 'semanticsEnabled' must be a boolean")
    return LiveTree(node_from_payload(root_payload), semantics_enabled=semantics_enabled)


def load_tree(path: Path) -> LiveTree:
    payload = load_json_object_path(path)
    if not payload:
        raise SnapshotError(f"could not read a tree snapshot from {path}")
    return tree_from_payload(payload)
