"""Bounded-depth diagnostics tree serialization.

`children` and `properties` are `None` when not requested, which drops the key
from the payload; an explored leaf has `children == ()`, which keeps the key
with an empty list. The two states mean different things to the driver.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Protocol

from lantern.exceptions import UnsupportedElement
from lantern.invariants import never
from lantern.json_types import JSONObject, JSONValue
from lantern.tree import Node, RenderNode

DiagnosticsFlavor = Literal["widget", "renderObject"]

_PROPERTY_TYPE_NAMES: dict[type, str] = {type(None): "Null", str: "String"}


class Diagnosticable(Protocol):
    def diagnostics_description(self) -> str:
        ...

    def diagnostics_runtime_type(self) -> str | None:
        ...

    def diagnostics_properties(self) -> list[tuple[str, object]]:
        ...

    def diagnostics_children(self) -> tuple["Diagnosticable", ...]:
        ...


@dataclass(frozen=True)
class DiagnosticsProperty:
    name: str
    description: str
    property_type: str

    @classmethod
    def from_value(cls, name: str, value: object) -> "DiagnosticsProperty":
        return cls(
            name=name,
            description=describe_value(value),
            property_type=_PROPERTY_TYPE_NAMES.get(type(value), type(value).__name__),
        )

    def as_payload(self) -> JSONObject:
        return {
            "name": self.name,
            "description": self.description,
            "propertyType": self.property_type,
        }


@dataclass(frozen=True)
class DiagnosticsNode:
    description: str
    widget_runtime_type: str | None = None
    properties: tuple[DiagnosticsProperty, ...] | None = None
    children: tuple["DiagnosticsNode", ...] | None = None

    def as_payload(self) -> JSONObject:
        payload: JSONObject = {"description": self.description}
        if self.widget_runtime_type is not None:
            payload["widgetRuntimeType"] = self.widget_runtime_type
        if self.properties is not None:
            payload["properties"] = [entry.as_payload() for entry in self.properties]
        if self.children is not None:
            payload["children"] = [child.as_payload() for child in self.children]
        return payload


def describe_value(value: object) -> str:
    if isinstance(value, str):
        return f'"{value}"'
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _walk(
    source: Diagnosticable,
    *,
    depth_budget: int,
    include_properties: bool,
) -> DiagnosticsNode:
    properties: tuple[DiagnosticsProperty, ...] | None = None
    if include_properties:
        properties = tuple(
            DiagnosticsProperty.from_value(name, value)
            for name, value in source.diagnostics_properties()
        )
    children: tuple[DiagnosticsNode, ...] | None = None
    if depth_budget > 0:
        children = tuple(
            _walk(
                child,
                depth_budget=depth_budget - 1,
                include_properties=include_properties,
            )
            for child in source.diagnostics_children()
        )
    return DiagnosticsNode(
        description=source.diagnostics_description(),
        widget_runtime_type=source.diagnostics_runtime_type(),
        properties=properties,
        children=children,
    )


def diagnostics_root(node: Node, flavor: DiagnosticsFlavor) -> Diagnosticable:
    if flavor == "widget":
        return node
    if flavor == "renderObject":
        render_object = node.nearest_render_object()
        if render_object is None:
            raise UnsupportedElement(
                f"{node.diagnostics_description()} has no render object"
            )
        return render_object
    never("unknown diagnostics flavor", flavor=flavor)


def serialize(
    node: Node,
    flavor: DiagnosticsFlavor,
    max_depth: int,
    include_properties: bool,
) -> DiagnosticsNode:
    if max_depth < 0:
        never("negative diagnostics depth", max_depth=max_depth)
    return _walk(
        diagnostics_root(node, flavor),
        depth_budget=max_depth,
        include_properties=include_properties,
    )


def serialize_payload(
    node: Node,
    flavor: DiagnosticsFlavor,
    max_depth: int,
    include_properties: bool,
) -> JSONValue:
    return serialize(node, flavor, max_depth, include_properties).as_payload()


def render_tree_text(root: RenderNode | None) -> str:
    """Indented text dump of a render tree, one node per line."""
    if root is None:
        return "<no render tree>"
    lines: list[str] = []
    stack: list[tuple[RenderNode, int]] = [(root, 0)]
    while stack:
        node, level = stack.pop()
        indent = "  " * level
        lines.append(f"{indent}{node.description}")
        for name, value in node.properties.items():
            lines.append(f"{indent}  {name}: {describe_value(value)}")
        stack.extend((child, level + 1) for child in reversed(node.children))
    return "\n".join(lines)
