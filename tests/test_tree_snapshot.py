from __future__ import annotations

import json
from pathlib import Path

import pytest

from lantern.exceptions import SnapshotError
from lantern.tree import LiveTree, Node, Rect, load_tree, tree_from_payload

SNAPSHOT = {
    "semanticsEnabled": False,
    "root": {
        "type": "MaterialApp",
        "rect": [0, 0, 800, 600],
        "children": [
            {
                "type": "Text",
                "key": 3,
                "text": "Hi",
                "tooltip": "greeting",
                "semanticsLabel": "Greeting",
                "semanticsId": 9,
                "properties": {"maxLines": 1},
                "renderObject": {
                    "description": "RenderParagraph",
                    "children": [{"description": "TextSpan"}],
                },
            }
        ],
    },
}


def test_tree_from_payload_builds_linked_nodes() -> None:
    tree = tree_from_payload(SNAPSHOT)
    assert tree.semantics_enabled is False
    root = tree.root()
    assert root is not None
    assert root.rect == Rect(0.0, 0.0, 800.0, 600.0)
    (text,) = tree.children(root)
    assert tree.parent(text) is root
    assert text.key == 3
    assert text.tooltip == "greeting"
    assert text.semantics_label == "Greeting"
    assert text.semantics_id == 9
    assert text.properties == {"maxLines": 1}
    assert text.render_object is not None
    assert [child.description for child in text.render_object.children] == ["TextSpan"]
    assert root.nearest_render_object() is text.render_object


def test_load_tree_reads_json_file(tmp_path: Path) -> None:
    path = tmp_path / "tree.json"
    path.write_text(json.dumps(SNAPSHOT))
    tree = load_tree(path)
    root = tree.root()
    assert root is not None
    assert root.type_name == "MaterialApp"


@pytest.mark.parametrize(
    ("payload", "fragment"),
    [
        ({}, "requires a 'root'"),
        ({"root": {"key": "x"}}, "requires a 'type'"),
        ({"root": {"type": "A", "key": True}}, "key must be"),
        ({"root": {"type": "A", "rect": [1, 2]}}, "'rect'"),
        ({"root": {"type": "A", "rect": [1, 2, "x", 4]}}, "not numeric"),
        ({"root": {"type": "A", "children": {"type": "B"}}}, "'children'"),
        ({"root": {"type": "A", "renderObject": {}}}, "'description'"),
        ({"root": {"type": "A", "semanticsId": "1"}}, "semanticsId"),
        ({"root": {"type": "A"}, "semanticsEnabled": "yes"}, "semanticsEnabled"),
    ],
)
def test_bad_snapshots(payload: dict[str, object], fragment: str) -> None:
    with pytest.raises(SnapshotError) as excinfo:
        tree_from_payload(payload)
    assert fragment in str(excinfo.value)


def test_load_tree_rejects_unreadable_file(tmp_path: Path) -> None:
    path = tmp_path / "tree.json"
    path.write_text("not json")
    with pytest.raises(SnapshotError):
        load_tree(path)


def test_descendants_walk_live_children() -> None:
    root = Node("Column", children=[Node("A", children=[Node("A1")]), Node("B")])
    tree = LiveTree(root)
    assert [node.type_name for node in tree.descendants(root, include_self=True)] == [
        "Column",
        "A",
        "A1",
        "B",
    ]
    added = root.append(Node("C"))
    assert added.parent is root
    root.remove(root.children[0])
    assert [node.type_name for node in tree.descendants(root, include_self=False)] == [
        "B",
        "C",
    ]


def test_node_description_includes_key() -> None:
    assert Node("Text").diagnostics_description() == "Text"
    assert Node("Text", key="a").diagnostics_description() == "Text-[<'a'>]"
    assert Node("Text", key=1).diagnostics_description() == "Text-[<1>]"
