"""Finder resolution over the live tree.

Every resolution takes a fresh root reference from the accessor, so a tree
mutated between frames is observed as a whole new snapshot on the next
attempt. Results keep depth-first pre-order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from lantern.deadline_clock import Deadline
from lantern.exceptions import AmbiguousMatch, FinderTimeout, NoMatchingElement
from lantern.finders import (
    Ancestor,
    BySemanticsLabel,
    ByText,
    ByTooltipMessage,
    ByType,
    ByValueKey,
    Descendant,
    SerializableFinder,
)
from lantern.invariants import never
from lantern.synchronizer import QuiescenceSynchronizer
from lantern.tree import Node, TreeAccessor

logger = logging.getLogger(__name__)

_F = TypeVar("_F", bound=SerializableFinder)

_NodeMatcher = Callable[[SerializableFinder, Node], bool]


def _expect_finder(finder: SerializableFinder, model: type[_F]) -> _F:
    if not isinstance(finder, model):
        never(
            "matcher received the wrong finder model",
            expected=model.__name__,
            actual=type(finder).__name__,
        )
    return finder


def _match_value_key(finder: SerializableFinder, node: Node) -> bool:
    wanted = _expect_finder(finder, ByValueKey).key
    key = node.key
    return key is not None and type(key) is type(wanted) and key == wanted


def _match_text(finder: SerializableFinder, node: Node) -> bool:
    return node.text == _expect_finder(finder, ByText).text


def _match_type(finder: SerializableFinder, node: Node) -> bool:
    return node.type_name == _expect_finder(finder, ByType).type_name


def _match_tooltip(finder: SerializableFinder, node: Node) -> bool:
    return node.tooltip == _expect_finder(finder, ByTooltipMessage).text


def _match_semantics_label(finder: SerializableFinder, node: Node) -> bool:
    return _expect_finder(finder, BySemanticsLabel).label_matches(node.semantics_label)


_BASE_MATCHERS: dict[str, _NodeMatcher] = {
    ByValueKey.finder_type: _match_value_key,
    ByText.finder_type: _match_text,
    ByType.finder_type: _match_type,
    ByTooltipMessage.finder_type: _match_tooltip,
    BySemanticsLabel.finder_type: _match_semantics_label,
}


class FinderResolver:
    def __init__(self, tree: TreeAccessor) -> None:
        self._tree = tree

    @property
    def tree(self) -> TreeAccessor:
        return self._tree

    def resolve(self, finder: SerializableFinder) -> list[Node]:
        """Return every node matching `finder`; may be empty or have duplicates."""
        root = self._tree.root()
        if root is None:
            return []
        return self._resolve(finder, root)

    def resolve_single(self, finder: SerializableFinder) -> Node:
        return self.require_single(finder, self.resolve(finder))

    @staticmethod
    def require_single(finder: SerializableFinder, nodes: list[Node]) -> Node:
        if not nodes:
            raise NoMatchingElement(finder.describe())
        if len(nodes) > 1:
            raise AmbiguousMatch(finder.describe(), count=len(nodes))
        return nodes[0]

    def _resolve(self, finder: SerializableFinder, root: Node) -> list[Node]:
        if isinstance(finder, Descendant):
            return self._resolve_descendant(finder, root)
        if isinstance(finder, Ancestor):
            return self._resolve_ancestor(finder, root)
        matcher = _BASE_MATCHERS.get(finder.finder_type)
        if matcher is None:
            never("unsupported finder type", finder_type=finder.finder_type)
        return [
            node
            for node in self._tree.descendants(root, include_self=True)
            if matcher(finder, node)
        ]

    def _unique_anchor(self, finder: SerializableFinder, root: Node) -> Node | None:
        nodes = self._resolve(finder, root)
        if not nodes:
            return None
        if len(nodes) > 1:
            raise AmbiguousMatch(finder.describe(), count=len(nodes))
        return nodes[0]

    def _resolve_descendant(self, finder: Descendant, root: Node) -> list[Node]:
        anchor = self._unique_anchor(finder.of, root)
        if anchor is None:
            return []
        in_subtree = {
            id(node)
            for node in self._tree.descendants(anchor, include_self=finder.match_root)
        }
        return [
            node for node in self._resolve(finder.matching, root) if id(node) in in_subtree
        ]

    def _resolve_ancestor(self, finder: Ancestor, root: Node) -> list[Node]:
        anchor = self._unique_anchor(finder.of, root)
        if anchor is None:
            return []
        matching = {id(node) for node in self._resolve(finder.matching, root)}
        current = anchor if finder.match_root else self._tree.parent(anchor)
        while current is not None:
            if id(current) in matching:
                return [current]
            current = self._tree.parent(current)
        return []

    async def poll(
        self,
        finder: SerializableFinder,
        *,
        synchronizer: QuiescenceSynchronizer,
        deadline: Deadline | None,
        absent: bool = False,
    ) -> list[Node]:
        """Re-resolve on each frame until present (or absent) or the deadline passes.

        Without a deadline a single attempt is made and its result returned
        as-is. A presence poll that runs out of time raises `FinderTimeout`;
        an absence poll returns the still-present nodes for the caller to
        report.
        """
        attempts = 0
        while True:
            nodes = self.resolve(finder)
            attempts += 1
            satisfied = not nodes if absent else bool(nodes)
            if satisfied or deadline is None:
                return nodes
            if deadline.expired():
                logger.debug(
                    "gave up on %s after %d attempts (%dms)",
                    finder.describe(),
                    attempts,
                    deadline.timeout_ms,
                )
                if absent:
                    return nodes
                raise FinderTimeout(finder.describe(), timeout_ms=deadline.timeout_ms)
            await synchronizer.next_frame()
