"""Line-keyed index answering "which node is under this point" queries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Union

from .nodes import AttributeNode, BlockNode, CommentNode, Node, ValueNode, value_comments
from .position import Position, PositionLike, is_position_in_range, range_size

IndexTarget = Union[Node, CommentNode]


@dataclass(slots=True)
class IndexedNode:
    node: IndexTarget
    position: Position
    range_size: int


def index_entries(nodes: list[Node]) -> Iterator[IndexedNode]:
    """Pre-order entries for every positioned node.

    Attributes and Value nodes get a second entry for their inner value when its
    span differs, so a point inside the literal still maps to the holder.
    Comments embedded in object/array values are yielded as their own entries.
    """
    for node in nodes:
        if node.position is None:
            continue
        yield IndexedNode(node, node.position, range_size(node.position))
        if isinstance(node, (AttributeNode, ValueNode)):
            inner = node.value.position
            if inner is not None and inner != node.position:
                yield IndexedNode(node, inner, range_size(inner))
            for comment in value_comments(node.value):
                if comment.position is not None:
                    yield IndexedNode(comment, comment.position, range_size(comment.position))
        elif isinstance(node, BlockNode):
            yield from index_entries(node.children)


class PositionIndex:
    def __init__(self, nodes: list[Node]):
        self.line_map: dict[int, list[IndexedNode]] = {}
        self.comments: list[IndexedNode] = []
        self._build(nodes)

    def _build(self, nodes: list[Node]) -> None:
        for entry in index_entries(nodes):
            if isinstance(entry.node, CommentNode):
                self.comments.append(entry)
            for line in range(entry.position.start.line, entry.position.end.line + 1):
                self.line_map.setdefault(line, []).append(entry)
        for entries in self.line_map.values():
            # stable: equal sizes keep registration order
            entries.sort(key=lambda entry: entry.range_size)

    def nodes_at_line(self, line: int) -> list[IndexTarget]:
        return [entry.node for entry in self.line_map.get(line, [])]

    def find_node_at_position(self, position: PositionLike) -> Optional[IndexTarget]:
        for comment in self.comments:
            if is_position_in_range(position, comment.position):
                return comment.node
        for entry in self.line_map.get(position.line, []):
            if is_position_in_range(position, entry.position):
                return entry.node
        return None


__all__ = ["IndexedNode", "IndexTarget", "PositionIndex", "index_entries"]
