"""Tree queries used by editor tooling."""

from __future__ import annotations

from typing import Optional

from .nodes import BlockNode, Node, walk
from .position import PositionLike, is_position_in_range
from .position_index import IndexTarget, PositionIndex, index_entries


def find_node_at_position(nodes: list[Node], position: PositionLike) -> Optional[IndexTarget]:
    """Most specific node containing the point, by a full scan of the tree.

    Comments win outright; otherwise the smallest containing range is chosen,
    the earliest in document order on ties. Agrees with ``PositionIndex``.
    """
    best = None
    for entry in index_entries(nodes):
        if not is_position_in_range(position, entry.position):
            continue
        if entry.node.type == "Comment":
            return entry.node
        if best is None or entry.range_size < best.range_size:
            best = entry
    return best.node if best is not None else None


def find_node_at_position_with_index(
    nodes: list[Node], position: PositionLike, index: Optional[PositionIndex] = None
) -> Optional[IndexTarget]:
    return (index or PositionIndex(nodes)).find_node_at_position(position)


def find_parent_block(nodes: list[Node], target: object, parent: Optional[BlockNode] = None) -> Optional[BlockNode]:
    """Enclosing block of ``target`` (matched by identity), without needing hydrated parents."""
    for node in nodes:
        if node is target:
            return parent
        if isinstance(node, BlockNode):
            found = find_parent_block(node.children, target, node)
            if found is not None:
                return found
    return None


def find_nodes_by_type(nodes: list[Node], type_name: str) -> list[Node]:
    return [node for node in walk(nodes) if node.type == type_name]


def find_blocks_by_name(nodes: list[Node], name: str) -> list[BlockNode]:
    return [node for node in walk(nodes) if isinstance(node, BlockNode) and node.name == name]


__all__ = [
    "find_node_at_position",
    "find_node_at_position_with_index",
    "find_parent_block",
    "find_nodes_by_type",
    "find_blocks_by_name",
]
